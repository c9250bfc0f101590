"""
Google Calendar Integration Routes
Handles per-crew-member OAuth connection
"""

import logging
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from ..config import FRONTEND_URL, GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET, GOOGLE_REDIRECT_URI
from ..database import get_db
from ..domain.crew.repository import CrewRepository
from ..domain.scheduling.errors import CredentialInvalidError, CredentialUnavailableError
from ..services.calendar_credentials import GoogleCredentialService
from ..shared.validators import validate_uuid
from ..tenancy import get_tenant_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/google-calendar", tags=["google-calendar"])

# Google OAuth URLs
GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
# Events-only scope; crew calendars are never read
GOOGLE_CALENDAR_SCOPES = ["https://www.googleapis.com/auth/calendar.events"]


def get_credential_service() -> GoogleCredentialService:
    return GoogleCredentialService()


def _crew_redirect(**params) -> RedirectResponse:
    return RedirectResponse(url=f"{FRONTEND_URL}/crew?{urlencode(params)}", status_code=302)


def build_state(tenant_id: str, crew_member_id: str) -> str:
    """The callback carries no tenant header, so the tenant travels in the OAuth state"""
    return f"{tenant_id}:{crew_member_id}"


def parse_state(state: Optional[str]) -> Optional[tuple[str, str]]:
    if not state or ":" not in state:
        return None
    tenant_id, crew_member_id = state.split(":", 1)
    if not validate_uuid(tenant_id) or not crew_member_id:
        return None
    return tenant_id, crew_member_id


@router.get("/connect")
async def initiate_google_calendar_oauth(
    crew_member_id: str = Query(...),
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    """Initiate Google Calendar OAuth flow for a crew member"""
    if not GOOGLE_CLIENT_ID or not GOOGLE_CLIENT_SECRET:
        raise HTTPException(status_code=500, detail="Google Calendar not configured")

    if not CrewRepository.get_crew_member_by_id(db, tenant_id, crew_member_id):
        raise HTTPException(status_code=404, detail="Crew member not found")

    params = {
        "client_id": GOOGLE_CLIENT_ID,
        "redirect_uri": GOOGLE_REDIRECT_URI,
        "response_type": "code",
        "scope": " ".join(GOOGLE_CALENDAR_SCOPES),
        "access_type": "offline",  # Required for a refresh token
        "prompt": "consent",  # Google only re-issues a refresh token on consent
        "state": build_state(tenant_id, crew_member_id),
    }
    auth_url = f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    logger.info(f"Google Calendar OAuth initiated for crew member: {crew_member_id}")

    return {"authorization_url": auth_url}


@router.get("/callback")
async def handle_google_calendar_callback(
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    credentials: GoogleCredentialService = Depends(get_credential_service),
):
    """Handle Google Calendar OAuth callback and store the encrypted refresh token"""
    if error:
        logger.error(f"❌ Google Calendar OAuth error: {error}")
        return _crew_redirect(error="oauth_cancelled")

    if not code:
        return _crew_redirect(error="no_code")

    parsed = parse_state(state)
    if not parsed:
        return _crew_redirect(error="no_crew_id")
    tenant_id, crew_member_id = parsed

    crew_member = CrewRepository.get_crew_member_by_id(db, tenant_id, crew_member_id)
    if not crew_member:
        return _crew_redirect(error="no_crew_id")

    try:
        encrypted_refresh_token, expiry = await credentials.exchange_code(code)
    except CredentialInvalidError as e:
        logger.error(f"❌ Google Calendar callback error: {str(e)}")
        return _crew_redirect(error="no_refresh_token")
    except CredentialUnavailableError as e:
        logger.error(f"❌ Google Calendar callback error: {str(e)}")
        return _crew_redirect(error="token_exchange_failed")

    CrewRepository.update_crew_member(
        db,
        crew_member,
        google_calendar_refresh_token=encrypted_refresh_token,
        google_calendar_token_expiry=expiry,
        google_calendar_connected=True,
    )

    logger.info(f"✅ Google Calendar connected for crew member: {crew_member_id}")

    return _crew_redirect(success="calendar_connected")


@router.get("/status/{crew_member_id}")
async def get_google_calendar_status(
    crew_member_id: str,
    tenant_id: str = Depends(get_tenant_id),
    db: Session = Depends(get_db),
):
    """Get a crew member's Google Calendar connection status"""
    crew_member = CrewRepository.get_crew_member_by_id(db, tenant_id, crew_member_id)
    if not crew_member:
        raise HTTPException(status_code=404, detail="Crew member not found")

    return {
        "connected": bool(crew_member.google_calendar_connected),
        "has_credential": bool(crew_member.google_calendar_refresh_token),
        "token_expiry": crew_member.google_calendar_token_expiry,
    }
