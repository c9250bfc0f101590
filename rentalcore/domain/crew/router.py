"""Crew router - FastAPI endpoints for crew members"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...tenancy import get_tenant_id
from .schemas import (
    CrewCalendarResponse,
    CrewMemberCreate,
    CrewMemberResponse,
    CrewMemberUpdate,
    LeaveUpdate,
)
from .service import CrewService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/crew", tags=["Crew"])


def get_crew_service(db: Session = Depends(get_db)) -> CrewService:
    """Dependency injection for CrewService"""
    return CrewService(db)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("", response_model=list[CrewMemberResponse])
async def get_crew_members(
    tenant_id: str = Depends(get_tenant_id),
    service: CrewService = Depends(get_crew_service),
):
    """Get all crew members ordered by name"""
    return [CrewMemberResponse.model_validate(c) for c in service.get_crew_members(tenant_id)]


@router.get("/{crew_member_id}", response_model=CrewMemberResponse)
async def get_crew_member(
    crew_member_id: str,
    tenant_id: str = Depends(get_tenant_id),
    service: CrewService = Depends(get_crew_service),
):
    return CrewMemberResponse.model_validate(service.get_crew_member(tenant_id, crew_member_id))


@router.post("", response_model=CrewMemberResponse, status_code=201)
async def create_crew_member(
    data: CrewMemberCreate,
    tenant_id: str = Depends(get_tenant_id),
    service: CrewService = Depends(get_crew_service),
):
    """Create a new crew member"""
    return CrewMemberResponse.model_validate(service.create_crew_member(tenant_id, data))


@router.patch("/{crew_member_id}", response_model=CrewMemberResponse)
async def update_crew_member(
    crew_member_id: str,
    data: CrewMemberUpdate,
    tenant_id: str = Depends(get_tenant_id),
    service: CrewService = Depends(get_crew_service),
):
    """Update a crew member"""
    return CrewMemberResponse.model_validate(
        service.update_crew_member(tenant_id, crew_member_id, data)
    )


@router.delete("/{crew_member_id}")
async def delete_crew_member(
    crew_member_id: str,
    tenant_id: str = Depends(get_tenant_id),
    service: CrewService = Depends(get_crew_service),
):
    """Delete a crew member and their assignments"""
    return service.delete_crew_member(tenant_id, crew_member_id)


# ============================================================================
# LEAVE & CALENDAR
# ============================================================================


@router.put("/{crew_member_id}/leave", response_model=CrewMemberResponse)
async def update_leave(
    crew_member_id: str,
    data: LeaveUpdate,
    tenant_id: str = Depends(get_tenant_id),
    service: CrewService = Depends(get_crew_service),
):
    """Mark a crew member on or off leave"""
    return CrewMemberResponse.model_validate(service.update_leave(tenant_id, crew_member_id, data))


@router.get("/{crew_member_id}/calendar", response_model=CrewCalendarResponse)
async def get_crew_calendar(
    crew_member_id: str,
    exclude_event_id: Optional[str] = Query(None),
    include_current_event: bool = Query(False),
    tenant_id: str = Depends(get_tenant_id),
    service: CrewService = Depends(get_crew_service),
):
    """Busy date ranges for the crew member's assignments"""
    busy = service.get_calendar_data(tenant_id, crew_member_id, exclude_event_id, include_current_event)
    return CrewCalendarResponse(crew_member_id=crew_member_id, busy_dates=busy)


@router.post("/{crew_member_id}/google-calendar/disconnect")
async def disconnect_google_calendar(
    crew_member_id: str,
    tenant_id: str = Depends(get_tenant_id),
    service: CrewService = Depends(get_crew_service),
):
    """Remove the crew member's Google Calendar connection"""
    return service.disconnect_google_calendar(tenant_id, crew_member_id)
