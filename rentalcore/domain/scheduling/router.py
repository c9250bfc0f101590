"""Scheduling router - availability checks and calendar sync endpoints"""

import logging
from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ...database import get_db
from ...tenancy import get_tenant_id
from .availability_service import AvailabilityService
from .integration_service import CalendarSyncService
from .schemas import (
    AvailabilityResponse,
    SyncFailure,
    SyncResponse,
    SyncResult,
    TypeAvailabilityResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scheduling", tags=["Scheduling"])


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    """Dependency injection for AvailabilityService"""
    return AvailabilityService(db)


def get_calendar_sync_service(db: Session = Depends(get_db)) -> CalendarSyncService:
    """Dependency injection for CalendarSyncService"""
    return CalendarSyncService(db)


def sync_response(result: SyncResult) -> JSONResponse:
    """Map a sync result onto HTTP: 409 asks the user to reconnect, 404 / 502 otherwise"""
    body = SyncResponse.from_result(result).model_dump()
    if result.ok:
        return JSONResponse(status_code=200, content=body)
    if result.reason == SyncFailure.CREDENTIAL_INVALID:
        return JSONResponse(status_code=409, content=body)
    if result.reason == SyncFailure.NOT_FOUND:
        return JSONResponse(status_code=404, content=body)
    return JSONResponse(status_code=502, content=body)


# ============================================================================
# AVAILABILITY
# ============================================================================


@router.get("/availability", response_model=AvailabilityResponse)
async def check_availability(
    crew_member_id: str = Query(...),
    event_id: str = Query(...),
    call_time: Optional[datetime] = Query(None),
    end_time: Optional[datetime] = Query(None),
    tenant_id: str = Depends(get_tenant_id),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Availability verdict for a crew member on an event, optionally for explicit times"""
    verdict = service.check_availability(tenant_id, crew_member_id, event_id, call_time, end_time)
    return AvailabilityResponse.from_verdict(verdict)


@router.get("/availability/by-type", response_model=TypeAvailabilityResponse)
async def check_availability_by_type(
    technician_type: str = Query(...),
    start_date: date = Query(...),
    end_date: date = Query(...),
    exclude_event_id: Optional[str] = Query(None),
    tenant_id: str = Depends(get_tenant_id),
    service: AvailabilityService = Depends(get_availability_service),
):
    """How many crew members of a technician type are free for a date range"""
    if end_date < start_date:
        raise HTTPException(status_code=400, detail="End date must be after start date")

    counts = service.count_available_by_type(
        tenant_id, technician_type, start_date, end_date, exclude_event_id
    )
    return TypeAvailabilityResponse(
        technician_type=technician_type,
        start_date=start_date,
        end_date=end_date,
        available=counts.available,
        total=counts.total,
        unavailable=counts.unavailable,
    )


# ============================================================================
# GOOGLE CALENDAR SYNC
# ============================================================================


@router.post("/assignments/{assignment_id}/sync", response_model=SyncResponse)
async def sync_assignment(
    assignment_id: str,
    tenant_id: str = Depends(get_tenant_id),
    service: CalendarSyncService = Depends(get_calendar_sync_service),
):
    """Push an assignment to the crew member's Google Calendar (replaces earlier entries)"""
    result = await service.sync_assignment(tenant_id, assignment_id)
    return sync_response(result)


@router.delete("/assignments/{assignment_id}/sync", response_model=SyncResponse)
async def remove_assignment_sync(
    assignment_id: str,
    tenant_id: str = Depends(get_tenant_id),
    service: CalendarSyncService = Depends(get_calendar_sync_service),
):
    """Remove an assignment's entries from the crew member's Google Calendar"""
    result = await service.remove_assignment_sync(tenant_id, assignment_id)
    return sync_response(result)
