"""Event router - FastAPI endpoints for events and crew assignments"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...database import get_db
from ...models import Event, EventCrew
from ...tenancy import get_tenant_id
from ..scheduling.integration_service import CalendarSyncService
from ..scheduling.router import get_calendar_sync_service
from ..scheduling.schemas import AvailabilityResponse, SyncResponse
from .schemas import (
    AssignmentCreate,
    AssignmentResponse,
    AssignmentResult,
    AssignmentUpdate,
    EventCreate,
    EventDetailResponse,
    EventResponse,
    EventUpdate,
)
from .service import EventService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["Events"])


def get_event_service(
    db: Session = Depends(get_db),
    calendar_sync: CalendarSyncService = Depends(get_calendar_sync_service),
) -> EventService:
    """Dependency injection for EventService"""
    return EventService(db, calendar_sync=calendar_sync)


def _assignment_response(assignment: EventCrew) -> AssignmentResponse:
    return AssignmentResponse(
        id=assignment.id,
        event_id=assignment.event_id,
        crew_member_id=assignment.crew_member_id,
        crew_member_name=assignment.crew_member.name if assignment.crew_member else None,
        role=assignment.role,
        call_time=assignment.call_time,
        end_time=assignment.end_time,
        rate=assignment.rate,
        rate_type=assignment.rate_type,
        notes=assignment.notes,
        external_event_ids=list(assignment.external_event_ids or []),
    )


def _event_detail(event: Event) -> EventDetailResponse:
    crew = sorted(event.crew_assignments, key=lambda a: (a.call_time is None, a.call_time, a.id))
    return EventDetailResponse(
        **EventResponse.model_validate(event).model_dump(),
        crew=[_assignment_response(a) for a in crew],
    )


# ============================================================================
# EVENTS
# ============================================================================


@router.get("", response_model=list[EventResponse])
async def get_events(
    tenant_id: str = Depends(get_tenant_id),
    service: EventService = Depends(get_event_service),
):
    """Get all events"""
    return [EventResponse.model_validate(e) for e in service.get_events(tenant_id)]


@router.get("/{event_id}", response_model=EventDetailResponse)
async def get_event(
    event_id: str,
    tenant_id: str = Depends(get_tenant_id),
    service: EventService = Depends(get_event_service),
):
    """Get an event with its assigned crew"""
    return _event_detail(service.get_event(tenant_id, event_id))


@router.post("", response_model=EventResponse, status_code=201)
async def create_event(
    data: EventCreate,
    tenant_id: str = Depends(get_tenant_id),
    service: EventService = Depends(get_event_service),
):
    return EventResponse.model_validate(service.create_event(tenant_id, data))


@router.patch("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: str,
    data: EventUpdate,
    tenant_id: str = Depends(get_tenant_id),
    service: EventService = Depends(get_event_service),
):
    event = await service.update_event(tenant_id, event_id, data)
    return EventResponse.model_validate(event)


@router.delete("/{event_id}")
async def delete_event(
    event_id: str,
    tenant_id: str = Depends(get_tenant_id),
    service: EventService = Depends(get_event_service),
):
    """Delete an event and its crew assignments"""
    return await service.delete_event(tenant_id, event_id)


# ============================================================================
# CREW ASSIGNMENTS
# ============================================================================


@router.post("/{event_id}/crew", response_model=AssignmentResult, status_code=201)
async def add_event_crew(
    event_id: str,
    data: AssignmentCreate,
    tenant_id: str = Depends(get_tenant_id),
    service: EventService = Depends(get_event_service),
):
    """Assign a crew member; rejected with 409 on conflict or unavailability"""
    assignment, verdict, sync_result = await service.add_assignment(tenant_id, event_id, data)
    return AssignmentResult(
        assignment=_assignment_response(assignment),
        availability=AvailabilityResponse.from_verdict(verdict),
        calendar_sync=SyncResponse.from_result(sync_result),
    )


@router.patch("/{event_id}/crew/{assignment_id}", response_model=AssignmentResult)
async def update_event_crew(
    event_id: str,
    assignment_id: str,
    data: AssignmentUpdate,
    tenant_id: str = Depends(get_tenant_id),
    service: EventService = Depends(get_event_service),
):
    assignment, verdict, sync_result = await service.update_assignment(
        tenant_id, event_id, assignment_id, data
    )
    return AssignmentResult(
        assignment=_assignment_response(assignment),
        availability=AvailabilityResponse.from_verdict(verdict) if verdict else None,
        calendar_sync=SyncResponse.from_result(sync_result),
    )


@router.delete("/{event_id}/crew/{assignment_id}")
async def delete_event_crew(
    event_id: str,
    assignment_id: str,
    tenant_id: str = Depends(get_tenant_id),
    service: EventService = Depends(get_event_service),
):
    """Remove a crew member from an event"""
    sync_result = await service.remove_assignment(tenant_id, event_id, assignment_id)
    return {
        "message": "Crew member removed from event",
        "calendar_sync": SyncResponse.from_result(sync_result).model_dump(),
    }
