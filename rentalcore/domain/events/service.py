"""Event service - Business logic for events and crew assignments"""

import logging
from datetime import datetime, tzinfo
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models import Event, EventCrew
from ..crew.repository import CrewRepository
from ..scheduling.availability_service import AvailabilityService
from ..scheduling.integration_service import CalendarSyncService
from ..scheduling.schemas import (
    AvailabilityResponse,
    AvailabilityVerdict,
    Conflict,
    SyncResult,
    Unavailable,
)
from ..scheduling.time_calculator import ensure_aware
from .repository import EventRepository
from .schemas import AssignmentCreate, AssignmentUpdate, EventCreate, EventUpdate

logger = logging.getLogger(__name__)

RATE_PAIR_ERROR = "Rate and rate type must both be provided or both be empty"
TIME_ORDER_ERROR = "End time must be after call time"

# Event fields that end up in the synced calendar entries
CALENDAR_FIELDS = ("name", "location", "start_date", "end_date")


def reject_if_unavailable(verdict: AvailabilityVerdict, fallback: str) -> None:
    """Raise 409 for Conflict / Unavailable verdicts; Partial and Available pass"""
    if isinstance(verdict, Conflict):
        message = f'Conflict: Already assigned to "{verdict.event_name}"'
    elif isinstance(verdict, Unavailable):
        message = verdict.reason or fallback
    else:
        return

    raise HTTPException(
        status_code=409,
        detail={
            "message": message,
            "availability": AvailabilityResponse.from_verdict(verdict).model_dump(mode="json"),
        },
    )


def reject_inverted_times(call_time: Optional[datetime], end_time: Optional[datetime], zone: tzinfo) -> None:
    if call_time and end_time and ensure_aware(end_time, zone) <= ensure_aware(call_time, zone):
        raise HTTPException(status_code=400, detail=TIME_ORDER_ERROR)


class EventService:
    """Service layer for events; assignment changes go through availability and calendar sync"""

    def __init__(
        self,
        db: Session,
        availability: Optional[AvailabilityService] = None,
        calendar_sync: Optional[CalendarSyncService] = None,
    ):
        self.db = db
        self.repo = EventRepository()
        self.crew_repo = CrewRepository()
        self.availability = availability or AvailabilityService(db)
        self.calendar_sync = calendar_sync or CalendarSyncService(db)

    # ========================================================================
    # EVENTS
    # ========================================================================

    def get_events(self, tenant_id: str) -> list[Event]:
        return self.repo.get_events(self.db, tenant_id)

    def get_event(self, tenant_id: str, event_id: str) -> Event:
        event = self.repo.get_event_by_id(self.db, tenant_id, event_id)
        if not event:
            raise HTTPException(status_code=404, detail="Event not found")
        return event

    def create_event(self, tenant_id: str, data: EventCreate) -> Event:
        if data.end_date < data.start_date:
            raise HTTPException(status_code=400, detail="End date must be after start date")

        event = self.repo.create_event(
            self.db,
            tenant_id,
            name=data.name,
            description=data.description,
            start_date=data.start_date,
            end_date=data.end_date,
            location=data.location,
            status=data.status,
            quote_id=data.quote_id,
        )
        logger.info(f"✅ Event created: {event.id} ({event.name})")
        return event

    async def update_event(self, tenant_id: str, event_id: str, data: EventUpdate) -> Event:
        """Update an event; assignments are re-synced when calendar-visible fields change"""
        event = self.get_event(tenant_id, event_id)

        updates = data.model_dump(exclude_none=True)
        start_date = updates.get("start_date", event.start_date)
        end_date = updates.get("end_date", event.end_date)
        if end_date < start_date:
            raise HTTPException(status_code=400, detail="End date must be after start date")

        calendar_changed = any(
            field in updates and updates[field] != getattr(event, field) for field in CALENDAR_FIELDS
        )
        assignment_ids = [a.id for a in event.crew_assignments]

        event = self.repo.update_event(self.db, event, **updates)

        if calendar_changed:
            for assignment_id in assignment_ids:
                await self._sync(tenant_id, assignment_id)

        return event

    async def delete_event(self, tenant_id: str, event_id: str) -> dict:
        """Delete an event after removing each assignment's calendar entries (best-effort)"""
        event = self.get_event(tenant_id, event_id)

        for assignment_id in [a.id for a in event.crew_assignments]:
            await self._remove_sync(tenant_id, assignment_id)

        self.repo.delete_event(self.db, event)
        logger.info(f"🗑️ Event deleted: {event_id}")
        return {"message": "Event deleted"}

    # ========================================================================
    # CREW ASSIGNMENTS
    # ========================================================================

    def _get_assignment(self, tenant_id: str, event_id: str, assignment_id: str) -> EventCrew:
        assignment = self.repo.get_assignment(self.db, tenant_id, event_id, assignment_id)
        if not assignment:
            raise HTTPException(status_code=404, detail="Crew assignment not found")
        return assignment

    async def add_assignment(
        self, tenant_id: str, event_id: str, data: AssignmentCreate
    ) -> tuple[EventCrew, AvailabilityVerdict, SyncResult]:
        """Assign a crew member to an event, then push it to their calendar"""
        event = self.get_event(tenant_id, event_id)
        crew_member = self.crew_repo.get_crew_member_by_id(self.db, tenant_id, data.crew_member_id)
        if not crew_member:
            raise HTTPException(status_code=404, detail="Crew member not found")

        if self.repo.get_assignment_for_member(self.db, tenant_id, event.id, crew_member.id):
            raise HTTPException(status_code=409, detail="This crew member is already assigned to this event")

        reject_inverted_times(data.call_time, data.end_time, self.availability.zone)

        verdict = self.availability.check_availability(
            tenant_id, crew_member.id, event.id, data.call_time, data.end_time
        )
        reject_if_unavailable(verdict, "Crew member is not available")

        # Fall back to the crew member's standard rate
        rate = data.rate if data.rate is not None else crew_member.base_rate
        rate_type = data.rate_type or crew_member.rate_type
        if bool(rate) != bool(rate_type):
            raise HTTPException(status_code=400, detail=RATE_PAIR_ERROR)

        try:
            assignment = self.repo.create_assignment(
                self.db,
                tenant_id,
                event_id=event.id,
                crew_member_id=crew_member.id,
                role=data.role,
                call_time=data.call_time,
                end_time=data.end_time,
                rate=rate,
                rate_type=rate_type,
                notes=data.notes,
            )
        except IntegrityError:
            self.db.rollback()
            raise HTTPException(status_code=409, detail="This crew member is already assigned to this event")

        logger.info(f"✅ Crew member {crew_member.id} assigned to event {event.id} as {data.role}")

        sync_result = await self._sync(tenant_id, assignment.id)
        self.db.refresh(assignment)
        return assignment, verdict, sync_result

    async def update_assignment(
        self, tenant_id: str, event_id: str, assignment_id: str, data: AssignmentUpdate
    ) -> tuple[EventCrew, Optional[AvailabilityVerdict], SyncResult]:
        assignment = self._get_assignment(tenant_id, event_id, assignment_id)

        verdict = None
        if data.call_time or data.end_time:
            call_time = data.call_time or assignment.call_time
            end_time = data.end_time or assignment.end_time
            reject_inverted_times(call_time, end_time, self.availability.zone)

            verdict = self.availability.check_availability(
                tenant_id, assignment.crew_member_id, assignment.event_id, call_time, end_time
            )
            reject_if_unavailable(verdict, "Crew member is not available for these times")

        rate = data.rate if data.rate is not None else assignment.rate
        rate_type = data.rate_type or assignment.rate_type
        if bool(rate) != bool(rate_type):
            raise HTTPException(status_code=400, detail=RATE_PAIR_ERROR)

        assignment = self.repo.update_assignment(
            self.db,
            assignment,
            role=data.role,
            call_time=data.call_time,
            end_time=data.end_time,
            rate=data.rate,
            rate_type=data.rate_type,
            notes=data.notes,
        )

        sync_result = await self._sync(tenant_id, assignment.id)
        self.db.refresh(assignment)
        return assignment, verdict, sync_result

    async def remove_assignment(self, tenant_id: str, event_id: str, assignment_id: str) -> SyncResult:
        """Remove calendar entries first (best-effort), then the assignment itself"""
        assignment = self._get_assignment(tenant_id, event_id, assignment_id)

        sync_result = await self._remove_sync(tenant_id, assignment.id)

        self.repo.delete_assignment(self.db, assignment)
        logger.info(f"🗑️ Crew assignment removed: {assignment_id}")
        return sync_result

    async def _sync(self, tenant_id: str, assignment_id: str) -> SyncResult:
        result = await self.calendar_sync.sync_assignment(tenant_id, assignment_id)
        if not result.ok:
            logger.warning(f"⚠️ Calendar sync failed for assignment {assignment_id}: {result.reason.value}")
        return result

    async def _remove_sync(self, tenant_id: str, assignment_id: str) -> SyncResult:
        result = await self.calendar_sync.remove_assignment_sync(tenant_id, assignment_id)
        if not result.ok:
            logger.warning(
                f"⚠️ Calendar cleanup incomplete for assignment {assignment_id}: "
                f"{result.reason.value}, left behind: {result.failed_ids}"
            )
        return result
