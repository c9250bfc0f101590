"""Crew availability - classify a proposed assignment against leave and other assignments"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from ...config import CALENDAR_TIMEZONE
from .repository import SchedulingRepository
from .schemas import (
    Available,
    AvailabilityVerdict,
    Conflict,
    Partial,
    TypeAvailability,
    Unavailable,
)
from .time_calculator import (
    dates_overlap,
    effective_window,
    end_of_day,
    format_clock,
    format_day,
    gap_between,
    overlaps,
    start_of_day,
)

logger = logging.getLogger(__name__)

# Back-to-back assignments closer than this are "tight but possible"
TIGHT_TURNAROUND = timedelta(hours=2)


class AvailabilityService:
    """
    Read-only availability checks. Never raises: every failure becomes an
    Unavailable verdict, since the check is advisory.
    """

    def __init__(self, db: Session, zone: Optional[ZoneInfo] = None):
        self.db = db
        self.repo = SchedulingRepository()
        self.zone = zone or ZoneInfo(CALENDAR_TIMEZONE)

    def check_availability(
        self,
        tenant_id: str,
        crew_member_id: str,
        event_id: str,
        proposed_call_time: Optional[datetime] = None,
        proposed_end_time: Optional[datetime] = None,
    ) -> AvailabilityVerdict:
        try:
            return self._check(
                tenant_id, crew_member_id, event_id, proposed_call_time, proposed_end_time
            )
        except Exception as e:
            logger.error(f"❌ Error checking availability for crew {crew_member_id}: {str(e)}")
            return Unavailable(reason="Error checking availability")

    def _check(
        self,
        tenant_id: str,
        crew_member_id: str,
        event_id: str,
        proposed_call_time: Optional[datetime],
        proposed_end_time: Optional[datetime],
    ) -> AvailabilityVerdict:
        event = self.repo.get_event(self.db, tenant_id, event_id)
        if not event:
            return Unavailable(reason="Event not found")

        crew_member = self.repo.get_crew_member(self.db, tenant_id, crew_member_id)
        if not crew_member:
            return Unavailable(reason="Crew member not found")

        requested_start, requested_end = effective_window(
            event.start_date, event.end_date, self.zone, proposed_call_time, proposed_end_time
        )

        leave = self._leave_verdict(crew_member, event.start_date, event.end_date)
        if leave:
            return leave

        others = self.repo.list_other_assignments(self.db, tenant_id, crew_member_id, event_id)
        for other in others:
            other_event = other.event
            if not other_event:
                continue

            other_start, other_end = effective_window(
                other_event.start_date,
                other_event.end_date,
                self.zone,
                other.call_time,
                other.end_time,
            )

            if overlaps(requested_start, requested_end, other_start, other_end):
                return Conflict(
                    assignment_id=other.id,
                    event_id=other_event.id,
                    event_name=other_event.name,
                    call_time=other_start,
                    end_time=other_end,
                )

            if other_end < requested_start and gap_between(other_end, requested_start) < TIGHT_TURNAROUND:
                return Partial(
                    available_after=other_end,
                    reason=(
                        f"Available after {format_clock(other_end, self.zone)} "
                        f"(finishing '{other_event.name}')"
                    ),
                )

            if other_start > requested_end and gap_between(requested_end, other_start) < TIGHT_TURNAROUND:
                return Partial(
                    available_until=other_start,
                    reason=(
                        f"Must finish by {format_clock(other_start, self.zone)} "
                        f"(starting '{other_event.name}')"
                    ),
                )

        return Available()

    def _leave_verdict(self, crew_member, event_start: date, event_end: date) -> Optional[Unavailable]:
        if not (crew_member.on_leave and crew_member.leave_start_date and crew_member.leave_end_date):
            return None

        # Leave end counts through the end of that day
        if not overlaps(
            start_of_day(event_start, self.zone),
            end_of_day(event_end, self.zone),
            start_of_day(crew_member.leave_start_date, self.zone),
            end_of_day(crew_member.leave_end_date, self.zone),
        ):
            return None

        reason = (
            f"On leave from {format_day(crew_member.leave_start_date)} "
            f"to {format_day(crew_member.leave_end_date)}"
        )
        if crew_member.leave_reason:
            reason += f": {crew_member.leave_reason}"
        return Unavailable(reason=reason)

    def count_available_by_type(
        self,
        tenant_id: str,
        technician_type: str,
        start_date: date,
        end_date: date,
        exclude_event_id: Optional[str] = None,
    ) -> TypeAvailability:
        """
        How many crew members of a technician type are free for a date range.
        A crew member assigned to any event (any role) in the range counts as busy.
        """
        try:
            crew = self.repo.list_crew_by_technician_type(self.db, tenant_id, technician_type)
            crew_ids = {c.id for c in crew}
            busy: set[str] = set()

            for member in crew:
                if (
                    member.on_leave
                    and member.leave_start_date
                    and member.leave_end_date
                    and dates_overlap(start_date, end_date, member.leave_start_date, member.leave_end_date)
                ):
                    busy.add(member.id)

            assignments = self.repo.list_assignments_in_range(
                self.db, tenant_id, start_date, end_date, exclude_event_id
            )
            for assignment in assignments:
                if assignment.crew_member_id in crew_ids:
                    busy.add(assignment.crew_member_id)

            logger.info(
                f"ℹ️ Availability for '{technician_type}' {start_date}..{end_date}: "
                f"{len(crew) - len(busy)}/{len(crew)} free"
            )
            return TypeAvailability(
                available=len(crew) - len(busy), total=len(crew), unavailable=len(busy)
            )
        except Exception as e:
            logger.error(f"❌ Error counting availability for '{technician_type}': {str(e)}")
            return TypeAvailability(available=0, total=0, unavailable=0)
