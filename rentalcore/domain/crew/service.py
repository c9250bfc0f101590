"""Crew service - Business logic for crew members, leave and calendar data"""

import logging
from typing import Optional
from zoneinfo import ZoneInfo

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...config import CALENDAR_TIMEZONE
from ...models import CrewMember
from ..scheduling.time_calculator import effective_window, ensure_aware
from .repository import CrewRepository
from .schemas import BusyRange, CrewMemberCreate, CrewMemberUpdate, LeaveUpdate

logger = logging.getLogger(__name__)


def validate_rate_pair(rate_type: Optional[str], base_rate: Optional[float]) -> None:
    """A rate type needs a positive base rate, and a base rate needs a rate type"""
    if rate_type and (base_rate is None or base_rate <= 0):
        raise HTTPException(
            status_code=400,
            detail="Base rate is required and must be greater than 0 when rate type is provided",
        )
    if base_rate is not None and not rate_type:
        raise HTTPException(status_code=400, detail="Rate type is required when base rate is provided")


class CrewService:
    """Service layer for crew member business logic"""

    def __init__(self, db: Session, zone: Optional[ZoneInfo] = None):
        self.db = db
        self.repo = CrewRepository()
        self.zone = zone or ZoneInfo(CALENDAR_TIMEZONE)

    def get_crew_members(self, tenant_id: str) -> list[CrewMember]:
        return self.repo.get_crew_members(self.db, tenant_id)

    def get_crew_member(self, tenant_id: str, crew_member_id: str) -> CrewMember:
        crew_member = self.repo.get_crew_member_by_id(self.db, tenant_id, crew_member_id)
        if not crew_member:
            raise HTTPException(status_code=404, detail="Crew member not found")
        return crew_member

    def _ensure_email_free(self, tenant_id: str, email: Optional[str], crew_member_id: Optional[str] = None):
        if not email:
            return
        existing = self.repo.get_crew_member_by_email(self.db, tenant_id, email)
        if existing and existing.id != crew_member_id:
            raise HTTPException(status_code=409, detail="A crew member with this email already exists")

    def create_crew_member(self, tenant_id: str, data: CrewMemberCreate) -> CrewMember:
        """Create a crew member with validation"""
        logger.info(f"📥 Creating crew member for tenant: {tenant_id}")

        validate_rate_pair(data.rate_type, data.base_rate)
        self._ensure_email_free(tenant_id, data.email)

        try:
            crew_member = self.repo.create_crew_member(
                self.db,
                tenant_id,
                name=data.name,
                email=data.email,
                contact=data.contact,
                role=data.role,
                technician_type=data.technician_type,
                rate_type=data.rate_type,
                base_rate=data.base_rate,
            )
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Duplicate crew member email for tenant {tenant_id}: {str(e)}")
            raise HTTPException(status_code=409, detail="A crew member with this email already exists")

        logger.info(f"✅ Crew member created: {crew_member.id}")
        return crew_member

    def update_crew_member(self, tenant_id: str, crew_member_id: str, data: CrewMemberUpdate) -> CrewMember:
        crew_member = self.get_crew_member(tenant_id, crew_member_id)

        updates = {}
        if data.name is not None:
            updates["name"] = data.name
        if data.email is not None:
            updates["email"] = data.email
        if data.contact is not None:
            updates["contact"] = data.contact
        if data.role is not None:
            updates["role"] = data.role
        if data.technician_type is not None:
            updates["technician_type"] = data.technician_type
        if data.rate_type is not None:
            updates["rate_type"] = data.rate_type
        if data.base_rate is not None:
            updates["base_rate"] = data.base_rate

        validate_rate_pair(
            updates.get("rate_type", crew_member.rate_type),
            updates.get("base_rate", crew_member.base_rate),
        )
        self._ensure_email_free(tenant_id, updates.get("email"), crew_member.id)

        try:
            return self.repo.update_crew_member(self.db, crew_member, **updates)
        except IntegrityError:
            self.db.rollback()
            raise HTTPException(status_code=409, detail="A crew member with this email already exists")

    def delete_crew_member(self, tenant_id: str, crew_member_id: str) -> dict:
        crew_member = self.get_crew_member(tenant_id, crew_member_id)
        self.repo.delete_crew_member(self.db, crew_member)
        logger.info(f"🗑️ Crew member deleted: {crew_member_id}")
        return {"message": "Crew member deleted"}

    def update_leave(self, tenant_id: str, crew_member_id: str, data: LeaveUpdate) -> CrewMember:
        """Put a crew member on leave for an inclusive date range, or take them off leave"""
        crew_member = self.get_crew_member(tenant_id, crew_member_id)

        if data.on_leave:
            if not data.leave_start_date or not data.leave_end_date:
                raise HTTPException(
                    status_code=400,
                    detail="Leave start date and end date are required when marking on leave",
                )
            if data.leave_end_date < data.leave_start_date:
                raise HTTPException(status_code=400, detail="Leave end date must be after start date")

            updates = {
                "on_leave": True,
                "leave_start_date": data.leave_start_date,
                "leave_end_date": data.leave_end_date,
                "leave_reason": data.leave_reason or None,
            }
        else:
            updates = {
                "on_leave": False,
                "leave_start_date": None,
                "leave_end_date": None,
                "leave_reason": None,
            }

        crew_member = self.repo.update_crew_member(self.db, crew_member, **updates)
        logger.info(f"✅ Leave updated for crew member {crew_member_id}: on_leave={data.on_leave}")
        return crew_member

    def get_calendar_data(
        self,
        tenant_id: str,
        crew_member_id: str,
        exclude_event_id: Optional[str] = None,
        include_current_event: bool = False,
    ) -> list[BusyRange]:
        """
        Busy ranges for a crew member, one per assignment, ordered by start.
        The excluded event is only dropped when include_current_event is False.
        """
        self.get_crew_member(tenant_id, crew_member_id)

        exclude = exclude_event_id if exclude_event_id and not include_current_event else None
        assignments = self.repo.get_assignments_with_events(self.db, tenant_id, crew_member_id, exclude)

        busy = []
        for assignment in assignments:
            event = assignment.event
            if not event:
                continue
            start, end = effective_window(
                event.start_date, event.end_date, self.zone, assignment.call_time, assignment.end_time
            )
            busy.append(
                BusyRange(
                    start=start,
                    end=end,
                    event_id=event.id,
                    event_name=event.name or "Unknown Event",
                    call_time=ensure_aware(assignment.call_time, self.zone) if assignment.call_time else None,
                    end_time=ensure_aware(assignment.end_time, self.zone) if assignment.end_time else None,
                )
            )

        busy.sort(key=lambda b: b.start)
        logger.info(f"ℹ️ Found {len(busy)} busy range(s) for crew member {crew_member_id}")
        return busy

    def disconnect_google_calendar(self, tenant_id: str, crew_member_id: str) -> dict:
        """Forget the stored calendar credential; already-synced events are left in place"""
        crew_member = self.get_crew_member(tenant_id, crew_member_id)
        self.repo.update_crew_member(
            self.db,
            crew_member,
            google_calendar_refresh_token=None,
            google_calendar_token_expiry=None,
            google_calendar_connected=False,
        )
        logger.info(f"✅ Google Calendar disconnected for crew member {crew_member_id}")
        return {"success": True, "message": "Google Calendar disconnected"}
