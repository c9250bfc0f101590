"""Scheduling repository - assignment and crew records used by availability and calendar sync"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import CrewMember, Event, EventCrew


class SchedulingRepository:
    """
    Tenant-scoped point reads/writes. Each write commits on its own; there is
    no transaction spanning several calls.
    """

    @staticmethod
    def get_assignment(db: Session, tenant_id: str, assignment_id: str) -> Optional[EventCrew]:
        return (
            db.query(EventCrew)
            .options(joinedload(EventCrew.event), joinedload(EventCrew.crew_member))
            .filter(EventCrew.id == assignment_id, EventCrew.tenant_id == tenant_id)
            .first()
        )

    @staticmethod
    def get_event(db: Session, tenant_id: str, event_id: str) -> Optional[Event]:
        return db.query(Event).filter(Event.id == event_id, Event.tenant_id == tenant_id).first()

    @staticmethod
    def get_crew_member(db: Session, tenant_id: str, crew_member_id: str) -> Optional[CrewMember]:
        return (
            db.query(CrewMember)
            .filter(CrewMember.id == crew_member_id, CrewMember.tenant_id == tenant_id)
            .first()
        )

    @staticmethod
    def list_other_assignments(
        db: Session, tenant_id: str, crew_member_id: str, exclude_event_id: str
    ) -> list[EventCrew]:
        """Every assignment of the crew member on other events, ordered by assignment id"""
        return (
            db.query(EventCrew)
            .options(joinedload(EventCrew.event))
            .filter(
                EventCrew.tenant_id == tenant_id,
                EventCrew.crew_member_id == crew_member_id,
                EventCrew.event_id != exclude_event_id,
            )
            .order_by(EventCrew.id.asc())
            .all()
        )

    @staticmethod
    def list_crew_by_technician_type(
        db: Session, tenant_id: str, technician_type: str
    ) -> list[CrewMember]:
        return (
            db.query(CrewMember)
            .filter(
                CrewMember.tenant_id == tenant_id,
                CrewMember.technician_type == technician_type,
            )
            .order_by(CrewMember.id.asc())
            .all()
        )

    @staticmethod
    def list_assignments_in_range(
        db: Session,
        tenant_id: str,
        start_date: date,
        end_date: date,
        exclude_event_id: Optional[str] = None,
    ) -> list[EventCrew]:
        """Assignments (any role) whose event date range overlaps [start_date, end_date]"""
        query = (
            db.query(EventCrew)
            .join(Event, EventCrew.event_id == Event.id)
            .options(joinedload(EventCrew.event))
            .filter(
                EventCrew.tenant_id == tenant_id,
                Event.start_date <= end_date,
                Event.end_date >= start_date,
            )
        )
        if exclude_event_id:
            query = query.filter(EventCrew.event_id != exclude_event_id)
        return query.order_by(EventCrew.id.asc()).all()

    @staticmethod
    def update_assignment_external_ids(
        db: Session, tenant_id: str, assignment_id: str, external_ids: list[str]
    ) -> None:
        db.query(EventCrew).filter(
            EventCrew.id == assignment_id, EventCrew.tenant_id == tenant_id
        ).update({EventCrew.external_event_ids: list(external_ids)}, synchronize_session="fetch")
        db.commit()

    @staticmethod
    def clear_assignment_external_ids(db: Session, tenant_id: str, assignment_id: str) -> None:
        SchedulingRepository.update_assignment_external_ids(db, tenant_id, assignment_id, [])

    @staticmethod
    def set_crew_member_disconnected(db: Session, tenant_id: str, crew_member_id: str) -> None:
        """Flag the calendar connection as broken; the stored token is left for inspection"""
        db.query(CrewMember).filter(
            CrewMember.id == crew_member_id, CrewMember.tenant_id == tenant_id
        ).update({CrewMember.google_calendar_connected: False}, synchronize_session="fetch")
        db.commit()
