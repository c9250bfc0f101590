"""Event repository - Database operations for events and crew assignments"""

from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session, joinedload

from ...config import CALENDAR_TIMEZONE
from ...models import Event, EventCrew
from ..scheduling.time_calculator import to_zone

TIME_FIELDS = ("call_time", "end_time")


def in_calendar_zone(fields: dict) -> dict:
    """Store call and end times as calendar-zone wall time"""
    zone = ZoneInfo(CALENDAR_TIMEZONE)
    return {key: to_zone(value, zone) if key in TIME_FIELDS else value for key, value in fields.items()}


class EventRepository:
    """Repository for event database operations"""

    @staticmethod
    def get_events(db: Session, tenant_id: str) -> list[Event]:
        """Get all events for a tenant, soonest first"""
        return (
            db.query(Event)
            .filter(Event.tenant_id == tenant_id)
            .order_by(Event.start_date.asc(), Event.name.asc())
            .all()
        )

    @staticmethod
    def get_event_by_id(db: Session, tenant_id: str, event_id: str) -> Optional[Event]:
        """Get an event with its crew assignments"""
        return (
            db.query(Event)
            .options(joinedload(Event.crew_assignments).joinedload(EventCrew.crew_member))
            .filter(Event.id == event_id, Event.tenant_id == tenant_id)
            .first()
        )

    @staticmethod
    def create_event(db: Session, tenant_id: str, **event_data) -> Event:
        event = Event(tenant_id=tenant_id, **event_data)
        db.add(event)
        db.commit()
        db.refresh(event)
        return event

    @staticmethod
    def update_event(db: Session, event: Event, **updates) -> Event:
        for key, value in updates.items():
            if value is not None and hasattr(event, key):
                setattr(event, key, value)

        db.commit()
        db.refresh(event)
        return event

    @staticmethod
    def delete_event(db: Session, event: Event) -> None:
        db.delete(event)
        db.commit()

    # Crew assignment methods
    @staticmethod
    def get_assignment(db: Session, tenant_id: str, event_id: str, assignment_id: str) -> Optional[EventCrew]:
        return (
            db.query(EventCrew)
            .options(joinedload(EventCrew.crew_member))
            .filter(
                EventCrew.id == assignment_id,
                EventCrew.event_id == event_id,
                EventCrew.tenant_id == tenant_id,
            )
            .first()
        )

    @staticmethod
    def get_assignment_for_member(
        db: Session, tenant_id: str, event_id: str, crew_member_id: str
    ) -> Optional[EventCrew]:
        return (
            db.query(EventCrew)
            .filter(
                EventCrew.event_id == event_id,
                EventCrew.crew_member_id == crew_member_id,
                EventCrew.tenant_id == tenant_id,
            )
            .first()
        )

    @staticmethod
    def create_assignment(db: Session, tenant_id: str, **assignment_data) -> EventCrew:
        assignment = EventCrew(tenant_id=tenant_id, external_event_ids=[], **in_calendar_zone(assignment_data))
        db.add(assignment)
        db.commit()
        db.refresh(assignment)
        return assignment

    @staticmethod
    def update_assignment(db: Session, assignment: EventCrew, **updates) -> EventCrew:
        for key, value in in_calendar_zone(updates).items():
            if value is not None and hasattr(assignment, key):
                setattr(assignment, key, value)

        db.commit()
        db.refresh(assignment)
        return assignment

    @staticmethod
    def delete_assignment(db: Session, assignment: EventCrew) -> None:
        db.delete(assignment)
        db.commit()
