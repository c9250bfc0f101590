"""Crew repository - Database operations for crew members"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import CrewMember, EventCrew


class CrewRepository:
    """Repository for crew member database operations"""

    @staticmethod
    def get_crew_members(db: Session, tenant_id: str) -> list[CrewMember]:
        """Get all crew members for a tenant, ordered by name"""
        return (
            db.query(CrewMember)
            .filter(CrewMember.tenant_id == tenant_id)
            .order_by(CrewMember.name.asc())
            .all()
        )

    @staticmethod
    def get_crew_member_by_id(db: Session, tenant_id: str, crew_member_id: str) -> Optional[CrewMember]:
        return (
            db.query(CrewMember)
            .filter(CrewMember.id == crew_member_id, CrewMember.tenant_id == tenant_id)
            .first()
        )

    @staticmethod
    def get_crew_member_by_email(db: Session, tenant_id: str, email: str) -> Optional[CrewMember]:
        return (
            db.query(CrewMember)
            .filter(CrewMember.email == email, CrewMember.tenant_id == tenant_id)
            .first()
        )

    @staticmethod
    def create_crew_member(db: Session, tenant_id: str, **crew_data) -> CrewMember:
        crew_member = CrewMember(tenant_id=tenant_id, **crew_data)
        db.add(crew_member)
        db.commit()
        db.refresh(crew_member)
        return crew_member

    @staticmethod
    def update_crew_member(db: Session, crew_member: CrewMember, **updates) -> CrewMember:
        """Apply updates as given; None values are written (used to clear leave fields)"""
        for key, value in updates.items():
            if hasattr(crew_member, key):
                setattr(crew_member, key, value)

        db.commit()
        db.refresh(crew_member)
        return crew_member

    @staticmethod
    def delete_crew_member(db: Session, crew_member: CrewMember) -> None:
        db.delete(crew_member)
        db.commit()

    @staticmethod
    def get_assignments_with_events(
        db: Session, tenant_id: str, crew_member_id: str, exclude_event_id: Optional[str] = None
    ) -> list[EventCrew]:
        """Crew member's assignments with their events loaded"""
        query = (
            db.query(EventCrew)
            .options(joinedload(EventCrew.event))
            .filter(EventCrew.tenant_id == tenant_id, EventCrew.crew_member_id == crew_member_id)
        )
        if exclude_event_id:
            query = query.filter(EventCrew.event_id != exclude_event_id)
        return query.all()
