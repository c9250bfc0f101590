import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_id():
    """Generate a unique string primary key"""
    return str(uuid.uuid4())


CREW_ROLES = ("Own Crew", "Freelancer")
RATE_TYPES = ("hourly", "daily", "weekly", "monthly")
EVENT_STATUSES = ("draft", "confirmed", "in_progress", "completed", "cancelled")


class CrewMember(Base):
    __tablename__ = "crew_members"
    __table_args__ = (UniqueConstraint("tenant_id", "email", name="uq_crew_members_tenant_email"),)

    id = Column(String(36), primary_key=True, default=generate_id)
    tenant_id = Column(String(36), index=True, nullable=False)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    contact = Column(String(50), nullable=True)  # Phone number
    role = Column(String(20), nullable=False, default="Own Crew")  # Own Crew, Freelancer
    technician_type = Column(String(100), nullable=True, index=True)  # e.g. "Lighting Technician"
    rate_type = Column(String(20), nullable=True)  # hourly, daily, weekly, monthly
    base_rate = Column(Float, nullable=True)

    # Leave window (inclusive calendar dates)
    on_leave = Column(Boolean, default=False, nullable=False)
    leave_start_date = Column(Date, nullable=True)
    leave_end_date = Column(Date, nullable=True)
    leave_reason = Column(Text, nullable=True)

    # Google Calendar OAuth (refresh token is Fernet-encrypted)
    google_calendar_refresh_token = Column(Text, nullable=True)
    google_calendar_token_expiry = Column(DateTime(timezone=True), nullable=True)
    google_calendar_connected = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    assignments = relationship(
        "EventCrew", back_populates="crew_member", cascade="all, delete-orphan"
    )


class Event(Base):
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=generate_id)
    tenant_id = Column(String(36), index=True, nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    location = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default="draft")
    quote_id = Column(String(36), nullable=True)  # Set when generated from an accepted quote

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    crew_assignments = relationship(
        "EventCrew", back_populates="event", cascade="all, delete-orphan"
    )


class EventCrew(Base):
    """Crew-to-event assignment"""

    __tablename__ = "event_crew"
    __table_args__ = (
        UniqueConstraint("event_id", "crew_member_id", name="uq_event_crew_event_member"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    tenant_id = Column(String(36), index=True, nullable=False)
    event_id = Column(String(36), ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    crew_member_id = Column(
        String(36), ForeignKey("crew_members.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role = Column(String(255), nullable=False)
    call_time = Column(DateTime(timezone=True), nullable=True)
    end_time = Column(DateTime(timezone=True), nullable=True)
    rate = Column(Float, nullable=True)
    rate_type = Column(String(20), nullable=True)
    notes = Column(Text, nullable=True)

    # One Google Calendar event per assignment day, in day order
    external_event_ids = Column(JSON, default=list, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    event = relationship("Event", back_populates="crew_assignments")
    crew_member = relationship("CrewMember", back_populates="assignments")
