"""Crew domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ...models import CREW_ROLES, RATE_TYPES
from ...shared.validators import validate_choice, validate_email, validate_phone


class CrewMemberCreate(BaseModel):
    """Schema for creating a crew member"""

    name: str
    email: Optional[str] = None
    contact: Optional[str] = None
    role: str = "Own Crew"
    technician_type: Optional[str] = None
    rate_type: Optional[str] = None
    base_rate: Optional[float] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v):
        return validate_email(v) if v else None

    @field_validator("contact")
    @classmethod
    def validate_contact(cls, v):
        return validate_phone(v) if v else None

    @field_validator("role")
    @classmethod
    def validate_role(cls, v):
        return validate_choice(v, CREW_ROLES, "Role")

    @field_validator("rate_type")
    @classmethod
    def validate_rate_type(cls, v):
        return validate_choice(v or None, RATE_TYPES, "Rate type")


class CrewMemberUpdate(BaseModel):
    """Schema for updating a crew member; omitted fields stay unchanged"""

    name: Optional[str] = None
    email: Optional[str] = None
    contact: Optional[str] = None
    role: Optional[str] = None
    technician_type: Optional[str] = None
    rate_type: Optional[str] = None
    base_rate: Optional[float] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v):
        return validate_email(v) if v else None

    @field_validator("contact")
    @classmethod
    def validate_contact(cls, v):
        return validate_phone(v) if v else None

    @field_validator("role")
    @classmethod
    def validate_role(cls, v):
        return validate_choice(v, CREW_ROLES, "Role")

    @field_validator("rate_type")
    @classmethod
    def validate_rate_type(cls, v):
        return validate_choice(v or None, RATE_TYPES, "Rate type")


class LeaveUpdate(BaseModel):
    """Schema for putting a crew member on or off leave"""

    on_leave: bool
    leave_start_date: Optional[date] = None
    leave_end_date: Optional[date] = None
    leave_reason: Optional[str] = None


class CrewMemberResponse(BaseModel):
    """Schema for crew member response (the stored calendar token is never exposed)"""

    id: str
    name: str
    email: Optional[str] = None
    contact: Optional[str] = None
    role: str
    technician_type: Optional[str] = None
    rate_type: Optional[str] = None
    base_rate: Optional[float] = None
    on_leave: bool = False
    leave_start_date: Optional[date] = None
    leave_end_date: Optional[date] = None
    leave_reason: Optional[str] = None
    google_calendar_connected: bool = False
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class BusyRange(BaseModel):
    start: datetime
    end: datetime
    event_id: str
    event_name: str
    call_time: Optional[datetime] = None
    end_time: Optional[datetime] = None


class CrewCalendarResponse(BaseModel):
    crew_member_id: str
    busy_dates: list[BusyRange]
