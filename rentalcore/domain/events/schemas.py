"""Event domain schemas - Pydantic models for events and crew assignments"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ...models import EVENT_STATUSES, RATE_TYPES
from ...shared.validators import validate_choice
from ..scheduling.schemas import AvailabilityResponse, SyncResponse


class EventCreate(BaseModel):
    """Schema for creating an event"""

    name: str
    description: Optional[str] = None
    start_date: date
    end_date: date
    location: Optional[str] = None
    status: str = "draft"
    quote_id: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return validate_choice(v, EVENT_STATUSES, "Status")


class EventUpdate(BaseModel):
    """Schema for updating an event; omitted fields stay unchanged"""

    name: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    location: Optional[str] = None
    status: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return validate_choice(v, EVENT_STATUSES, "Status")


class AssignmentCreate(BaseModel):
    """Schema for assigning a crew member to an event"""

    crew_member_id: str
    role: str
    call_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    rate: Optional[float] = None
    rate_type: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("role")
    @classmethod
    def validate_role(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Role is required")
        return v

    @field_validator("rate_type")
    @classmethod
    def validate_rate_type(cls, v):
        return validate_choice(v or None, RATE_TYPES, "Rate type")


class AssignmentUpdate(BaseModel):
    role: Optional[str] = None
    call_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    rate: Optional[float] = None
    rate_type: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("role")
    @classmethod
    def validate_role(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Role is required")
        return v

    @field_validator("rate_type")
    @classmethod
    def validate_rate_type(cls, v):
        return validate_choice(v or None, RATE_TYPES, "Rate type")


class AssignmentResponse(BaseModel):
    id: str
    event_id: str
    crew_member_id: str
    crew_member_name: Optional[str] = None
    role: str
    call_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    rate: Optional[float] = None
    rate_type: Optional[str] = None
    notes: Optional[str] = None
    external_event_ids: list[str] = []

    model_config = ConfigDict(from_attributes=True)


class EventResponse(BaseModel):
    """Schema for event response"""

    id: str
    name: str
    description: Optional[str] = None
    start_date: date
    end_date: date
    location: Optional[str] = None
    status: str
    quote_id: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class EventDetailResponse(EventResponse):
    crew: list[AssignmentResponse] = []


class AssignmentResult(BaseModel):
    """Assignment after add/update, with the availability verdict and calendar sync outcome"""

    assignment: AssignmentResponse
    availability: Optional[AvailabilityResponse] = None
    calendar_sync: SyncResponse
