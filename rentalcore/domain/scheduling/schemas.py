"""Scheduling domain schemas - availability verdicts, calendar descriptors, sync results"""

import enum
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, ClassVar, Literal, Optional, Union

from pydantic import BaseModel

# ============================================================================
# AVAILABILITY VERDICTS
# ============================================================================


@dataclass(frozen=True)
class Available:
    status: ClassVar[str] = "available"
    available: ClassVar[bool] = True


@dataclass(frozen=True)
class Conflict:
    """Proposed window overlaps another assignment of the same crew member"""

    assignment_id: str
    event_id: str
    event_name: str
    call_time: datetime
    end_time: datetime

    status: ClassVar[str] = "conflict"
    available: ClassVar[bool] = False


@dataclass(frozen=True)
class Partial:
    """Technically free, but with less than the turnaround buffer to another assignment"""

    reason: str
    available_after: Optional[datetime] = None
    available_until: Optional[datetime] = None

    status: ClassVar[str] = "partial"
    available: ClassVar[bool] = True


@dataclass(frozen=True)
class Unavailable:
    reason: str

    status: ClassVar[str] = "unavailable"
    available: ClassVar[bool] = False


AvailabilityVerdict = Union[Available, Conflict, Partial, Unavailable]


@dataclass(frozen=True)
class TypeAvailability:
    available: int
    total: int
    unavailable: int


# ============================================================================
# CALENDAR SYNC
# ============================================================================


@dataclass(frozen=True)
class CalendarEventDescriptor:
    """One single-day external calendar event mirroring part of an assignment"""

    title: str
    description: str
    location: Optional[str]
    start: datetime
    end: datetime
    time_zone: str

    def to_google_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "summary": self.title,
            "description": self.description,
            "start": {"dateTime": self.start.isoformat(), "timeZone": self.time_zone},
            "end": {"dateTime": self.end.isoformat(), "timeZone": self.time_zone},
        }
        if self.location:
            body["location"] = self.location
        return body


class SyncFailure(str, enum.Enum):
    NOT_FOUND = "not_found"
    CREDENTIAL_INVALID = "credential_invalid"
    TRANSIENT_EXTERNAL_FAILURE = "transient_external_failure"
    ALL_CREATES_FAILED = "all_creates_failed"


@dataclass(frozen=True)
class SyncResult:
    ok: bool
    external_event_id: Optional[str] = None
    reason: Optional[SyncFailure] = None
    failed_ids: list[str] = field(default_factory=list)

    @classmethod
    def success(cls, external_event_id: Optional[str] = None) -> "SyncResult":
        return cls(ok=True, external_event_id=external_event_id)

    @classmethod
    def failure(cls, reason: SyncFailure, failed_ids: Optional[list[str]] = None) -> "SyncResult":
        return cls(ok=False, reason=reason, failed_ids=list(failed_ids or []))


# ============================================================================
# API RESPONSES
# ============================================================================


class ConflictDetail(BaseModel):
    event_id: str
    event_name: str
    call_time: datetime
    end_time: datetime


class PartialDetail(BaseModel):
    available_after: Optional[datetime] = None
    available_until: Optional[datetime] = None
    reason: str


class UnavailableDetail(BaseModel):
    reason: str


class AvailabilityResponse(BaseModel):
    """Schema for an availability verdict"""

    available: bool
    status: Literal["available", "conflict", "partial", "unavailable"]
    conflict: Optional[ConflictDetail] = None
    partial: Optional[PartialDetail] = None
    unavailable: Optional[UnavailableDetail] = None

    @classmethod
    def from_verdict(cls, verdict: AvailabilityVerdict) -> "AvailabilityResponse":
        if isinstance(verdict, Conflict):
            return cls(
                available=False,
                status="conflict",
                conflict=ConflictDetail(
                    event_id=verdict.event_id,
                    event_name=verdict.event_name,
                    call_time=verdict.call_time,
                    end_time=verdict.end_time,
                ),
            )
        if isinstance(verdict, Partial):
            return cls(
                available=True,
                status="partial",
                partial=PartialDetail(
                    available_after=verdict.available_after,
                    available_until=verdict.available_until,
                    reason=verdict.reason,
                ),
            )
        if isinstance(verdict, Unavailable):
            return cls(
                available=False,
                status="unavailable",
                unavailable=UnavailableDetail(reason=verdict.reason),
            )
        return cls(available=True, status="available")


class TypeAvailabilityResponse(BaseModel):
    technician_type: str
    start_date: date
    end_date: date
    available: int
    total: int
    unavailable: int


class SyncResponse(BaseModel):
    success: bool
    external_event_id: Optional[str] = None
    error: Optional[str] = None
    reconnect_required: bool = False
    failed_ids: list[str] = []

    @classmethod
    def from_result(cls, result: SyncResult) -> "SyncResponse":
        return cls(
            success=result.ok,
            external_event_id=result.external_event_id,
            error=result.reason.value if result.reason else None,
            reconnect_required=result.reason == SyncFailure.CREDENTIAL_INVALID,
            failed_ids=list(result.failed_ids),
        )
