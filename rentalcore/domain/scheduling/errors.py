"""Scheduling errors raised by the Google adapters and handled by the synchronizer"""

from typing import Optional


class SchedulingError(Exception):
    """Base class for crew scheduling / calendar sync errors"""


class CredentialInvalidError(SchedulingError):
    """The stored refresh credential is permanently unusable (revoked, expired, undecryptable)"""


class CredentialUnavailableError(SchedulingError):
    """An access token could not be obtained right now; the credential may still be valid"""


class CalendarAuthError(SchedulingError):
    """The calendar API rejected the access token"""


class CalendarRequestError(SchedulingError):
    """A single calendar API call failed for a reason other than authorization"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
