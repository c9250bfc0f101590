"""Expand one crew assignment into single-day calendar events"""

from datetime import date, datetime, time, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from .schemas import CalendarEventDescriptor
from .time_calculator import ensure_aware

DEFAULT_CALL_TIME = time(9, 0)
DEFAULT_END_TIME = time(18, 0)


def daily_window(
    zone: ZoneInfo,
    call_time: Optional[datetime] = None,
    end_time: Optional[datetime] = None,
) -> tuple[time, time]:
    """Time-of-day window for every assignment day (09:00-18:00 unless set)"""
    start = (
        ensure_aware(call_time, zone).astimezone(zone).time().replace(second=0, microsecond=0)
        if call_time
        else DEFAULT_CALL_TIME
    )
    end = (
        ensure_aware(end_time, zone).astimezone(zone).time().replace(second=0, microsecond=0)
        if end_time
        else DEFAULT_END_TIME
    )
    return start, end


def build_description(event_name: str, role: str, location: Optional[str]) -> str:
    return (
        f"Event: {event_name}\n"
        f"Role: {role}\n"
        f"Location: {location or 'TBD'}\n"
        "\n"
        "Assigned via Rental Core."
    )


def expand_assignment(
    role: str,
    event_name: str,
    location: Optional[str],
    start_date: date,
    end_date: date,
    zone: ZoneInfo,
    call_time: Optional[datetime] = None,
    end_time: Optional[datetime] = None,
) -> list[CalendarEventDescriptor]:
    """
    One descriptor per calendar day in [start_date, end_date], each using the
    same daily window. A window whose end is not after its start (overnight
    call) ends on the following day.
    """
    window_start, window_end = daily_window(zone, call_time, end_time)
    overnight = window_end <= window_start

    title = f"{role} - {event_name}"
    description = build_description(event_name, role, location)
    descriptors = []

    day = start_date
    while day <= end_date:
        start = datetime.combine(day, window_start, tzinfo=zone)
        end_day = day + timedelta(days=1) if overnight else day
        end = datetime.combine(end_day, window_end, tzinfo=zone)
        descriptors.append(
            CalendarEventDescriptor(
                title=title,
                description=description,
                location=location or None,
                start=start,
                end=end,
                time_zone=zone.key,
            )
        )
        day += timedelta(days=1)

    return descriptors
