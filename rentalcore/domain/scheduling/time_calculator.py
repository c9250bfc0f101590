"""Time range helpers for crew scheduling.

All comparisons work on absolute (timezone-aware) instants. Values coming
from storage or requests are normalized with ``ensure_aware`` before they
get here.
"""

from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional

END_OF_DAY = time(23, 59, 59, 999000)


def ensure_aware(value: datetime, zone: tzinfo) -> datetime:
    """Attach ``zone`` to naive datetimes (SQLite drops tzinfo on read)"""
    if value.tzinfo is None:
        return value.replace(tzinfo=zone)
    return value


def to_zone(value: Optional[datetime], zone: tzinfo) -> Optional[datetime]:
    """
    Express an aware datetime as wall time in ``zone`` before it is stored,
    so a store that drops tzinfo still holds what ``ensure_aware`` expects.
    Naive values are taken to be in ``zone`` already.
    """
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(zone)


def start_of_day(day: date, zone: tzinfo) -> datetime:
    return datetime.combine(day, time.min, tzinfo=zone)


def end_of_day(day: date, zone: tzinfo) -> datetime:
    return datetime.combine(day, END_OF_DAY, tzinfo=zone)


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open [start, end) overlap; touching ranges do not overlap"""
    return a_start < b_end and a_end > b_start


def dates_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Closed (inclusive) calendar date range overlap"""
    return a_start <= b_end and a_end >= b_start


def gap_between(earlier_end: datetime, later_start: datetime) -> timedelta:
    """Time between the end of one range and the start of the next"""
    return later_start - earlier_end


def gap_hours(earlier_end: datetime, later_start: datetime) -> float:
    return gap_between(earlier_end, later_start).total_seconds() / 3600


def effective_window(
    start_date: date,
    end_date: date,
    zone: tzinfo,
    call_time: Optional[datetime] = None,
    end_time: Optional[datetime] = None,
) -> tuple[datetime, datetime]:
    """
    Window an assignment occupies: explicit call/end time when set, otherwise
    the whole event from start date 00:00 to end date 23:59:59.999
    """
    window_start = ensure_aware(call_time, zone) if call_time else start_of_day(start_date, zone)
    window_end = ensure_aware(end_time, zone) if end_time else end_of_day(end_date, zone)
    return window_start, window_end


def format_day(day: date) -> str:
    """e.g. 'Jul 1'"""
    return f"{day:%b} {day.day}"


def format_clock(value: datetime, zone: tzinfo) -> str:
    """e.g. '2:00 PM' in the calendar zone"""
    local = ensure_aware(value, zone).astimezone(zone)
    return local.strftime("%I:%M %p").lstrip("0")
