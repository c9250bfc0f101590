from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from rentalcore.domain.scheduling.time_calculator import (
    dates_overlap,
    effective_window,
    end_of_day,
    ensure_aware,
    format_clock,
    format_day,
    gap_between,
    gap_hours,
    overlaps,
    start_of_day,
    to_zone,
)

UTC = ZoneInfo("UTC")
BERLIN = ZoneInfo("Europe/Berlin")


def at(hour, minute=0, day=1):
    return datetime(2024, 6, day, hour, minute, tzinfo=UTC)


class TestOverlaps:
    def test_overlapping_ranges(self):
        assert overlaps(at(9), at(18), at(12), at(16))

    def test_contained_range(self):
        assert overlaps(at(12), at(16), at(9), at(18))

    def test_touching_ranges_do_not_overlap(self):
        assert not overlaps(at(9), at(12), at(12), at(15))
        assert not overlaps(at(12), at(15), at(9), at(12))

    def test_disjoint_ranges(self):
        assert not overlaps(at(9), at(10), at(14), at(18))


class TestDatesOverlap:
    def test_shared_day_counts(self):
        assert dates_overlap(date(2024, 7, 1), date(2024, 7, 5), date(2024, 7, 5), date(2024, 7, 8))

    def test_adjacent_days_do_not_overlap(self):
        assert not dates_overlap(date(2024, 7, 1), date(2024, 7, 5), date(2024, 7, 6), date(2024, 7, 8))


def test_gap_between_and_hours():
    assert gap_between(at(14), at(15)) == timedelta(hours=1)
    assert gap_hours(at(14), at(16, 30)) == 2.5


def test_day_bounds():
    assert start_of_day(date(2024, 6, 1), UTC) == at(0)
    assert end_of_day(date(2024, 6, 1), UTC) == datetime(2024, 6, 1, 23, 59, 59, 999000, tzinfo=UTC)


def test_ensure_aware_attaches_zone_to_naive_values():
    naive = datetime(2024, 6, 1, 9, 0)
    assert ensure_aware(naive, BERLIN).tzinfo == BERLIN

    aware = at(9)
    assert ensure_aware(aware, BERLIN) is aware


def test_to_zone_converts_aware_values_into_zone_wall_time():
    # 10:00 in Berlin during summer time is 08:00 UTC
    converted = to_zone(datetime(2024, 6, 1, 10, 0, tzinfo=BERLIN), UTC)
    assert converted.replace(tzinfo=None) == datetime(2024, 6, 1, 8, 0)

    naive = datetime(2024, 6, 1, 10, 0)
    assert to_zone(naive, UTC) is naive
    assert to_zone(None, UTC) is None


class TestEffectiveWindow:
    def test_defaults_to_whole_event(self):
        start, end = effective_window(date(2024, 6, 1), date(2024, 6, 3), UTC)
        assert start == at(0)
        assert end == end_of_day(date(2024, 6, 3), UTC)

    def test_explicit_times_win(self):
        start, end = effective_window(date(2024, 6, 1), date(2024, 6, 3), UTC, at(10), at(14))
        assert (start, end) == (at(10), at(14))

    def test_only_call_time_set(self):
        start, end = effective_window(date(2024, 6, 1), date(2024, 6, 1), UTC, call_time=at(10))
        assert start == at(10)
        assert end == end_of_day(date(2024, 6, 1), UTC)


def test_format_day():
    assert format_day(date(2024, 7, 1)) == "Jul 1"
    assert format_day(date(2024, 12, 25)) == "Dec 25"


def test_format_clock():
    assert format_clock(at(14), UTC) == "2:00 PM"
    assert format_clock(at(9, 5), UTC) == "9:05 AM"
    assert format_clock(at(12), UTC) == "12:00 PM"
    assert format_clock(at(0, 30), UTC) == "12:30 AM"


def test_format_clock_converts_into_zone():
    # 12:00 UTC is 14:00 in Berlin during summer time
    assert format_clock(at(12), BERLIN) == "2:00 PM"
