"""Tests for booking slot generation."""
from datetime import date, datetime, time, timezone
from types import SimpleNamespace
from zoneinfo import ZoneInfo

from groomypaws.services.availability_service import (
    day_of_week,
    format_display_time,
    generate_time_slots,
)

MONDAY = date(2030, 1, 7)


def _hours(day=1, start=time(9, 0), end=time(17, 0), available=True):
    return SimpleNamespace(day_of_week=day, start_time=start, end_time=end, is_available=available)


def _appt(hour, minute=0, duration=60, status="confirmed"):
    return SimpleNamespace(
        scheduled_at=datetime(2030, 1, 7, hour, minute, tzinfo=timezone.utc),
        duration_minutes=duration,
        status=status,
    )


def test_day_of_week_starts_on_sunday():
    assert day_of_week(date(2030, 1, 6)) == 0
    assert day_of_week(MONDAY) == 1
    assert day_of_week(date(2030, 1, 12)) == 6


def test_display_time_formatting():
    assert format_display_time(time(9, 0)) == "9:00 AM"
    assert format_display_time(time(12, 30)) == "12:30 PM"
    assert format_display_time(time(0, 15)) == "12:15 AM"
    assert format_display_time(time(16, 30)) == "4:30 PM"


def test_no_hours_for_weekday_returns_empty():
    assert generate_time_slots(MONDAY, [_hours(day=2)], []) == []


def test_unavailable_row_is_ignored():
    assert generate_time_slots(MONDAY, [_hours(available=False)], []) == []


def test_full_day_has_sixteen_half_hour_slots():
    slots = generate_time_slots(MONDAY, [_hours()], [])
    assert len(slots) == 16
    assert slots[0].time == "09:00"
    assert slots[0].display_time == "9:00 AM"
    assert slots[-1].time == "16:30"
    assert all(s.available for s in slots)


def test_overlapping_slots_are_marked_unavailable():
    slots = generate_time_slots(MONDAY, [_hours()], [_appt(10, 0, duration=60)])
    taken = [s.time for s in slots if not s.available]
    assert taken == ["10:00", "10:30"]


def test_longer_duration_blocks_earlier_starts():
    slots = generate_time_slots(MONDAY, [_hours()], [_appt(10, 0, duration=30)], duration_minutes=90)
    taken = [s.time for s in slots if not s.available]
    assert taken == ["09:00", "09:30", "10:00"]


def test_missing_duration_defaults_to_an_hour():
    slots = generate_time_slots(MONDAY, [_hours()], [_appt(13, 0, duration=None)])
    taken = [s.time for s in slots if not s.available]
    assert taken == ["13:00", "13:30"]


def test_cancelled_appointments_are_ignored():
    slots = generate_time_slots(MONDAY, [_hours()], [_appt(10, 0, status="cancelled")])
    assert all(s.available for s in slots)


def test_first_matching_row_wins():
    rows = [_hours(start=time(12, 0), end=time(13, 0)), _hours()]
    slots = generate_time_slots(MONDAY, rows, [])
    assert [s.time for s in slots] == ["12:00", "12:30"]


def test_business_timezone_wall_clock():
    tz = ZoneInfo("America/New_York")
    slots = generate_time_slots(MONDAY, [_hours(start=time(9, 0), end=time(10, 0))], [], tz=tz)
    assert slots[0].time == "09:00"
    # 9:00 EST is 14:00 UTC
    assert slots[0].starts_at.astimezone(timezone.utc).hour == 14
