"""
Availability service - staff weekly hours and booking slot computation.

Slot rules:
- Use the first available row for the date's weekday (0 = Sunday)
- Step from start_time in 30 minute increments while start < end_time
- A slot [s, s + duration) is taken when it overlaps any non-cancelled
  appointment [a, a + (duration or 60))
"""

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Iterable, NamedTuple
from uuid import UUID
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session, joinedload

from groomypaws.core.config import settings
from groomypaws.db.enums import AppointmentStatus, Role
from groomypaws.db.models import Availability, User
from groomypaws.services import appointment_service


DEFAULT_START = time(9, 0)
DEFAULT_END = time(17, 0)
SLOT_INTERVAL_MINUTES = 30
DEFAULT_SLOT_DURATION_MINUTES = 30
DEFAULT_APPOINTMENT_MINUTES = 60


class TimeSlot(NamedTuple):
    """A candidate booking slot."""
    time: str  # "HH:MM" wall-clock
    display_time: str  # "9:00 AM"
    starts_at: datetime
    available: bool


def day_of_week(value: date) -> int:
    """Sunday = 0 ... Saturday = 6."""
    return (value.weekday() + 1) % 7


def format_display_time(value: time) -> str:
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {suffix}"


def business_tz() -> tzinfo:
    return ZoneInfo(settings.BUSINESS_TIMEZONE)


# =============================================================================
# Slot Generation (pure)
# =============================================================================

def generate_time_slots(
    selected_date: date,
    availability: Iterable,
    appointments: Iterable,
    duration_minutes: int = DEFAULT_SLOT_DURATION_MINUTES,
    interval_minutes: int = SLOT_INTERVAL_MINUTES,
    tz: tzinfo = timezone.utc,
) -> list[TimeSlot]:
    """
    Compute bookable slots for a date.

    availability: rows with day_of_week, start_time, end_time, is_available
    appointments: rows with scheduled_at (aware), duration_minutes, status

    Returns [] when no availability row matches the weekday.
    """
    weekday = day_of_week(selected_date)
    window = next(
        (a for a in availability if a.day_of_week == weekday and a.is_available),
        None,
    )
    if window is None:
        return []

    busy = [
        (
            appt.scheduled_at,
            appt.scheduled_at + timedelta(
                minutes=appt.duration_minutes or DEFAULT_APPOINTMENT_MINUTES
            ),
        )
        for appt in appointments
        if appt.status != AppointmentStatus.CANCELLED.value
    ]

    slot_length = timedelta(minutes=duration_minutes)
    step = timedelta(minutes=interval_minutes)
    current = datetime.combine(selected_date, window.start_time, tzinfo=tz)
    end = datetime.combine(selected_date, window.end_time, tzinfo=tz)

    slots = []
    while current < end:
        slot_end = current + slot_length
        booked = any(current < busy_end and slot_end > busy_start for busy_start, busy_end in busy)
        wall = current.timetz()
        slots.append(TimeSlot(
            time=f"{wall.hour:02d}:{wall.minute:02d}",
            display_time=format_display_time(wall),
            starts_at=current,
            available=not booked,
        ))
        current += step
    return slots


def get_slots_for_date(
    db: Session,
    selected_date: date,
    duration_minutes: int = DEFAULT_SLOT_DURATION_MINUTES,
) -> list[TimeSlot]:
    """Load public availability and that day's appointments, then compute slots."""
    tz = business_tz()
    day_start = datetime.combine(selected_date, time(0, 0), tzinfo=tz)
    day_end = day_start + timedelta(days=1)
    appointments = appointment_service.list_appointments_between(db, day_start, day_end)
    return generate_time_slots(
        selected_date,
        list_public_availability(db),
        appointments,
        duration_minutes=duration_minutes,
        tz=tz,
    )


# =============================================================================
# Staff Hours
# =============================================================================

def list_public_availability(db: Session) -> list[Availability]:
    """Available rows for staff/admin users, ordered by day and start time."""
    return (
        db.query(Availability)
        .join(User, Availability.user_id == User.id)
        .options(joinedload(Availability.user))
        .filter(
            Availability.is_available.is_(True),
            User.role.in_([Role.STAFF.value, Role.ADMIN.value]),
        )
        .order_by(Availability.day_of_week, Availability.start_time)
        .all()
    )


def list_user_availability(db: Session, user_id: UUID) -> list[Availability]:
    return (
        db.query(Availability)
        .filter(Availability.user_id == user_id)
        .order_by(Availability.day_of_week)
        .all()
    )


def validate_day(day: int | None) -> int:
    """
    Raises:
        ValueError: Missing or outside 0-6
    """
    if day is None or not isinstance(day, int) or day < 0 or day > 6:
        raise ValueError("day_of_week must be between 0 (Sunday) and 6 (Saturday)")
    return day


def upsert_availability(
    db: Session,
    user_id: UUID,
    day: int,
    start_time: time | None = None,
    end_time: time | None = None,
    is_available: bool | None = None,
) -> tuple[Availability, bool]:
    """Create or replace a user's hours for one weekday. Returns (row, created)."""
    day = validate_day(day)
    start_time = start_time or DEFAULT_START
    end_time = end_time or DEFAULT_END
    if start_time >= end_time:
        raise ValueError("start_time must be before end_time")
    is_available = True if is_available is None else is_available

    row = (
        db.query(Availability)
        .filter(Availability.user_id == user_id, Availability.day_of_week == day)
        .first()
    )
    created = row is None
    if created:
        row = Availability(user_id=user_id, day_of_week=day)
        db.add(row)
    row.start_time = start_time
    row.end_time = end_time
    row.is_available = is_available
    db.commit()
    db.refresh(row)
    return row, created


def delete_availability(db: Session, user_id: UUID, day: int) -> bool:
    day = validate_day(day)
    deleted = (
        db.query(Availability)
        .filter(Availability.user_id == user_id, Availability.day_of_week == day)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted > 0
