"""
Row-level SLA predicates.

Shared by the metrics endpoint and the SLA evaluator so both count the
same thing. All datetimes are timezone-aware.
"""

from datetime import datetime, timedelta

from groomypaws.db.enums import AppointmentStatus


PENDING_MAX_AGE_MINUTES = 24 * 60
IN_PROGRESS_GRACE_MINUTES = 30
CHAT_REPLY_WINDOW_MINUTES = 30
DEFAULT_DURATION_MINUTES = 60


def pending_longer_than(status: str, scheduled_at: datetime, minutes: int, now: datetime) -> bool:
    """Pending and scheduled_at more than `minutes` in the past."""
    return (
        status == AppointmentStatus.PENDING.value
        and now - scheduled_at > timedelta(minutes=minutes)
    )


def is_pending_over_24h(status: str, scheduled_at: datetime, now: datetime) -> bool:
    return pending_longer_than(status, scheduled_at, PENDING_MAX_AGE_MINUTES, now)


def is_in_progress_overrun(
    status: str,
    scheduled_at: datetime,
    duration_minutes: int | None,
    now: datetime,
) -> bool:
    """In progress and past its scheduled end plus a 30 minute grace period."""
    if status != AppointmentStatus.IN_PROGRESS.value:
        return False
    duration = duration_minutes or DEFAULT_DURATION_MINUTES
    return now - scheduled_at > timedelta(minutes=duration + IN_PROGRESS_GRACE_MINUTES)


def message_older_than(last_message_at: datetime | None, minutes: int, now: datetime) -> bool:
    if last_message_at is None:
        return False
    return now - last_message_at > timedelta(minutes=minutes)


def is_chat_awaiting_reply(last_message_at: datetime | None, now: datetime) -> bool:
    return message_older_than(last_message_at, CHAT_REPLY_WINDOW_MINUTES, now)
