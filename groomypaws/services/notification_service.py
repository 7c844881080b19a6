"""
Notification service - in-app notifications with email/SMS fan-out.

Channel delivery is best-effort: a failing channel is logged and skipped,
and only channels that actually went out are recorded in channel_sent.
"""

import logging
import smtplib
import ssl
from datetime import datetime, timedelta
from email.mime.text import MIMEText
from typing import Any, Iterable
from uuid import UUID

import httpx
from sqlalchemy.orm import Session

from groomypaws.core.config import settings
from groomypaws.db.enums import NotificationChannel, NotificationStatus
from groomypaws.db.models import Notification, NotificationPreference, User
from groomypaws.db.types import utcnow

logger = logging.getLogger(__name__)


DEFAULT_PREFERENCES = {
    "email_enabled": True,
    "sms_enabled": False,
    "push_enabled": True,
}
DEFAULT_LIST_LIMIT = 100
MAX_LIST_LIMIT = 200
DEFAULT_SNOOZE_MINUTES = 60
DEFAULT_TITLE = "Notification"
DEFAULT_CATEGORY = "system"


# =============================================================================
# Preferences
# =============================================================================

def get_preferences(db: Session, user_id: UUID) -> dict[str, bool]:
    """Return channel preferences. Missing row = defaults."""
    row = db.query(NotificationPreference).filter(
        NotificationPreference.user_id == user_id
    ).first()
    if not row:
        return dict(DEFAULT_PREFERENCES)
    return {key: getattr(row, key) for key in DEFAULT_PREFERENCES}


def update_preferences(db: Session, user_id: UUID, updates: dict) -> dict[str, bool]:
    """Merge updates over current preferences and upsert."""
    merged = get_preferences(db, user_id)
    for key in DEFAULT_PREFERENCES:
        if updates.get(key) is not None:
            merged[key] = bool(updates[key])

    row = db.query(NotificationPreference).filter(
        NotificationPreference.user_id == user_id
    ).first()
    if not row:
        row = NotificationPreference(user_id=user_id)
        db.add(row)
    for key, value in merged.items():
        setattr(row, key, value)
    db.commit()
    return merged


# =============================================================================
# Channels
# =============================================================================

def send_email(to: str, subject: str, body: str) -> None:
    """Send a plain-text email over SMTP. Raises on failure."""
    msg = MIMEText(body, "plain", "utf-8")
    msg["Subject"] = subject
    msg["From"] = settings.SMTP_FROM
    msg["To"] = to

    context = ssl.create_default_context()
    if settings.SMTP_SECURE:
        server = smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT, context=context, timeout=30)
    else:
        server = smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30)
    try:
        server.ehlo()
        if not settings.SMTP_SECURE and server.has_extn("starttls"):
            server.starttls(context=context)
        if settings.SMTP_USER:
            server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
        server.sendmail(settings.SMTP_FROM, [to], msg.as_string())
    finally:
        server.quit()


def send_sms(to: str, body: str) -> None:
    """POST {to, body} to the SMS webhook. Raises on non-2xx."""
    response = httpx.post(
        settings.SMS_WEBHOOK_URL,
        json={"to": to, "body": body},
        timeout=settings.SMS_WEBHOOK_TIMEOUT_SECONDS,
    )
    response.raise_for_status()


def dispatch_channels(
    user: User | None,
    preferences: dict[str, bool],
    title: str,
    body: str,
    channels: Iterable[str] | None = None,
) -> list[str]:
    """Deliver to each enabled channel. Returns the channels that succeeded."""
    requested = set(channels) if channels is not None else {c.value for c in NotificationChannel}
    sent: list[str] = []

    if (
        NotificationChannel.EMAIL.value in requested
        and preferences.get("email_enabled")
        and settings.smtp_enabled
        and user is not None
        and user.email
    ):
        try:
            send_email(user.email, title, body)
            sent.append(NotificationChannel.EMAIL.value)
        except Exception:
            logger.exception("Email delivery failed for user %s", user.id)

    if (
        NotificationChannel.SMS.value in requested
        and preferences.get("sms_enabled")
        and settings.sms_enabled
        and user is not None
        and user.phone
    ):
        try:
            send_sms(user.phone, f"{title}: {body}")
            sent.append(NotificationChannel.SMS.value)
        except Exception:
            logger.exception("SMS delivery failed for user %s", user.id)

    # Push is in-app only; the client polls for new rows
    if NotificationChannel.PUSH.value in requested and preferences.get("push_enabled"):
        sent.append(NotificationChannel.PUSH.value)

    return sent


# =============================================================================
# Notifications
# =============================================================================

def create_notification(
    db: Session,
    user_id: UUID,
    body: str,
    title: str | None = None,
    category: str | None = None,
    metadata: dict[str, Any] | None = None,
    channels: Iterable[str] | None = None,
) -> Notification:
    """
    Store a notification (status new) and fan out to channels.

    Raises:
        ValueError: Blank body
    """
    if not body or not str(body).strip():
        raise ValueError("Notification body is required")

    notification = Notification(
        user_id=user_id,
        title=title or DEFAULT_TITLE,
        body=body,
        category=category or DEFAULT_CATEGORY,
        meta=metadata or {},
        status=NotificationStatus.NEW.value,
        channel_sent=[],
    )
    db.add(notification)
    db.commit()
    db.refresh(notification)

    user = db.query(User).filter(User.id == user_id).first()
    sent = dispatch_channels(user, get_preferences(db, user_id), notification.title, body, channels)
    if sent:
        notification.channel_sent = sent
        db.commit()
        db.refresh(notification)
    return notification


def send_notification(
    db: Session,
    user_id: UUID,
    title: str,
    body: str,
    category: str = DEFAULT_CATEGORY,
    metadata: dict[str, Any] | None = None,
) -> Notification:
    """Entry point used by automation actions."""
    return create_notification(
        db,
        user_id=user_id,
        body=body,
        title=title,
        category=category,
        metadata=metadata,
    )


def clamp_limit(limit: int | None) -> int:
    if not limit or limit < 1:
        return DEFAULT_LIST_LIMIT
    return min(limit, MAX_LIST_LIMIT)


def list_notifications(
    db: Session,
    user_id: UUID,
    status: str | None = None,
    limit: int | None = None,
) -> list[Notification]:
    query = db.query(Notification).filter(Notification.user_id == user_id)
    if status:
        query = query.filter(Notification.status == status)
    return query.order_by(Notification.created_at.desc()).limit(clamp_limit(limit)).all()


def update_notification_status(
    db: Session,
    user_id: UUID,
    notification_id: UUID,
    status: NotificationStatus,
    snoozed_until: datetime | None = None,
) -> Notification | None:
    """
    Set status on the user's own notification.

    snoozed_until is kept only for SNOOZED; any other status clears it.
    Returns None when the notification is not the user's.
    """
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.user_id == user_id,
    ).first()
    if not notification:
        return None

    notification.status = status.value
    notification.snoozed_until = snoozed_until if status == NotificationStatus.SNOOZED else None
    db.commit()
    db.refresh(notification)
    return notification


def snooze_until(minutes: int | None) -> datetime:
    return utcnow() + timedelta(minutes=minutes or DEFAULT_SNOOZE_MINUTES)
