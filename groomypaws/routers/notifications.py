"""Notifications router - the caller's inbox and channel preferences."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from groomypaws.core.deps import get_current_session, get_db
from groomypaws.db.enums import NotificationStatus
from groomypaws.schemas.auth import UserSession
from groomypaws.schemas.notification import (
    NotificationCreate,
    NotificationListResponse,
    NotificationRead,
    NotificationResponse,
    PreferencesRead,
    PreferencesResponse,
    PreferencesUpdate,
    SnoozeRequest,
)
from groomypaws.services import notification_service

router = APIRouter()


def _notification_to_read(notification) -> NotificationRead:
    return NotificationRead(
        id=notification.id,
        user_id=notification.user_id,
        title=notification.title,
        body=notification.body,
        category=notification.category,
        metadata=notification.meta or {},
        status=notification.status,
        snoozed_until=notification.snoozed_until,
        channel_sent=notification.channel_sent or [],
        created_at=notification.created_at,
        updated_at=notification.updated_at,
    )


def _set_status(db, session, notification_id, status, snoozed_until=None) -> NotificationResponse:
    notification = notification_service.update_notification_status(
        db, session.user_id, notification_id, status, snoozed_until=snoozed_until
    )
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    return NotificationResponse(notification=_notification_to_read(notification))


# =============================================================================
# Notifications
# =============================================================================

@router.get("", response_model=NotificationListResponse)
def list_notifications(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
    status: NotificationStatus | None = Query(None),
    limit: int | None = Query(None, ge=1),
):
    """Newest first (limit defaults 100, max 200)."""
    notifications = notification_service.list_notifications(
        db, session.user_id, status=status.value if status else None, limit=limit
    )
    return NotificationListResponse(notifications=[_notification_to_read(n) for n in notifications])


@router.post("", response_model=NotificationResponse, status_code=201)
def create_notification(
    data: NotificationCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Create a notification for the caller and fan out to enabled channels."""
    try:
        notification = notification_service.create_notification(
            db,
            user_id=session.user_id,
            body=data.body,
            title=data.title,
            category=data.category,
            metadata=data.metadata,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return NotificationResponse(notification=_notification_to_read(notification))


@router.post("/{notification_id}/read", response_model=NotificationResponse)
def mark_read(
    notification_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return _set_status(db, session, notification_id, NotificationStatus.READ)


@router.post("/{notification_id}/snooze", response_model=NotificationResponse)
def snooze(
    notification_id: UUID,
    data: SnoozeRequest | None = None,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    minutes = data.minutes if data else None
    return _set_status(
        db,
        session,
        notification_id,
        NotificationStatus.SNOOZED,
        snoozed_until=notification_service.snooze_until(minutes),
    )


@router.post("/{notification_id}/dismiss", response_model=NotificationResponse)
def dismiss(
    notification_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return _set_status(db, session, notification_id, NotificationStatus.DISMISSED)


# =============================================================================
# Preferences
# =============================================================================

@router.get("/preferences/me", response_model=PreferencesResponse)
def get_preferences(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    prefs = notification_service.get_preferences(db, session.user_id)
    return PreferencesResponse(preferences=PreferencesRead(**prefs))


@router.put("/preferences/me", response_model=PreferencesResponse)
def update_preferences(
    data: PreferencesUpdate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    prefs = notification_service.update_preferences(
        db, session.user_id, data.model_dump(exclude_unset=True)
    )
    return PreferencesResponse(preferences=PreferencesRead(**prefs))
