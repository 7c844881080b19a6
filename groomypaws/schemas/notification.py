"""Notification schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class NotificationCreate(BaseModel):
    title: str | None = None
    body: str | None = None
    category: str | None = None
    metadata: dict[str, Any] | None = None


class NotificationRead(BaseModel):
    id: UUID
    user_id: UUID
    title: str
    body: str
    category: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    status: str
    snoozed_until: datetime | None = None
    channel_sent: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class NotificationResponse(BaseModel):
    notification: NotificationRead


class NotificationListResponse(BaseModel):
    notifications: list[NotificationRead]


class SnoozeRequest(BaseModel):
    minutes: int | None = Field(None, gt=0)


class PreferencesRead(BaseModel):
    email_enabled: bool
    sms_enabled: bool
    push_enabled: bool


class PreferencesUpdate(BaseModel):
    email_enabled: bool | None = None
    sms_enabled: bool | None = None
    push_enabled: bool | None = None


class PreferencesResponse(BaseModel):
    preferences: PreferencesRead
