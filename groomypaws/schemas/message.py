"""Chat schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class ConversationCreate(BaseModel):
    customer_id: UUID | None = None


class ConversationRead(BaseModel):
    id: UUID
    customer_id: UUID
    last_message_at: datetime | None = None
    created_at: datetime
    last_message: str | None = None
    last_message_sender_id: UUID | None = None

    # Staff view
    customer_name: str | None = None
    customer_email: str | None = None
    customer_profile_picture_url: str | None = None
    customer_is_online: bool | None = None
    customer_last_seen_at: datetime | None = None

    # Customer view
    staff_name: str | None = None
    staff_profile_picture_url: str | None = None


class ConversationResponse(BaseModel):
    conversation: ConversationRead


class ConversationListResponse(BaseModel):
    conversations: list[ConversationRead]


class MessageCreate(BaseModel):
    body: str | None = None


class MessageRead(BaseModel):
    id: UUID
    conversation_id: UUID
    sender_id: UUID
    body: str
    created_at: datetime
    sender_name: str | None = None
    sender_role: str | None = None
    sender_profile_picture_url: str | None = None


class MessageResponse(BaseModel):
    message: MessageRead


class MessageListResponse(BaseModel):
    messages: list[MessageRead]


class UnreadCountResponse(BaseModel):
    unread_count: int
