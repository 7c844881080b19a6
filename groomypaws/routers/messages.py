"""Messages router - customer/staff chat over polled REST endpoints."""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from groomypaws.core.deps import get_current_session, get_db, is_staff
from groomypaws.db.enums import SlaEntityType, TriggerType
from groomypaws.schemas.auth import UserSession
from groomypaws.schemas.message import (
    ConversationCreate,
    ConversationListResponse,
    ConversationRead,
    ConversationResponse,
    MessageCreate,
    MessageListResponse,
    MessageRead,
    MessageResponse,
    UnreadCountResponse,
)
from groomypaws.services import automation_triggers, customer_service, message_service

router = APIRouter()


def _message_to_read(message) -> MessageRead:
    sender = message.sender
    return MessageRead(
        id=message.id,
        conversation_id=message.conversation_id,
        sender_id=message.sender_id,
        body=message.body,
        created_at=message.created_at,
        sender_name=sender.name if sender else None,
        sender_role=sender.role if sender else None,
        sender_profile_picture_url=sender.profile_picture_url if sender else None,
    )


def _get_accessible_conversation(db: Session, conversation_id: UUID, session: UserSession):
    conversation = message_service.get_conversation(db, conversation_id)
    if not conversation:
        raise HTTPException(status_code=404, detail="Conversation not found")
    if not is_staff(session) and conversation.customer_id != session.user_id:
        raise HTTPException(status_code=403, detail="Access denied")
    return conversation


# =============================================================================
# Conversations
# =============================================================================

@router.get("/conversations", response_model=ConversationListResponse)
def list_conversations(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    customer_id = None if is_staff(session) else session.user_id
    summaries = message_service.list_conversations(db, customer_id=customer_id)
    return ConversationListResponse(conversations=[ConversationRead(**s) for s in summaries])


@router.post("/conversations", response_model=ConversationResponse)
def open_conversation(
    data: ConversationCreate | None = None,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Get or create the customer's conversation. 201 when newly created."""
    customer_id = session.user_id
    if is_staff(session) and data is not None and data.customer_id:
        if not customer_service.get_customer(db, data.customer_id):
            raise HTTPException(status_code=404, detail="Customer not found")
        customer_id = data.customer_id

    conversation, created = message_service.get_or_create_conversation(db, customer_id)
    body = ConversationResponse(conversation=ConversationRead(
        id=conversation.id,
        customer_id=conversation.customer_id,
        last_message_at=conversation.last_message_at,
        created_at=conversation.created_at,
    ))
    return JSONResponse(status_code=201 if created else 200, content=body.model_dump(mode="json"))


# =============================================================================
# Messages
# =============================================================================

@router.get("/conversations/{conversation_id}/messages", response_model=MessageListResponse)
def list_messages(
    conversation_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
    limit: int | None = Query(None, ge=1),
    before: datetime | None = Query(None),
):
    """Latest messages in chronological order (limit defaults 50, max 100)."""
    _get_accessible_conversation(db, conversation_id, session)
    messages = message_service.list_messages(db, conversation_id, limit=limit, before=before)
    return MessageListResponse(messages=[_message_to_read(m) for m in messages])


@router.post(
    "/conversations/{conversation_id}/messages",
    response_model=MessageResponse,
    status_code=201,
)
def send_message(
    conversation_id: UUID,
    data: MessageCreate,
    background_tasks: BackgroundTasks,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """
    Post a message.

    Emits chat_message; a staff reply also resolves chat.unanswered.
    """
    conversation = _get_accessible_conversation(db, conversation_id, session)
    try:
        message = message_service.create_message(db, conversation, session.user_id, data.body)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    background_tasks.add_task(
        automation_triggers.fire_trigger,
        TriggerType.CHAT_MESSAGE.value,
        {
            "conversation_id": str(conversation.id),
            "sender_id": str(session.user_id),
            "sender_role": session.role.value,
        },
    )
    if is_staff(session):
        background_tasks.add_task(
            automation_triggers.fire_close_incidents,
            SlaEntityType.CHAT_UNANSWERED.value,
            str(conversation.id),
        )
    return MessageResponse(message=_message_to_read(message))


@router.put("/conversations/{conversation_id}/read")
def mark_conversation_read(
    conversation_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Acknowledge only; read receipts are not stored."""
    _get_accessible_conversation(db, conversation_id, session)
    return {"success": True}


@router.get("/unread-count", response_model=UnreadCountResponse)
def get_unread_count(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    count = message_service.unread_count(db, session.user_id, staff=is_staff(session))
    return UnreadCountResponse(unread_count=count)
