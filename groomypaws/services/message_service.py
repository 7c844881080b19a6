"""Message service - customer/staff conversations."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from groomypaws.db.enums import Role
from groomypaws.db.models import Conversation, Message, User
from groomypaws.db.types import utcnow


DEFAULT_MESSAGE_LIMIT = 50
MAX_MESSAGE_LIMIT = 100
DEFAULT_STAFF_NAME = "Groomy Paws Staff"
STAFF_ROLES = (Role.STAFF.value, Role.ADMIN.value)


# =============================================================================
# Conversations
# =============================================================================

def get_conversation(db: Session, conversation_id: UUID) -> Conversation | None:
    return (
        db.query(Conversation)
        .options(joinedload(Conversation.customer))
        .filter(Conversation.id == conversation_id)
        .first()
    )


def get_or_create_conversation(db: Session, customer_id: UUID) -> tuple[Conversation, bool]:
    """One conversation per customer. Returns (conversation, created)."""
    existing = db.query(Conversation).filter(Conversation.customer_id == customer_id).first()
    if existing:
        return existing, False
    conversation = Conversation(customer_id=customer_id)
    db.add(conversation)
    db.commit()
    db.refresh(conversation)
    return conversation, True


def _last_message(db: Session, conversation_id: UUID) -> Message | None:
    return (
        db.query(Message)
        .filter(Message.conversation_id == conversation_id)
        .order_by(Message.created_at.desc())
        .first()
    )


def _last_staff_sender(db: Session, conversation_id: UUID) -> User | None:
    return (
        db.query(User)
        .join(Message, Message.sender_id == User.id)
        .filter(Message.conversation_id == conversation_id, User.role.in_(STAFF_ROLES))
        .order_by(Message.created_at.desc())
        .first()
    )


def list_conversations(db: Session, customer_id: UUID | None = None) -> list[dict]:
    """
    Conversation summaries, most recent activity first.

    Staff (customer_id=None) get customer details and presence;
    a customer gets the most recent staff responder's name.
    """
    query = (
        db.query(Conversation)
        .join(User, Conversation.customer_id == User.id)
        .options(joinedload(Conversation.customer))
    )
    if customer_id is not None:
        query = query.filter(Conversation.customer_id == customer_id)
    conversations = query.all()
    conversations.sort(
        key=lambda c: c.last_message_at or c.created_at,
        reverse=True,
    )

    summaries = []
    for conversation in conversations:
        last = _last_message(db, conversation.id)
        summary = {
            "id": conversation.id,
            "customer_id": conversation.customer_id,
            "last_message_at": conversation.last_message_at,
            "created_at": conversation.created_at,
            "last_message": last.body if last else None,
            "last_message_sender_id": last.sender_id if last else None,
        }
        if customer_id is None:
            customer = conversation.customer
            summary.update({
                "customer_name": customer.name,
                "customer_email": customer.email,
                "customer_profile_picture_url": customer.profile_picture_url,
                "customer_is_online": customer.is_online,
                "customer_last_seen_at": customer.last_seen_at,
            })
        else:
            staff = _last_staff_sender(db, conversation.id)
            summary.update({
                "staff_name": staff.name if staff else DEFAULT_STAFF_NAME,
                "staff_profile_picture_url": staff.profile_picture_url if staff else None,
            })
        summaries.append(summary)
    return summaries


# =============================================================================
# Messages
# =============================================================================

def clamp_limit(limit: int | None) -> int:
    if not limit or limit < 1:
        return DEFAULT_MESSAGE_LIMIT
    return min(limit, MAX_MESSAGE_LIMIT)


def list_messages(
    db: Session,
    conversation_id: UUID,
    limit: int | None = None,
    before: datetime | None = None,
) -> list[Message]:
    """Latest `limit` messages (optionally before a timestamp), oldest first."""
    query = (
        db.query(Message)
        .options(joinedload(Message.sender))
        .filter(Message.conversation_id == conversation_id)
    )
    if before is not None:
        query = query.filter(Message.created_at < before)
    rows = query.order_by(Message.created_at.desc()).limit(clamp_limit(limit)).all()
    rows.reverse()
    return rows


def create_message(db: Session, conversation: Conversation, sender_id: UUID, body: str) -> Message:
    """
    Append a message and bump last_message_at.

    Raises:
        ValueError: Blank body
    """
    text = (body or "").strip()
    if not text:
        raise ValueError("Message body is required")

    now = utcnow()
    message = Message(
        conversation_id=conversation.id,
        sender_id=sender_id,
        body=text,
        created_at=now,
    )
    db.add(message)
    conversation.last_message_at = now
    db.commit()
    db.refresh(message)
    return message


def unread_count(db: Session, user_id: UUID, staff: bool) -> int:
    """
    Approximate unread count (no read receipts are stored).

    Staff: messages from others in conversations that are not their own.
    Customers: staff messages in their conversation.
    """
    if staff:
        return (
            db.query(func.count(Message.id))
            .join(Conversation, Conversation.id == Message.conversation_id)
            .filter(Message.sender_id != user_id, Conversation.customer_id != user_id)
            .scalar()
        ) or 0
    return (
        db.query(func.count(Message.id))
        .join(Conversation, Conversation.id == Message.conversation_id)
        .join(User, User.id == Message.sender_id)
        .filter(Conversation.customer_id == user_id, User.role.in_(STAFF_ROLES))
        .scalar()
    ) or 0
