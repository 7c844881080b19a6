"""User service - profile and presence."""

from uuid import UUID

from sqlalchemy.orm import Session

from groomypaws.db.models import User
from groomypaws.db.types import utcnow


PROFILE_FIELDS = ("name", "phone", "address")


def get_user(db: Session, user_id: UUID) -> User | None:
    return db.query(User).filter(User.id == user_id).first()


def set_presence(db: Session, user: User, is_online: bool) -> User:
    """Record a presence heartbeat."""
    user.is_online = bool(is_online)
    user.last_seen_at = utcnow()
    db.commit()
    db.refresh(user)
    return user


def update_profile(db: Session, user: User, fields: dict) -> User:
    """Apply name/phone/address. Unknown keys are ignored."""
    for key in PROFILE_FIELDS:
        if key in fields:
            setattr(user, key, fields[key])
    db.commit()
    db.refresh(user)
    return user


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.created_at.desc()).all()
