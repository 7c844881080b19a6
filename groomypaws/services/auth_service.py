"""Auth service - registration, credential checks, token issue."""

import logging

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.orm import Session

from groomypaws.core.security import create_session_token, hash_password, verify_password
from groomypaws.db.enums import Role
from groomypaws.db.models import User

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def register_user(
    db: Session,
    email: str,
    password: str,
    name: str,
    phone: str | None = None,
) -> User:
    """
    Create a customer account.

    Raises:
        ValueError: Malformed email, or email already registered
    """
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        raise ValueError("Invalid email address")
    if get_user_by_email(db, email):
        raise ValueError("User already exists")

    user = User(
        email=normalize_email(email),
        password_hash=hash_password(password),
        name=name.strip(),
        phone=phone,
        role=Role.CUSTOMER.value,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.id)
    return user


def authenticate(db: Session, email: str, password: str) -> User | None:
    """Return the user when credentials match, else None."""
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        return None
    return user


def issue_token(user: User) -> str:
    return create_session_token(user.id, user.email, user.role)
