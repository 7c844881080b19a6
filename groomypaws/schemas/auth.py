"""Authentication-related Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from groomypaws.db.enums import Role


class UserSession(BaseModel):
    """
    Session context for authenticated requests.

    Returned by the get_current_session dependency.
    """
    user_id: UUID
    role: Role  # Validated enum
    email: str
    name: str


class RegisterRequest(BaseModel):
    # Optional so missing fields map to 400 rather than 422
    email: str | None = None
    password: str | None = None
    name: str | None = None
    phone: str | None = None


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class UserRead(BaseModel):
    """Public user shape (never includes password_hash)."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    name: str
    phone: str | None = None
    address: str | None = None
    role: str
    profile_picture_url: str | None = None
    is_online: bool = False
    last_seen_at: datetime | None = None
    created_at: datetime | None = None


class AuthResponse(BaseModel):
    user: UserRead
    token: str


class MeResponse(BaseModel):
    user: UserRead
