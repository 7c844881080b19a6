"""User profile schemas."""

from pydantic import BaseModel

from groomypaws.schemas.auth import UserRead


class PresenceUpdate(BaseModel):
    is_online: bool = True


class ProfileUpdate(BaseModel):
    name: str | None = None
    phone: str | None = None
    address: str | None = None


class UserResponse(BaseModel):
    user: UserRead


class UserListResponse(BaseModel):
    users: list[UserRead]
