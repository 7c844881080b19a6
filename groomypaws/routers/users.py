"""Users router - profile, presence heartbeat, staff user list."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from groomypaws.core.deps import get_current_user, get_db, require_roles
from groomypaws.db.enums import Role
from groomypaws.schemas.auth import UserRead
from groomypaws.schemas.user import PresenceUpdate, ProfileUpdate, UserListResponse, UserResponse
from groomypaws.services import user_service

router = APIRouter()


@router.post("/online", response_model=UserResponse)
def update_presence(
    data: PresenceUpdate,
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Presence heartbeat (clients call this every 30s)."""
    user = user_service.set_presence(db, user, data.is_online)
    return UserResponse(user=UserRead.model_validate(user))


@router.get("/profile", response_model=UserResponse)
def get_profile(user=Depends(get_current_user)):
    return UserResponse(user=UserRead.model_validate(user))


@router.put("/profile", response_model=UserResponse)
def update_profile(
    data: ProfileUpdate,
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = user_service.update_profile(db, user, data.model_dump(exclude_unset=True))
    return UserResponse(user=UserRead.model_validate(user))


@router.get(
    "",
    response_model=UserListResponse,
    dependencies=[Depends(require_roles([Role.STAFF, Role.ADMIN]))],
)
def list_users(db: Session = Depends(get_db)):
    users = user_service.list_users(db)
    return UserListResponse(users=[UserRead.model_validate(u) for u in users])
