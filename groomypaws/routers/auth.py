"""Auth router - email/password registration and login."""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from groomypaws.core.deps import get_current_user, get_db
from groomypaws.core.rate_limit import AUTH_LIMIT, limiter
from groomypaws.schemas.auth import (
    AuthResponse,
    LoginRequest,
    MeResponse,
    RegisterRequest,
    UserRead,
)
from groomypaws.services import auth_service

router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=201)
@limiter.limit(AUTH_LIMIT)
def register(
    request: Request,
    data: RegisterRequest,
    db: Session = Depends(get_db),
):
    """Create a customer account and return a session token."""
    if not data.email or not data.password or not data.name:
        raise HTTPException(status_code=400, detail="Email, password, and name are required")

    try:
        user = auth_service.register_user(
            db,
            email=data.email,
            password=data.password,
            name=data.name,
            phone=data.phone,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return AuthResponse(user=UserRead.model_validate(user), token=auth_service.issue_token(user))


@router.post("/login", response_model=AuthResponse)
@limiter.limit(AUTH_LIMIT)
def login(
    request: Request,
    data: LoginRequest,
    db: Session = Depends(get_db),
):
    if not data.email or not data.password:
        raise HTTPException(status_code=400, detail="Email and password are required")

    user = auth_service.authenticate(db, data.email, data.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    return AuthResponse(user=UserRead.model_validate(user), token=auth_service.issue_token(user))


@router.get("/me", response_model=MeResponse)
def me(user=Depends(get_current_user)):
    """Return the authenticated user."""
    return MeResponse(user=UserRead.model_validate(user))
