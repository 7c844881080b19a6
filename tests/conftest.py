"""
Test configuration and fixtures.

Provides:
- In-memory SQLite database, schema rebuilt for every test
- Users for each role plus bearer tokens
- HTTPX AsyncClient per role with the Authorization header set
"""
import os
import tempfile
import uuid
from datetime import datetime, time, timedelta, timezone
from decimal import Decimal
from typing import AsyncGenerator, Generator

# Must be set before the app is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["TESTING"] = "1"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="groomypaws-uploads-")
os.environ["SMTP_HOST"] = ""
os.environ["SMS_WEBHOOK_URL"] = ""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import Session

from groomypaws.main import app
from groomypaws.core.deps import get_db
from groomypaws.core.security import create_session_token, hash_password
from groomypaws.db.base import Base
from groomypaws.db.enums import Role
from groomypaws.db.models import Appointment, AppointmentService, Availability, Pet, Service, User
from groomypaws.db.session import SessionLocal, engine


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Fresh schema per test.

    The in-memory engine uses a single shared connection, so sessions opened
    by background tasks see the same data as this one.
    """
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


def make_user(db: Session, role: Role = Role.CUSTOMER, name: str = "Test User", **kwargs) -> User:
    user = User(
        id=uuid.uuid4(),
        email=f"{role.value}-{uuid.uuid4().hex[:8]}@test.com",
        password_hash=hash_password("password123"),
        name=name,
        role=role.value,
        **kwargs,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def token_for(user: User) -> str:
    return create_session_token(user.id, user.email, user.role)


@pytest.fixture
def customer_user(db: Session) -> User:
    return make_user(db, Role.CUSTOMER, name="Casey Customer", phone="555-0100")


@pytest.fixture
def other_customer(db: Session) -> User:
    return make_user(db, Role.CUSTOMER, name="Olive Other")


@pytest.fixture
def staff_user(db: Session) -> User:
    return make_user(db, Role.STAFF, name="Sam Staff")


@pytest.fixture
def admin_user(db: Session) -> User:
    return make_user(db, Role.ADMIN, name="Ada Admin")


# =============================================================================
# Domain Fixtures
# =============================================================================

@pytest.fixture
def pet(db: Session, customer_user: User) -> Pet:
    pet = Pet(owner_id=customer_user.id, name="Biscuit", breed="Poodle", size_category="small")
    db.add(pet)
    db.commit()
    db.refresh(pet)
    return pet


@pytest.fixture
def service(db: Session) -> Service:
    service = Service(name="Full Groom", base_price=Decimal("60.00"), duration_minutes=90)
    db.add(service)
    db.commit()
    db.refresh(service)
    return service


def make_appointment(
    db: Session,
    customer: User,
    pet: Pet,
    scheduled_at: datetime,
    status: str = "pending",
    duration_minutes: int = 60,
    service: Service | None = None,
) -> Appointment:
    appt = Appointment(
        customer_id=customer.id,
        pet_id=pet.id,
        scheduled_at=scheduled_at,
        duration_minutes=duration_minutes,
        total_price=Decimal("60.00"),
        status=status,
    )
    db.add(appt)
    db.flush()
    if service is not None:
        db.add(AppointmentService(
            appointment_id=appt.id, service_id=service.id, price_at_booking=Decimal("60.00")
        ))
    db.commit()
    db.refresh(appt)
    return appt


def make_availability(db: Session, user: User, day_of_week: int, start=time(9, 0), end=time(17, 0)):
    row = Availability(
        user_id=user.id, day_of_week=day_of_week, start_time=start, end_time=end, is_available=True
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def utc(year, month, day, hour=0, minute=0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


def hours_ago(hours: float) -> datetime:
    return datetime.now(timezone.utc) - timedelta(hours=hours)


# =============================================================================
# Client Fixtures
# =============================================================================

async def _client_for(db: Session, user: User | None) -> AsyncGenerator[AsyncClient, None]:
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    headers = {"Authorization": f"Bearer {token_for(user)}"} if user else {}

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers=headers,
    ) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def client(db: Session) -> AsyncGenerator[AsyncClient, None]:
    """Unauthenticated client for public endpoints."""
    async for c in _client_for(db, None):
        yield c


@pytest.fixture(scope="function")
async def customer_client(db: Session, customer_user: User) -> AsyncGenerator[AsyncClient, None]:
    async for c in _client_for(db, customer_user):
        yield c


@pytest.fixture(scope="function")
async def other_client(db: Session, other_customer: User) -> AsyncGenerator[AsyncClient, None]:
    async for c in _client_for(db, other_customer):
        yield c


@pytest.fixture(scope="function")
async def staff_client(db: Session, staff_user: User) -> AsyncGenerator[AsyncClient, None]:
    async for c in _client_for(db, staff_user):
        yield c


@pytest.fixture(scope="function")
async def admin_client(db: Session, admin_user: User) -> AsyncGenerator[AsyncClient, None]:
    async for c in _client_for(db, admin_user):
        yield c
