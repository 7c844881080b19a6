"""User accounts (customers, staff, admins)."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from groomypaws.db.base import Base
from groomypaws.db.enums import Role
from groomypaws.db.types import utcnow

if TYPE_CHECKING:
    from groomypaws.db.models import Pet


class User(Base):
    """
    Application user.

    Role decides access: customers own pets and appointments,
    staff and admins run the back office.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=Role.CUSTOMER.value)

    # Uploaded avatar (relative URL under /uploads)
    profile_picture_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    profile_picture_updated_at: Mapped[datetime | None] = mapped_column(nullable=True)

    # Presence (heartbeat every 30s from the client)
    is_online: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_seen_at: Mapped[datetime | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, onupdate=utcnow)

    pets: Mapped[list["Pet"]] = relationship(back_populates="owner", cascade="all, delete-orphan")

    @property
    def is_staff(self) -> bool:
        return self.role in (Role.STAFF.value, Role.ADMIN.value)
