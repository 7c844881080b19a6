"""Appointment and availability models."""

from __future__ import annotations

import uuid
from datetime import datetime, time
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    SmallInteger,
    String,
    Text,
    Time,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from groomypaws.db.base import Base
from groomypaws.db.enums import AppointmentStatus
from groomypaws.db.types import utcnow

if TYPE_CHECKING:
    from groomypaws.db.models import Pet, Service, User


class Appointment(Base):
    """
    A booked grooming visit.

    Occupies [scheduled_at, scheduled_at + duration_minutes).
    """

    __tablename__ = "appointments"
    __table_args__ = (
        Index("idx_appointments_customer", "customer_id", "scheduled_at"),
        Index("idx_appointments_status_time", "status", "scheduled_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    customer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    pet_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("pets.id", ondelete="CASCADE"), nullable=False
    )
    scheduled_at: Mapped[datetime] = mapped_column(nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=60)
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=AppointmentStatus.PENDING.value
    )
    internal_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, onupdate=utcnow)

    customer: Mapped["User"] = relationship()
    pet: Mapped["Pet"] = relationship()
    services: Mapped[list["AppointmentService"]] = relationship(
        back_populates="appointment", cascade="all, delete-orphan"
    )


class AppointmentService(Base):
    """Service line on an appointment, with the price agreed at booking."""

    __tablename__ = "appointment_services"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    appointment_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("appointments.id", ondelete="CASCADE"), nullable=False
    )
    service_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("services.id", ondelete="CASCADE"), nullable=False
    )
    price_at_booking: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    appointment: Mapped["Appointment"] = relationship(back_populates="services")
    service: Mapped["Service"] = relationship()


class Availability(Base):
    """
    Weekly working hours for a staff member.

    day_of_week: 0 = Sunday ... 6 = Saturday.
    """

    __tablename__ = "availability"
    __table_args__ = (
        UniqueConstraint("user_id", "day_of_week", name="uq_availability_user_day"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    day_of_week: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, onupdate=utcnow)

    user: Mapped["User"] = relationship()
