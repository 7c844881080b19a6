"""
Appointment service - booking, listing, and status updates.

Bookings are written in one transaction (appointment + service lines).
Overlap is checked against non-cancelled appointments before insert.
"""

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import NamedTuple
from uuid import UUID

from sqlalchemy.orm import Session, selectinload

from groomypaws.db.enums import AppointmentStatus
from groomypaws.db.models import Appointment, AppointmentService, Pet, Service

logger = logging.getLogger(__name__)


DEFAULT_DURATION_MINUTES = 60
# Longest appointment we look back for when checking overlap
CONFLICT_LOOKBACK = timedelta(days=1)

UPDATABLE_FIELDS = ("status", "internal_notes", "scheduled_at", "duration_minutes")


class SlotConflictError(Exception):
    """Requested time overlaps an existing appointment."""


class ServiceLine(NamedTuple):
    service_id: UUID
    price: Decimal


# =============================================================================
# Helpers
# =============================================================================

def ensure_aware(value: datetime) -> datetime:
    """Naive datetimes are treated as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def intervals_overlap(
    start: datetime,
    end: datetime,
    other_start: datetime,
    other_end: datetime,
) -> bool:
    return start < other_end and end > other_start


def appointment_end(appt: Appointment) -> datetime:
    return appt.scheduled_at + timedelta(minutes=appt.duration_minutes or DEFAULT_DURATION_MINUTES)


def with_details(query):
    return query.options(
        selectinload(Appointment.pet),
        selectinload(Appointment.customer),
        selectinload(Appointment.services).selectinload(AppointmentService.service),
    )


# =============================================================================
# Queries
# =============================================================================

def list_appointments(db: Session, customer_id: UUID | None = None) -> list[Appointment]:
    """All appointments (staff) or one customer's, newest first."""
    query = with_details(db.query(Appointment))
    if customer_id is not None:
        query = query.filter(Appointment.customer_id == customer_id)
    return query.order_by(Appointment.scheduled_at.desc()).all()


def get_appointment(db: Session, appointment_id: UUID) -> Appointment | None:
    return with_details(db.query(Appointment)).filter(Appointment.id == appointment_id).first()


def list_appointments_between(db: Session, start: datetime, end: datetime) -> list[Appointment]:
    """Non-cancelled appointments that may overlap [start, end)."""
    return (
        db.query(Appointment)
        .filter(
            Appointment.status != AppointmentStatus.CANCELLED.value,
            Appointment.scheduled_at < end,
            Appointment.scheduled_at >= start - CONFLICT_LOOKBACK,
        )
        .order_by(Appointment.scheduled_at)
        .all()
    )


def find_conflicts(
    db: Session,
    scheduled_at: datetime,
    duration_minutes: int,
    exclude_id: UUID | None = None,
) -> list[Appointment]:
    start = ensure_aware(scheduled_at)
    end = start + timedelta(minutes=duration_minutes)
    conflicts = []
    for appt in list_appointments_between(db, start, end):
        if exclude_id is not None and appt.id == exclude_id:
            continue
        if intervals_overlap(start, end, appt.scheduled_at, appointment_end(appt)):
            conflicts.append(appt)
    return conflicts


# =============================================================================
# Mutations
# =============================================================================

def create_appointment(
    db: Session,
    customer_id: UUID,
    pet: Pet,
    scheduled_at: datetime,
    services: list[ServiceLine],
    total_price: Decimal | None = None,
    duration_minutes: int | None = None,
    enforce_conflicts: bool = True,
) -> Appointment:
    """
    Book an appointment for a pet.

    Raises:
        ValueError: No services, or an unknown service id
        SlotConflictError: Overlaps a non-cancelled appointment
    """
    if not services:
        raise ValueError("At least one service is required")

    scheduled_at = ensure_aware(scheduled_at)
    duration = duration_minutes or DEFAULT_DURATION_MINUTES

    service_ids = {line.service_id for line in services}
    found = {s.id for s in db.query(Service.id).filter(Service.id.in_(service_ids)).all()}
    missing = service_ids - found
    if missing:
        raise ValueError(f"Service not found: {sorted(str(m) for m in missing)[0]}")

    if enforce_conflicts and find_conflicts(db, scheduled_at, duration):
        raise SlotConflictError("Requested time is no longer available")

    appointment = Appointment(
        customer_id=customer_id,
        pet_id=pet.id,
        scheduled_at=scheduled_at,
        duration_minutes=duration,
        total_price=total_price if total_price is not None else 0,
        status=AppointmentStatus.PENDING.value,
    )
    try:
        db.add(appointment)
        db.flush()
        for line in services:
            db.add(AppointmentService(
                appointment_id=appointment.id,
                service_id=line.service_id,
                price_at_booking=line.price,
            ))
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Appointment %s booked for pet %s", appointment.id, pet.id)
    return get_appointment(db, appointment.id)


def update_appointment(db: Session, appointment: Appointment, fields: dict) -> tuple[Appointment, str]:
    """
    Apply staff edits. Returns (appointment, previous_status).

    Any status may follow any other.

    Raises:
        ValueError: No updatable field given
    """
    # internal_notes may be cleared; other fields ignore explicit nulls
    updates = {
        k: v for k, v in fields.items()
        if k in UPDATABLE_FIELDS and (v is not None or k == "internal_notes")
    }
    if not updates:
        raise ValueError("No valid fields provided for update")

    previous_status = appointment.status
    if "status" in updates:
        status = updates["status"]
        appointment.status = status.value if isinstance(status, AppointmentStatus) else status
    if "internal_notes" in updates:
        appointment.internal_notes = updates["internal_notes"]
    if "scheduled_at" in updates:
        appointment.scheduled_at = ensure_aware(updates["scheduled_at"])
    if "duration_minutes" in updates:
        appointment.duration_minutes = updates["duration_minutes"]

    db.commit()
    return get_appointment(db, appointment.id), previous_status
