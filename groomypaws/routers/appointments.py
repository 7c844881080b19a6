"""Appointments router - booking and back-office management.

Customers book and view their own appointments. Staff see everything and
drive status changes. Automation triggers fire after the response.
"""

from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy.orm import Session

from groomypaws.core.config import settings
from groomypaws.core.deps import get_current_session, get_db, is_staff, require_roles
from groomypaws.db.enums import AppointmentStatus, Role, SlaEntityType, TriggerType
from groomypaws.schemas.appointment import (
    AppointmentCreate,
    AppointmentListResponse,
    AppointmentRead,
    AppointmentResponse,
    AppointmentServiceRead,
    AppointmentUpdate,
)
from groomypaws.schemas.auth import UserSession
from groomypaws.services import appointment_service, automation_triggers, pet_service

router = APIRouter()


# =============================================================================
# Helper Functions
# =============================================================================

def appointment_to_read(appt, include_customer: bool = True) -> AppointmentRead:
    """Convert Appointment model (with pet/customer/services loaded) to read schema."""
    lines = [
        AppointmentServiceRead(
            service_id=line.service_id,
            name=line.service.name if line.service else None,
            price_at_booking=line.price_at_booking,
        )
        for line in appt.services
    ]
    customer = appt.customer if include_customer else None
    return AppointmentRead(
        id=appt.id,
        customer_id=appt.customer_id,
        pet_id=appt.pet_id,
        scheduled_at=appt.scheduled_at,
        duration_minutes=appt.duration_minutes,
        total_price=appt.total_price,
        status=appt.status,
        internal_notes=appt.internal_notes,
        created_at=appt.created_at,
        updated_at=appt.updated_at,
        pet_name=appt.pet.name if appt.pet else None,
        pet_breed=appt.pet.breed if appt.pet else None,
        pet_size_category=appt.pet.size_category if appt.pet else None,
        customer_name=customer.name if customer else None,
        customer_email=customer.email if customer else None,
        customer_phone=customer.phone if customer else None,
        services=[line.name for line in lines if line.name],
        service_items=lines,
    )


def _trigger_payload(appt, **extra) -> dict:
    return {
        "appointment_id": str(appt.id),
        "customer_id": str(appt.customer_id),
        "status": appt.status,
        "scheduled_at": appt.scheduled_at.isoformat(),
        **extra,
    }


# =============================================================================
# Appointments
# =============================================================================

@router.get("", response_model=AppointmentListResponse)
def list_appointments(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Staff see all appointments; customers see only their own."""
    staff = is_staff(session)
    appointments = appointment_service.list_appointments(
        db, customer_id=None if staff else session.user_id
    )
    return AppointmentListResponse(
        appointments=[appointment_to_read(a, include_customer=staff) for a in appointments]
    )


@router.get("/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(
    appointment_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    appt = appointment_service.get_appointment(db, appointment_id)
    if not appt:
        raise HTTPException(status_code=404, detail="Appointment not found")
    if not is_staff(session) and appt.customer_id != session.user_id:
        raise HTTPException(status_code=403, detail="Access denied")
    return AppointmentResponse(appointment=appointment_to_read(appt))


@router.post("", response_model=AppointmentResponse, status_code=201)
def create_appointment(
    data: AppointmentCreate,
    background_tasks: BackgroundTasks,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """
    Book an appointment for one of the caller's pets.

    Emits appointment_created after the response.
    """
    if not data.pet_id or not data.scheduled_at or not data.services:
        raise HTTPException(status_code=400, detail="Pet, scheduled time, and services are required")
    for line in data.services:
        if not line.service_id or line.price is None:
            raise HTTPException(status_code=400, detail="Each service requires service_id and price")

    pet = pet_service.get_pet(db, data.pet_id)
    if not pet:
        raise HTTPException(status_code=404, detail="Pet not found")
    if pet.owner_id != session.user_id:
        raise HTTPException(status_code=403, detail="Pet does not belong to you")

    try:
        appt = appointment_service.create_appointment(
            db,
            customer_id=session.user_id,
            pet=pet,
            scheduled_at=data.scheduled_at,
            services=[
                appointment_service.ServiceLine(line.service_id, Decimal(str(line.price)))
                for line in data.services
            ],
            total_price=Decimal(str(data.total_price)) if data.total_price is not None else None,
            duration_minutes=data.duration_minutes,
            enforce_conflicts=settings.BOOKING_ENFORCE_SLOT_CONFLICTS,
        )
    except appointment_service.SlotConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    background_tasks.add_task(
        automation_triggers.fire_trigger,
        TriggerType.APPOINTMENT_CREATED.value,
        _trigger_payload(appt),
    )
    return AppointmentResponse(appointment=appointment_to_read(appt))


@router.put("/{appointment_id}", response_model=AppointmentResponse)
def update_appointment(
    appointment_id: UUID,
    data: AppointmentUpdate,
    background_tasks: BackgroundTasks,
    session: UserSession = Depends(require_roles([Role.STAFF, Role.ADMIN])),
    db: Session = Depends(get_db),
):
    """
    Staff update of status, notes, or schedule.

    On a status change emits appointment_status_changed; leaving pending
    also resolves the appointment.pending SLA incident.
    """
    appt = appointment_service.get_appointment(db, appointment_id)
    if not appt:
        raise HTTPException(status_code=404, detail="Appointment not found")

    try:
        appt, previous_status = appointment_service.update_appointment(
            db, appt, data.model_dump(exclude_unset=True)
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if appt.status != previous_status:
        background_tasks.add_task(
            automation_triggers.fire_trigger,
            TriggerType.APPOINTMENT_STATUS_CHANGED.value,
            _trigger_payload(appt, previous_status=previous_status),
        )
        if previous_status == AppointmentStatus.PENDING.value:
            background_tasks.add_task(
                automation_triggers.fire_close_incidents,
                SlaEntityType.APPOINTMENT_PENDING.value,
                str(appt.id),
            )

    return AppointmentResponse(appointment=appointment_to_read(appt))
