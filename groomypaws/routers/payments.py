"""Payments router - record and review appointment payments."""

from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from groomypaws.core.deps import get_current_session, get_db, is_staff, require_roles
from groomypaws.db.enums import Role
from groomypaws.schemas.auth import UserSession
from groomypaws.schemas.payment import (
    PaymentCreate,
    PaymentListResponse,
    PaymentRead,
    PaymentResponse,
    PaymentUpdate,
)
from groomypaws.services import appointment_service, payment_service

router = APIRouter()


def _payment_to_read(payment) -> PaymentRead:
    appt = payment.appointment
    customer = appt.customer if appt else None
    return PaymentRead(
        id=payment.id,
        appointment_id=payment.appointment_id,
        amount=payment.amount,
        status=payment.status,
        payment_method=payment.payment_method,
        payment_reference=payment.payment_reference,
        stripe_payment_intent_id=payment.stripe_payment_intent_id,
        created_at=payment.created_at,
        updated_at=payment.updated_at,
        scheduled_at=appt.scheduled_at if appt else None,
        pet_name=appt.pet.name if appt and appt.pet else None,
        customer_id=appt.customer_id if appt else None,
        customer_name=customer.name if customer else None,
        customer_email=customer.email if customer else None,
    )


def _get_accessible_appointment(db: Session, appointment_id: UUID, session: UserSession):
    appt = appointment_service.get_appointment(db, appointment_id)
    if not appt:
        raise HTTPException(status_code=404, detail="Appointment not found")
    if not is_staff(session) and appt.customer_id != session.user_id:
        raise HTTPException(status_code=403, detail="Access denied")
    return appt


@router.get("", response_model=PaymentListResponse)
def list_payments(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    customer_id = None if is_staff(session) else session.user_id
    payments = payment_service.list_payments(db, customer_id=customer_id)
    return PaymentListResponse(payments=[_payment_to_read(p) for p in payments])


@router.get("/appointment/{appointment_id}", response_model=PaymentListResponse)
def list_appointment_payments(
    appointment_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    _get_accessible_appointment(db, appointment_id, session)
    payments = payment_service.list_payments_for_appointment(db, appointment_id)
    return PaymentListResponse(payments=[_payment_to_read(p) for p in payments])


@router.get("/{payment_id}", response_model=PaymentResponse)
def get_payment(
    payment_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    payment = payment_service.get_payment(db, payment_id)
    if not payment:
        raise HTTPException(status_code=404, detail="Payment not found")
    if not is_staff(session) and payment.appointment.customer_id != session.user_id:
        raise HTTPException(status_code=403, detail="Access denied")
    return PaymentResponse(payment=_payment_to_read(payment))


@router.post("", response_model=PaymentResponse, status_code=201)
def create_payment(
    data: PaymentCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Record a payment for an appointment (status paid)."""
    if not data.appointment_id or data.amount is None:
        raise HTTPException(status_code=400, detail="Appointment and amount are required")

    appt = _get_accessible_appointment(db, data.appointment_id, session)
    try:
        payment = payment_service.create_payment(
            db,
            appointment=appt,
            amount=Decimal(str(data.amount)),
            payment_method=data.payment_method,
            payment_reference=data.payment_reference,
            stripe_payment_intent_id=data.stripe_payment_intent_id,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return PaymentResponse(payment=_payment_to_read(payment))


@router.put(
    "/{payment_id}",
    response_model=PaymentResponse,
    dependencies=[Depends(require_roles([Role.STAFF, Role.ADMIN]))],
)
def update_payment(payment_id: UUID, data: PaymentUpdate, db: Session = Depends(get_db)):
    payment = payment_service.get_payment(db, payment_id)
    if not payment:
        raise HTTPException(status_code=404, detail="Payment not found")
    try:
        payment = payment_service.update_payment(db, payment, data.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return PaymentResponse(payment=_payment_to_read(payment))
