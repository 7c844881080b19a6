"""Payment service - recording and updating appointment payments."""

from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session, joinedload

from groomypaws.db.enums import PaymentMethod, PaymentStatus
from groomypaws.db.models import Appointment, Payment


UPDATABLE_FIELDS = ("status", "payment_method", "payment_reference", "stripe_payment_intent_id")


def _with_details(query):
    return query.options(
        joinedload(Payment.appointment).joinedload(Appointment.customer),
        joinedload(Payment.appointment).joinedload(Appointment.pet),
    )


def list_payments(db: Session, customer_id: UUID | None = None) -> list[Payment]:
    query = _with_details(db.query(Payment)).join(Appointment, Appointment.id == Payment.appointment_id)
    if customer_id is not None:
        query = query.filter(Appointment.customer_id == customer_id)
    return query.order_by(Payment.created_at.desc()).all()


def get_payment(db: Session, payment_id: UUID) -> Payment | None:
    return _with_details(db.query(Payment)).filter(Payment.id == payment_id).first()


def list_payments_for_appointment(db: Session, appointment_id: UUID) -> list[Payment]:
    return (
        db.query(Payment)
        .filter(Payment.appointment_id == appointment_id)
        .order_by(Payment.created_at.desc())
        .all()
    )


def validate_method(method: str | None) -> str:
    """
    Raises:
        ValueError: Unknown payment method
    """
    method = method or PaymentMethod.CARD.value
    if not PaymentMethod.has_value(method):
        raise ValueError("Invalid payment method")
    return method


def create_payment(
    db: Session,
    appointment: Appointment,
    amount: Decimal,
    payment_method: str | None = None,
    payment_reference: str | None = None,
    stripe_payment_intent_id: str | None = None,
) -> Payment:
    """Record a completed payment (status paid)."""
    payment = Payment(
        appointment_id=appointment.id,
        amount=amount,
        status=PaymentStatus.PAID.value,
        payment_method=validate_method(payment_method),
        payment_reference=payment_reference,
        stripe_payment_intent_id=stripe_payment_intent_id,
    )
    db.add(payment)
    db.commit()
    return get_payment(db, payment.id)


def update_payment(db: Session, payment: Payment, fields: dict) -> Payment:
    """
    Raises:
        ValueError: Nothing to update, or invalid status/method
    """
    updates = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS and v is not None}
    if not updates:
        raise ValueError("No valid fields provided for update")
    if "status" in updates and not PaymentStatus.has_value(updates["status"]):
        raise ValueError("Invalid payment status")
    if "payment_method" in updates:
        validate_method(updates["payment_method"])

    for key, value in updates.items():
        setattr(payment, key, value)
    db.commit()
    return get_payment(db, payment.id)
