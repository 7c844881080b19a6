"""Customer service - back-office customer directory."""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from groomypaws.db.enums import PaymentStatus, Role
from groomypaws.db.models import Appointment, Payment, Pet, User
from groomypaws.services import appointment_service


RECENT_APPOINTMENTS = 10
DEFAULT_APPOINTMENT_LIMIT = 50
PROFILE_FIELDS = ("name", "phone", "address", "role")

_ROLE_RANK = case(
    (User.role == Role.ADMIN.value, 0),
    (User.role == Role.STAFF.value, 1),
    else_=2,
)


def _counts(db: Session) -> tuple:
    pet_counts = (
        db.query(Pet.owner_id.label("user_id"), func.count(Pet.id).label("pet_count"))
        .group_by(Pet.owner_id)
        .subquery()
    )
    appt_counts = (
        db.query(
            Appointment.customer_id.label("user_id"),
            func.count(Appointment.id).label("appointment_count"),
        )
        .group_by(Appointment.customer_id)
        .subquery()
    )
    return pet_counts, appt_counts


def list_customers(db: Session) -> list[dict]:
    """Every user with pet/appointment counts; admins, then staff, then customers."""
    pet_counts, appt_counts = _counts(db)
    rows = (
        db.query(
            User,
            func.coalesce(pet_counts.c.pet_count, 0),
            func.coalesce(appt_counts.c.appointment_count, 0),
        )
        .outerjoin(pet_counts, pet_counts.c.user_id == User.id)
        .outerjoin(appt_counts, appt_counts.c.user_id == User.id)
        .order_by(_ROLE_RANK, User.created_at.desc())
        .all()
    )
    return [
        {"user": user, "pet_count": int(pets), "appointment_count": int(appts)}
        for user, pets, appts in rows
    ]


def get_customer(db: Session, user_id: UUID) -> User | None:
    return db.query(User).filter(User.id == user_id).first()


def total_spent(db: Session, user_id: UUID) -> Decimal:
    total = (
        db.query(func.coalesce(func.sum(Payment.amount), 0))
        .join(Appointment, Appointment.id == Payment.appointment_id)
        .filter(Appointment.customer_id == user_id, Payment.status == PaymentStatus.PAID.value)
        .scalar()
    )
    return Decimal(str(total or 0))


def get_customer_detail(db: Session, user: User) -> dict:
    pets = db.query(Pet).filter(Pet.owner_id == user.id).order_by(Pet.created_at.desc()).all()
    appointment_count = (
        db.query(func.count(Appointment.id)).filter(Appointment.customer_id == user.id).scalar()
    ) or 0
    return {
        "user": user,
        "pet_count": len(pets),
        "appointment_count": appointment_count,
        "total_spent": total_spent(db, user.id),
        "pets": pets,
        "recent_appointments": list_customer_appointments(db, user.id, limit=RECENT_APPOINTMENTS),
    }


def list_customer_appointments(
    db: Session,
    user_id: UUID,
    status: str | None = None,
    limit: int = DEFAULT_APPOINTMENT_LIMIT,
) -> list[Appointment]:
    query = appointment_service.with_details(db.query(Appointment)).filter(
        Appointment.customer_id == user_id
    )
    if status:
        query = query.filter(Appointment.status == status)
    return query.order_by(Appointment.scheduled_at.desc()).limit(limit).all()


def update_customer(db: Session, user: User, fields: dict) -> User:
    """
    Admin edit of a user's profile or role.

    Raises:
        ValueError: Nothing to update, or unknown role
    """
    updates = {k: v for k, v in fields.items() if k in PROFILE_FIELDS and v is not None}
    if not updates:
        raise ValueError("No valid fields provided for update")
    if "role" in updates:
        role = updates["role"]
        role = role.value if isinstance(role, Role) else role
        if not Role.has_value(role):
            raise ValueError("Invalid role")
        updates["role"] = role
    for key, value in updates.items():
        setattr(user, key, value)
    db.commit()
    db.refresh(user)
    return user
