"""Customers router - staff directory of users with activity rollups."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from groomypaws.core.deps import get_db, require_roles
from groomypaws.db.enums import AppointmentStatus, Role
from groomypaws.routers.appointments import appointment_to_read
from groomypaws.schemas.appointment import AppointmentListResponse
from groomypaws.schemas.auth import UserRead
from groomypaws.schemas.customer import (
    CustomerDetailResponse,
    CustomerListResponse,
    CustomerRead,
    CustomerResponse,
    CustomerUpdate,
)
from groomypaws.schemas.pet import PetListResponse, PetRead
from groomypaws.services import customer_service

router = APIRouter(dependencies=[Depends(require_roles([Role.STAFF, Role.ADMIN]))])


def _customer_to_read(user, **rollups) -> CustomerRead:
    return CustomerRead(**UserRead.model_validate(user).model_dump(), **rollups)


def _get_customer_or_404(db: Session, user_id: UUID):
    user = customer_service.get_customer(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="Customer not found")
    return user


@router.get("", response_model=CustomerListResponse)
def list_customers(db: Session = Depends(get_db)):
    rows = customer_service.list_customers(db)
    return CustomerListResponse(customers=[
        _customer_to_read(
            row["user"],
            pet_count=row["pet_count"],
            appointment_count=row["appointment_count"],
        )
        for row in rows
    ])


@router.get("/{user_id}", response_model=CustomerDetailResponse)
def get_customer(user_id: UUID, db: Session = Depends(get_db)):
    """Customer profile with pets, recent appointments, and total paid."""
    user = _get_customer_or_404(db, user_id)
    detail = customer_service.get_customer_detail(db, user)
    return CustomerDetailResponse(
        customer=_customer_to_read(
            user,
            pet_count=detail["pet_count"],
            appointment_count=detail["appointment_count"],
            total_spent=detail["total_spent"],
        ),
        pets=[PetRead.model_validate(p) for p in detail["pets"]],
        recent_appointments=[appointment_to_read(a) for a in detail["recent_appointments"]],
    )


@router.put(
    "/{user_id}",
    response_model=CustomerResponse,
    dependencies=[Depends(require_roles([Role.ADMIN]))],
)
def update_customer(user_id: UUID, data: CustomerUpdate, db: Session = Depends(get_db)):
    """Admin-only profile/role edit."""
    user = _get_customer_or_404(db, user_id)
    try:
        user = customer_service.update_customer(db, user, data.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return CustomerResponse(customer=_customer_to_read(user))


@router.get("/{user_id}/pets", response_model=PetListResponse)
def list_customer_pets(user_id: UUID, db: Session = Depends(get_db)):
    user = _get_customer_or_404(db, user_id)
    return PetListResponse(pets=[PetRead.model_validate(p) for p in user.pets])


@router.get("/{user_id}/appointments", response_model=AppointmentListResponse)
def list_customer_appointments(
    user_id: UUID,
    db: Session = Depends(get_db),
    status: AppointmentStatus | None = Query(None),
    limit: int = Query(customer_service.DEFAULT_APPOINTMENT_LIMIT, ge=1, le=200),
):
    _get_customer_or_404(db, user_id)
    appointments = customer_service.list_customer_appointments(
        db, user_id, status=status.value if status else None, limit=limit
    )
    return AppointmentListResponse(appointments=[appointment_to_read(a) for a in appointments])
