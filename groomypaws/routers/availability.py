"""Availability router - staff working hours and public booking slots."""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from groomypaws.core.deps import get_current_user, get_db, require_roles
from groomypaws.db.enums import Role
from groomypaws.schemas.appointment import (
    AvailabilityListResponse,
    AvailabilityRead,
    AvailabilityResponse,
    AvailabilityUpsert,
    SlotListResponse,
    TimeSlotRead,
)
from groomypaws.schemas.auth import UserSession
from groomypaws.services import availability_service

router = APIRouter()

require_staff = require_roles([Role.STAFF, Role.ADMIN])


def _availability_to_read(row) -> AvailabilityRead:
    return AvailabilityRead(
        id=row.id,
        user_id=row.user_id,
        day_of_week=row.day_of_week,
        start_time=row.start_time,
        end_time=row.end_time,
        is_available=row.is_available,
        user_name=row.user.name if row.user else None,
        role=row.user.role if row.user else None,
    )


# =============================================================================
# Public
# =============================================================================

@router.get("/public", response_model=AvailabilityListResponse)
def list_public_availability(db: Session = Depends(get_db)):
    """Open hours for all staff (no auth)."""
    rows = availability_service.list_public_availability(db)
    return AvailabilityListResponse(availability=[_availability_to_read(r) for r in rows])


@router.get("/slots", response_model=SlotListResponse, dependencies=[Depends(get_current_user)])
def list_slots(
    db: Session = Depends(get_db),
    slot_date: date = Query(..., alias="date"),
    duration_minutes: int = Query(
        availability_service.DEFAULT_SLOT_DURATION_MINUTES, gt=0, le=24 * 60
    ),
):
    """Bookable 30 minute slots for a date, sized to the selected services' duration."""
    slots = availability_service.get_slots_for_date(db, slot_date, duration_minutes)
    return SlotListResponse(
        date=slot_date,
        duration_minutes=duration_minutes,
        slots=[TimeSlotRead(**slot._asdict()) for slot in slots],
    )


# =============================================================================
# Staff
# =============================================================================

@router.get("", response_model=AvailabilityListResponse)
def list_my_availability(
    session: UserSession = Depends(require_staff),
    db: Session = Depends(get_db),
):
    rows = availability_service.list_user_availability(db, session.user_id)
    return AvailabilityListResponse(availability=[_availability_to_read(r) for r in rows])


@router.post("", response_model=AvailabilityResponse)
def upsert_availability(
    data: AvailabilityUpsert,
    session: UserSession = Depends(require_staff),
    db: Session = Depends(get_db),
):
    """Create or replace hours for one weekday. 201 when created."""
    try:
        row, created = availability_service.upsert_availability(
            db,
            session.user_id,
            data.day_of_week,
            start_time=data.start_time,
            end_time=data.end_time,
            is_available=data.is_available,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    body = AvailabilityResponse(availability=_availability_to_read(row))
    return JSONResponse(status_code=201 if created else 200, content=body.model_dump(mode="json"))


@router.delete("/{day_of_week}")
def delete_availability(
    day_of_week: int,
    session: UserSession = Depends(require_staff),
    db: Session = Depends(get_db),
):
    try:
        availability_service.delete_availability(db, session.user_id, day_of_week)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"message": "Availability deleted successfully"}
