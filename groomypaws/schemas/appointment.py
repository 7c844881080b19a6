"""Appointment and booking slot schemas."""

from datetime import date, datetime, time
from uuid import UUID

from pydantic import BaseModel, Field

from groomypaws.db.enums import AppointmentStatus


# =============================================================================
# Appointments
# =============================================================================

class AppointmentServiceLine(BaseModel):
    service_id: UUID | None = None
    price: float | None = Field(None, ge=0)


class AppointmentCreate(BaseModel):
    # Presence is checked in the router (400, not 422)
    pet_id: UUID | None = None
    scheduled_at: datetime | None = None
    services: list[AppointmentServiceLine] = Field(default_factory=list)
    total_price: float | None = Field(None, ge=0)
    duration_minutes: int | None = Field(None, gt=0)


class AppointmentUpdate(BaseModel):
    status: AppointmentStatus | None = None
    internal_notes: str | None = None
    scheduled_at: datetime | None = None
    duration_minutes: int | None = Field(None, gt=0)


class AppointmentServiceRead(BaseModel):
    service_id: UUID
    name: str | None = None
    price_at_booking: float


class AppointmentRead(BaseModel):
    id: UUID
    customer_id: UUID
    pet_id: UUID
    scheduled_at: datetime
    duration_minutes: int
    total_price: float
    status: str
    internal_notes: str | None = None
    created_at: datetime
    updated_at: datetime

    pet_name: str | None = None
    pet_breed: str | None = None
    pet_size_category: str | None = None
    customer_name: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None
    services: list[str] = Field(default_factory=list)
    service_items: list[AppointmentServiceRead] = Field(default_factory=list)


class AppointmentResponse(BaseModel):
    appointment: AppointmentRead


class AppointmentListResponse(BaseModel):
    appointments: list[AppointmentRead]


# =============================================================================
# Availability & Slots
# =============================================================================

class AvailabilityUpsert(BaseModel):
    day_of_week: int | None = None
    start_time: time | None = None
    end_time: time | None = None
    is_available: bool | None = None


class AvailabilityRead(BaseModel):
    id: UUID
    user_id: UUID
    day_of_week: int
    start_time: time
    end_time: time
    is_available: bool
    user_name: str | None = None
    role: str | None = None


class AvailabilityResponse(BaseModel):
    availability: AvailabilityRead


class AvailabilityListResponse(BaseModel):
    availability: list[AvailabilityRead]


class TimeSlotRead(BaseModel):
    time: str
    display_time: str
    starts_at: datetime
    available: bool


class SlotListResponse(BaseModel):
    date: date
    duration_minutes: int
    slots: list[TimeSlotRead]
