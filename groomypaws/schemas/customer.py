"""Back-office customer directory schemas."""

from pydantic import BaseModel

from groomypaws.db.enums import Role
from groomypaws.schemas.appointment import AppointmentRead
from groomypaws.schemas.auth import UserRead
from groomypaws.schemas.pet import PetRead


class CustomerRead(UserRead):
    pet_count: int = 0
    appointment_count: int = 0
    total_spent: float | None = None


class CustomerUpdate(BaseModel):
    name: str | None = None
    phone: str | None = None
    address: str | None = None
    role: Role | None = None


class CustomerListResponse(BaseModel):
    customers: list[CustomerRead]


class CustomerDetailResponse(BaseModel):
    customer: CustomerRead
    pets: list[PetRead]
    recent_appointments: list[AppointmentRead]


class CustomerResponse(BaseModel):
    customer: CustomerRead
