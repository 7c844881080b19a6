"""Pet schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class PetBase(BaseModel):
    breed: str | None = None
    size_category: str | None = None
    age: int | None = Field(None, ge=0)
    weight: float | None = Field(None, ge=0)
    temperament_notes: str | None = None
    grooming_notes: str | None = None


class PetCreate(PetBase):
    name: str | None = None


class PetUpdate(PetBase):
    name: str | None = None


class PetRead(PetBase):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    owner_id: UUID
    name: str
    photo_url: str | None = None
    created_at: datetime
    updated_at: datetime


class PetResponse(BaseModel):
    pet: PetRead


class PetListResponse(BaseModel):
    pets: list[PetRead]
