"""Catalog schemas (grooming services and breed prices)."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ServiceCreate(BaseModel):
    name: str | None = None
    description: str | None = None
    base_price: float | None = Field(None, ge=0)
    duration_minutes: int | None = Field(None, gt=0)
    is_addon: bool = False
    is_active: bool = True


class ServiceUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    base_price: float | None = Field(None, ge=0)
    duration_minutes: int | None = Field(None, gt=0)
    is_addon: bool | None = None
    is_active: bool | None = None


class ServiceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str | None = None
    base_price: float
    duration_minutes: int
    is_addon: bool
    is_active: bool
    created_at: datetime


class ServicePriceUpsert(BaseModel):
    breed: str | None = None
    price: float | None = Field(None, ge=0)


class ServicePriceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    service_id: UUID
    breed: str
    price: float


class ServiceResponse(BaseModel):
    service: ServiceRead


class ServiceListResponse(BaseModel):
    services: list[ServiceRead]


class ServicePriceResponse(BaseModel):
    price: ServicePriceRead


class ServicePriceListResponse(BaseModel):
    prices: list[ServicePriceRead]
