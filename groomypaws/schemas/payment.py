"""Payment and saved card schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


# =============================================================================
# Payments
# =============================================================================

class PaymentCreate(BaseModel):
    appointment_id: UUID | None = None
    amount: float | None = Field(None, gt=0)
    payment_method: str | None = None
    payment_reference: str | None = None
    stripe_payment_intent_id: str | None = None


class PaymentUpdate(BaseModel):
    status: str | None = None
    payment_method: str | None = None
    payment_reference: str | None = None
    stripe_payment_intent_id: str | None = None


class PaymentRead(BaseModel):
    id: UUID
    appointment_id: UUID
    amount: float
    status: str
    payment_method: str
    payment_reference: str | None = None
    stripe_payment_intent_id: str | None = None
    created_at: datetime
    updated_at: datetime

    scheduled_at: datetime | None = None
    pet_name: str | None = None
    customer_id: UUID | None = None
    customer_name: str | None = None
    customer_email: str | None = None


class PaymentResponse(BaseModel):
    payment: PaymentRead


class PaymentListResponse(BaseModel):
    payments: list[PaymentRead]


# =============================================================================
# Saved Cards
# =============================================================================

class CardCreate(BaseModel):
    card_last4: str | None = Field(None, min_length=4, max_length=4)
    card_brand: str | None = None
    card_exp_month: int | None = Field(None, ge=1, le=12)
    card_exp_year: int | None = None
    stripe_payment_method_id: str | None = None
    is_default: bool = False


class CardUpdate(BaseModel):
    is_default: bool = True


class CardRead(BaseModel):
    id: UUID
    card_last4: str
    card_brand: str
    card_exp_month: int
    card_exp_year: int
    stripe_payment_method_id: str
    is_default: bool
    created_at: datetime


class CardResponse(BaseModel):
    card: CardRead


class CardListResponse(BaseModel):
    cards: list[CardRead]
