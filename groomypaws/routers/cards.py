"""Saved cards router - the caller's stored Stripe payment methods."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from groomypaws.core.deps import get_current_session, get_db
from groomypaws.schemas.auth import UserSession
from groomypaws.schemas.payment import (
    CardCreate,
    CardListResponse,
    CardRead,
    CardResponse,
    CardUpdate,
)
from groomypaws.services import card_service

router = APIRouter()

REQUIRED_CARD_FIELDS = (
    "card_last4",
    "card_brand",
    "card_exp_month",
    "card_exp_year",
    "stripe_payment_method_id",
)


def _get_own_card(db: Session, card_id: UUID, session: UserSession):
    card = card_service.get_user_card(db, session.user_id, card_id)
    if not card:
        raise HTTPException(status_code=404, detail="Card not found")
    return card


@router.get("", response_model=CardListResponse)
def list_cards(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    cards = card_service.list_cards(db, session.user_id)
    return CardListResponse(cards=[CardRead.model_validate(c, from_attributes=True) for c in cards])


@router.post("", response_model=CardResponse, status_code=201)
def add_card(
    data: CardCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    fields = data.model_dump()
    if any(fields.get(key) in (None, "") for key in REQUIRED_CARD_FIELDS):
        raise HTTPException(status_code=400, detail="All card fields are required")
    card = card_service.add_card(db, session.user_id, fields)
    return CardResponse(card=CardRead.model_validate(card, from_attributes=True))


@router.put("/{card_id}", response_model=CardResponse)
def set_default_card(
    card_id: UUID,
    data: CardUpdate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    card = _get_own_card(db, card_id, session)
    card = card_service.set_default(db, card, data.is_default)
    return CardResponse(card=CardRead.model_validate(card, from_attributes=True))


@router.delete("/{card_id}")
def delete_card(
    card_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    card = _get_own_card(db, card_id, session)
    card_service.delete_card(db, card)
    return {"message": "Card deleted successfully"}
