"""Saved card service. Only Stripe references are stored."""

from uuid import UUID

from sqlalchemy.orm import Session

from groomypaws.db.models import SavedCard


def list_cards(db: Session, user_id: UUID) -> list[SavedCard]:
    """Default card first, then newest."""
    return (
        db.query(SavedCard)
        .filter(SavedCard.user_id == user_id)
        .order_by(SavedCard.is_default.desc(), SavedCard.created_at.desc())
        .all()
    )


def get_user_card(db: Session, user_id: UUID, card_id: UUID) -> SavedCard | None:
    return (
        db.query(SavedCard)
        .filter(SavedCard.id == card_id, SavedCard.user_id == user_id)
        .first()
    )


def _clear_defaults(db: Session, user_id: UUID) -> None:
    db.query(SavedCard).filter(
        SavedCard.user_id == user_id, SavedCard.is_default.is_(True)
    ).update({SavedCard.is_default: False}, synchronize_session=False)


def add_card(db: Session, user_id: UUID, data: dict) -> SavedCard:
    if data.get("is_default"):
        _clear_defaults(db, user_id)
    card = SavedCard(
        user_id=user_id,
        card_last4=data["card_last4"],
        card_brand=data["card_brand"],
        card_exp_month=data["card_exp_month"],
        card_exp_year=data["card_exp_year"],
        stripe_payment_method_id=data["stripe_payment_method_id"],
        is_default=bool(data.get("is_default")),
    )
    db.add(card)
    db.commit()
    db.refresh(card)
    return card


def set_default(db: Session, card: SavedCard, is_default: bool) -> SavedCard:
    if is_default:
        _clear_defaults(db, card.user_id)
    card.is_default = is_default
    db.commit()
    db.refresh(card)
    return card


def delete_card(db: Session, card: SavedCard) -> None:
    db.delete(card)
    db.commit()
