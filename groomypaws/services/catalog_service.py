"""Catalog service - grooming services and breed pricing."""

from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from groomypaws.db.models import Service, ServicePrice


SERVICE_FIELDS = ("name", "description", "base_price", "duration_minutes", "is_addon", "is_active")


# =============================================================================
# Services
# =============================================================================

def list_active_services(db: Session) -> list[Service]:
    return (
        db.query(Service)
        .filter(Service.is_active.is_(True))
        .order_by(Service.name)
        .all()
    )


def get_service(db: Session, service_id: UUID) -> Service | None:
    return db.query(Service).filter(Service.id == service_id).first()


def create_service(db: Session, data: dict) -> Service:
    """
    Create a catalog service.

    Raises:
        ValueError: Missing name
    """
    name = (data.get("name") or "").strip()
    if not name:
        raise ValueError("Service name is required")

    service = Service(
        name=name,
        description=data.get("description"),
        base_price=data.get("base_price") or 0,
        duration_minutes=data.get("duration_minutes") or 60,
        is_addon=bool(data.get("is_addon", False)),
        is_active=bool(data.get("is_active", True)),
    )
    db.add(service)
    db.commit()
    db.refresh(service)
    return service


def update_service(db: Session, service: Service, data: dict) -> Service:
    for key in SERVICE_FIELDS:
        if key in data and data[key] is not None:
            setattr(service, key, data[key])
    db.commit()
    db.refresh(service)
    return service


# =============================================================================
# Breed Prices
# =============================================================================

def list_prices(db: Session, service_id: UUID) -> list[ServicePrice]:
    return (
        db.query(ServicePrice)
        .filter(ServicePrice.service_id == service_id)
        .order_by(ServicePrice.breed)
        .all()
    )


def upsert_price(
    db: Session,
    service_id: UUID,
    breed: str,
    price: Decimal,
) -> tuple[ServicePrice, bool]:
    """
    Set the price for a breed. Returns (row, created).

    Raises:
        ValueError: Missing breed or price
    """
    breed = (breed or "").strip()
    if not breed or price is None:
        raise ValueError("Breed and price are required")

    existing = (
        db.query(ServicePrice)
        .filter(ServicePrice.service_id == service_id, ServicePrice.breed == breed)
        .first()
    )
    if existing:
        existing.price = price
        db.commit()
        db.refresh(existing)
        return existing, False

    row = ServicePrice(service_id=service_id, breed=breed, price=price)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row, True


def delete_price(db: Session, service_id: UUID, price_id: UUID) -> bool:
    deleted = (
        db.query(ServicePrice)
        .filter(ServicePrice.id == price_id, ServicePrice.service_id == service_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted > 0


def delete_all_prices(db: Session, service_id: UUID) -> int:
    deleted = (
        db.query(ServicePrice)
        .filter(ServicePrice.service_id == service_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted


def quote_service_price(
    service: Service,
    pet_breed: str | None,
    prices: list[ServicePrice],
) -> Decimal:
    """Breed price when the pet's breed matches (trimmed, case-insensitive), else base price."""
    if pet_breed:
        wanted = pet_breed.strip().lower()
        for row in prices:
            if row.breed.strip().lower() == wanted:
                return row.price
    return service.base_price
