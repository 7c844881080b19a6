"""Pet service - CRUD for customer pets."""

from uuid import UUID

from sqlalchemy.orm import Session

from groomypaws.db.enums import PetSize
from groomypaws.db.models import Pet


PET_FIELDS = (
    "name",
    "breed",
    "size_category",
    "age",
    "weight",
    "temperament_notes",
    "grooming_notes",
)


def normalize_size(value: str | None) -> str | None:
    """Unknown sizes are stored as null rather than rejected."""
    if value and PetSize.has_value(value):
        return value
    return None


def list_pets(db: Session, owner_id: UUID | None = None) -> list[Pet]:
    """List pets, optionally scoped to one owner. Newest first."""
    query = db.query(Pet)
    if owner_id is not None:
        query = query.filter(Pet.owner_id == owner_id)
    return query.order_by(Pet.created_at.desc()).all()


def get_pet(db: Session, pet_id: UUID) -> Pet | None:
    return db.query(Pet).filter(Pet.id == pet_id).first()


def create_pet(db: Session, owner_id: UUID, data: dict) -> Pet:
    """
    Create a pet for owner_id.

    Raises:
        ValueError: Missing name
    """
    name = (data.get("name") or "").strip()
    if not name:
        raise ValueError("Pet name is required")

    pet = Pet(owner_id=owner_id)
    for key in PET_FIELDS:
        if key in data:
            setattr(pet, key, data[key])
    pet.name = name
    pet.size_category = normalize_size(data.get("size_category"))
    db.add(pet)
    db.commit()
    db.refresh(pet)
    return pet


def update_pet(db: Session, pet: Pet, data: dict) -> Pet:
    for key in PET_FIELDS:
        if key in data:
            setattr(pet, key, data[key])
    if "size_category" in data:
        pet.size_category = normalize_size(data["size_category"])
    db.commit()
    db.refresh(pet)
    return pet


def delete_pet(db: Session, pet: Pet) -> None:
    db.delete(pet)
    db.commit()
