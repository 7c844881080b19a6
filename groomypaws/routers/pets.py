"""Pets router - customers manage their pets; staff see all."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from groomypaws.core.deps import get_current_session, get_db, is_owner_or_staff, is_staff
from groomypaws.schemas.auth import UserSession
from groomypaws.schemas.pet import PetCreate, PetListResponse, PetRead, PetResponse, PetUpdate
from groomypaws.services import pet_service

router = APIRouter()


def _get_accessible_pet(db: Session, pet_id: UUID, session: UserSession):
    pet = pet_service.get_pet(db, pet_id)
    if not pet:
        raise HTTPException(status_code=404, detail="Pet not found")
    if not is_owner_or_staff(session, pet.owner_id):
        raise HTTPException(status_code=403, detail="Access denied")
    return pet


@router.get("", response_model=PetListResponse)
def list_pets(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Customers see their own pets; staff see every pet."""
    owner_id = None if is_staff(session) else session.user_id
    pets = pet_service.list_pets(db, owner_id=owner_id)
    return PetListResponse(pets=[PetRead.model_validate(p) for p in pets])


@router.get("/{pet_id}", response_model=PetResponse)
def get_pet(
    pet_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    pet = _get_accessible_pet(db, pet_id, session)
    return PetResponse(pet=PetRead.model_validate(pet))


@router.post("", response_model=PetResponse, status_code=201)
def create_pet(
    data: PetCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    try:
        pet = pet_service.create_pet(db, session.user_id, data.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return PetResponse(pet=PetRead.model_validate(pet))


@router.put("/{pet_id}", response_model=PetResponse)
def update_pet(
    pet_id: UUID,
    data: PetUpdate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    pet = _get_accessible_pet(db, pet_id, session)
    updates = data.model_dump(exclude_unset=True)
    if "name" in updates and not (updates["name"] or "").strip():
        raise HTTPException(status_code=400, detail="Pet name is required")
    pet = pet_service.update_pet(db, pet, updates)
    return PetResponse(pet=PetRead.model_validate(pet))


@router.delete("/{pet_id}")
def delete_pet(
    pet_id: UUID,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    pet = _get_accessible_pet(db, pet_id, session)
    pet_service.delete_pet(db, pet)
    return {"message": "Pet deleted successfully"}
