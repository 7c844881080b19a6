"""Upload router - profile and pet photos (multipart field "image")."""

from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from starlette.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from groomypaws.core.config import settings
from groomypaws.core.deps import get_current_user, get_db
from groomypaws.schemas.auth import UserRead
from groomypaws.schemas.pet import PetRead
from groomypaws.services import pet_service, upload_service
from groomypaws.utils.file_upload import (
    content_length_exceeds_limit,
    get_upload_file_size,
    is_allowed_image,
)

router = APIRouter()

MAX_SIZE_MB = settings.UPLOAD_MAX_BYTES // (1024 * 1024)


async def _validate_image(request: Request, image: UploadFile) -> None:
    """
    Raises:
        HTTPException 400: Not an allowed image type, or too large
    """
    if content_length_exceeds_limit(
        request.headers.get("content-length"), max_size_bytes=settings.UPLOAD_MAX_BYTES
    ):
        raise HTTPException(status_code=400, detail=f"File too large. Maximum size is {MAX_SIZE_MB}MB")
    if not is_allowed_image(image.filename, image.content_type):
        raise HTTPException(
            status_code=400,
            detail="Only image files are allowed (jpeg, jpg, png, gif, webp)",
        )
    if await get_upload_file_size(image) > settings.UPLOAD_MAX_BYTES:
        raise HTTPException(status_code=400, detail=f"File too large. Maximum size is {MAX_SIZE_MB}MB")


def _get_own_pet(db: Session, pet_id: UUID, user):
    pet = pet_service.get_pet(db, pet_id)
    if not pet or pet.owner_id != user.id:
        raise HTTPException(status_code=404, detail="Pet not found")
    return pet


# =============================================================================
# Profile Photo
# =============================================================================

@router.post("/profile")
async def upload_profile_picture(
    request: Request,
    image: UploadFile = File(...),
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Crop to 400x400 JPEG and set as the caller's avatar."""
    await _validate_image(request, image)
    try:
        user = await run_in_threadpool(upload_service.set_profile_picture, db, user, image.file)
    except upload_service.InvalidImageError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "message": "Profile picture uploaded successfully",
        "profile_picture_url": user.profile_picture_url,
        "user": UserRead.model_validate(user).model_dump(mode="json"),
    }


@router.delete("/profile")
def delete_profile_picture(
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    upload_service.clear_profile_picture(db, user)
    return {"message": "Profile picture removed successfully"}


# =============================================================================
# Pet Photo
# =============================================================================

@router.post("/pet/{pet_id}")
async def upload_pet_photo(
    pet_id: UUID,
    request: Request,
    image: UploadFile = File(...),
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Crop to 300x300 JPEG and replace the pet's photo (owner only)."""
    pet = _get_own_pet(db, pet_id, user)
    await _validate_image(request, image)
    try:
        pet = await run_in_threadpool(upload_service.set_pet_photo, db, pet, image.file)
    except upload_service.InvalidImageError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "message": "Pet photo uploaded successfully",
        "photo_url": pet.photo_url,
        "pet": PetRead.model_validate(pet).model_dump(mode="json"),
    }


@router.delete("/pet/{pet_id}")
def delete_pet_photo(
    pet_id: UUID,
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    pet = _get_own_pet(db, pet_id, user)
    upload_service.clear_pet_photo(db, pet)
    return {"message": "Pet photo removed successfully"}
