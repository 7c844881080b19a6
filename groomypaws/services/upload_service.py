"""
Upload service - profile and pet photos.

Images are center-cropped to a square, re-encoded as JPEG, and written
under UPLOAD_DIR. The stored URL is relative to the /uploads mount.
"""

import logging
import os
import time
import uuid
from typing import BinaryIO

from PIL import Image, ImageOps, UnidentifiedImageError
from sqlalchemy.orm import Session

from groomypaws.core.config import settings
from groomypaws.db.models import Pet, User
from groomypaws.db.types import utcnow

logger = logging.getLogger(__name__)


PROFILE_SIZE = (400, 400)
PET_SIZE = (300, 300)
JPEG_QUALITY = 85
URL_PREFIX = "/uploads"


class InvalidImageError(ValueError):
    """Upload could not be decoded as an image."""


def _folder(kind: str) -> str:
    path = os.path.join(settings.UPLOAD_DIR, kind)
    os.makedirs(path, exist_ok=True)
    return path


def url_to_path(url: str | None) -> str | None:
    """Map a stored /uploads/... URL back to a file path under UPLOAD_DIR."""
    if not url or not url.startswith(URL_PREFIX + "/"):
        return None
    relative = url[len(URL_PREFIX) + 1:]
    path = os.path.normpath(os.path.join(settings.UPLOAD_DIR, relative))
    root = os.path.normpath(settings.UPLOAD_DIR)
    if os.path.commonpath([root, path]) != root:
        return None
    return path


def remove_file(url: str | None) -> None:
    path = url_to_path(url)
    if path and os.path.exists(path):
        try:
            os.remove(path)
        except OSError:
            logger.warning("Could not remove upload %s", path)


def save_square_jpeg(source: BinaryIO, kind: str, stem: str, size: tuple[int, int]) -> str:
    """
    Crop/resize to `size` and save as JPEG. Returns the public URL.

    Raises:
        InvalidImageError: Not a decodable image
    """
    filename = f"{stem}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}.jpg"
    path = os.path.join(_folder(kind), filename)
    try:
        with Image.open(source) as image:
            image = ImageOps.exif_transpose(image)
            fitted = ImageOps.fit(image.convert("RGB"), size, method=Image.Resampling.LANCZOS)
            fitted.save(path, "JPEG", quality=JPEG_QUALITY)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        if os.path.exists(path):
            os.remove(path)
        raise InvalidImageError("Invalid image file") from exc
    return f"{URL_PREFIX}/{kind}/{filename}"


def set_profile_picture(db: Session, user: User, source: BinaryIO) -> User:
    url = save_square_jpeg(source, "profiles", user.id.hex, PROFILE_SIZE)
    old_url = user.profile_picture_url
    try:
        user.profile_picture_url = url
        user.profile_picture_updated_at = utcnow()
        db.commit()
    except Exception:
        db.rollback()
        remove_file(url)
        raise
    if old_url and old_url != url:
        remove_file(old_url)
    db.refresh(user)
    return user


def clear_profile_picture(db: Session, user: User) -> User:
    remove_file(user.profile_picture_url)
    user.profile_picture_url = None
    user.profile_picture_updated_at = utcnow()
    db.commit()
    db.refresh(user)
    return user


def set_pet_photo(db: Session, pet: Pet, source: BinaryIO) -> Pet:
    url = save_square_jpeg(source, "pets", pet.id.hex, PET_SIZE)
    old_url = pet.photo_url
    try:
        pet.photo_url = url
        db.commit()
    except Exception:
        db.rollback()
        remove_file(url)
        raise
    if old_url and old_url != url:
        remove_file(old_url)
    db.refresh(pet)
    return pet


def clear_pet_photo(db: Session, pet: Pet) -> Pet:
    remove_file(pet.photo_url)
    pet.photo_url = None
    db.commit()
    db.refresh(pet)
    return pet
