"""Tests for profile and pet photo uploads."""
import io
import os

import pytest
from httpx import AsyncClient
from PIL import Image

from groomypaws.services import upload_service


def png_bytes(size=(640, 480)) -> io.BytesIO:
    buf = io.BytesIO()
    Image.new("RGB", size, (200, 120, 40)).save(buf, "PNG")
    buf.seek(0)
    return buf


@pytest.mark.asyncio
async def test_profile_picture_is_cropped_and_stored(customer_client: AsyncClient, db, customer_user):
    response = await customer_client.post(
        "/api/upload/profile", files={"image": ("dog.png", png_bytes(), "image/png")}
    )
    assert response.status_code == 200
    url = response.json()["profile_picture_url"]
    assert url.startswith("/uploads/profiles/")
    assert url.endswith(".jpg")

    path = upload_service.url_to_path(url)
    assert os.path.exists(path)
    with Image.open(path) as stored:
        assert stored.size == (400, 400)
        assert stored.format == "JPEG"

    removed = await customer_client.delete("/api/upload/profile")
    assert removed.status_code == 200
    assert not os.path.exists(path)
    db.refresh(customer_user)
    assert customer_user.profile_picture_url is None


@pytest.mark.asyncio
async def test_non_image_is_rejected(customer_client: AsyncClient):
    response = await customer_client.post(
        "/api/upload/profile", files={"image": ("notes.txt", io.BytesIO(b"hello"), "text/plain")}
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_undecodable_image_is_rejected(customer_client: AsyncClient):
    response = await customer_client.post(
        "/api/upload/profile", files={"image": ("dog.png", io.BytesIO(b"not a png"), "image/png")}
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid image file"


@pytest.mark.asyncio
async def test_pet_photo_replaces_previous(customer_client: AsyncClient, pet):
    first = await customer_client.post(
        f"/api/upload/pet/{pet.id}", files={"image": ("a.png", png_bytes(), "image/png")}
    )
    assert first.status_code == 200
    first_path = upload_service.url_to_path(first.json()["photo_url"])
    with Image.open(first_path) as stored:
        assert stored.size == (300, 300)

    second = await customer_client.post(
        f"/api/upload/pet/{pet.id}", files={"image": ("b.png", png_bytes((100, 300)), "image/png")}
    )
    assert second.json()["pet"]["photo_url"] == second.json()["photo_url"]
    assert os.path.exists(upload_service.url_to_path(second.json()["photo_url"]))
    assert not os.path.exists(first_path)


@pytest.mark.asyncio
async def test_pet_photo_requires_ownership(other_client: AsyncClient, pet):
    response = await other_client.post(
        f"/api/upload/pet/{pet.id}", files={"image": ("a.png", png_bytes(), "image/png")}
    )
    assert response.status_code == 404
    assert (await other_client.delete(f"/api/upload/pet/{pet.id}")).status_code == 404


@pytest.mark.asyncio
async def test_oversized_dimensions_are_rejected(customer_client: AsyncClient, customer_user, db):
    buf = io.BytesIO()
    Image.new("1", (14000, 14000)).save(buf, "PNG")
    buf.seek(0)

    response = await customer_client.post(
        "/api/upload/profile", files={"image": ("huge.png", buf, "image/png")}
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid image file"
    db.refresh(customer_user)
    assert customer_user.profile_picture_url is None
