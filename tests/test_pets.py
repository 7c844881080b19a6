"""Tests for pet profiles."""
import pytest
from httpx import AsyncClient

from groomypaws.db.models import Pet


@pytest.mark.asyncio
async def test_create_pet(customer_client: AsyncClient, customer_user):
    response = await customer_client.post("/api/pets", json={
        "name": " Mochi ", "breed": "Shih Tzu", "size_category": "small", "age": 3, "weight": 6.5,
    })
    assert response.status_code == 201
    pet = response.json()["pet"]
    assert pet["name"] == "Mochi"
    assert pet["owner_id"] == str(customer_user.id)
    assert pet["weight"] == 6.5


@pytest.mark.asyncio
async def test_unknown_size_is_stored_as_null(customer_client: AsyncClient):
    response = await customer_client.post("/api/pets", json={"name": "Tank", "size_category": "huge"})
    assert response.json()["pet"]["size_category"] is None


@pytest.mark.asyncio
async def test_name_is_required(customer_client: AsyncClient, pet):
    assert (await customer_client.post("/api/pets", json={"breed": "Lab"})).status_code == 400
    blanked = await customer_client.put(f"/api/pets/{pet.id}", json={"name": "  "})
    assert blanked.status_code == 400


@pytest.mark.asyncio
async def test_owner_scoping(other_client: AsyncClient, staff_client: AsyncClient, pet):
    assert (await other_client.get("/api/pets")).json()["pets"] == []
    assert (await other_client.get(f"/api/pets/{pet.id}")).status_code == 403
    assert (await other_client.delete(f"/api/pets/{pet.id}")).status_code == 403

    staff_view = await staff_client.get(f"/api/pets/{pet.id}")
    assert staff_view.status_code == 200
    assert len((await staff_client.get("/api/pets")).json()["pets"]) == 1


@pytest.mark.asyncio
async def test_update_and_delete(customer_client: AsyncClient, db, pet):
    updated = await customer_client.put(f"/api/pets/{pet.id}", json={"grooming_notes": "Short cut"})
    assert updated.json()["pet"]["grooming_notes"] == "Short cut"
    assert updated.json()["pet"]["name"] == "Biscuit"

    deleted = await customer_client.delete(f"/api/pets/{pet.id}")
    assert deleted.status_code == 200
    assert db.query(Pet).count() == 0
    assert (await customer_client.get(f"/api/pets/{pet.id}")).status_code == 404
