"""Tests for profile and presence endpoints."""
import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_presence_heartbeat(customer_client: AsyncClient, db, customer_user):
    response = await customer_client.post("/api/users/online", json={"is_online": True})
    assert response.status_code == 200
    assert response.json()["user"]["is_online"] is True
    assert response.json()["user"]["last_seen_at"] is not None

    offline = await customer_client.post("/api/users/online", json={"is_online": False})
    assert offline.json()["user"]["is_online"] is False
    db.refresh(customer_user)
    assert customer_user.is_online is False


@pytest.mark.asyncio
async def test_profile_read_and_update(customer_client: AsyncClient, customer_user):
    profile = await customer_client.get("/api/users/profile")
    assert profile.json()["user"]["email"] == customer_user.email

    updated = await customer_client.put(
        "/api/users/profile", json={"name": "Casey C.", "address": "1 Bark Lane"}
    )
    assert updated.status_code == 200
    user = updated.json()["user"]
    assert user["name"] == "Casey C."
    assert user["address"] == "1 Bark Lane"
    assert user["phone"] == "555-0100"


@pytest.mark.asyncio
async def test_profile_requires_auth(client: AsyncClient):
    assert (await client.get("/api/users/profile")).status_code == 401


@pytest.mark.asyncio
async def test_user_list_is_staff_only(customer_client: AsyncClient, staff_client: AsyncClient):
    assert (await customer_client.get("/api/users")).status_code == 403
    users = (await staff_client.get("/api/users")).json()["users"]
    assert len(users) == 2
