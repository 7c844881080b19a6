"""Tests for customer/staff chat."""
import uuid

import pytest
from httpx import AsyncClient

from groomypaws.db.models import Conversation, SlaIncident, SlaTarget, Workflow, WorkflowRun


async def _open(client: AsyncClient, **body) -> dict:
    response = await client.post("/api/messages/conversations", json=body or None)
    return response


@pytest.mark.asyncio
async def test_open_conversation_is_idempotent(customer_client: AsyncClient, customer_user):
    first = await _open(customer_client)
    assert first.status_code == 201
    assert first.json()["conversation"]["customer_id"] == str(customer_user.id)

    second = await _open(customer_client)
    assert second.status_code == 200
    assert second.json()["conversation"]["id"] == first.json()["conversation"]["id"]


@pytest.mark.asyncio
async def test_staff_can_open_for_customer(staff_client: AsyncClient, customer_user):
    response = await _open(staff_client, customer_id=str(customer_user.id))
    assert response.status_code == 201
    assert response.json()["conversation"]["customer_id"] == str(customer_user.id)


@pytest.mark.asyncio
async def test_staff_cannot_open_for_unknown_customer(staff_client: AsyncClient, db):
    response = await _open(staff_client, customer_id=str(uuid.uuid4()))
    assert response.status_code == 404
    assert db.query(Conversation).count() == 0


@pytest.mark.asyncio
async def test_conversation_without_customer_is_left_out(
    staff_client: AsyncClient, db, customer_user
):
    db.add(Conversation(customer_id=uuid.uuid4()))
    db.commit()
    await _open(staff_client, customer_id=str(customer_user.id))

    response = await staff_client.get("/api/messages/conversations")
    assert response.status_code == 200
    conversations = response.json()["conversations"]
    assert [c["customer_id"] for c in conversations] == [str(customer_user.id)]


@pytest.mark.asyncio
async def test_send_and_read_messages_in_order(customer_client: AsyncClient, staff_client: AsyncClient):
    conversation_id = (await _open(customer_client)).json()["conversation"]["id"]
    url = f"/api/messages/conversations/{conversation_id}/messages"

    first = await customer_client.post(url, json={"body": "  Is 10am free?  "})
    assert first.status_code == 201
    assert first.json()["message"]["body"] == "Is 10am free?"
    await staff_client.post(url, json={"body": "Yes it is"})

    messages = (await customer_client.get(url)).json()["messages"]
    assert [m["body"] for m in messages] == ["Is 10am free?", "Yes it is"]
    assert messages[1]["sender_role"] == "staff"

    latest = (await customer_client.get(url, params={"limit": 1})).json()["messages"]
    assert [m["body"] for m in latest] == ["Yes it is"]


@pytest.mark.asyncio
async def test_blank_message_rejected(customer_client: AsyncClient):
    conversation_id = (await _open(customer_client)).json()["conversation"]["id"]
    response = await customer_client.post(
        f"/api/messages/conversations/{conversation_id}/messages", json={"body": "   "}
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_other_customer_cannot_read(customer_client: AsyncClient, other_client: AsyncClient):
    conversation_id = (await _open(customer_client)).json()["conversation"]["id"]
    response = await other_client.get(f"/api/messages/conversations/{conversation_id}/messages")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_conversation_lists_per_role(
    customer_client: AsyncClient, staff_client: AsyncClient, customer_user
):
    conversation_id = (await _open(customer_client)).json()["conversation"]["id"]
    await customer_client.post(
        f"/api/messages/conversations/{conversation_id}/messages", json={"body": "Hello"}
    )

    mine = (await customer_client.get("/api/messages/conversations")).json()["conversations"]
    assert mine[0]["staff_name"] == "Groomy Paws Staff"
    assert mine[0]["last_message"] == "Hello"

    everyone = (await staff_client.get("/api/messages/conversations")).json()["conversations"]
    assert everyone[0]["customer_name"] == "Casey Customer"
    assert everyone[0]["customer_email"] == customer_user.email


@pytest.mark.asyncio
async def test_unread_counts(customer_client: AsyncClient, staff_client: AsyncClient):
    conversation_id = (await _open(customer_client)).json()["conversation"]["id"]
    url = f"/api/messages/conversations/{conversation_id}/messages"
    await customer_client.post(url, json={"body": "One"})
    await customer_client.post(url, json={"body": "Two"})
    await staff_client.post(url, json={"body": "Reply"})

    assert (await staff_client.get("/api/messages/unread-count")).json() == {"unread_count": 2}
    assert (await customer_client.get("/api/messages/unread-count")).json() == {"unread_count": 1}

    read = await customer_client.put(f"/api/messages/conversations/{conversation_id}/read")
    assert read.json() == {"success": True}


@pytest.mark.asyncio
async def test_staff_reply_resolves_chat_incident(
    customer_client: AsyncClient, staff_client: AsyncClient, db
):
    conversation_id = (await _open(customer_client)).json()["conversation"]["id"]
    target = SlaTarget(name="Chat", entity_type="chat.unanswered", threshold_minutes=30)
    db.add(target)
    db.flush()
    db.add(SlaIncident(target_id=target.id, entity_type="chat.unanswered", entity_id=conversation_id))
    db.commit()

    url = f"/api/messages/conversations/{conversation_id}/messages"
    await customer_client.post(url, json={"body": "Anyone there?"})
    db.expire_all()
    assert db.query(SlaIncident).one().status == "open"

    await staff_client.post(url, json={"body": "Here!"})
    db.expire_all()
    assert db.query(SlaIncident).one().status == "resolved"


@pytest.mark.asyncio
async def test_messages_fire_chat_trigger(customer_client: AsyncClient, db):
    db.add(Workflow(name="Auto reply", trigger_type="chat_message", is_active=True))
    db.commit()
    conversation_id = (await _open(customer_client)).json()["conversation"]["id"]
    await customer_client.post(
        f"/api/messages/conversations/{conversation_id}/messages", json={"body": "Hi"}
    )
    run = db.query(WorkflowRun).one()
    assert run.trigger_payload["conversation_id"] == conversation_id
    assert run.trigger_payload["sender_role"] == "customer"
    assert db.query(Conversation).one().last_message_at is not None
