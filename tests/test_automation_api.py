"""Tests for the automation admin API (workflows, runs, SLA, metrics)."""
import pytest
from httpx import AsyncClient

from groomypaws.db.models import SlaIncident, SlaTarget, WorkflowRun

from conftest import hours_ago, make_appointment


WORKFLOW = {
    "name": "Booking confirmation",
    "description": "Tell the customer we got it",
    "trigger": "appointment_created",
    "minutes_delay": 0,
    "conditions": ["status == pending", "  ", None],
    "actions": [
        {"action_type": "send_notification", "action_config": {"title": "Thanks!"}},
        {},
    ],
}


@pytest.mark.asyncio
async def test_customers_are_forbidden(customer_client: AsyncClient):
    response = await customer_client.get("/api/automation/workflows")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_create_and_list_workflow(staff_client: AsyncClient):
    response = await staff_client.post("/api/automation/workflows", json=WORKFLOW)
    assert response.status_code == 201
    workflow = response.json()["workflow"]
    assert workflow["trigger"] == "appointment_created"
    assert workflow["conditions"] == ["status == pending"]
    assert [a["action_type"] for a in workflow["actions"]] == ["send_notification", "send_notification"]
    assert workflow["actions"][1]["action_config"] == {}

    listed = await staff_client.get("/api/automation/workflows")
    assert [w["id"] for w in listed.json()["workflows"]] == [workflow["id"]]


@pytest.mark.asyncio
async def test_create_requires_name_and_trigger(staff_client: AsyncClient):
    response = await staff_client.post("/api/automation/workflows", json={"name": "No trigger"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_merges_and_keeps_steps(staff_client: AsyncClient):
    created = (await staff_client.post("/api/automation/workflows", json=WORKFLOW)).json()["workflow"]

    response = await staff_client.put(
        f"/api/automation/workflows/{created['id']}", json={"name": "Renamed"}
    )
    assert response.status_code == 200
    updated = response.json()["workflow"]
    assert updated["name"] == "Renamed"
    assert updated["trigger"] == "appointment_created"
    assert updated["conditions"] == ["status == pending"]
    assert len(updated["actions"]) == 2

    replaced = await staff_client.put(
        f"/api/automation/workflows/{created['id']}",
        json={"conditions": [], "actions": [{"action_type": "update_status"}]},
    )
    body = replaced.json()["workflow"]
    assert body["conditions"] == []
    assert [a["action_type"] for a in body["actions"]] == ["update_status"]


@pytest.mark.asyncio
async def test_toggle_and_delete_workflow(staff_client: AsyncClient):
    created = (await staff_client.post("/api/automation/workflows", json=WORKFLOW)).json()["workflow"]

    toggled = await staff_client.patch(
        f"/api/automation/workflows/{created['id']}/toggle", json={"is_active": False}
    )
    assert toggled.json()["workflow"]["is_active"] is False

    deleted = await staff_client.delete(f"/api/automation/workflows/{created['id']}")
    assert deleted.json() == {"success": True}

    missing = await staff_client.put(f"/api/automation/workflows/{created['id']}", json={"name": "x"})
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_manual_trigger_queues_runs(staff_client: AsyncClient, db):
    await staff_client.post("/api/automation/workflows", json={**WORKFLOW, "trigger": "chat_message"})

    response = await staff_client.post("/api/automation/triggers/chat_message", json={"conversation_id": "c1"})
    assert response.status_code == 202
    assert response.json() == {"queued": True, "runs": 1}

    runs = await staff_client.get("/api/automation/runs")
    row = runs.json()["runs"][0]
    assert row["status"] == "queued"
    assert row["workflow_name"] == "Booking confirmation"
    assert row["trigger_payload"]["conversation_id"] == "c1"
    assert db.query(WorkflowRun).count() == 1


@pytest.mark.asyncio
async def test_sla_target_update(staff_client: AsyncClient, db):
    target = SlaTarget(name="Chat", entity_type="chat.unanswered", threshold_minutes=30)
    db.add(target)
    db.commit()

    response = await staff_client.put(
        f"/api/automation/sla/targets/{target.id}", json={"threshold_minutes": 45, "severity": "high"}
    )
    assert response.status_code == 200
    assert response.json()["target"]["threshold_minutes"] == 45
    assert response.json()["target"]["severity"] == "high"

    bad = await staff_client.put(f"/api/automation/sla/targets/{target.id}", json={"severity": "apocalyptic"})
    assert bad.status_code == 422

    listed = await staff_client.get("/api/automation/sla/targets")
    assert len(listed.json()["targets"]) == 1


@pytest.mark.asyncio
async def test_sla_incidents_include_target_name(staff_client: AsyncClient, db):
    target = SlaTarget(name="Pending", entity_type="appointment.pending", threshold_minutes=1440)
    db.add(target)
    db.flush()
    db.add(SlaIncident(target_id=target.id, entity_type="appointment.pending", entity_id="abc"))
    db.commit()

    response = await staff_client.get("/api/automation/sla/incidents")
    incident = response.json()["incidents"][0]
    assert incident["target_name"] == "Pending"
    assert incident["status"] == "open"


@pytest.mark.asyncio
async def test_metrics_endpoint(staff_client: AsyncClient, db, customer_user, pet):
    make_appointment(db, customer_user, pet, hours_ago(48))
    response = await staff_client.get("/api/automation/metrics")
    assert response.status_code == 200
    data = response.json()
    assert data["metrics"]["pending_over_24h"] == 1
    assert data["recentRuns"] == []
