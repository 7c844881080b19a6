"""
Tests for appointment booking and staff updates.

Coverage:
- Booking validation and ownership
- Slot conflict detection
- Access control on read/update
- Automation triggers and SLA incident closing after status changes
"""
import pytest
from httpx import AsyncClient

from groomypaws.db.enums import WorkflowRunStatus
from groomypaws.db.models import Appointment, Pet, SlaIncident, SlaTarget, Workflow, WorkflowAction, WorkflowRun
from groomypaws.services import automation_service

from conftest import make_appointment, utc


SLOT = "2030-01-07T10:00:00Z"


def _booking(pet, service, scheduled_at=SLOT, **extra):
    body = {
        "pet_id": str(pet.id),
        "scheduled_at": scheduled_at,
        "services": [{"service_id": str(service.id), "price": 60}],
        "total_price": 60,
        "duration_minutes": 60,
    }
    body.update(extra)
    return body


# =============================================================================
# Booking
# =============================================================================

@pytest.mark.asyncio
async def test_create_then_fetch_appointment(customer_client: AsyncClient, pet, service):
    response = await customer_client.post("/api/appointments", json=_booking(pet, service))
    assert response.status_code == 201
    created = response.json()["appointment"]
    assert created["status"] == "pending"
    assert created["pet_name"] == "Biscuit"
    assert created["services"] == ["Full Groom"]
    assert created["service_items"][0]["price_at_booking"] == 60

    fetched = await customer_client.get(f"/api/appointments/{created['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["appointment"]["id"] == created["id"]


@pytest.mark.asyncio
async def test_create_requires_pet_time_and_services(customer_client: AsyncClient, pet):
    response = await customer_client.post("/api/appointments", json={"pet_id": str(pet.id)})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_cannot_book_someone_elses_pet(other_client: AsyncClient, pet, service):
    response = await other_client.post("/api/appointments", json=_booking(pet, service))
    assert response.status_code == 403
    assert response.json()["detail"] == "Pet does not belong to you"


@pytest.mark.asyncio
async def test_unknown_service_is_rejected_and_nothing_written(customer_client: AsyncClient, db, pet, service):
    body = _booking(pet, service)
    body["services"].append({"service_id": "00000000-0000-0000-0000-000000000001", "price": 10})
    response = await customer_client.post("/api/appointments", json=body)
    assert response.status_code == 400
    assert db.query(Appointment).count() == 0


@pytest.mark.asyncio
async def test_overlapping_booking_conflicts(customer_client: AsyncClient, db, customer_user, pet, service):
    make_appointment(db, customer_user, pet, utc(2030, 1, 7, 9, 30), duration_minutes=60)
    response = await customer_client.post("/api/appointments", json=_booking(pet, service))
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_cancelled_appointments_do_not_block(customer_client: AsyncClient, db, customer_user, pet, service):
    make_appointment(db, customer_user, pet, utc(2030, 1, 7, 10, 0), status="cancelled")
    response = await customer_client.post("/api/appointments", json=_booking(pet, service))
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_booking_enqueues_appointment_created_runs(customer_client: AsyncClient, db, pet, service):
    workflow = Workflow(name="Confirm booking", trigger_type="appointment_created", is_active=True)
    workflow.actions.append(WorkflowAction(action_type="send_notification", action_config={}, position=0))
    db.add(workflow)
    db.commit()

    response = await customer_client.post("/api/appointments", json=_booking(pet, service))
    assert response.status_code == 201

    runs = db.query(WorkflowRun).all()
    assert len(runs) == 1
    assert runs[0].status == WorkflowRunStatus.QUEUED.value
    assert runs[0].trigger_payload["triggerType"] == "appointment_created"
    assert runs[0].trigger_payload["appointment_id"] == response.json()["appointment"]["id"]


# =============================================================================
# Access Control
# =============================================================================

@pytest.mark.asyncio
async def test_customer_sees_only_own_appointments(
    other_client: AsyncClient, db, customer_user, other_customer, pet
):
    mine = make_appointment(db, customer_user, pet, utc(2030, 1, 8, 10))
    other_pet = Pet(owner_id=other_customer.id, name="Rex")
    db.add(other_pet)
    db.commit()
    theirs = make_appointment(db, other_customer, other_pet, utc(2030, 1, 9, 10))

    listed = await other_client.get("/api/appointments")
    assert [a["id"] for a in listed.json()["appointments"]] == [str(theirs.id)]

    response = await other_client.get(f"/api/appointments/{mine.id}")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_customer_cannot_update_appointment(customer_client: AsyncClient, db, customer_user, pet):
    appt = make_appointment(db, customer_user, pet, utc(2030, 1, 8, 10))
    response = await customer_client.put(f"/api/appointments/{appt.id}", json={"status": "confirmed"})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_staff_list_includes_customer_details(staff_client: AsyncClient, db, customer_user, pet):
    make_appointment(db, customer_user, pet, utc(2030, 1, 8, 10))
    response = await staff_client.get("/api/appointments")
    assert response.status_code == 200
    row = response.json()["appointments"][0]
    assert row["customer_name"] == "Casey Customer"
    assert row["customer_email"] == customer_user.email


# =============================================================================
# Staff Updates
# =============================================================================

@pytest.mark.asyncio
async def test_update_requires_a_field(staff_client: AsyncClient, db, customer_user, pet):
    appt = make_appointment(db, customer_user, pet, utc(2030, 1, 8, 10))
    response = await staff_client.put(f"/api/appointments/{appt.id}", json={})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_rejects_unknown_status(staff_client: AsyncClient, db, customer_user, pet):
    appt = make_appointment(db, customer_user, pet, utc(2030, 1, 8, 10))
    response = await staff_client.put(f"/api/appointments/{appt.id}", json={"status": "lost"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_update_missing_appointment(staff_client: AsyncClient):
    response = await staff_client.put(
        "/api/appointments/00000000-0000-0000-0000-000000000001", json={"status": "confirmed"}
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_leaving_pending_closes_incidents_once(
    staff_client: AsyncClient, db, customer_user, pet, monkeypatch
):
    appt = make_appointment(db, customer_user, pet, utc(2030, 1, 8, 10))
    calls = []
    monkeypatch.setattr(
        automation_service,
        "close_incidents_for_entity",
        lambda session, entity_type, entity_id: calls.append((entity_type, entity_id)) or 0,
    )

    response = await staff_client.put(f"/api/appointments/{appt.id}", json={"status": "confirmed"})
    assert response.status_code == 200
    assert response.json()["appointment"]["status"] == "confirmed"
    assert calls == [("appointment.pending", str(appt.id))]

    # confirmed -> completed is not a pending exit
    await staff_client.put(f"/api/appointments/{appt.id}", json={"status": "completed"})
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_confirming_resolves_open_pending_incident(staff_client: AsyncClient, db, customer_user, pet):
    appt = make_appointment(db, customer_user, pet, utc(2030, 1, 8, 10))
    target = SlaTarget(name="Pending", entity_type="appointment.pending", threshold_minutes=1440)
    db.add(target)
    db.flush()
    db.add(SlaIncident(target_id=target.id, entity_type="appointment.pending", entity_id=str(appt.id)))
    db.commit()

    response = await staff_client.put(f"/api/appointments/{appt.id}", json={"status": "confirmed"})
    assert response.status_code == 200

    db.expire_all()
    incident = db.query(SlaIncident).one()
    assert incident.status == "resolved"
    assert incident.resolved_at is not None


@pytest.mark.asyncio
async def test_notes_only_update_does_not_fire_status_trigger(
    staff_client: AsyncClient, db, customer_user, pet
):
    workflow = Workflow(name="Status", trigger_type="appointment_status_changed", is_active=True)
    db.add(workflow)
    db.commit()
    appt = make_appointment(db, customer_user, pet, utc(2030, 1, 8, 10))

    response = await staff_client.put(f"/api/appointments/{appt.id}", json={"internal_notes": "Nervous dog"})
    assert response.status_code == 200
    assert response.json()["appointment"]["internal_notes"] == "Nervous dog"
    assert db.query(WorkflowRun).count() == 0

    await staff_client.put(f"/api/appointments/{appt.id}", json={"status": "in_progress"})
    run = db.query(WorkflowRun).one()
    assert run.trigger_payload["previous_status"] == "pending"
    assert run.trigger_payload["status"] == "in_progress"
