"""
Tests for the automation run queue and SLA evaluation.

Coverage:
- Trigger fan-out to active workflows only
- Delayed runs and batch execution
- Action results, skips and failures
- SLA incident open/resolve lifecycle
"""
from datetime import datetime, timedelta, timezone

import pytest

from groomypaws.db.enums import WorkflowRunStatus
from groomypaws.db.models import (
    Appointment,
    Conversation,
    Message,
    Notification,
    SlaIncident,
    SlaTarget,
    Workflow,
    WorkflowAction,
    WorkflowRun,
)
from groomypaws.services import automation_service

from conftest import hours_ago, make_appointment


def _workflow(db, trigger="appointment_created", actions=None, delay=None, active=True):
    workflow = Workflow(name="Test flow", trigger_type=trigger, minutes_delay=delay, is_active=active)
    for index, (action_type, config) in enumerate(actions or []):
        workflow.actions.append(
            WorkflowAction(action_type=action_type, action_config=config, position=index)
        )
    db.add(workflow)
    db.commit()
    return workflow


# =============================================================================
# Enqueue
# =============================================================================

def test_enqueue_only_matches_active_workflows(db):
    _workflow(db, trigger="appointment_created")
    _workflow(db, trigger="appointment_created", active=False)
    _workflow(db, trigger="chat_message")

    runs = automation_service.enqueue_trigger(db, "appointment_created", {"appointment_id": "a1"})
    assert len(runs) == 1
    assert runs[0].status == WorkflowRunStatus.QUEUED.value
    assert runs[0].trigger_payload == {"triggerType": "appointment_created", "appointment_id": "a1"}


def test_enqueue_without_matches_is_a_noop(db):
    assert automation_service.enqueue_trigger(db, "appointment_created", {}) == []
    assert db.query(WorkflowRun).count() == 0


# =============================================================================
# Execution
# =============================================================================

def test_send_notification_targets_customer_from_payload(db, customer_user):
    _workflow(db, actions=[("send_notification", {"title": "Booked", "body": "See you soon"})])
    automation_service.enqueue_trigger(db, "appointment_created", {"customer_id": customer_user.id})

    assert automation_service.process_pending_runs(db) == 1

    run = db.query(WorkflowRun).one()
    assert run.status == WorkflowRunStatus.COMPLETED.value
    assert run.result_payload == [{"action": "send_notification", "result": {"sent": True}}]
    assert run.started_at is not None and run.completed_at is not None

    notification = db.query(Notification).one()
    assert notification.user_id == customer_user.id
    assert notification.title == "Booked"
    assert notification.body == "See you soon"


def test_send_notification_without_target_is_skipped(db):
    _workflow(db, actions=[("send_notification", {})])
    automation_service.enqueue_trigger(db, "appointment_created", {})
    automation_service.process_pending_runs(db)

    run = db.query(WorkflowRun).one()
    assert run.status == WorkflowRunStatus.COMPLETED.value
    assert run.result_payload[0]["result"] == {"skipped": "Missing target user id"}


def test_update_status_action(db, customer_user, pet):
    appt = make_appointment(db, customer_user, pet, hours_ago(1))
    _workflow(db, actions=[("update_status", {"next_status": "confirmed"})])
    automation_service.enqueue_trigger(db, "appointment_created", {"appointment_id": appt.id})
    automation_service.process_pending_runs(db)

    db.refresh(appt)
    assert appt.status == "confirmed"
    assert db.query(WorkflowRun).one().result_payload[0]["result"] == {"updated": True}


def test_invalid_status_fails_the_run(db, customer_user, pet):
    appt = make_appointment(db, customer_user, pet, hours_ago(1))
    _workflow(db, actions=[("update_status", {"next_status": "teleported"})])
    automation_service.enqueue_trigger(db, "appointment_created", {"appointment_id": appt.id})
    automation_service.process_pending_runs(db)

    run = db.query(WorkflowRun).one()
    assert run.status == WorkflowRunStatus.FAILED.value
    assert "teleported" in run.error_message
    db.refresh(appt)
    assert appt.status == "pending"


def test_unimplemented_actions_are_skipped(db):
    _workflow(db, actions=[("create_task", {}), ("assign_owner", {})])
    automation_service.enqueue_trigger(db, "appointment_created", {})
    automation_service.process_pending_runs(db)

    run = db.query(WorkflowRun).one()
    assert run.status == WorkflowRunStatus.COMPLETED.value
    assert [r["result"] for r in run.result_payload] == [
        {"skipped": "Action create_task not implemented"},
        {"skipped": "Action assign_owner not implemented"},
    ]


def test_delayed_runs_wait_for_their_delay(db):
    _workflow(db, delay=30)
    automation_service.enqueue_trigger(db, "appointment_created", {})

    assert automation_service.process_pending_runs(db) == 0
    later = datetime.now(timezone.utc) + timedelta(minutes=31)
    assert automation_service.process_pending_runs(db, now=later) == 1


def test_batch_size_limits_work_per_tick(db):
    _workflow(db)
    for _ in range(3):
        automation_service.enqueue_trigger(db, "appointment_created", {})
    assert automation_service.process_pending_runs(db, limit=2) == 2
    assert automation_service.process_pending_runs(db, limit=2) == 1
    assert automation_service.process_pending_runs(db, limit=2) == 0


def test_already_claimed_run_is_not_executed_twice(db):
    _workflow(db)
    run = automation_service.enqueue_trigger(db, "appointment_created", {})[0]
    automation_service.execute_run(db, run)
    completed_at = run.completed_at

    automation_service.execute_run(db, run)
    db.refresh(run)
    assert run.completed_at == completed_at


# =============================================================================
# SLA
# =============================================================================

@pytest.fixture
def pending_target(db):
    target = SlaTarget(name="Pending", entity_type="appointment.pending", threshold_minutes=1440)
    db.add(target)
    db.commit()
    return target


def test_seed_default_targets_is_idempotent(db):
    assert automation_service.seed_default_sla_targets(db) == 2
    assert automation_service.seed_default_sla_targets(db) == 0
    types = {t.entity_type for t in db.query(SlaTarget).all()}
    assert types == {"appointment.pending", "chat.unanswered"}


def test_pending_breach_opens_one_incident(db, customer_user, pet, pending_target):
    stale = make_appointment(db, customer_user, pet, hours_ago(30))
    make_appointment(db, customer_user, pet, hours_ago(2))

    automation_service.evaluate_sla_targets(db)
    automation_service.evaluate_sla_targets(db)

    incidents = db.query(SlaIncident).all()
    assert len(incidents) == 1
    assert incidents[0].entity_id == str(stale.id)
    assert incidents[0].status == "open"
    assert incidents[0].breach_reason == "Breach detected for appointment.pending"


def test_incident_resolves_when_breach_clears(db, customer_user, pet, pending_target):
    stale = make_appointment(db, customer_user, pet, hours_ago(30))
    automation_service.evaluate_sla_targets(db)

    stale.status = "confirmed"
    db.commit()
    automation_service.evaluate_sla_targets(db)

    incident = db.query(SlaIncident).one()
    assert incident.status == "resolved"
    assert incident.resolved_at is not None


def test_inactive_targets_are_not_evaluated(db, customer_user, pet, pending_target):
    pending_target.is_active = False
    db.commit()
    make_appointment(db, customer_user, pet, hours_ago(30))
    automation_service.evaluate_sla_targets(db)
    assert db.query(SlaIncident).count() == 0


def test_chat_breach_only_when_customer_spoke_last(db, customer_user, staff_user):
    target = SlaTarget(name="Chat", entity_type="chat.unanswered", threshold_minutes=30)
    waiting = Conversation(customer_id=customer_user.id, last_message_at=hours_ago(2))
    db.add_all([target, waiting])
    db.flush()
    db.add(Message(conversation_id=waiting.id, sender_id=customer_user.id, body="Hello?", created_at=hours_ago(2)))
    db.commit()

    automation_service.evaluate_sla_targets(db)
    assert [i.entity_id for i in db.query(SlaIncident).all()] == [str(waiting.id)]

    db.add(Message(conversation_id=waiting.id, sender_id=staff_user.id, body="Hi!", created_at=hours_ago(1)))
    db.commit()
    automation_service.evaluate_sla_targets(db)
    assert db.query(SlaIncident).one().status == "resolved"


def test_close_incidents_for_entity(db, pending_target):
    db.add_all([
        SlaIncident(target_id=pending_target.id, entity_type="appointment.pending", entity_id="abc"),
        SlaIncident(
            target_id=pending_target.id, entity_type="appointment.pending", entity_id="abc",
            status="acknowledged",
        ),
        SlaIncident(target_id=pending_target.id, entity_type="appointment.pending", entity_id="other"),
    ])
    db.commit()

    assert automation_service.close_incidents_for_entity(db, "appointment.pending", "abc") == 2
    assert automation_service.close_incidents_for_entity(db, "appointment.pending", "abc") == 0
    statuses = sorted(i.status for i in db.query(SlaIncident).all())
    assert statuses == ["open", "resolved", "resolved"]
