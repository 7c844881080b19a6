"""Tests for SLA predicates and the live metrics counts."""
from datetime import datetime, timedelta, timezone

from groomypaws.db.models import Conversation
from groomypaws.services import automation_service, sla_rules

from conftest import hours_ago, make_appointment

NOW = datetime(2030, 6, 1, 12, 0, tzinfo=timezone.utc)


def test_pending_over_24h_is_strict():
    assert sla_rules.is_pending_over_24h("pending", NOW - timedelta(hours=25), NOW)
    assert not sla_rules.is_pending_over_24h("pending", NOW - timedelta(hours=24), NOW)
    assert not sla_rules.is_pending_over_24h("confirmed", NOW - timedelta(hours=48), NOW)


def test_in_progress_overrun_uses_duration_plus_grace():
    start = NOW - timedelta(minutes=100)
    assert sla_rules.is_in_progress_overrun("in_progress", start, 60, NOW)
    assert not sla_rules.is_in_progress_overrun("in_progress", start, 90, NOW)
    # Missing duration counts as an hour
    assert sla_rules.is_in_progress_overrun("in_progress", start, None, NOW)
    assert not sla_rules.is_in_progress_overrun("completed", start, 10, NOW)


def test_chat_awaiting_reply():
    assert sla_rules.is_chat_awaiting_reply(NOW - timedelta(minutes=31), NOW)
    assert not sla_rules.is_chat_awaiting_reply(NOW - timedelta(minutes=10), NOW)
    assert not sla_rules.is_chat_awaiting_reply(None, NOW)


def test_metrics_count_each_bucket(db, customer_user, other_customer, pet):
    make_appointment(db, customer_user, pet, hours_ago(30))
    make_appointment(db, customer_user, pet, hours_ago(2))
    make_appointment(db, customer_user, pet, hours_ago(3), status="in_progress", duration_minutes=60)
    make_appointment(db, customer_user, pet, hours_ago(0.5), status="in_progress", duration_minutes=60)
    db.add_all([
        Conversation(customer_id=customer_user.id, last_message_at=hours_ago(1)),
        Conversation(customer_id=other_customer.id, last_message_at=hours_ago(0.1)),
    ])
    db.commit()

    assert automation_service.get_sla_metrics(db) == {
        "pending_over_24h": 1,
        "in_progress_overrun": 1,
        "chats_awaiting_reply": 1,
    }


def test_metrics_on_empty_database(db):
    assert automation_service.get_sla_metrics(db) == {
        "pending_over_24h": 0,
        "in_progress_overrun": 0,
        "chats_awaiting_reply": 0,
    }
