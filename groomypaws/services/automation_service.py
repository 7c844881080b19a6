"""
Automation service - workflow run queue, action execution, SLA tracking.

Flow:
    trigger -> enqueue_trigger() inserts one queued run per matching workflow
    worker  -> process_pending_runs() executes runs whose delay has elapsed
    worker  -> evaluate_sla_targets() opens/resolves SLA incidents
"""

import logging
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session, joinedload

from groomypaws.db.enums import (
    SLA_INCIDENT_ACTIVE,
    AppointmentStatus,
    SlaEntityType,
    SlaIncidentStatus,
    SlaSeverity,
    WorkflowActionType,
    WorkflowRunStatus,
)
from groomypaws.db.models import (
    Appointment,
    Conversation,
    Message,
    SlaIncident,
    SlaTarget,
    Workflow,
    WorkflowRun,
)
from groomypaws.db.types import utcnow
from groomypaws.services import notification_service, sla_rules

logger = logging.getLogger(__name__)


DEFAULT_BATCH_SIZE = 10
RECENT_RUNS_LIMIT = 50
RECENT_INCIDENTS_LIMIT = 100
DEFAULT_NOTIFICATION_TITLE = "Automation"
DEFAULT_NOTIFICATION_BODY = "An automation workflow sent this notification."


# =============================================================================
# Run Queue
# =============================================================================

def enqueue_trigger(
    db: Session,
    trigger_type: str,
    payload: dict[str, Any] | None = None,
) -> list[WorkflowRun]:
    """Queue a run for every active workflow listening on trigger_type."""
    if not trigger_type:
        return []

    workflows = db.query(Workflow).filter(
        Workflow.trigger_type == trigger_type,
        Workflow.is_active.is_(True),
    ).all()
    if not workflows:
        return []

    trigger_payload = {"triggerType": trigger_type, **_json_safe(payload or {})}
    runs = []
    for workflow in workflows:
        run = WorkflowRun(
            workflow_id=workflow.id,
            trigger_payload=trigger_payload,
            status=WorkflowRunStatus.QUEUED.value,
            queued_at=utcnow(),
        )
        db.add(run)
        runs.append(run)
    db.commit()
    logger.info("Queued %d workflow run(s) for trigger %s", len(runs), trigger_type)
    return runs


def _json_safe(payload: dict[str, Any]) -> dict[str, Any]:
    """Stringify ids and datetimes so the payload fits a JSON column."""
    safe = {}
    for key, value in payload.items():
        if isinstance(value, UUID):
            value = str(value)
        elif isinstance(value, datetime):
            value = value.isoformat()
        safe[key] = value
    return safe


def due_runs(
    db: Session,
    now: datetime | None = None,
    limit: int = DEFAULT_BATCH_SIZE,
) -> list[WorkflowRun]:
    """Queued runs whose workflow delay has elapsed, oldest first."""
    now = now or utcnow()
    candidates = (
        db.query(WorkflowRun)
        .options(joinedload(WorkflowRun.workflow))
        .filter(WorkflowRun.status == WorkflowRunStatus.QUEUED.value)
        .order_by(WorkflowRun.queued_at)
        .all()
    )
    due = []
    for run in candidates:
        delay = run.workflow.minutes_delay if run.workflow else None
        if not delay or run.queued_at + timedelta(minutes=delay) <= now:
            due.append(run)
        if len(due) >= limit:
            break
    return due


def process_pending_runs(
    db: Session,
    limit: int = DEFAULT_BATCH_SIZE,
    now: datetime | None = None,
) -> int:
    """Execute due runs. Returns how many were picked up."""
    runs = due_runs(db, now=now, limit=limit)
    for run in runs:
        execute_run(db, run)
    return len(runs)


def _claim_run(db: Session, run: WorkflowRun) -> bool:
    """Move queued -> running; False if another worker got there first."""
    claimed = (
        db.query(WorkflowRun)
        .filter(WorkflowRun.id == run.id, WorkflowRun.status == WorkflowRunStatus.QUEUED.value)
        .update(
            {WorkflowRun.status: WorkflowRunStatus.RUNNING.value, WorkflowRun.started_at: utcnow()},
            synchronize_session=False,
        )
    )
    db.commit()
    return claimed == 1


def execute_run(db: Session, run: WorkflowRun) -> WorkflowRun:
    """
    Run a workflow's actions in position order.

    Any exception marks the run failed with the error message.
    """
    if not _claim_run(db, run):
        db.refresh(run)
        return run
    db.refresh(run)

    payload = run.trigger_payload or {}
    try:
        workflow = db.query(Workflow).filter(Workflow.id == run.workflow_id).first()
        actions = workflow.actions if workflow else []
        results = []
        for action in actions:
            config = dict(action.action_config or {})
            if workflow is not None:
                config.setdefault("workflowName", workflow.name)
            result = execute_action(db, action.action_type, config, payload)
            results.append({"action": action.action_type, "result": result})

        run.status = WorkflowRunStatus.COMPLETED.value
        run.result_payload = results
        run.completed_at = utcnow()
        db.commit()
    except Exception as exc:
        db.rollback()
        run = db.query(WorkflowRun).filter(WorkflowRun.id == run.id).first()
        run.status = WorkflowRunStatus.FAILED.value
        run.error_message = str(exc) or exc.__class__.__name__
        run.completed_at = utcnow()
        db.commit()
        logger.exception("Workflow run %s failed", run.id)

    db.refresh(run)
    return run


def execute_action(
    db: Session,
    action_type: str,
    config: dict[str, Any],
    payload: dict[str, Any],
) -> dict[str, Any]:
    """Execute one action. Unknown types are skipped, not failed."""
    if action_type == WorkflowActionType.SEND_NOTIFICATION.value:
        target = config.get("user_id") or payload.get("customer_id") or payload.get("user_id")
        if not target:
            return {"skipped": "Missing target user id"}
        notification_service.send_notification(
            db,
            user_id=UUID(str(target)),
            title=config.get("title") or payload.get("title") or DEFAULT_NOTIFICATION_TITLE,
            body=config.get("body") or payload.get("message") or DEFAULT_NOTIFICATION_BODY,
            category=config.get("category") or "system",
            metadata={"workflow": config.get("workflowName"), "payload": payload},
        )
        return {"sent": True}

    if action_type == WorkflowActionType.UPDATE_STATUS.value:
        appointment_id = payload.get("appointment_id")
        next_status = config.get("next_status")
        if not appointment_id or not next_status:
            return {"skipped": "Missing appointment or status"}
        if not AppointmentStatus.has_value(next_status):
            raise ValueError(f"Invalid appointment status: {next_status}")
        appointment = db.query(Appointment).filter(
            Appointment.id == UUID(str(appointment_id))
        ).first()
        if not appointment:
            return {"skipped": "Appointment not found"}
        appointment.status = next_status
        db.commit()
        return {"updated": True}

    return {"skipped": f"Action {action_type} not implemented"}


def list_recent_runs(db: Session, limit: int = RECENT_RUNS_LIMIT) -> list[WorkflowRun]:
    return (
        db.query(WorkflowRun)
        .options(joinedload(WorkflowRun.workflow))
        .order_by(WorkflowRun.queued_at.desc())
        .limit(limit)
        .all()
    )


# =============================================================================
# SLA Targets & Incidents
# =============================================================================

def list_sla_targets(db: Session) -> list[SlaTarget]:
    return db.query(SlaTarget).order_by(SlaTarget.name).all()


def get_sla_target(db: Session, target_id: UUID) -> SlaTarget | None:
    return db.query(SlaTarget).filter(SlaTarget.id == target_id).first()


def update_sla_target(db: Session, target: SlaTarget, fields: dict) -> SlaTarget:
    for key in ("threshold_minutes", "warning_minutes", "severity", "is_active"):
        if key in fields and fields[key] is not None:
            value = fields[key]
            setattr(target, key, value.value if hasattr(value, "value") else value)
    db.commit()
    db.refresh(target)
    return target


def list_recent_incidents(db: Session, limit: int = RECENT_INCIDENTS_LIMIT) -> list[SlaIncident]:
    return (
        db.query(SlaIncident)
        .options(joinedload(SlaIncident.target))
        .order_by(SlaIncident.opened_at.desc())
        .limit(limit)
        .all()
    )


DEFAULT_SLA_TARGETS = [
    {
        "name": "Pending appointment confirmation",
        "entity_type": SlaEntityType.APPOINTMENT_PENDING.value,
        "threshold_minutes": 1440,
        "warning_minutes": 720,
        "severity": SlaSeverity.HIGH.value,
    },
    {
        "name": "Unanswered customer chat",
        "entity_type": SlaEntityType.CHAT_UNANSWERED.value,
        "threshold_minutes": 30,
        "warning_minutes": 15,
        "severity": SlaSeverity.MEDIUM.value,
    },
]


def seed_default_sla_targets(db: Session) -> int:
    """Insert the default targets that are missing. Returns how many were added."""
    existing = {row.entity_type for row in db.query(SlaTarget.entity_type).all()}
    added = 0
    for defaults in DEFAULT_SLA_TARGETS:
        if defaults["entity_type"] in existing:
            continue
        db.add(SlaTarget(is_active=True, **defaults))
        added += 1
    db.commit()
    return added


def evaluate_sla_targets(db: Session, now: datetime | None = None) -> None:
    """Evaluate every active target and sync its incidents."""
    now = now or utcnow()
    targets = db.query(SlaTarget).filter(SlaTarget.is_active.is_(True)).all()
    for target in targets:
        breach_ids = evaluate_target(db, target, now=now)
        sync_incidents(db, target, breach_ids)


def evaluate_target(db: Session, target: SlaTarget, now: datetime | None = None) -> list[str]:
    """Entity ids currently breaching the target. Unknown entity types never breach."""
    now = now or utcnow()
    threshold = target.threshold_minutes

    if target.entity_type == SlaEntityType.APPOINTMENT_PENDING.value:
        cutoff = now - timedelta(minutes=threshold)
        rows = db.query(Appointment).filter(
            Appointment.status == AppointmentStatus.PENDING.value,
            Appointment.scheduled_at < cutoff,
        ).all()
        return [
            str(appt.id) for appt in rows
            if sla_rules.pending_longer_than(appt.status, appt.scheduled_at, threshold, now)
        ]

    if target.entity_type == SlaEntityType.CHAT_UNANSWERED.value:
        cutoff = now - timedelta(minutes=threshold)
        conversations = db.query(Conversation).filter(
            Conversation.last_message_at.is_not(None),
            Conversation.last_message_at < cutoff,
        ).all()
        breaches = []
        for conversation in conversations:
            if not sla_rules.message_older_than(conversation.last_message_at, threshold, now):
                continue
            last = (
                db.query(Message)
                .filter(Message.conversation_id == conversation.id)
                .order_by(Message.created_at.desc())
                .first()
            )
            # Only unanswered when the customer spoke last
            if last is not None and last.sender_id == conversation.customer_id:
                breaches.append(str(conversation.id))
        return breaches

    return []


def sync_incidents(db: Session, target: SlaTarget, breach_ids: list[str]) -> None:
    """Open incidents for new breaches; resolve active ones that cleared."""
    active = db.query(SlaIncident).filter(
        SlaIncident.target_id == target.id,
        SlaIncident.status.in_(SLA_INCIDENT_ACTIVE),
    ).all()
    breaching = set(breach_ids)
    already_open = {incident.entity_id for incident in active}
    now = utcnow()

    for entity_id in breach_ids:
        if entity_id not in already_open:
            db.add(SlaIncident(
                target_id=target.id,
                entity_type=target.entity_type,
                entity_id=entity_id,
                status=SlaIncidentStatus.OPEN.value,
                breach_reason=f"Breach detected for {target.entity_type}",
                opened_at=now,
            ))
            already_open.add(entity_id)

    for incident in active:
        if incident.entity_id not in breaching:
            incident.status = SlaIncidentStatus.RESOLVED.value
            incident.resolved_at = now

    db.commit()


def close_incidents_for_entity(db: Session, entity_type: str, entity_id: Any) -> int:
    """Resolve all open/acknowledged incidents for one entity. Returns count."""
    closed = (
        db.query(SlaIncident)
        .filter(
            SlaIncident.entity_type == entity_type,
            SlaIncident.entity_id == str(entity_id),
            SlaIncident.status.in_(SLA_INCIDENT_ACTIVE),
        )
        .update(
            {SlaIncident.status: SlaIncidentStatus.RESOLVED.value, SlaIncident.resolved_at: utcnow()},
            synchronize_session=False,
        )
    )
    db.commit()
    if closed:
        logger.info("Resolved %d %s incident(s)", closed, entity_type)
    return closed


# =============================================================================
# Metrics
# =============================================================================

def get_sla_metrics(db: Session, now: datetime | None = None) -> dict[str, int]:
    """Point-in-time counts, recomputed on every call."""
    now = now or utcnow()

    pending = db.query(Appointment).filter(
        Appointment.status == AppointmentStatus.PENDING.value,
        Appointment.scheduled_at < now - timedelta(minutes=sla_rules.PENDING_MAX_AGE_MINUTES),
    ).all()
    in_progress = db.query(Appointment).filter(
        Appointment.status == AppointmentStatus.IN_PROGRESS.value,
        Appointment.scheduled_at < now - timedelta(minutes=sla_rules.IN_PROGRESS_GRACE_MINUTES),
    ).all()
    chats = db.query(Conversation).filter(
        Conversation.last_message_at < now - timedelta(minutes=sla_rules.CHAT_REPLY_WINDOW_MINUTES),
    ).all()

    return {
        "pending_over_24h": sum(
            1 for a in pending if sla_rules.is_pending_over_24h(a.status, a.scheduled_at, now)
        ),
        "in_progress_overrun": sum(
            1 for a in in_progress
            if sla_rules.is_in_progress_overrun(a.status, a.scheduled_at, a.duration_minutes, now)
        ),
        "chats_awaiting_reply": sum(
            1 for c in chats if sla_rules.is_chat_awaiting_reply(c.last_message_at, now)
        ),
    }
