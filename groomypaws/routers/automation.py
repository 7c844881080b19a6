"""Automation router - workflows, runs, SLA targets/incidents, metrics.

Staff/admin only.
"""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.orm import Session

from groomypaws.core.deps import get_db, require_roles
from groomypaws.db.enums import Role
from groomypaws.schemas.automation import (
    MetricsResponse,
    SlaIncidentListResponse,
    SlaIncidentRead,
    SlaMetrics,
    SlaTargetListResponse,
    SlaTargetRead,
    SlaTargetResponse,
    SlaTargetUpdate,
    TriggerQueuedResponse,
    WorkflowActionRead,
    WorkflowCreate,
    WorkflowListResponse,
    WorkflowRead,
    WorkflowResponse,
    WorkflowRunListResponse,
    WorkflowRunRead,
    WorkflowToggle,
    WorkflowUpdate,
)
from groomypaws.services import automation_service, workflow_service

router = APIRouter(dependencies=[Depends(require_roles([Role.STAFF, Role.ADMIN]))])

RECENT_RUNS_ON_DASHBOARD = 10


# =============================================================================
# Helper Functions
# =============================================================================

def _workflow_to_read(workflow) -> WorkflowRead:
    return WorkflowRead(
        id=workflow.id,
        name=workflow.name,
        description=workflow.description,
        trigger=workflow.trigger_type,
        minutes_delay=workflow.minutes_delay,
        is_active=workflow.is_active,
        created_at=workflow.created_at,
        updated_at=workflow.updated_at,
        conditions=[c.condition_text for c in workflow.conditions],
        actions=[
            WorkflowActionRead(
                id=a.id,
                action_type=a.action_type,
                action_config=a.action_config or {},
            )
            for a in workflow.actions
        ],
    )


def _run_to_read(run) -> WorkflowRunRead:
    return WorkflowRunRead(
        id=run.id,
        workflow_id=run.workflow_id,
        workflow_name=run.workflow.name if run.workflow else None,
        status=run.status,
        trigger_payload=run.trigger_payload or {},
        result_payload=run.result_payload,
        error_message=run.error_message,
        queued_at=run.queued_at,
        started_at=run.started_at,
        completed_at=run.completed_at,
    )


def _incident_to_read(incident) -> SlaIncidentRead:
    return SlaIncidentRead(
        id=incident.id,
        target_id=incident.target_id,
        target_name=incident.target.name if incident.target else None,
        entity_type=incident.entity_type,
        entity_id=incident.entity_id,
        status=incident.status,
        breach_reason=incident.breach_reason,
        opened_at=incident.opened_at,
        resolved_at=incident.resolved_at,
    )


def _workflow_fields(data) -> dict:
    fields = data.model_dump(exclude_unset=True)
    if "trigger" in fields:
        fields["trigger_type"] = fields.pop("trigger")
    if fields.get("actions") is not None:
        fields["actions"] = [a or {} for a in fields["actions"]]
    return fields


def _get_workflow_or_404(db: Session, workflow_id: UUID):
    workflow = workflow_service.get_workflow(db, workflow_id)
    if not workflow:
        raise HTTPException(status_code=404, detail="Workflow not found")
    return workflow


# =============================================================================
# Workflows
# =============================================================================

@router.get("/workflows", response_model=WorkflowListResponse)
def list_workflows(db: Session = Depends(get_db)):
    workflows = workflow_service.list_workflows(db)
    return WorkflowListResponse(workflows=[_workflow_to_read(w) for w in workflows])


@router.post("/workflows", response_model=WorkflowResponse, status_code=201)
def create_workflow(data: WorkflowCreate, db: Session = Depends(get_db)):
    try:
        workflow = workflow_service.create_workflow(db, _workflow_fields(data))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return WorkflowResponse(workflow=_workflow_to_read(workflow))


@router.put("/workflows/{workflow_id}", response_model=WorkflowResponse)
def update_workflow(workflow_id: UUID, data: WorkflowUpdate, db: Session = Depends(get_db)):
    workflow = _get_workflow_or_404(db, workflow_id)
    try:
        workflow = workflow_service.update_workflow(db, workflow, _workflow_fields(data))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return WorkflowResponse(workflow=_workflow_to_read(workflow))


@router.patch("/workflows/{workflow_id}/toggle", response_model=WorkflowResponse)
def toggle_workflow(workflow_id: UUID, data: WorkflowToggle, db: Session = Depends(get_db)):
    workflow = _get_workflow_or_404(db, workflow_id)
    workflow = workflow_service.toggle_workflow(db, workflow, data.is_active)
    return WorkflowResponse(workflow=_workflow_to_read(workflow))


@router.delete("/workflows/{workflow_id}")
def delete_workflow(workflow_id: UUID, db: Session = Depends(get_db)):
    workflow = _get_workflow_or_404(db, workflow_id)
    workflow_service.delete_workflow(db, workflow)
    return {"success": True}


# =============================================================================
# Runs & Manual Triggers
# =============================================================================

@router.get("/runs", response_model=WorkflowRunListResponse)
def list_runs(db: Session = Depends(get_db)):
    runs = automation_service.list_recent_runs(db)
    return WorkflowRunListResponse(runs=[_run_to_read(r) for r in runs])


@router.post("/triggers/{trigger_type}", response_model=TriggerQueuedResponse, status_code=202)
def fire_trigger(
    trigger_type: str,
    payload: dict[str, Any] | None = Body(None),
    db: Session = Depends(get_db),
):
    """Manually enqueue runs for a trigger; the worker executes them."""
    runs = automation_service.enqueue_trigger(db, trigger_type, payload or {})
    return TriggerQueuedResponse(queued=True, runs=len(runs))


# =============================================================================
# SLA
# =============================================================================

@router.get("/sla/targets", response_model=SlaTargetListResponse)
def list_sla_targets(db: Session = Depends(get_db)):
    targets = automation_service.list_sla_targets(db)
    return SlaTargetListResponse(targets=[SlaTargetRead.model_validate(t) for t in targets])


@router.put("/sla/targets/{target_id}", response_model=SlaTargetResponse)
def update_sla_target(target_id: UUID, data: SlaTargetUpdate, db: Session = Depends(get_db)):
    target = automation_service.get_sla_target(db, target_id)
    if not target:
        raise HTTPException(status_code=404, detail="SLA target not found")
    target = automation_service.update_sla_target(db, target, data.model_dump(exclude_unset=True))
    return SlaTargetResponse(target=SlaTargetRead.model_validate(target))


@router.get("/sla/incidents", response_model=SlaIncidentListResponse)
def list_sla_incidents(db: Session = Depends(get_db)):
    incidents = automation_service.list_recent_incidents(db)
    return SlaIncidentListResponse(incidents=[_incident_to_read(i) for i in incidents])


@router.get("/metrics", response_model=MetricsResponse)
def get_metrics(db: Session = Depends(get_db)):
    """Live SLA counts plus the latest runs for the dashboard."""
    metrics = automation_service.get_sla_metrics(db)
    runs = automation_service.list_recent_runs(db, limit=RECENT_RUNS_ON_DASHBOARD)
    return MetricsResponse(metrics=SlaMetrics(**metrics), recentRuns=[_run_to_read(r) for r in runs])
