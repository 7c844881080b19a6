"""Automation workflow and SLA schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from groomypaws.db.enums import SlaSeverity


# =============================================================================
# Workflows
# =============================================================================

class WorkflowActionInput(BaseModel):
    action_type: str | None = None
    action_config: dict[str, Any] | None = None


class WorkflowCreate(BaseModel):
    name: str | None = None
    description: str | None = None
    trigger: str | None = None
    minutes_delay: int | None = Field(None, ge=0)
    is_active: bool = True
    conditions: list[str | None] = Field(default_factory=list)
    actions: list[WorkflowActionInput] = Field(default_factory=list)


class WorkflowUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    trigger: str | None = None
    minutes_delay: int | None = Field(None, ge=0)
    is_active: bool | None = None
    conditions: list[str | None] | None = None
    actions: list[WorkflowActionInput] | None = None


class WorkflowToggle(BaseModel):
    is_active: bool


class WorkflowActionRead(BaseModel):
    id: UUID
    action_type: str
    action_config: dict[str, Any]


class WorkflowRead(BaseModel):
    id: UUID
    name: str
    description: str | None = None
    trigger: str
    minutes_delay: int | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
    conditions: list[str]
    actions: list[WorkflowActionRead]


class WorkflowResponse(BaseModel):
    workflow: WorkflowRead


class WorkflowListResponse(BaseModel):
    workflows: list[WorkflowRead]


class WorkflowRunRead(BaseModel):
    id: UUID
    workflow_id: UUID
    workflow_name: str | None = None
    status: str
    trigger_payload: dict[str, Any] = Field(default_factory=dict)
    result_payload: Any = None
    error_message: str | None = None
    queued_at: datetime
    started_at: datetime | None = None
    completed_at: datetime | None = None


class WorkflowRunListResponse(BaseModel):
    runs: list[WorkflowRunRead]


# =============================================================================
# SLA
# =============================================================================

class SlaTargetRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    entity_type: str
    threshold_minutes: int
    warning_minutes: int | None = None
    severity: str
    is_active: bool


class SlaTargetUpdate(BaseModel):
    threshold_minutes: int | None = Field(None, gt=0)
    warning_minutes: int | None = Field(None, ge=0)
    severity: SlaSeverity | None = None
    is_active: bool | None = None


class SlaTargetResponse(BaseModel):
    target: SlaTargetRead


class SlaTargetListResponse(BaseModel):
    targets: list[SlaTargetRead]


class SlaIncidentRead(BaseModel):
    id: UUID
    target_id: UUID
    target_name: str | None = None
    entity_type: str
    entity_id: str
    status: str
    breach_reason: str | None = None
    opened_at: datetime
    resolved_at: datetime | None = None


class SlaIncidentListResponse(BaseModel):
    incidents: list[SlaIncidentRead]


class SlaMetrics(BaseModel):
    pending_over_24h: int
    in_progress_overrun: int
    chats_awaiting_reply: int


class MetricsResponse(BaseModel):
    metrics: SlaMetrics
    recentRuns: list[WorkflowRunRead]


class TriggerQueuedResponse(BaseModel):
    queued: bool = True
    runs: int = 0
