"""Workflow service - CRUD operations for automation workflows."""

from uuid import UUID

from sqlalchemy.orm import Session, selectinload

from groomypaws.db.enums import WorkflowActionType
from groomypaws.db.models import Workflow, WorkflowAction, WorkflowCondition
from groomypaws.db.types import utcnow


SCALAR_FIELDS = ("name", "description", "trigger_type", "minutes_delay", "is_active")


def _with_steps(query):
    return query.options(selectinload(Workflow.conditions), selectinload(Workflow.actions))


def _build_conditions(conditions: list | None) -> list[WorkflowCondition]:
    """Blank conditions are dropped; positions follow the input order."""
    rows = []
    for text in conditions or []:
        if text is None or not str(text).strip():
            continue
        rows.append(WorkflowCondition(condition_text=str(text).strip(), position=len(rows)))
    return rows


def _build_actions(actions: list | None) -> list[WorkflowAction]:
    rows = []
    for index, action in enumerate(actions or []):
        action = action or {}
        rows.append(WorkflowAction(
            action_type=action.get("action_type") or WorkflowActionType.SEND_NOTIFICATION.value,
            action_config=action.get("action_config") or {},
            position=index,
        ))
    return rows


# =============================================================================
# CRUD Operations
# =============================================================================

def list_workflows(db: Session) -> list[Workflow]:
    return _with_steps(db.query(Workflow)).order_by(Workflow.created_at.desc()).all()


def get_workflow(db: Session, workflow_id: UUID) -> Workflow | None:
    return _with_steps(db.query(Workflow)).filter(Workflow.id == workflow_id).first()


def create_workflow(db: Session, data: dict) -> Workflow:
    """
    Create a workflow with ordered conditions and actions.

    Raises:
        ValueError: Missing name or trigger
    """
    name = (data.get("name") or "").strip()
    trigger_type = (data.get("trigger_type") or "").strip()
    if not name or not trigger_type:
        raise ValueError("Name and trigger are required")

    workflow = Workflow(
        name=name,
        description=data.get("description"),
        trigger_type=trigger_type,
        minutes_delay=data.get("minutes_delay"),
        is_active=data.get("is_active", True) is not False,
    )
    workflow.conditions = _build_conditions(data.get("conditions"))
    workflow.actions = _build_actions(data.get("actions"))
    db.add(workflow)
    db.commit()
    return get_workflow(db, workflow.id)


def update_workflow(db: Session, workflow: Workflow, data: dict) -> Workflow:
    """
    Merge scalar fields; replace conditions/actions when given.

    Raises:
        ValueError: Name or trigger blanked out
    """
    for key in SCALAR_FIELDS:
        if key in data and data[key] is not None:
            setattr(workflow, key, data[key])
    if not (workflow.name or "").strip() or not (workflow.trigger_type or "").strip():
        raise ValueError("Name and trigger are required")

    if data.get("conditions") is not None:
        workflow.conditions = _build_conditions(data["conditions"])
    if data.get("actions") is not None:
        workflow.actions = _build_actions(data["actions"])

    workflow.updated_at = utcnow()
    db.commit()
    return get_workflow(db, workflow.id)


def toggle_workflow(db: Session, workflow: Workflow, is_active: bool) -> Workflow:
    workflow.is_active = bool(is_active)
    workflow.updated_at = utcnow()
    db.commit()
    return get_workflow(db, workflow.id)


def delete_workflow(db: Session, workflow: Workflow) -> None:
    """Delete a workflow; conditions, actions and runs cascade."""
    db.delete(workflow)
    db.commit()
