"""
Fire-and-forget automation hooks.

Scheduled from routers as background tasks so they run after the response.
Each call opens its own session. Failures are logged and swallowed: no
retries, at-most-once.
"""

import logging
from typing import Any

from groomypaws.core.structured_logging import build_log_context
from groomypaws.db.session import SessionLocal
from groomypaws.services import automation_service

logger = logging.getLogger(__name__)


def fire_trigger(trigger_type: str, payload: dict[str, Any]) -> None:
    """Enqueue workflow runs for a business event."""
    db = SessionLocal()
    try:
        automation_service.enqueue_trigger(db, trigger_type, payload)
    except Exception:
        db.rollback()
        logger.exception(
            "Automation trigger failed: %s",
            trigger_type,
            extra=build_log_context(entity_type=trigger_type),
        )
    finally:
        db.close()


def fire_close_incidents(entity_type: str, entity_id: Any) -> None:
    """Resolve open SLA incidents for an entity."""
    db = SessionLocal()
    try:
        automation_service.close_incidents_for_entity(db, entity_type, entity_id)
    except Exception:
        db.rollback()
        logger.exception(
            "Closing SLA incidents failed",
            extra=build_log_context(entity_type=entity_type, entity_id=str(entity_id)),
        )
    finally:
        db.close()
