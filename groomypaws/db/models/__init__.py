"""SQLAlchemy ORM models."""

from groomypaws.db.models.users import User
from groomypaws.db.models.pets import Pet
from groomypaws.db.models.services import Service, ServicePrice
from groomypaws.db.models.appointments import Appointment, AppointmentService, Availability
from groomypaws.db.models.messages import Conversation, Message
from groomypaws.db.models.payments import Payment, SavedCard
from groomypaws.db.models.notifications import Notification, NotificationPreference
from groomypaws.db.models.automation import (
    SlaIncident,
    SlaTarget,
    Workflow,
    WorkflowAction,
    WorkflowCondition,
    WorkflowRun,
)

__all__ = [
    "User",
    "Pet",
    "Service",
    "ServicePrice",
    "Appointment",
    "AppointmentService",
    "Availability",
    "Conversation",
    "Message",
    "Payment",
    "SavedCard",
    "Notification",
    "NotificationPreference",
    "Workflow",
    "WorkflowCondition",
    "WorkflowAction",
    "WorkflowRun",
    "SlaTarget",
    "SlaIncident",
]
