"""Enum definitions for application constants."""

from enum import Enum


class Role(str, Enum):
    """
    User roles.

    - CUSTOMER: Pet owner booking appointments
    - STAFF: Groomer (appointments, chat, payments)
    - ADMIN: Business owner (catalog, customer roles)
    """
    CUSTOMER = "customer"
    STAFF = "staff"
    ADMIN = "admin"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a valid role."""
        return value in cls._value2member_map_


# Staff-side roles (back office access)
ROLES_STAFF = {Role.STAFF, Role.ADMIN}


class PetSize(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    XL = "xl"

    @classmethod
    def has_value(cls, value: str) -> bool:
        return value in cls._value2member_map_


class AppointmentStatus(str, Enum):
    """
    Appointment lifecycle.

    Any status may follow any other; transitions are plain field writes.
    """
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def has_value(cls, value: str) -> bool:
        return value in cls._value2member_map_


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PAID = "paid"
    REFUNDED = "refunded"

    @classmethod
    def has_value(cls, value: str) -> bool:
        return value in cls._value2member_map_


class PaymentMethod(str, Enum):
    CARD = "card"
    CASH = "cash"
    CASH_APP = "cash_app"
    OTHER = "other"

    @classmethod
    def has_value(cls, value: str) -> bool:
        return value in cls._value2member_map_


class NotificationStatus(str, Enum):
    NEW = "new"
    READ = "read"
    SNOOZED = "snoozed"
    DISMISSED = "dismissed"

    @classmethod
    def has_value(cls, value: str) -> bool:
        return value in cls._value2member_map_


class NotificationChannel(str, Enum):
    EMAIL = "email"
    SMS = "sms"
    PUSH = "push"


class WorkflowActionType(str, Enum):
    """Action types. Only SEND_NOTIFICATION and UPDATE_STATUS execute."""
    SEND_NOTIFICATION = "send_notification"
    UPDATE_STATUS = "update_status"
    CREATE_TASK = "create_task"
    ASSIGN_OWNER = "assign_owner"


class WorkflowRunStatus(str, Enum):
    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class SlaSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @classmethod
    def has_value(cls, value: str) -> bool:
        return value in cls._value2member_map_


class SlaIncidentStatus(str, Enum):
    OPEN = "open"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"


# Incidents that still count as active
SLA_INCIDENT_ACTIVE = {SlaIncidentStatus.OPEN.value, SlaIncidentStatus.ACKNOWLEDGED.value}


class SlaEntityType(str, Enum):
    """SLA target entity types with an evaluator."""
    APPOINTMENT_PENDING = "appointment.pending"
    CHAT_UNANSWERED = "chat.unanswered"


class TriggerType(str, Enum):
    """Business events emitted by the API. Workflows may also use free-text triggers."""
    APPOINTMENT_CREATED = "appointment_created"
    APPOINTMENT_STATUS_CHANGED = "appointment_status_changed"
    CHAT_MESSAGE = "chat_message"
