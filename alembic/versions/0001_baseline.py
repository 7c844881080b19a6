"""Baseline migration - all Groomy Paws tables

Revision ID: 0001_baseline
Revises:
Create Date: 2026-10-18

Creates users, pets, catalog, appointments, messaging, payments,
notifications and automation/SLA tables, and seeds the default SLA targets.
"""
import uuid
from datetime import datetime, timezone
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_baseline'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id():
    return sa.Column('id', sa.Uuid(), primary_key=True)


def _ts(name, nullable=False):
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable)


def _fk(name, target, **kwargs):
    return sa.Column(
        name, sa.Uuid(), sa.ForeignKey(target, ondelete='CASCADE'), nullable=False, **kwargs
    )


def upgrade() -> None:
    """Create all tables."""

    # ==========================================================================
    # Users & Pets
    # ==========================================================================
    op.create_table(
        'users',
        _id(),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(50)),
        sa.Column('address', sa.Text()),
        sa.Column('role', sa.String(20), nullable=False, server_default='customer'),
        sa.Column('profile_picture_url', sa.String(500)),
        _ts('profile_picture_updated_at', nullable=True),
        sa.Column('is_online', sa.Boolean(), nullable=False, server_default=sa.false()),
        _ts('last_seen_at', nullable=True),
        _ts('created_at'),
        _ts('updated_at'),
    )

    op.create_table(
        'pets',
        _id(),
        _fk('owner_id', 'users.id'),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('breed', sa.String(255)),
        sa.Column('size_category', sa.String(20)),
        sa.Column('age', sa.Integer()),
        sa.Column('weight', sa.Numeric(6, 2)),
        sa.Column('temperament_notes', sa.Text()),
        sa.Column('grooming_notes', sa.Text()),
        sa.Column('photo_url', sa.String(500)),
        _ts('created_at'),
        _ts('updated_at'),
    )
    op.create_index('idx_pets_owner', 'pets', ['owner_id'])

    # ==========================================================================
    # Service Catalog
    # ==========================================================================
    op.create_table(
        'services',
        _id(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('base_price', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('duration_minutes', sa.Integer(), nullable=False, server_default='60'),
        sa.Column('is_addon', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        _ts('created_at'),
        _ts('updated_at'),
    )

    op.create_table(
        'service_prices',
        _id(),
        _fk('service_id', 'services.id'),
        sa.Column('breed', sa.String(255), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        _ts('created_at'),
        _ts('updated_at'),
        sa.UniqueConstraint('service_id', 'breed', name='uq_service_prices_breed'),
    )

    # ==========================================================================
    # Appointments & Availability
    # ==========================================================================
    op.create_table(
        'appointments',
        _id(),
        _fk('customer_id', 'users.id'),
        _fk('pet_id', 'pets.id'),
        _ts('scheduled_at'),
        sa.Column('duration_minutes', sa.Integer(), nullable=False, server_default='60'),
        sa.Column('total_price', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('internal_notes', sa.Text()),
        _ts('created_at'),
        _ts('updated_at'),
    )
    op.create_index('idx_appointments_customer', 'appointments', ['customer_id', 'scheduled_at'])
    op.create_index('idx_appointments_status_time', 'appointments', ['status', 'scheduled_at'])

    op.create_table(
        'appointment_services',
        _id(),
        _fk('appointment_id', 'appointments.id'),
        _fk('service_id', 'services.id'),
        sa.Column('price_at_booking', sa.Numeric(10, 2), nullable=False),
    )

    op.create_table(
        'availability',
        _id(),
        _fk('user_id', 'users.id'),
        sa.Column('day_of_week', sa.SmallInteger(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('is_available', sa.Boolean(), nullable=False, server_default=sa.true()),
        _ts('created_at'),
        _ts('updated_at'),
        sa.UniqueConstraint('user_id', 'day_of_week', name='uq_availability_user_day'),
    )

    # ==========================================================================
    # Messaging
    # ==========================================================================
    op.create_table(
        'conversations',
        _id(),
        _fk('customer_id', 'users.id', unique=True),
        _ts('last_message_at', nullable=True),
        _ts('created_at'),
    )

    op.create_table(
        'messages',
        _id(),
        _fk('conversation_id', 'conversations.id'),
        _fk('sender_id', 'users.id'),
        sa.Column('body', sa.Text(), nullable=False),
        _ts('created_at'),
    )
    op.create_index('idx_messages_conversation_time', 'messages', ['conversation_id', 'created_at'])

    # ==========================================================================
    # Payments
    # ==========================================================================
    op.create_table(
        'payments',
        _id(),
        _fk('appointment_id', 'appointments.id'),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='unpaid'),
        sa.Column('payment_method', sa.String(20), nullable=False, server_default='card'),
        sa.Column('payment_reference', sa.String(255)),
        sa.Column('stripe_payment_intent_id', sa.String(255)),
        _ts('created_at'),
        _ts('updated_at'),
    )
    op.create_index('idx_payments_appointment', 'payments', ['appointment_id'])

    op.create_table(
        'saved_cards',
        _id(),
        _fk('user_id', 'users.id'),
        sa.Column('card_last4', sa.String(4), nullable=False),
        sa.Column('card_brand', sa.String(50), nullable=False),
        sa.Column('card_exp_month', sa.Integer(), nullable=False),
        sa.Column('card_exp_year', sa.Integer(), nullable=False),
        sa.Column('stripe_payment_method_id', sa.String(255), nullable=False),
        sa.Column('is_default', sa.Boolean(), nullable=False, server_default=sa.false()),
        _ts('created_at'),
    )

    # ==========================================================================
    # Notifications
    # ==========================================================================
    op.create_table(
        'notification_preferences',
        sa.Column(
            'user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True
        ),
        sa.Column('email_enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('sms_enabled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('push_enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
        _ts('updated_at'),
    )

    op.create_table(
        'user_notifications',
        _id(),
        _fk('user_id', 'users.id'),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('category', sa.String(50), nullable=False, server_default='system'),
        sa.Column('metadata', sa.JSON(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='new'),
        _ts('snoozed_until', nullable=True),
        sa.Column('channel_sent', sa.JSON(), nullable=False),
        _ts('created_at'),
        _ts('updated_at'),
    )
    op.create_index('idx_user_notifications_user_time', 'user_notifications', ['user_id', 'created_at'])

    # ==========================================================================
    # Automation & SLA
    # ==========================================================================
    op.create_table(
        'automation_workflows',
        _id(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('trigger_type', sa.String(100), nullable=False),
        sa.Column('minutes_delay', sa.Integer()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        _ts('created_at'),
        _ts('updated_at'),
    )
    op.create_index('idx_workflows_trigger_active', 'automation_workflows', ['trigger_type', 'is_active'])

    op.create_table(
        'automation_workflow_conditions',
        _id(),
        _fk('workflow_id', 'automation_workflows.id'),
        sa.Column('condition_text', sa.Text(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
    )

    op.create_table(
        'automation_workflow_actions',
        _id(),
        _fk('workflow_id', 'automation_workflows.id'),
        sa.Column('action_type', sa.String(50), nullable=False),
        sa.Column('action_config', sa.JSON(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
    )

    op.create_table(
        'automation_workflow_runs',
        _id(),
        _fk('workflow_id', 'automation_workflows.id'),
        sa.Column('trigger_payload', sa.JSON(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='queued'),
        _ts('queued_at'),
        _ts('started_at', nullable=True),
        _ts('completed_at', nullable=True),
        sa.Column('result_payload', sa.JSON()),
        sa.Column('error_message', sa.Text()),
    )
    op.create_index('idx_workflow_runs_status_queued', 'automation_workflow_runs', ['status', 'queued_at'])

    sla_targets = op.create_table(
        'sla_targets',
        _id(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('entity_type', sa.String(100), nullable=False, unique=True),
        sa.Column('threshold_minutes', sa.Integer(), nullable=False),
        sa.Column('warning_minutes', sa.Integer()),
        sa.Column('severity', sa.String(20), nullable=False, server_default='medium'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        _ts('created_at'),
        _ts('updated_at'),
    )

    op.create_table(
        'sla_incidents',
        _id(),
        _fk('target_id', 'sla_targets.id'),
        sa.Column('entity_type', sa.String(100), nullable=False),
        sa.Column('entity_id', sa.String(64), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='open'),
        sa.Column('breach_reason', sa.Text()),
        _ts('opened_at'),
        _ts('resolved_at', nullable=True),
    )
    op.create_index('idx_sla_incidents_entity', 'sla_incidents', ['entity_type', 'entity_id', 'status'])

    # ==========================================================================
    # Default SLA targets
    # ==========================================================================
    now = datetime.now(timezone.utc)
    op.bulk_insert(sla_targets, [
        {
            'id': uuid.uuid4(),
            'name': 'Pending appointment confirmation',
            'entity_type': 'appointment.pending',
            'threshold_minutes': 1440,
            'warning_minutes': 720,
            'severity': 'high',
            'is_active': True,
            'created_at': now,
            'updated_at': now,
        },
        {
            'id': uuid.uuid4(),
            'name': 'Unanswered customer chat',
            'entity_type': 'chat.unanswered',
            'threshold_minutes': 30,
            'warning_minutes': 15,
            'severity': 'medium',
            'is_active': True,
            'created_at': now,
            'updated_at': now,
        },
    ])


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    for table in (
        'sla_incidents',
        'sla_targets',
        'automation_workflow_runs',
        'automation_workflow_actions',
        'automation_workflow_conditions',
        'automation_workflows',
        'user_notifications',
        'notification_preferences',
        'saved_cards',
        'payments',
        'messages',
        'conversations',
        'availability',
        'appointment_services',
        'appointments',
        'service_prices',
        'services',
        'pets',
        'users',
    ):
        op.drop_table(table)
