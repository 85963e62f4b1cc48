"""create scheduling tables

Revision ID: 20261019100000
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261019100000'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'businesses',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_businesses_id', 'businesses', ['id'])
    op.create_index('ix_businesses_owner_id', 'businesses', ['owner_id'])

    op.create_table(
        'business_operating_hours',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('business_id', sa.Integer(), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=False),
        sa.Column('open_time', sa.Time(), nullable=True),
        sa.Column('close_time', sa.Time(), nullable=True),
        sa.Column('is_closed', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['business_id'], ['businesses.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('business_id', 'day_of_week', name='uq_operating_hours_business_day'),
    )
    op.create_index('ix_business_operating_hours_id', 'business_operating_hours', ['id'])

    op.create_table(
        'appointment_time_slots',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('business_id', sa.Integer(), nullable=False),
        sa.Column('slot_name', sa.String(length=100), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('max_concurrent_appointments', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['business_id'], ['businesses.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('start_time < end_time', name='ck_slot_templates_time_order'),
        sa.CheckConstraint('max_concurrent_appointments >= 1', name='ck_slot_templates_capacity'),
    )
    op.create_index(
        'idx_slot_templates_business_active_start',
        'appointment_time_slots', ['business_id', 'is_active', 'start_time']
    )

    op.create_table(
        'daily_slot_availability',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('business_id', sa.Integer(), nullable=False),
        sa.Column('slot_id', sa.Uuid(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('is_available', sa.Boolean(), nullable=False),
        sa.Column('max_appointments_in_slot', sa.Integer(), nullable=False),
        sa.Column('current_appointments_in_slot', sa.Integer(), server_default='0', nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['business_id'], ['businesses.id']),
        sa.ForeignKeyConstraint(['slot_id'], ['appointment_time_slots.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('business_id', 'slot_id', 'date', name='uq_daily_slot_availability_business_slot_date'),
        sa.CheckConstraint(
            'current_appointments_in_slot >= 0 AND current_appointments_in_slot <= max_appointments_in_slot',
            name='ck_daily_slot_availability_capacity',
        ),
    )
    op.create_index(
        'idx_daily_slot_availability_business_date',
        'daily_slot_availability', ['business_id', 'date']
    )

    op.create_table(
        'business_availability',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('business_id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('is_open', sa.Boolean(), nullable=False),
        sa.Column('max_appointments_per_day', sa.Integer(), nullable=False),
        sa.Column('current_appointments_count', sa.Integer(), server_default='0', nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['business_id'], ['businesses.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('business_id', 'date', name='uq_business_availability_business_date'),
        sa.CheckConstraint(
            'current_appointments_count >= 0 AND current_appointments_count <= max_appointments_per_day',
            name='ck_business_availability_capacity',
        ),
    )
    op.create_index('ix_business_availability_id', 'business_availability', ['id'])

    op.create_table(
        'appointments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('business_id', sa.Integer(), nullable=False),
        sa.Column('customer_id', sa.String(length=64), nullable=False),
        sa.Column('appointment_date', sa.Date(), nullable=False),
        sa.Column('appointment_time_slot_id', sa.Uuid(), nullable=True),
        sa.Column('appointment_time', sa.Time(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('booking_flow', sa.String(length=30), nullable=False),
        sa.Column('notes', sa.String(length=500), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['business_id'], ['businesses.id']),
        sa.ForeignKeyConstraint(['appointment_time_slot_id'], ['appointment_time_slots.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_appointments_customer_id', 'appointments', ['customer_id'])
    op.create_index('idx_appointments_business_date', 'appointments', ['business_id', 'appointment_date'])
    op.create_index('idx_appointments_status', 'appointments', ['status'])

    # Only active appointments hold their time
    op.create_index(
        'uq_appointments_active_business_date_time',
        'appointments', ['business_id', 'appointment_date', 'appointment_time'],
        unique=True,
        postgresql_where=sa.text("status NOT IN ('cancelled', 'rejected')"),
        sqlite_where=sa.text("status NOT IN ('cancelled', 'rejected')"),
    )


def downgrade() -> None:
    op.drop_index('uq_appointments_active_business_date_time', table_name='appointments')
    op.drop_index('idx_appointments_status', table_name='appointments')
    op.drop_index('idx_appointments_business_date', table_name='appointments')
    op.drop_index('ix_appointments_customer_id', table_name='appointments')
    op.drop_table('appointments')
    op.drop_index('ix_business_availability_id', table_name='business_availability')
    op.drop_table('business_availability')
    op.drop_index('idx_daily_slot_availability_business_date', table_name='daily_slot_availability')
    op.drop_table('daily_slot_availability')
    op.drop_index('idx_slot_templates_business_active_start', table_name='appointment_time_slots')
    op.drop_table('appointment_time_slots')
    op.drop_index('ix_business_operating_hours_id', table_name='business_operating_hours')
    op.drop_table('business_operating_hours')
    op.drop_index('ix_businesses_owner_id', table_name='businesses')
    op.drop_index('ix_businesses_id', table_name='businesses')
    op.drop_table('businesses')
