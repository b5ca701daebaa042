"""Initial scheduling schema with overlap exclusion constraint

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-01

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = '001_initial_schema'
down_revision = None


def _uuid():
    return postgresql.UUID(as_uuid=True)


def upgrade():
    # Tenants
    op.create_table(
        'tenants',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False, index=True),
        sa.Column('slug', sa.String(255), nullable=False, unique=True, index=True),
        sa.Column('email', sa.String(255), nullable=False, index=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('plan', sa.String(50), nullable=False, server_default='basico'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.current_timestamp()),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true', index=True),
    )

    # Staff
    op.create_table(
        'users',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('tenant_id', _uuid(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('email', sa.String(255), nullable=False, index=True),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('role', sa.Enum('OWNER', 'ADMIN', 'EMPLOYEE', 'RECEPTIONIST', name='userrole'), nullable=False),
        sa.Column('status', sa.Enum('ACTIVE', 'DEACTIVATED', name='userstatus'), nullable=False, index=True),
        sa.Column('deactivated_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'clients',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('tenant_id', _uuid(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('notes', sa.String(2000), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'services',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('tenant_id', _uuid(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.String(1000), nullable=True),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('status', sa.Enum('ACTIVE', 'INACTIVE', name='servicestatus'), nullable=False, index=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('duration_minutes > 0', name='ck_service_duration_positive'),
    )

    # Appointment ledger
    op.create_table(
        'appointments',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('tenant_id', _uuid(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('client_id', _uuid(), sa.ForeignKey('clients.id'), nullable=False, index=True),
        sa.Column('created_by', _uuid(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('start_at', sa.DateTime(), nullable=False, index=True),
        sa.Column('end_at', sa.DateTime(), nullable=False),
        sa.Column(
            'state',
            sa.Enum('PENDING', 'CONFIRMED', 'COMPLETED', 'CANCELED', name='appointmentstate'),
            nullable=False,
            index=True,
        ),
        sa.Column('notes', sa.String(2000), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('is_recurring', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column(
            'recurrence_pattern',
            sa.Enum('DAILY', 'WEEKLY', 'BIWEEKLY', 'MONTHLY', 'QUARTERLY', 'CUSTOM', name='recurrencepattern'),
            nullable=True,
        ),
        sa.Column('recurrence_weekdays', sa.JSON(), nullable=True),
        sa.Column('recurrence_interval_days', sa.Integer(), nullable=True),
        sa.Column('recurrence_max_occurrences', sa.Integer(), nullable=True),
        sa.Column('recurrence_end_at', sa.DateTime(), nullable=True),
        sa.Column('parent_appointment_id', _uuid(), sa.ForeignKey('appointments.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('canceled_at', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('end_at > start_at', name='ck_appointment_range'),
    )
    op.create_index('idx_appointment_tenant_start', 'appointments', ['tenant_id', 'start_at'])
    op.create_index('idx_appointment_parent', 'appointments', ['parent_appointment_id', 'start_at'])

    # Two active appointments of a tenant may never overlap, whatever the
    # application does. Half-open ranges so touching bookings are allowed.
    op.execute('CREATE EXTENSION IF NOT EXISTS btree_gist')
    op.execute("""
        ALTER TABLE appointments
        ADD CONSTRAINT ex_appointment_no_overlap
        EXCLUDE USING gist (
            tenant_id WITH =,
            tsrange(start_at, end_at, '[)') WITH &&
        )
        WHERE (state <> 'CANCELED')
    """)

    op.create_table(
        'appointment_service_lines',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('appointment_id', _uuid(), sa.ForeignKey('appointments.id'), nullable=False, index=True),
        sa.Column('service_id', _uuid(), sa.ForeignKey('services.id'), nullable=False, index=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
    )

    # Calendar configuration
    op.create_table(
        'working_hours',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('tenant_id', _uuid(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('weekday', sa.Integer(), nullable=False),
        sa.Column('opens_at', sa.Time(), nullable=False),
        sa.Column('closes_at', sa.Time(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('tenant_id', 'weekday', name='uq_working_hours_tenant_weekday'),
        sa.CheckConstraint('weekday BETWEEN 0 AND 6', name='ck_working_hours_weekday'),
        sa.CheckConstraint('closes_at > opens_at', name='ck_working_hours_window'),
    )

    op.create_table(
        'days_off',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('tenant_id', _uuid(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('day', sa.Date(), nullable=False, index=True),
        sa.Column('reason', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('tenant_id', 'day', name='uq_day_off_tenant_day'),
    )

    # Plans and usage
    op.create_table(
        'plan_limits',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column(
            'plan_tier',
            sa.Enum('BASIC', 'PROFESSIONAL', 'PREMIUM', name='plantier'),
            nullable=False,
            unique=True,
            index=True,
        ),
        sa.Column('max_users', sa.Integer(), nullable=False),
        sa.Column('max_clients', sa.Integer(), nullable=False),
        sa.Column('max_appointments_month', sa.Integer(), nullable=False),
        sa.Column('max_services', sa.Integer(), nullable=False),
        sa.Column('sms_whatsapp_enabled', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('advanced_reports_enabled', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('priority_support', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'usage_counters',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('tenant_id', _uuid(), sa.ForeignKey('tenants.id'), nullable=False, index=True),
        sa.Column('period', sa.String(7), nullable=False, index=True),
        sa.Column('total_users', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_clients', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_appointments_month', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_services', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('tenant_id', 'period', name='uq_usage_tenant_period'),
    )


def downgrade():
    op.drop_table('usage_counters')
    op.drop_table('plan_limits')
    op.drop_table('days_off')
    op.drop_table('working_hours')
    op.drop_table('appointment_service_lines')
    op.drop_table('appointments')
    op.drop_table('services')
    op.drop_table('clients')
    op.drop_table('users')
    op.drop_table('tenants')

    for enum_name in (
        'plantier', 'recurrencepattern', 'appointmentstate',
        'servicestatus', 'userstatus', 'userrole',
    ):
        op.execute(f'DROP TYPE IF EXISTS {enum_name}')
