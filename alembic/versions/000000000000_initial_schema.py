"""initial_schema

Revision ID: 000000000000
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '000000000000'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create tracked_vehicles table
    op.create_table(
        'tracked_vehicles',
        sa.Column('id', sa.String(length=64), nullable=False, comment='Stock identifier'),
        sa.Column('tenant_id', sa.String(length=64), nullable=False, comment='Owning dealer'),
        sa.Column('registration', sa.String(length=20), nullable=True, comment='Registration plate as entered in stock (may be blank)'),
        sa.Column('make', sa.String(length=100), nullable=True),
        sa.Column('model', sa.String(length=100), nullable=True),
        sa.Column('mot_status', sa.String(length=50), nullable=True, comment='MOT status copied from the registry record'),
        sa.Column('mot_expiry_date', sa.Date(), nullable=True, comment='MOT expiry copied from the registry record'),
        sa.Column('registry_last_checked', sa.DateTime(timezone=True), nullable=True, comment='When the registry record was last refreshed'),
        sa.Column('registry_data_raw', postgresql.JSONB(astext_type=sa.Text()), nullable=True, comment='Raw registry payload from the last refresh'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('TRUE'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_tracked_vehicles_tenant_id', 'tracked_vehicles', ['tenant_id'], unique=False)
    op.create_index('idx_tracked_vehicles_registration', 'tracked_vehicles', ['registration'], unique=False)
    op.create_index('idx_tracked_vehicles_is_active', 'tracked_vehicles', ['is_active'], unique=False)

    # Create registry_records table
    op.create_table(
        'registry_records',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('registration', sa.String(length=20), nullable=False, comment='Normalized registration (no whitespace, upper case)'),
        sa.Column('make', sa.String(length=100), nullable=True),
        sa.Column('colour', sa.String(length=50), nullable=True),
        sa.Column('fuel_type', sa.String(length=50), nullable=True),
        sa.Column('year_of_manufacture', sa.Integer(), nullable=True),
        sa.Column('engine_capacity', sa.Integer(), nullable=True, comment='Engine capacity (cc)'),
        sa.Column('co2_emissions', sa.Integer(), nullable=True, comment='CO2 emissions (g/km)'),
        sa.Column('type_approval', sa.String(length=20), nullable=True),
        sa.Column('wheelplan', sa.String(length=100), nullable=True),
        sa.Column('revenue_weight', sa.Integer(), nullable=True, comment='Revenue weight (kg)'),
        sa.Column('marked_for_export', sa.Boolean(), nullable=True),
        sa.Column('mot_status', sa.String(length=50), nullable=True),
        sa.Column('mot_expiry_date', sa.Date(), nullable=True),
        sa.Column('tax_status', sa.String(length=50), nullable=True),
        sa.Column('tax_due_date', sa.Date(), nullable=True),
        sa.Column('date_of_last_v5c_issued', sa.Date(), nullable=True),
        sa.Column('month_of_first_registration', sa.String(length=7), nullable=True, comment='YYYY-MM'),
        sa.Column('raw_data', postgresql.JSONB(astext_type=sa.Text()), nullable=True, comment='Registry response as received'),
        sa.Column('last_checked', sa.DateTime(timezone=True), nullable=True, comment='Time of the last successful lookup'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('registration', name='uq_registry_records_registration')
    )
    op.create_index('idx_registry_records_last_checked', 'registry_records', ['last_checked'], unique=False)

    # Create registry_sync_runs table
    op.create_table(
        'registry_sync_runs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tenant_id', sa.String(length=64), nullable=True, comment='Dealer scope, NULL for all dealers'),
        sa.Column('force_refresh', sa.Boolean(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, comment='Run status: running, success, partial, failure, cancelled'),
        sa.Column('records_processed', sa.Integer(), nullable=False),
        sa.Column('records_updated', sa.Integer(), nullable=False),
        sa.Column('records_failed', sa.Integer(), nullable=False),
        sa.Column('error_message', sa.Text(), nullable=True, comment='Error details if failed'),
        sa.Column('error_details', postgresql.JSONB(astext_type=sa.Text()), nullable=True, comment='Error counts by kind'),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=False, comment='Sweep start time'),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True, comment='Sweep completion time'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_registry_sync_runs_started_at', 'registry_sync_runs', ['started_at'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_registry_sync_runs_started_at', table_name='registry_sync_runs')
    op.drop_table('registry_sync_runs')
    op.drop_index('idx_registry_records_last_checked', table_name='registry_records')
    op.drop_table('registry_records')
    op.drop_index('idx_tracked_vehicles_is_active', table_name='tracked_vehicles')
    op.drop_index('idx_tracked_vehicles_registration', table_name='tracked_vehicles')
    op.drop_index('idx_tracked_vehicles_tenant_id', table_name='tracked_vehicles')
    op.drop_table('tracked_vehicles')
