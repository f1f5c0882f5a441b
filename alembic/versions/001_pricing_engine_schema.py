"""Pricing engine schema

Revision ID: 001_pricing_engine_schema
Revises:
Create Date: 2026-10-19

Creates:
- properties: read-only mirror used for ownership and bookability
- rate_plans: per-property pricing policies with eligibility constraints
- weekly_base_pricing: one row per property, 7 full-day + 7 half-day prices
- date_overrides: per-date price replacing the weekly base
- rate_plan_prices: explicit per-date rate plan prices
- availability_slots: per-date availability status
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_pricing_engine_schema'
down_revision = None
branch_labels = None
depends_on = None

WEEKDAYS = ('monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # ==================
    # properties table
    # ==================
    op.create_table(
        'properties',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('owner_id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('status', sa.String(20), server_default='Draft'),
        sa.Column('maximum_guests', sa.Integer, server_default='2'),
        sa.Column('currency', sa.String(3), server_default='AED'),
        *_timestamps(),
    )
    op.create_index('ix_properties_owner_id', 'properties', ['owner_id'])

    # ==================
    # rate_plans table
    # ==================
    op.create_table(
        'rate_plans',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('property_id', sa.String(36), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('plan_type', sa.String(20), server_default='FullyFlexible'),
        sa.Column('adjustment_type', sa.String(20), server_default='Percentage'),
        sa.Column('adjustment_value', sa.Numeric(10, 2), server_default='0'),
        sa.Column('min_stay', sa.Integer, nullable=True),
        sa.Column('max_stay', sa.Integer, nullable=True),
        sa.Column('min_guests', sa.Integer, nullable=True),
        sa.Column('max_guests', sa.Integer, nullable=True),
        sa.Column('min_advance_booking', sa.Integer, nullable=True),
        sa.Column('max_advance_booking', sa.Integer, nullable=True),
        sa.Column('priority', sa.Integer, server_default='0'),
        sa.Column('is_active', sa.Boolean, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('ix_rate_plans_property_active', 'rate_plans', ['property_id', 'is_active'])

    # ==================
    # weekly_base_pricing table
    # ==================
    op.create_table(
        'weekly_base_pricing',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('property_id', sa.String(36), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False, unique=True),
        *[sa.Column(f'price_{day}', sa.Numeric(10, 2), nullable=False) for day in WEEKDAYS],
        *[sa.Column(f'half_day_price_{day}', sa.Numeric(10, 2), nullable=False) for day in WEEKDAYS],
        sa.Column('currency', sa.String(3), server_default='AED'),
        *_timestamps(),
    )

    # ==================
    # date_overrides table
    # ==================
    op.create_table(
        'date_overrides',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('property_id', sa.String(36), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date, nullable=False),
        sa.Column('full_day_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('half_day_price', sa.Numeric(10, 2), nullable=True),
        sa.Column('reason', sa.String(255), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('property_id', 'date', name='uq_date_override_property_date'),
    )
    op.create_index('ix_date_override_property_date', 'date_overrides', ['property_id', 'date'])

    # ==================
    # rate_plan_prices table
    # ==================
    op.create_table(
        'rate_plan_prices',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('rate_plan_id', sa.String(36), sa.ForeignKey('rate_plans.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date, nullable=False),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('rate_plan_id', 'date', name='uq_price_rate_plan_date'),
    )
    op.create_index('ix_price_rate_plan_date', 'rate_plan_prices', ['rate_plan_id', 'date'])

    # ==================
    # availability_slots table
    # ==================
    op.create_table(
        'availability_slots',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('property_id', sa.String(36), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date, nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='available'),
        sa.Column('reason', sa.String(255), nullable=True),
        sa.Column('reservation_id', sa.String(36), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('property_id', 'date', name='uq_availability_property_date'),
    )
    op.create_index('ix_availability_property_date', 'availability_slots', ['property_id', 'date'])
    op.create_index('ix_availability_slots_reservation_id', 'availability_slots', ['reservation_id'])


def downgrade() -> None:
    op.drop_table('availability_slots')
    op.drop_table('rate_plan_prices')
    op.drop_table('date_overrides')
    op.drop_table('weekly_base_pricing')
    op.drop_table('rate_plans')
    op.drop_table('properties')
