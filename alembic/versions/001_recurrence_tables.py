"""Recurrence rules, events and event exceptions

Revision ID: 001
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '001'
down_revision = None  # This is the first migration
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'recurrence_rules',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('frequency', sa.String(20), nullable=False),
        sa.Column('interval', sa.Integer, nullable=False, server_default='1'),
        sa.Column('days_of_week', sa.Text, nullable=True),
        sa.Column('day_of_month', sa.Integer, nullable=True),
        sa.Column('month_of_year', sa.Integer, nullable=True),
        sa.Column('end_date', sa.DateTime, nullable=True),
        sa.Column('end_occurrences', sa.Integer, nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.Column('updated_at', sa.DateTime, nullable=False),
        sa.CheckConstraint("frequency IN ('DAILY','WEEKLY','MONTHLY','YEARLY')", name='ck_recurrence_rules_frequency'),
        sa.CheckConstraint('interval >= 1', name='ck_recurrence_rules_interval'),
        sa.CheckConstraint('NOT (end_date IS NOT NULL AND end_occurrences IS NOT NULL)', name='ck_recurrence_rules_single_end'),
    )

    op.create_table(
        'events',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('description', sa.String(1000), nullable=True),
        sa.Column('start_time', sa.DateTime, nullable=False),
        sa.Column('end_time', sa.DateTime, nullable=False),
        sa.Column('is_all_day', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('location', sa.String(200), nullable=True),
        sa.Column('priority', sa.Integer, nullable=False, server_default='0'),
        sa.Column('category_id', sa.Integer, nullable=True),
        sa.Column('recurrence_rule_id', sa.Integer, sa.ForeignKey('recurrence_rules.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.Column('updated_at', sa.DateTime, nullable=False),
    )

    op.create_table(
        'event_exceptions',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('event_id', sa.Integer, sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('original_date', sa.String(10), nullable=False),
        sa.Column('is_cancelled', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('modified_title', sa.String(200), nullable=True),
        sa.Column('modified_description', sa.String(1000), nullable=True),
        sa.Column('modified_start_time', sa.String(40), nullable=True),
        sa.Column('modified_end_time', sa.String(40), nullable=True),
        sa.Column('modified_location', sa.String(200), nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.UniqueConstraint('event_id', 'original_date', name='uq_event_exceptions_event_date'),
    )
    op.create_index('ix_event_exceptions_event_id', 'event_exceptions', ['event_id'])


def downgrade():
    op.drop_index('ix_event_exceptions_event_id', table_name='event_exceptions')
    op.drop_table('event_exceptions')
    op.drop_table('events')
    op.drop_table('recurrence_rules')
