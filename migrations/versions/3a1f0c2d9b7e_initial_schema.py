"""initial schema

Revision ID: 3a1f0c2d9b7e
Revises:
Create Date: 2025-09-15 10:12:04.118532
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = '3a1f0c2d9b7e'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

METRIC_NAMES = ('FA', 'EH', 'NEW_APPOINTMENTS', 'RECOMMENDATIONS', 'TIV_INVITATIONS',
                'TAA_INVITATIONS', 'TGS_REGISTRATIONS', 'BAV_CHECKS')


def base_columns():
    return [
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_deleted', sa.Boolean(), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('updated_by', sa.Integer(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'teams',
        *base_columns(),
        sa.Column('name', sa.String(length=100), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
    )

    op.create_table(
        'users',
        *base_columns(),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('role', sa.Enum('ADVISOR', 'LEADER', 'ADMIN', name='userrole'), nullable=False),
        sa.Column('team_id', sa.Integer(), sa.ForeignKey('teams.id'), nullable=True),
        sa.Column('parent_leader_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('is_team_leader', sa.Boolean(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_team_id', 'users', ['team_id'])
    op.create_index('ix_users_parent_leader_id', 'users', ['parent_leader_id'])

    op.create_table(
        'daily_entries',
        *base_columns(),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('entry_date', sa.Date(), nullable=False),
        sa.Column('fa', sa.Integer(), nullable=True),
        sa.Column('eh', sa.Float(), nullable=True),
        sa.Column('new_appointments', sa.Integer(), nullable=True),
        sa.Column('recommendations', sa.Integer(), nullable=True),
        sa.Column('tiv_invitations', sa.Integer(), nullable=True),
        sa.Column('taa_invitations', sa.Integer(), nullable=True),
        sa.Column('tgs_registrations', sa.Integer(), nullable=True),
        sa.Column('bav_checks', sa.Integer(), nullable=True),
        sa.Column('highlight_yesterday', sa.Text(), nullable=True),
        sa.Column('help_needed', sa.Text(), nullable=True),
        sa.Column('improvement_today', sa.Text(), nullable=True),
        sa.Column('focus_area', sa.String(length=100), nullable=True),
        sa.UniqueConstraint('user_id', 'entry_date', name='uq_daily_entries_user_date'),
    )
    op.create_index('ix_daily_entries_user_id', 'daily_entries', ['user_id'])
    op.create_index('ix_daily_entries_entry_date', 'daily_entries', ['entry_date'])

    op.create_table(
        'goal_sets',
        *base_columns(),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('period', sa.Enum('DAILY', 'WEEKLY', 'MONTHLY', 'YEARLY', name='goalperiod'), nullable=False),
        sa.Column('period_start', sa.Date(), nullable=False),
        sa.Column('author', sa.Enum('SELF', 'MANAGER', name='goalauthor'), nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
        sa.UniqueConstraint('user_id', 'period', 'period_start', 'author', name='uq_goal_sets_owner_period'),
    )
    op.create_index('ix_goal_sets_user_id', 'goal_sets', ['user_id'])

    op.create_table(
        'goal_targets',
        *base_columns(),
        sa.Column('goal_set_id', sa.Integer(), sa.ForeignKey('goal_sets.id', ondelete='CASCADE'), nullable=False),
        sa.Column('metric', sa.Enum(*METRIC_NAMES, name='metrickey'), nullable=False),
        sa.Column('target', sa.Float(), nullable=False),
        sa.UniqueConstraint('goal_set_id', 'metric', name='uq_goal_targets_set_metric'),
    )
    op.create_index('ix_goal_targets_goal_set_id', 'goal_targets', ['goal_set_id'])

    op.create_table(
        'baseline_snapshots',
        *base_columns(),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('cycle_start', sa.Date(), nullable=False),
        sa.Column('metric_values', sa.JSON(), nullable=False),
        sa.UniqueConstraint('user_id', 'cycle_start', name='uq_baseline_user_cycle'),
    )
    op.create_index('ix_baseline_snapshots_user_id', 'baseline_snapshots', ['user_id'])

    op.create_table(
        'plan_locks',
        *base_columns(),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('cycle_start', sa.Date(), nullable=False),
        sa.Column('locked_until', sa.DateTime(timezone=True), nullable=True),
        sa.Column('finalized_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('user_id', 'cycle_start', name='uq_plan_lock_user_cycle'),
    )
    op.create_index('ix_plan_locks_user_id', 'plan_locks', ['user_id'])

    op.create_table(
        'monthly_plan_notes',
        *base_columns(),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('planning_month', sa.Date(), nullable=False),
        sa.Column('previous_month_missed_reason', sa.Text(), nullable=True),
        sa.Column('target_increase_reason', sa.Text(), nullable=True),
        sa.Column('focus_area', sa.String(length=100), nullable=True),
        sa.UniqueConstraint('user_id', 'planning_month', name='uq_monthly_note_user_month'),
    )
    op.create_index('ix_monthly_plan_notes_user_id', 'monthly_plan_notes', ['user_id'])

    op.create_table(
        'leadership_conversations',
        *base_columns(),
        sa.Column('partner_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('leader_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('action_items', sa.JSON(), nullable=True),
        sa.Column('next_steps', sa.JSON(), nullable=True),
        sa.Column('conversation_date', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_leadership_conversations_partner_id', 'leadership_conversations', ['partner_id'])

    op.create_table(
        'system_settings',
        *base_columns(),
        sa.Column('category', sa.String(length=50), nullable=False),
        sa.Column('setting_key', sa.String(length=100), nullable=False, unique=True),
        sa.Column('setting_value', sa.Text(), nullable=True),
        sa.Column('data_type', sa.String(length=20), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
    )

    op.create_table(
        'alerts',
        *base_columns(),
        sa.Column('alert_type', sa.String(length=50), nullable=False),
        sa.Column('severity', sa.String(length=20), nullable=True),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('entity_type', sa.String(length=50), nullable=True),
        sa.Column('entity_id', sa.Integer(), nullable=True),
        sa.Column('metric', sa.String(length=50), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=True),
        sa.Column('is_resolved', sa.Boolean(), nullable=True),
        sa.Column('assigned_to', sa.Integer(), nullable=True),
        sa.Column('resolved_by', sa.Integer(), nullable=True),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('resolution_notes', sa.Text(), nullable=True),
    )
    print("✓ [3a1f0c2d9b7e] Created SalesTrack tables")


def downgrade() -> None:
    for table in ('alerts', 'system_settings', 'leadership_conversations', 'monthly_plan_notes',
                  'plan_locks', 'baseline_snapshots', 'goal_targets', 'goal_sets',
                  'daily_entries', 'users', 'teams'):
        op.drop_table(table)
    for enum_name in ('metrickey', 'goalauthor', 'goalperiod', 'userrole'):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
