"""weekly reviews, weekday questions and alert cycles

Revision ID: 8d4b2e6f1a3c
Revises: 3a1f0c2d9b7e
Create Date: 2025-11-03 09:27:41.503218
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

revision: str = '8d4b2e6f1a3c'
down_revision: Union[str, None] = '3a1f0c2d9b7e'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


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
    connection = op.get_bind()
    inspector = inspect(connection)
    tables = inspector.get_table_names()

    columns = [col['name'] for col in inspector.get_columns('alerts')]
    if 'cycle_label' not in columns:
        op.add_column('alerts', sa.Column('cycle_label', sa.String(length=50), nullable=True))
        print("✓ [8d4b2e6f1a3c] Added cycle_label to alerts")
    else:
        print("✓ [8d4b2e6f1a3c] cycle_label already exists - skipping")

    columns = [col['name'] for col in inspector.get_columns('daily_entries')]
    if 'weekday_answers' not in columns:
        op.add_column('daily_entries', sa.Column('weekday_answers', sa.JSON(), nullable=True))
        print("✓ [8d4b2e6f1a3c] Added weekday_answers to daily_entries")
    else:
        print("✓ [8d4b2e6f1a3c] weekday_answers already exists - skipping")

    if 'weekday_questions' not in tables:
        op.create_table(
            'weekday_questions',
            *base_columns(),
            sa.Column('weekday', sa.Integer(), nullable=False),
            sa.Column('yesterday_question', sa.Text(), nullable=False),
            sa.Column('today_questions', sa.JSON(), nullable=False),
            sa.Column('trainee_question', sa.Text(), nullable=True),
            sa.UniqueConstraint('weekday', name='uq_weekday_questions_weekday'),
        )
        print("✓ [8d4b2e6f1a3c] Created weekday_questions")

    if 'weekly_goal_reviews' not in tables:
        op.create_table(
            'weekly_goal_reviews',
            *base_columns(),
            sa.Column('goal_set_id', sa.Integer(), sa.ForeignKey('goal_sets.id', ondelete='CASCADE'), nullable=False),
            sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
            sa.Column('week_start', sa.Date(), nullable=False),
            sa.Column('goal_achieved', sa.Boolean(), nullable=True),
            sa.Column('completion_notes', sa.Text(), nullable=True),
            sa.Column('next_week_focus', sa.Text(), nullable=True),
            sa.UniqueConstraint('goal_set_id', name='uq_weekly_review_goal_set'),
        )
        op.create_index('ix_weekly_goal_reviews_user_id', 'weekly_goal_reviews', ['user_id'])
        print("✓ [8d4b2e6f1a3c] Created weekly_goal_reviews")


def downgrade() -> None:
    connection = op.get_bind()
    inspector = inspect(connection)
    tables = inspector.get_table_names()

    if 'weekly_goal_reviews' in tables:
        op.drop_table('weekly_goal_reviews')
    if 'weekday_questions' in tables:
        op.drop_table('weekday_questions')

    columns = [col['name'] for col in inspector.get_columns('daily_entries')]
    if 'weekday_answers' in columns:
        op.drop_column('daily_entries', 'weekday_answers')

    columns = [col['name'] for col in inspector.get_columns('alerts')]
    if 'cycle_label' in columns:
        op.drop_column('alerts', 'cycle_label')
