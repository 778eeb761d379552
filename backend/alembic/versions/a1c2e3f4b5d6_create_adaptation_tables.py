"""create_adaptation_tables

Revision ID: a1c2e3f4b5d6
Revises:
Create Date: 2026-10-16 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
import sqlmodel


# revision identifiers, used by Alembic.
revision: str = 'a1c2e3f4b5d6'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('daily_metric',
        sa.Column('id', sqlmodel.sql.sqltypes.GUID(), nullable=False),
        sa.Column('athlete_id', sqlmodel.sql.sqltypes.GUID(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('hrv_rmssd', sa.Float(), nullable=True),
        sa.Column('sleep_minutes', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_daily_metric_athlete_id'), 'daily_metric', ['athlete_id'])
    op.create_index(op.f('ix_daily_metric_date'), 'daily_metric', ['date'])

    op.create_table('soreness_entry',
        sa.Column('id', sqlmodel.sql.sqltypes.GUID(), nullable=False),
        sa.Column('athlete_id', sqlmodel.sql.sqltypes.GUID(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_soreness_entry_athlete_id'), 'soreness_entry', ['athlete_id'])
    op.create_index(op.f('ix_soreness_entry_date'), 'soreness_entry', ['date'])

    op.create_table('jump_test',
        sa.Column('id', sqlmodel.sql.sqltypes.GUID(), nullable=False),
        sa.Column('athlete_id', sqlmodel.sql.sqltypes.GUID(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('height_cm', sa.Float(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_jump_test_athlete_id'), 'jump_test', ['athlete_id'])
    op.create_index(op.f('ix_jump_test_date'), 'jump_test', ['date'])

    op.create_table('training_session',
        sa.Column('id', sqlmodel.sql.sqltypes.GUID(), nullable=False),
        sa.Column('athlete_id', sqlmodel.sql.sqltypes.GUID(), nullable=False),
        sa.Column('coach_id', sqlmodel.sql.sqltypes.GUID(), nullable=True),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('started_at', sa.DateTime(), nullable=False),
        sa.Column('ended_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_training_session_athlete_id'), 'training_session', ['athlete_id'])
    op.create_index(op.f('ix_training_session_coach_id'), 'training_session', ['coach_id'])

    op.create_table('load_plan',
        sa.Column('id', sqlmodel.sql.sqltypes.GUID(), nullable=False),
        sa.Column('athlete_id', sqlmodel.sql.sqltypes.GUID(), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('tree', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_load_plan_athlete_id'), 'load_plan', ['athlete_id'])
    op.create_index(op.f('ix_load_plan_is_active'), 'load_plan', ['is_active'])

    op.create_table('adjustment_event',
        sa.Column('id', sqlmodel.sql.sqltypes.GUID(), nullable=False),
        sa.Column('session_id', sqlmodel.sql.sqltypes.GUID(), nullable=False),
        sa.Column('athlete_id', sqlmodel.sql.sqltypes.GUID(), nullable=False),
        sa.Column('coach_id', sqlmodel.sql.sqltypes.GUID(), nullable=True),
        sa.Column('metric', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('trigger_value', sa.Float(), nullable=False),
        sa.Column('delta', sa.Float(), nullable=False),
        sa.Column('prompt_text', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('sample_id', sqlmodel.sql.sqltypes.AutoString(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('sample_id'),
    )
    op.create_index(op.f('ix_adjustment_event_session_id'), 'adjustment_event', ['session_id'])
    op.create_index(op.f('ix_adjustment_event_athlete_id'), 'adjustment_event', ['athlete_id'])
    op.create_index(op.f('ix_adjustment_event_created_at'), 'adjustment_event', ['created_at'])

    op.create_table('set_log',
        sa.Column('id', sqlmodel.sql.sqltypes.GUID(), nullable=False),
        sa.Column('session_id', sqlmodel.sql.sqltypes.GUID(), nullable=False),
        sa.Column('exercise', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('weight', sa.Float(), nullable=False),
        sa.Column('reps', sa.Integer(), nullable=False),
        sa.Column('rpe', sa.Float(), nullable=True),
        sa.Column('tempo', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('velocity', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('received_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_set_log_session_id'), 'set_log', ['session_id'])


def downgrade() -> None:
    op.drop_index(op.f('ix_set_log_session_id'), table_name='set_log')
    op.drop_table('set_log')
    op.drop_index(op.f('ix_adjustment_event_created_at'), table_name='adjustment_event')
    op.drop_index(op.f('ix_adjustment_event_athlete_id'), table_name='adjustment_event')
    op.drop_index(op.f('ix_adjustment_event_session_id'), table_name='adjustment_event')
    op.drop_table('adjustment_event')
    op.drop_index(op.f('ix_load_plan_is_active'), table_name='load_plan')
    op.drop_index(op.f('ix_load_plan_athlete_id'), table_name='load_plan')
    op.drop_table('load_plan')
    op.drop_index(op.f('ix_training_session_coach_id'), table_name='training_session')
    op.drop_index(op.f('ix_training_session_athlete_id'), table_name='training_session')
    op.drop_table('training_session')
    op.drop_index(op.f('ix_jump_test_date'), table_name='jump_test')
    op.drop_index(op.f('ix_jump_test_athlete_id'), table_name='jump_test')
    op.drop_table('jump_test')
    op.drop_index(op.f('ix_soreness_entry_date'), table_name='soreness_entry')
    op.drop_index(op.f('ix_soreness_entry_athlete_id'), table_name='soreness_entry')
    op.drop_table('soreness_entry')
    op.drop_index(op.f('ix_daily_metric_date'), table_name='daily_metric')
    op.drop_index(op.f('ix_daily_metric_athlete_id'), table_name='daily_metric')
    op.drop_table('daily_metric')
