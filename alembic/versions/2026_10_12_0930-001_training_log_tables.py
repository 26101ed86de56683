"""Add training log, athlete, exercise and cycle tables

Revision ID: 001
Revises:
Create Date: 2026-10-12 09:30:00.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa
import sqlmodel
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create athletes, exercises, workout_sessions, set_logs and training_cycles tables."""
    op.create_table('athletes',
        sa.Column('athlete_id', sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False),
        sa.Column('display_name', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=True),
        sa.Column('experience_level', sqlmodel.sql.sqltypes.AutoString(length=20), nullable=True),
        sa.Column('primary_goal', sqlmodel.sql.sqltypes.AutoString(length=20), nullable=True),
        sa.Column('training_frequency', sa.Float(), nullable=True),
        sa.Column('body_weight_kg', sa.Float(), nullable=True),
        sa.Column('height_cm', sa.Float(), nullable=True),
        sa.Column('age', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.PrimaryKeyConstraint('athlete_id'))

    op.create_table('exercises',
        sa.Column('exercise_id', sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column('muscle_group', sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column('category', sqlmodel.sql.sqltypes.AutoString(length=50), nullable=True),
        sa.PrimaryKeyConstraint('exercise_id'))

    op.create_table('workout_sessions', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('athlete_id', sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False),
        sa.Column('session_date', sa.Date(), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('duration_minutes', sa.Integer(), nullable=True),
        sa.Column('notes', sqlmodel.sql.sqltypes.AutoString(length=1000), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.ForeignKeyConstraint(['athlete_id'], ['athletes.athlete_id']),
        sa.PrimaryKeyConstraint('id'))
    op.create_index(op.f('ix_workout_sessions_athlete_id'), 'workout_sessions', ['athlete_id'], unique=False)
    op.create_index(op.f('ix_workout_sessions_session_date'), 'workout_sessions', ['session_date'], unique=False)

    op.create_table('set_logs', sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.Integer(), nullable=False),
        sa.Column('exercise_id', sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False),
        sa.Column('set_order', sa.Integer(), nullable=False),
        sa.Column('weight_kg', sa.Float(), nullable=False),
        sa.Column('reps', sa.Integer(), nullable=False),
        sa.Column('logged_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.ForeignKeyConstraint(['session_id'], ['workout_sessions.id']),
        sa.PrimaryKeyConstraint('id'))
    op.create_index(op.f('ix_set_logs_session_id'), 'set_logs', ['session_id'], unique=False)
    op.create_index(op.f('ix_set_logs_exercise_id'), 'set_logs', ['exercise_id'], unique=False)

    op.create_table('training_cycles',
        sa.Column('athlete_id', sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False),
        sa.Column('cycle_start', sa.Date(), nullable=False),
        sa.Column('phase', sqlmodel.sql.sqltypes.AutoString(length=20), nullable=False),
        sa.Column('phase_start', sa.Date(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('(CURRENT_TIMESTAMP)')),
        sa.ForeignKeyConstraint(['athlete_id'], ['athletes.athlete_id']),
        sa.PrimaryKeyConstraint('athlete_id'))


def downgrade() -> None:
    """Drop the training tables."""
    op.drop_table('training_cycles')
    op.drop_index(op.f('ix_set_logs_exercise_id'), table_name='set_logs')
    op.drop_index(op.f('ix_set_logs_session_id'), table_name='set_logs')
    op.drop_table('set_logs')
    op.drop_index(op.f('ix_workout_sessions_session_date'), table_name='workout_sessions')
    op.drop_index(op.f('ix_workout_sessions_athlete_id'), table_name='workout_sessions')
    op.drop_table('workout_sessions')
    op.drop_table('exercises')
    op.drop_table('athletes')
