"""
Base database configuration.

Import all models here so Alembic can detect them for migrations.
"""

# Import all models for Alembic autogenerate
from trainiq.models.athlete import Athlete  # noqa: F401
from trainiq.models.cycle import TrainingCycle  # noqa: F401
from trainiq.models.exercise import Exercise  # noqa: F401
from trainiq.models.workout import SetLog, WorkoutSession  # noqa: F401
