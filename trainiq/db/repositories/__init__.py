"""Database repositories."""

from trainiq.db.repositories.athlete import AthleteRepository
from trainiq.db.repositories.cycle import TrainingCycleRepository
from trainiq.db.repositories.exercise import ExerciseRepository
from trainiq.db.repositories.workout import WorkoutRepository

__all__ = [
    "AthleteRepository",
    "TrainingCycleRepository",
    "ExerciseRepository",
    "WorkoutRepository",
]
