"""SQLModel database models."""

from trainiq.models.athlete import Athlete
from trainiq.models.cycle import TrainingCycle
from trainiq.models.exercise import Exercise
from trainiq.models.workout import SetLog, WorkoutSession

__all__ = [
    "Athlete",
    "TrainingCycle",
    "Exercise",
    "SetLog",
    "WorkoutSession",
]
