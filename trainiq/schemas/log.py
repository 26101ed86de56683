"""
Read-only workout log records.

These are the immutable facts handed to the engine by a log store.  They
are frozen so that no analysis can mutate a session or a set in place.
"""

import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SetRecord(BaseModel):
    """A single logged set (weight x reps) within a session."""

    model_config = ConfigDict(frozen=True)

    exercise_id: str = Field(..., min_length=1)
    weight_kg: float = Field(..., ge=0.0)
    reps: int = Field(..., ge=0)
    logged_at: Optional[datetime.datetime] = None

    @property
    def volume(self) -> float:
        return self.weight_kg * self.reps


class WorkoutSessionRecord(BaseModel):
    """A workout session with its set entries."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    athlete_id: str = Field(..., min_length=1)
    session_date: datetime.date
    completed_at: Optional[datetime.datetime] = Field(None, description="Null while the session is in progress")
    duration_minutes: Optional[int] = Field(None, ge=0)
    sets: tuple[SetRecord, ...] = ()

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    @property
    def total_volume(self) -> float:
        return sum(s.volume for s in self.sets)

    @property
    def exercise_ids(self) -> set[str]:
        return {s.exercise_id for s in self.sets}


class ExerciseSetRecord(BaseModel):
    """A set of one exercise joined with the date of the session it belongs to."""

    model_config = ConfigDict(frozen=True)

    session_id: str
    session_date: datetime.date
    exercise_id: str
    weight_kg: float = Field(..., ge=0.0)
    reps: int = Field(..., ge=0)
    logged_at: Optional[datetime.datetime] = None

    @property
    def volume(self) -> float:
        return self.weight_kg * self.reps
