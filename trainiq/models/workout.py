"""
Workout log database models.

A :class:`WorkoutSession` owns its :class:`SetLog` rows.  Sessions without
``completed_at`` are still in progress and are never handed to the engine.
"""

import datetime
from typing import Optional

from sqlmodel import Field, SQLModel


class WorkoutSession(SQLModel, table=True):
    """One workout of one athlete."""

    __tablename__ = "workout_sessions"

    id: Optional[int] = Field(default=None, primary_key=True)
    athlete_id: str = Field(foreign_key="athletes.athlete_id", nullable=False, max_length=64, index=True)
    session_date: datetime.date = Field(nullable=False, index=True)

    # Null while the session is in progress
    completed_at: Optional[datetime.datetime] = Field(default=None)
    duration_minutes: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = Field(default=None, max_length=1000)

    created_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)


class SetLog(SQLModel, table=True):
    """A single logged set (weight x reps)."""

    __tablename__ = "set_logs"

    id: Optional[int] = Field(default=None, primary_key=True)
    session_id: int = Field(foreign_key="workout_sessions.id", nullable=False, index=True)
    exercise_id: str = Field(nullable=False, max_length=64, index=True)

    # Order within the session
    set_order: int = Field(default=1, nullable=False)
    weight_kg: float = Field(default=0.0, ge=0.0, nullable=False)
    reps: int = Field(default=0, ge=0, nullable=False)

    logged_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)
