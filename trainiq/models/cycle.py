"""
Persisted periodization cycle.

One row per athlete, overwritten when the cycle advances.  Absent rows mean
the engine reconstructs the cycle from the session history.
"""

import datetime

from sqlmodel import Field, SQLModel


class TrainingCycle(SQLModel, table=True):
    __tablename__ = "training_cycles"

    athlete_id: str = Field(foreign_key="athletes.athlete_id", primary_key=True, max_length=64)
    cycle_start: datetime.date = Field(nullable=False)
    phase: str = Field(nullable=False, max_length=20)
    phase_start: datetime.date = Field(nullable=False)

    updated_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)
