"""
Athlete profile database model.

Holds the profile fields the engine reads.  Everything except the
identifier is optional; missing values make the engine fall back to its
conservative defaults.
"""

import datetime
from typing import Optional

from sqlmodel import Field, SQLModel


class Athlete(SQLModel, table=True):
    __tablename__ = "athletes"

    athlete_id: str = Field(primary_key=True, max_length=64)
    display_name: Optional[str] = Field(default=None, max_length=255)

    # Profile (stored as the enum values of trainiq.schemas.profile)
    experience_level: Optional[str] = Field(default=None, max_length=20)
    primary_goal: Optional[str] = Field(default=None, max_length=20)
    training_frequency: Optional[float] = Field(default=None, ge=1.0, le=7.0)
    programme_type: Optional[str] = Field(default=None, max_length=50)
    body_weight_kg: Optional[float] = Field(default=None)
    height_cm: Optional[float] = Field(default=None)
    age: Optional[int] = Field(default=None)

    # Timestamps
    created_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)
    updated_at: datetime.datetime = Field(default_factory=datetime.datetime.utcnow)
