"""Athlete profile and exercise metadata read from external collaborators."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ExperienceLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class TrainingGoal(str, Enum):
    STRENGTH = "strength"
    HYPERTROPHY = "hypertrophy"
    FAT_LOSS = "fat_loss"
    GENERAL = "general"


class AthleteProfile(BaseModel):
    """Profile fields the engine reads.  Every field except the id is optional."""

    athlete_id: str
    experience_level: Optional[ExperienceLevel] = None
    primary_goal: Optional[TrainingGoal] = None
    training_frequency: Optional[float] = Field(None, ge=1.0, le=7.0, description="Sessions per week")
    programme_type: Optional[str] = Field(None, max_length=50, description="Programme split, e.g. ppl or ulul")
    body_weight_kg: Optional[float] = Field(None, gt=0.0)
    height_cm: Optional[float] = Field(None, gt=0.0)
    age: Optional[int] = Field(None, ge=10, le=100)


class ExerciseInfo(BaseModel):
    """Catalog metadata for one exercise."""

    exercise_id: str
    name: str = "Unknown Exercise"
    muscle_group: str = Field("Full Body", description="Primary muscle group used for load balance")
    category: Optional[str] = None
