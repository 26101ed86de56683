"""Per-exercise progression recommendation schemas."""

import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from trainiq.schemas.periodization import Phase


class AlternativeKind(str, Enum):
    CONSERVATIVE = "conservative"
    AGGRESSIVE = "aggressive"
    TECHNIQUE = "technique"


class RecentTraining(BaseModel):
    """Recent whole-athlete training, across every exercise.

    ``rest_days_since_last`` is ``None`` without a completed session.
    ``average_set_volume`` is the mean over the last week's sessions of
    session volume divided by its set count.
    """

    rest_days_since_last: Optional[int] = Field(None, ge=0)
    weekly_volume: float = Field(0.0, ge=0.0, description="kg moved in the last 7 days")
    current_streak: int = Field(0, ge=0, description="Sessions on consecutive days up to the latest one")
    average_set_volume: float = Field(0.0, ge=0.0)
    last_session_date: Optional[datetime.date] = None


class ProgressionFactors(BaseModel):
    """The four multiplicative factors behind ``total_increment``."""

    base_increment: float = Field(..., ge=0.015, le=0.10)
    volume_multiplier: float = Field(..., ge=0.7, le=1.0)
    recovery_factor: float = Field(..., ge=0.5, le=1.3)
    plateau_adjustment: float = Field(..., ge=0.5, le=1.2)
    total_increment: float = Field(..., ge=0.0)


class ProgressionAlternative(BaseModel):
    kind: AlternativeKind
    weight: float = Field(..., ge=0.0)
    reps: int = Field(..., ge=1)
    description: str


class ProgressionRecommendation(BaseModel):
    """Suggested next weight and reps for one exercise.

    ``suggested_weight`` is a non-negative multiple of the configured
    quantum.  ``used_defaults`` is set when the fallback path ran because
    the profile or context was missing.
    """

    athlete_id: str
    exercise_id: str
    exercise_name: str = "Unknown Exercise"
    suggested_weight: float = Field(..., ge=0.0)
    suggested_reps: int = Field(..., ge=1)
    confidence: float = Field(..., ge=0.0, le=1.0)
    reasoning: list[str] = Field(default_factory=list)
    alternative_options: list[ProgressionAlternative] = Field(default_factory=list, max_length=2)
    plateau_detected: bool = False
    deload_recommended: bool = False
    used_defaults: bool = False
    factors: Optional[ProgressionFactors] = None
    phase: Optional[Phase] = None
    recent_training: Optional[RecentTraining] = None
