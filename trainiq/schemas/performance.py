"""Per-exercise performance analytics schemas (input to the plateau analyzer)."""

import datetime
from enum import Enum

from pydantic import BaseModel, Field


class ConsistencyPattern(str, Enum):
    REGULAR = "regular"
    IRREGULAR = "irregular"
    DECLINING = "declining"
    INCREASING = "increasing"


class SessionPerformance(BaseModel):
    """All sets of one exercise in one session, collapsed."""

    session_date: datetime.date
    set_count: int = Field(..., ge=0)
    total_reps: int = Field(..., ge=0)
    max_weight: float = Field(..., ge=0.0)
    total_volume: float = Field(..., ge=0.0)
    best_set_volume: float = Field(..., ge=0.0)
    estimated_one_rep_max: float = Field(..., ge=0.0, description="Best Epley e1RM of the session")


class ProgressionMetrics(BaseModel):
    weight_increase_rate: float = Field(0.0, description="Mean relative max-weight change between sessions")
    volume_increase_rate: float = Field(0.0, description="Mean relative volume change between sessions")
    velocity_kg_per_week: float = 0.0
    progression_consistency: float = Field(0.0, ge=0.0, le=1.0, description="Share of sessions that progressed")
    recent_stagnation: float = Field(0.0, ge=0.0, le=1.0, description="Share of the last 5 sessions under 2% gain")


class WeeklyVolume(BaseModel):
    week_start: datetime.date
    volume: float = Field(..., ge=0.0)
    sessions: int = Field(..., ge=0)


class StrengthPoint(BaseModel):
    session_date: datetime.date
    estimated_one_rep_max: float = Field(..., ge=0.0)


class FrequencyMetrics(BaseModel):
    sessions_per_week: float = Field(0.0, ge=0.0)
    consistency_pattern: ConsistencyPattern = ConsistencyPattern.IRREGULAR
    consistency_score: float = Field(0.0, ge=0.0, le=1.0)


class RecoveryIndicators(BaseModel):
    rest_gaps: list[int] = Field(default_factory=list)
    average_rest_days: float = Field(0.0, ge=0.0)
    performance_after_rest: list[float] = Field(default_factory=list, description="e1RM ratio vs previous session")
    fatigue_scores: list[float] = Field(default_factory=list, description="Per-session fatigue score in [0, 1]")


class ExercisePerformance(BaseModel):
    athlete_id: str
    exercise_id: str
    sessions: list[SessionPerformance] = Field(default_factory=list, description="Chronological")
    progression: ProgressionMetrics = Field(default_factory=ProgressionMetrics)
    weekly_volume: list[WeeklyVolume] = Field(default_factory=list)
    strength_curve: list[StrengthPoint] = Field(default_factory=list)
    frequency: FrequencyMetrics = Field(default_factory=FrequencyMetrics)
    recovery: RecoveryIndicators = Field(default_factory=RecoveryIndicators)
