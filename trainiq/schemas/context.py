"""
Training context summary schemas.

A :class:`TrainingContextSummary` is derived from the completed sessions in
a trailing window and is recomputed on every call.  Percent fields live in
``[0, 100]``; ratios are non-negative.
"""

import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from trainiq.schemas.common import LoadIntensity, Priority, RiskLevel, Trend


class RecoveryStatus(str, Enum):
    FRESH = "fresh"
    OPTIMAL = "optimal"
    FATIGUED = "fatigued"
    OVERTRAINED = "overtrained"


class InsightCategory(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    CONCERNING = "concerning"


class AnalysisPeriod(BaseModel):
    start_date: datetime.date
    end_date: datetime.date
    weeks: int = Field(..., ge=1)
    total_sessions: int = Field(..., ge=0)


class SessionMetrics(BaseModel):
    """Averages over the completed sessions of the analysis window."""

    average_duration_minutes: float = Field(0.0, ge=0.0)
    duration_trend: Trend = Trend.STABLE
    average_exercises_per_session: float = Field(0.0, ge=0.0)
    average_sets_per_session: float = Field(0.0, ge=0.0)
    average_volume_per_session: float = Field(0.0, ge=0.0)
    completion_rate: float = Field(0.0, ge=0.0, le=100.0, description="% of sessions with at least one set")


class RestPatternIssue(BaseModel):
    pattern: str = Field(..., description="insufficient_recovery, inconsistent_scheduling, overtraining_frequency")
    description: str
    severity: RiskLevel
    occurrences: int = Field(..., ge=0)


class RestAdjustment(BaseModel):
    horizon: str = Field(..., description="immediate, short_term or long_term")
    action: str
    rationale: str


class RestPeriodAnalysis(BaseModel):
    average_rest_days: float = Field(0.0, ge=0.0)
    optimal_rest_days: float = Field(..., gt=0.0)
    rest_consistency: float = Field(..., ge=0.0, le=100.0)
    rest_period_trend: Trend = Trend.STABLE
    rest_gaps: list[int] = Field(default_factory=list, description="Days between consecutive sessions")
    problematic_patterns: list[RestPatternIssue] = Field(default_factory=list)
    recommended_adjustments: list[RestAdjustment] = Field(default_factory=list)


class MuscleGroupBalance(BaseModel):
    muscle_group: str
    volume: float = Field(..., ge=0.0)
    target_volume: float = Field(..., ge=0.0)
    balance_ratio: float = Field(..., ge=0.0, le=200.0, description="volume / target x 100")
    last_trained: Optional[datetime.date] = None
    recovery_status: RecoveryStatus


class TrainingLoadMetrics(BaseModel):
    current_load: int = Field(..., ge=0)
    sustainable_load: int = Field(..., ge=0)
    load_ratio: float = Field(..., ge=0.0)
    load_trend: Trend = Trend.STABLE
    load_intensity: LoadIntensity
    recovery_demand: float = Field(..., ge=0.0, le=100.0)
    risk_score: float = Field(..., ge=0.0, le=100.0, description="(load_ratio - 1) x 50 + recovery_demand")
    overtraining_risk: RiskLevel
    sessions_per_week: float = Field(0.0, ge=0.0)
    average_volume_per_session: float = Field(0.0, ge=0.0)
    load_balance: list[MuscleGroupBalance] = Field(default_factory=list)


class RecoveryFactors(BaseModel):
    current_recovery_demand: float = Field(..., ge=0.0, le=100.0)
    recovery_efficiency: float = Field(..., ge=0.0, le=100.0)
    fatigue_accumulation: float = Field(..., ge=0.0, le=100.0)
    recommended_rest_days: float = Field(..., gt=0.0)


class ContextInsight(BaseModel):
    category: InsightCategory
    message: str


class ContextRecommendation(BaseModel):
    priority: Priority
    area: str = Field(..., description="rest_periods, volume, session_length, ...")
    message: str


class TrainingContextSummary(BaseModel):
    """Complete training context for one athlete at ``as_of``.

    ``is_neutral`` is set when the window held fewer than two completed
    sessions and every metric carries its documented default.
    """

    athlete_id: str
    as_of: datetime.date
    analysis_period: AnalysisPeriod
    session_metrics: SessionMetrics
    rest_period_analysis: RestPeriodAnalysis
    training_load_metrics: TrainingLoadMetrics
    recovery_factors: RecoveryFactors
    insights: list[ContextInsight] = Field(default_factory=list)
    recommendations: list[ContextRecommendation] = Field(default_factory=list)
    is_neutral: bool = False
