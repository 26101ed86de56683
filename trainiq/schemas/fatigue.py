"""
Overtraining assessment and fatigue pattern schemas.

Patterns are alert objects generated per call and never stored.
"""

import datetime
from enum import Enum

from pydantic import BaseModel, Field

from trainiq.schemas.common import Priority, RiskLevel


class PatternType(str, Enum):
    ACUTE_FATIGUE = "acute_fatigue"
    CHRONIC_FATIGUE = "chronic_fatigue"
    RECOVERY_STALL = "recovery_stall"
    PERFORMANCE_DECLINE = "performance_decline"
    INCONSISTENT_RECOVERY = "inconsistent_recovery"


class PatternTrend(str, Enum):
    WORSENING = "worsening"
    STABLE = "stable"
    IMPROVING = "improving"


class InterventionType(str, Enum):
    DELOAD = "deload"
    FREQUENCY_REDUCTION = "frequency_reduction"
    VOLUME_REDUCTION = "volume_reduction"
    ACTIVE_RECOVERY = "active_recovery"


class FatiguePattern(BaseModel):
    pattern_type: PatternType
    severity: RiskLevel
    confidence: float = Field(..., ge=0.0, le=1.0)
    duration_days: int = Field(..., ge=0, description="Days from first detection to as_of")
    indicators: list[str] = Field(default_factory=list)
    first_detected: datetime.date
    trend: PatternTrend = PatternTrend.STABLE
    recommended_action: str


class RecommendedAction(BaseModel):
    priority: Priority
    category: str
    action: str
    rationale: str


class RecoveryNeeds(BaseModel):
    immediate: list[str] = Field(default_factory=list)
    short_term: list[str] = Field(default_factory=list)
    long_term: list[str] = Field(default_factory=list)


class OvertrainingAssessment(BaseModel):
    """Aggregate overtraining risk for one athlete.

    ``risk_score`` = load-model score + pattern severity weights, clamped to
    ``[0, 100]`` and bucketed with the same cut-offs as the load model.
    """

    athlete_id: str
    as_of: datetime.date
    risk_level: RiskLevel
    risk_score: float = Field(..., ge=0.0, le=100.0)
    load_model_score: float = Field(..., ge=0.0, le=100.0)
    patterns: list[FatiguePattern] = Field(default_factory=list)
    primary_indicators: list[str] = Field(default_factory=list)
    secondary_indicators: list[str] = Field(default_factory=list)
    recovery_needs: RecoveryNeeds = Field(default_factory=RecoveryNeeds)
    recommended_actions: list[RecommendedAction] = Field(default_factory=list)
    monitoring_points: list[str] = Field(default_factory=list)
    reassessment_days: int = Field(..., ge=1)
    next_assessment_date: datetime.date


class RecoveryIntervention(BaseModel):
    intervention_type: InterventionType
    duration_days: int = Field(..., ge=1)
    intensity_pct: int = Field(..., ge=0, le=100, description="Training intensity relative to normal")
    description: str
    guidelines: list[str] = Field(default_factory=list)
    success_metrics: list[str] = Field(default_factory=list)
