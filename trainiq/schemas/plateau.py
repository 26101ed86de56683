"""
Plateau analysis and deload guidance schemas.

Levels by ``plateau_risk``:

- ``none``         : < 0.2
- ``early_warning``: < 0.4
- ``moderate``     : < 0.6
- ``severe``       : < 0.8
- ``critical``     : otherwise
"""

import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from trainiq.schemas.common import RiskLevel


class PlateauLevel(str, Enum):
    NONE = "none"
    EARLY_WARNING = "early_warning"
    MODERATE = "moderate"
    SEVERE = "severe"
    CRITICAL = "critical"


class PlateauFactorType(str, Enum):
    PROGRESSION_VELOCITY = "progression_velocity"
    VOLUME_STAGNATION = "volume_stagnation"
    RECOVERY_INDICATORS = "recovery_indicators"
    CONSISTENCY_BREAKDOWN = "consistency_breakdown"
    FATIGUE_ACCUMULATION = "fatigue_accumulation"
    PERIODIZATION_CONTEXT = "periodization_context"
    TRAINING_AGE = "training_age"


class FactorTrend(str, Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


class DeloadType(str, Enum):
    COMPLETE_DELOAD = "complete_deload"
    VOLUME_REDUCTION = "volume_reduction"


class PlateauFactor(BaseModel):
    factor: PlateauFactorType
    severity: float = Field(..., ge=0.0, le=1.0)
    impact: RiskLevel
    trend: FactorTrend = FactorTrend.STABLE
    data_points: int = Field(..., ge=0)
    description: str


class DeloadRecommendation(BaseModel):
    deload_type: DeloadType
    duration_weeks: int = Field(..., ge=1)
    volume_reduction_pct: int = Field(..., ge=0, le=100)
    weight_reduction_pct: int = Field(..., ge=0, le=100)
    rationale: str
    expected_recovery: str
    monitoring_checklist: list[str] = Field(default_factory=list)


class PlateauAnalysis(BaseModel):
    athlete_id: str
    exercise_id: str
    exercise_name: str = "Unknown Exercise"
    as_of: datetime.date
    plateau_level: PlateauLevel
    plateau_risk: float = Field(..., ge=0.0, le=1.0)
    factors: list[PlateauFactor] = Field(default_factory=list)
    recommended_actions: list[str] = Field(default_factory=list)
    time_to_plateau_weeks: Optional[float] = Field(None, ge=0.0, description="0 when already stalled")
    confidence: float = Field(..., ge=0.0, le=1.0)
    summary: str
    detailed_analysis: list[str] = Field(default_factory=list)
    deload: Optional[DeloadRecommendation] = None
    data_points: int = Field(0, ge=0, description="Sessions of this exercise in the window")
    sufficient_data: bool = True
