"""
Periodization phase schemas.

The phase sequence is the fixed 4-cycle
accumulation -> intensification -> realization -> deload -> accumulation.
"""

import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Phase(str, Enum):
    ACCUMULATION = "accumulation"
    INTENSIFICATION = "intensification"
    REALIZATION = "realization"
    DELOAD = "deload"


class TransitionRisk(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class CycleSource(str, Enum):
    RECONSTRUCTED = "reconstructed"
    PERSISTED = "persisted"


class PhaseCharacteristics(BaseModel):
    """Static training emphasis of a phase."""

    model_config = ConfigDict(frozen=True)

    volume_multiplier: float = Field(..., gt=0.0)
    intensity_multiplier: float = Field(..., gt=0.0)
    rep_adjustment: int
    rest_adjustment_seconds: int
    duration_weeks: int = Field(..., ge=1)
    focus: str
    transition_triggers: tuple[str, ...] = ()


class PeriodizationCycle(BaseModel):
    """Where an athlete currently sits in the cycle."""

    model_config = ConfigDict(frozen=True)

    athlete_id: str
    cycle_start: datetime.date
    phase: Phase
    phase_start: datetime.date
    source: CycleSource = CycleSource.RECONSTRUCTED

    def weeks_in_phase(self, as_of: datetime.date) -> float:
        return max(0.0, (as_of - self.phase_start).days / 7.0)


class PhaseAlternative(BaseModel):
    phase: Phase
    suitability: int = Field(..., ge=0, le=100)
    reason: str


class PeriodizationRecommendation(BaseModel):
    athlete_id: str
    as_of: datetime.date
    current_phase: Phase
    recommended_phase: Phase
    next_phase: Phase
    characteristics: PhaseCharacteristics
    should_transition: bool
    weeks_in_phase: float = Field(..., ge=0.0)
    reasoning: list[str] = Field(default_factory=list)
    expected_benefits: list[str] = Field(default_factory=list)
    transition_timeline: str
    transition_risk: TransitionRisk = Field(..., description="Risk of moving into next_phase now")
    alternatives: list[PhaseAlternative] = Field(default_factory=list)
