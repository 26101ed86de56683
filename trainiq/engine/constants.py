"""
Named threshold tables used across the engine.

The cut-offs are empirically chosen heuristics.  They are kept here, as
plain module-level tables, so that each one can be inspected and tested on
its own and tuned without touching the computation code.  Threshold lists
use the ``(label, low, high)`` convention with ``low <= value < high``.
"""

from __future__ import annotations

from trainiq.schemas.common import LoadIntensity, RiskLevel
from trainiq.schemas.periodization import Phase, PhaseCharacteristics
from trainiq.schemas.plateau import DeloadType, PlateauLevel
from trainiq.schemas.profile import ExperienceLevel

INF = float("inf")

# ======================================================================
# Rest days
# ======================================================================

# (minimum sessions/week, optimal rest days), checked top to bottom
OPTIMAL_REST_TABLE: list[tuple[float, float]] = [
    (5.0, 1.5),
    (3.0, 2.5),
    (2.0, 3.5),
]
OPTIMAL_REST_FALLBACK: float = 5.0

# ======================================================================
# Load model
# ======================================================================

LOAD_INTENSITY_THRESHOLDS: list[tuple[LoadIntensity, float, float]] = [
    (LoadIntensity.LOW, -INF, 0.7),
    (LoadIntensity.MODERATE, 0.7, 0.9),
    (LoadIntensity.HIGH, 0.9, 1.1),
    (LoadIntensity.VERY_HIGH, 1.1, INF),
]

# Shared by the load model and the aggregate overtraining score
RISK_THRESHOLDS: list[tuple[RiskLevel, float, float]] = [
    (RiskLevel.LOW, -INF, 30.0),
    (RiskLevel.MODERATE, 30.0, 60.0),
    (RiskLevel.HIGH, 60.0, 80.0),
    (RiskLevel.CRITICAL, 80.0, INF),
]

# Returned when the window holds too few sessions
NEUTRAL_SUSTAINABLE_LOAD: int = 50
NEUTRAL_RECOVERY_DEMAND: float = 20.0
NEUTRAL_OPTIMAL_REST_DAYS: float = 3.0
DEFAULT_SESSION_DURATION_MINUTES: int = 45

# ======================================================================
# Overtraining score
# ======================================================================

PATTERN_SEVERITY_WEIGHTS: dict[RiskLevel, float] = {
    RiskLevel.CRITICAL: 25.0,
    RiskLevel.HIGH: 15.0,
    RiskLevel.MODERATE: 8.0,
    RiskLevel.LOW: 3.0,
}

RISK_CATEGORY_POINTS: dict[RiskLevel, float] = {
    RiskLevel.CRITICAL: 40.0,
    RiskLevel.HIGH: 30.0,
    RiskLevel.MODERATE: 20.0,
    RiskLevel.LOW: 5.0,
}

LOAD_INTENSITY_POINTS: dict[LoadIntensity, float] = {
    LoadIntensity.VERY_HIGH: 20.0,
    LoadIntensity.HIGH: 10.0,
    LoadIntensity.MODERATE: 5.0,
    LoadIntensity.LOW: 0.0,
}

# (upper bound exclusive, points)
REST_CONSISTENCY_POINTS: list[tuple[float, float]] = [(50.0, 25.0), (70.0, 15.0)]
AVERAGE_REST_POINTS: list[tuple[float, float]] = [(3.0, 20.0), (4.0, 10.0)]

REASSESSMENT_DAYS: dict[RiskLevel, int] = {
    RiskLevel.CRITICAL: 7,
    RiskLevel.HIGH: 5,
    RiskLevel.MODERATE: 10,
    RiskLevel.LOW: 14,
}

# ======================================================================
# Periodization
# ======================================================================

PHASE_SEQUENCE: tuple[Phase, ...] = (
    Phase.ACCUMULATION,
    Phase.INTENSIFICATION,
    Phase.REALIZATION,
    Phase.DELOAD,
)

PHASE_CHARACTERISTICS: dict[Phase, PhaseCharacteristics] = {
    Phase.ACCUMULATION: PhaseCharacteristics(
        volume_multiplier=1.2, intensity_multiplier=0.85, rep_adjustment=2, rest_adjustment_seconds=-5,
        duration_weeks=4, focus="Build work capacity and muscle mass with higher volume",
        transition_triggers=("Volume tolerance established", "Consistent performance", "Load plateau reached"),
    ),
    Phase.INTENSIFICATION: PhaseCharacteristics(
        volume_multiplier=0.9, intensity_multiplier=1.05, rep_adjustment=-1, rest_adjustment_seconds=5,
        duration_weeks=3, focus="Convert accumulated volume into strength with heavier loads",
        transition_triggers=("Strength gains slowing", "Recovery demand rising", "Intensity targets met"),
    ),
    Phase.REALIZATION: PhaseCharacteristics(
        volume_multiplier=0.75, intensity_multiplier=1.1, rep_adjustment=-2, rest_adjustment_seconds=10,
        duration_weeks=2, focus="Express peak strength with low volume and high intensity",
        transition_triggers=("Peak performance reached", "Fatigue accumulating", "Overtraining risk rising"),
    ),
    Phase.DELOAD: PhaseCharacteristics(
        volume_multiplier=0.6, intensity_multiplier=0.8, rep_adjustment=1, rest_adjustment_seconds=-10,
        duration_weeks=1, focus="Dissipate fatigue and restore readiness for the next cycle",
        transition_triggers=("Fatigue dissipated", "Readiness restored", "Motivation returning"),
    ),
}

# Sum of the nominal phase durations
CYCLE_LENGTH_WEEKS: int = sum(c.duration_weeks for c in PHASE_CHARACTERISTICS.values())

# Share of the nominal duration a phase must run before an early trigger can end it
EARLY_TRANSITION_MIN_SHARE: float = 0.5

# ======================================================================
# Progression
# ======================================================================

# Base weekly increment by experience and sessions/week (index 0 = 1x/week)
BASE_INCREMENT_TABLE: dict[ExperienceLevel, tuple[float, ...]] = {
    ExperienceLevel.BEGINNER: (0.10, 0.08, 0.06, 0.05, 0.04, 0.03, 0.025),
    ExperienceLevel.INTERMEDIATE: (0.07, 0.06, 0.05, 0.04, 0.035, 0.03, 0.025),
    ExperienceLevel.ADVANCED: (0.05, 0.04, 0.035, 0.03, 0.025, 0.02, 0.015),
}

FALLBACK_INCREMENT: float = 0.05
FALLBACK_CONFIDENCE: float = 0.5
DEFAULT_TRAINING_FREQUENCY: float = 3.0

# (rest days lower bound, factor), checked top to bottom after the long-layoff rule
REST_DAY_RECOVERY_FACTORS: list[tuple[int, float]] = [
    (3, 0.9),
    (2, 0.95),
    (1, 1.0),
    (0, 0.8),
]

RISK_PLATEAU_ADJUSTMENTS: dict[RiskLevel, float] = {
    RiskLevel.CRITICAL: 0.7,
    RiskLevel.HIGH: 0.85,
    RiskLevel.MODERATE: 0.95,
    RiskLevel.LOW: 1.0,
}

CONFIDENCE_RISK_PENALTIES: dict[RiskLevel, float] = {
    RiskLevel.CRITICAL: 0.2,
    RiskLevel.HIGH: 0.1,
}

# ======================================================================
# Plateau analysis
# ======================================================================

PLATEAU_IMPACT_WEIGHTS: dict[RiskLevel, float] = {
    RiskLevel.CRITICAL: 3.0,
    RiskLevel.HIGH: 2.0,
    RiskLevel.MODERATE: 1.0,
    RiskLevel.LOW: 0.5,
}

PLATEAU_LEVEL_THRESHOLDS: list[tuple[PlateauLevel, float, float]] = [
    (PlateauLevel.NONE, -INF, 0.2),
    (PlateauLevel.EARLY_WARNING, 0.2, 0.4),
    (PlateauLevel.MODERATE, 0.4, 0.6),
    (PlateauLevel.SEVERE, 0.6, 0.8),
    (PlateauLevel.CRITICAL, 0.8, INF),
]

PLATEAU_LEVEL_ORDER: dict[PlateauLevel, int] = {
    level: i for i, (level, _, _) in enumerate(PLATEAU_LEVEL_THRESHOLDS)
}

# level -> (type, weeks, volume reduction %, weight reduction %)
DELOAD_BANDS: dict[PlateauLevel, tuple[DeloadType, int, int, int]] = {
    PlateauLevel.CRITICAL: (DeloadType.COMPLETE_DELOAD, 2, 70, 20),
    PlateauLevel.SEVERE: (DeloadType.VOLUME_REDUCTION, 2, 50, 10),
    PlateauLevel.MODERATE: (DeloadType.VOLUME_REDUCTION, 1, 30, 5),
}
