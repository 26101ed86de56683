"""
Plateau and long-horizon fatigue analysis for a single exercise.

Slower than the progression path and invoked on demand.  Seven factors are
scored independently, each with a severity in ``[0, 1]``, an impact bucket
and a trend:

1. progression velocity: early vs late kg/week over the last 6 sessions,
2. volume stagnation: recent vs previous weekly volume,
3. recovery indicators: rest deviation from optimal and post-rest e1RM,
4. consistency breakdown: the training-frequency pattern,
5. fatigue accumulation: recent vs earlier per-session fatigue scores,
6. periodization context: how the current phase interacts with progress,
7. training age: expected slowdown as training history grows.

A factor with fewer than three qualifying data points is **neutral**
(severity 0, impact low, trend stable) rather than extrapolated.

``plateau_risk`` is the impact-weighted mean of the severities
(critical 3, high 2, moderate 1, low 0.5).
"""

from __future__ import annotations

import datetime
from typing import Optional, Sequence

from loguru import logger
from pydantic import BaseModel, Field

from trainiq.core.exceptions import validate_identifier
from trainiq.engine.constants import DELOAD_BANDS, PLATEAU_IMPACT_WEIGHTS, PLATEAU_LEVEL_THRESHOLDS
from trainiq.engine.context import optimal_rest_days
from trainiq.engine.performance import compute_exercise_performance, period_velocity
from trainiq.engine.stats import clamp, linear_regression, mean, relative_change, split_halves
from trainiq.schemas.common import RiskLevel
from trainiq.schemas.log import ExerciseSetRecord
from trainiq.schemas.performance import ConsistencyPattern, ExercisePerformance
from trainiq.schemas.periodization import Phase
from trainiq.schemas.plateau import (
    DeloadRecommendation,
    FactorTrend,
    PlateauAnalysis,
    PlateauFactor,
    PlateauFactorType,
    PlateauLevel,
)

MIN_DATA_POINTS = 3

# ======================================================================
# Configuration
# ======================================================================


class PlateauConfig(BaseModel):
    window_weeks: int = Field(16, ge=4, le=52, description="History considered for the analysis")
    max_sets: int = Field(300, ge=6, le=2000)
    velocity_sessions: int = Field(6, ge=3)
    consistency_min_sessions: int = Field(5, ge=3)


# Singleton default config
DEFAULT_CONFIG = PlateauConfig()

# ======================================================================
# Labelling
# ======================================================================


def _impact(severity: float, critical_above: Optional[float], high_above: float,
            moderate_above: float, ) -> RiskLevel:
    if critical_above is not None and severity > critical_above:
        return RiskLevel.CRITICAL
    if severity > high_above:
        return RiskLevel.HIGH
    if severity > moderate_above:
        return RiskLevel.MODERATE
    return RiskLevel.LOW


def _neutral(factor: PlateauFactorType, data_points: int, description: str) -> PlateauFactor:
    return PlateauFactor(factor=factor, severity=0.0, impact=RiskLevel.LOW, trend=FactorTrend.STABLE,
                         data_points=data_points, description=description, )


def label_plateau(risk: float) -> PlateauLevel:
    for label, low, high in PLATEAU_LEVEL_THRESHOLDS:
        if low <= risk < high:
            return label
    return PlateauLevel.CRITICAL


# ======================================================================
# Factors
# ======================================================================


def _velocity_factor(perf: ExercisePerformance, cfg: PlateauConfig) -> PlateauFactor:
    recent = perf.sessions[-cfg.velocity_sessions:]
    if len(recent) < MIN_DATA_POINTS:
        return _neutral(PlateauFactorType.PROGRESSION_VELOCITY, len(recent),
                        "Not enough sessions to measure progression velocity")

    mid = len(recent) // 2
    early = period_velocity(recent[:mid + 1] if mid < 2 else recent[:mid])
    late = period_velocity(recent[mid:])
    slope = linear_regression([s.max_weight for s in recent]).slope

    if late < early * 0.5:
        severity, trend, text = 0.8, FactorTrend.DECLINING, "Progress slowed sharply"
    elif late < early * 0.75:
        severity, trend, text = 0.6, FactorTrend.DECLINING, "Progress is slowing"
    elif late > early * 1.2:
        severity, trend, text = 0.1, FactorTrend.IMPROVING, "Progress is accelerating"
    else:
        severity, trend, text = 0.2, FactorTrend.STABLE, "Progress is steady"

    return PlateauFactor(factor=PlateauFactorType.PROGRESSION_VELOCITY, severity=severity,
                         impact=_impact(severity, 0.7, 0.5, 0.3), trend=trend, data_points=len(recent),
                         description=(f"{text} ({early:.2f} -> {late:.2f} kg/week, "
                                      f"{slope:+.2f} kg per session)"), )


def _volume_factor(perf: ExercisePerformance) -> PlateauFactor:
    weeks = [w.volume for w in perf.weekly_volume]
    if len(weeks) < MIN_DATA_POINTS:
        return _neutral(PlateauFactorType.VOLUME_STAGNATION, len(weeks), "Not enough weeks of volume data")

    if len(weeks) >= 8:
        previous, recent = weeks[-8:-4], weeks[-4:]
    else:
        previous, recent = split_halves(weeks)
    change = relative_change(mean(recent), mean(previous))

    if change < -0.10:
        severity, trend = 0.7, FactorTrend.DECLINING
    elif change < 0.05:
        severity, trend = 0.4, FactorTrend.STABLE
    else:
        severity, trend = 0.1, FactorTrend.IMPROVING

    return PlateauFactor(factor=PlateauFactorType.VOLUME_STAGNATION, severity=severity,
                         impact=_impact(severity, None, 0.6, 0.3), trend=trend, data_points=len(weeks),
                         description=f"Weekly volume changed {change:+.0%} against the previous weeks", )


def _recovery_factor(perf: ExercisePerformance) -> PlateauFactor:
    gaps = perf.recovery.rest_gaps
    if len(gaps) < MIN_DATA_POINTS:
        return _neutral(PlateauFactorType.RECOVERY_INDICATORS, len(gaps), "Not enough rest periods to evaluate")

    optimal = optimal_rest_days(perf.frequency.sessions_per_week)
    average = perf.recovery.average_rest_days

    if average > optimal * 1.5:
        severity, text = 0.8, "Rest between sessions is far longer than optimal"
    elif average > optimal * 1.2:
        severity, text = 0.5, "Rest between sessions is longer than optimal"
    elif average < optimal * 0.8:
        severity, text = 0.3, "Rest between sessions is shorter than optimal"
    else:
        severity, text = 0.2, "Rest between sessions is close to optimal"

    post_rest = mean(perf.recovery.performance_after_rest) if perf.recovery.performance_after_rest else 1.0
    if post_rest < 0.95:
        severity = min(1.0, severity + 0.2)
        text += "; strength drops after rest"

    return PlateauFactor(factor=PlateauFactorType.RECOVERY_INDICATORS, severity=severity,
                         impact=_impact(severity, None, 0.6, 0.3),
                         trend=FactorTrend.DECLINING if post_rest < 0.95 else FactorTrend.STABLE,
                         data_points=len(gaps),
                         description=f"{text} ({average:.1f} vs {optimal} days)", )


_PATTERN_SCORES: dict[ConsistencyPattern, float] = {
    ConsistencyPattern.REGULAR: 0.9,
    ConsistencyPattern.INCREASING: 0.7,
    ConsistencyPattern.IRREGULAR: 0.4,
    ConsistencyPattern.DECLINING: 0.2,
}


def _consistency_factor(perf: ExercisePerformance, cfg: PlateauConfig) -> PlateauFactor:
    n = len(perf.sessions)
    if n < cfg.consistency_min_sessions:
        return _neutral(PlateauFactorType.CONSISTENCY_BREAKDOWN, n, "Not enough sessions to judge consistency")

    pattern = perf.frequency.consistency_pattern
    score = _PATTERN_SCORES[pattern]
    if score < 0.5:
        severity = 0.6
    elif score < 0.8:
        severity = 0.3
    else:
        severity = 0.1

    trend = {ConsistencyPattern.DECLINING: FactorTrend.DECLINING,
             ConsistencyPattern.INCREASING: FactorTrend.IMPROVING}.get(pattern, FactorTrend.STABLE)
    return PlateauFactor(factor=PlateauFactorType.CONSISTENCY_BREAKDOWN, severity=severity,
                         impact=_impact(severity, None, 0.5, 0.2), trend=trend, data_points=n,
                         description=f"Training frequency is {pattern.value}", )


def _fatigue_factor(perf: ExercisePerformance) -> PlateauFactor:
    scores = perf.recovery.fatigue_scores
    recent, earlier = scores[-3:], scores[-6:-3]
    if len(scores) < MIN_DATA_POINTS or not earlier:
        return _neutral(PlateauFactorType.FATIGUE_ACCUMULATION, len(scores),
                        "Not enough sessions to track fatigue")

    change = relative_change(mean(recent), mean(earlier))
    if change > 0.30:
        severity, trend = 0.8, FactorTrend.DECLINING
    elif change > 0.15:
        severity, trend = 0.5, FactorTrend.DECLINING
    elif change < -0.15:
        severity, trend = 0.1, FactorTrend.IMPROVING
    else:
        severity, trend = 0.2, FactorTrend.STABLE

    return PlateauFactor(factor=PlateauFactorType.FATIGUE_ACCUMULATION, severity=severity,
                         impact=_impact(severity, None, 0.6, 0.3), trend=trend, data_points=len(scores),
                         description=f"Fatigue score changed {change:+.0%} over the last sessions", )


def _periodization_factor(perf: ExercisePerformance, phase: Optional[Phase]) -> PlateauFactor:
    n = len(perf.sessions)
    if phase is None or n < MIN_DATA_POINTS:
        return _neutral(PlateauFactorType.PERIODIZATION_CONTEXT, n, "Training phase unknown")

    progression = perf.progression
    if phase == Phase.ACCUMULATION:
        severity = 0.4 if n > 8 else 0.1
        text = "Long accumulation; consider intensification" if n > 8 else "Building volume in accumulation"
    elif phase == Phase.INTENSIFICATION:
        severity = 0.6 if progression.progression_consistency < 0.6 else 0.3
        text = "Intensification with inconsistent progress" if severity > 0.3 else "Intensification on track"
    elif phase == Phase.REALIZATION:
        severity = 0.7 if progression.recent_stagnation > 0.5 else 0.2
        text = "Realization while progress stalls" if severity > 0.2 else "Realization pushing limits"
    else:
        severity, text = 0.1, "Deload in progress"

    return PlateauFactor(factor=PlateauFactorType.PERIODIZATION_CONTEXT, severity=severity,
                         impact=_impact(severity, None, 0.6, 0.4), trend=FactorTrend.STABLE, data_points=n,
                         description=f"{text} ({Phase(phase).value})", )


def _training_age_factor(perf: ExercisePerformance) -> PlateauFactor:
    n = len(perf.sessions)
    if n < MIN_DATA_POINTS:
        return _neutral(PlateauFactorType.TRAINING_AGE, n, "Training history too short")

    weeks = n / 2.0
    velocity = perf.progression.velocity_kg_per_week
    if weeks < 4:
        severity = 0.1
    elif weeks < 12:
        severity = 0.5 if velocity < 0.1 else 0.2
    else:
        severity = 0.7 if velocity < 0.05 else 0.3

    return PlateauFactor(factor=PlateauFactorType.TRAINING_AGE, severity=severity,
                         impact=_impact(severity, None, 0.6, 0.4),
                         trend=FactorTrend.DECLINING if severity >= 0.5 else FactorTrend.STABLE, data_points=n,
                         description=f"About {weeks:.0f} weeks of history at {velocity:.2f} kg/week", )


def evaluate_factors(perf: ExercisePerformance, phase: Optional[Phase] = None,
                     config: Optional[PlateauConfig] = None, ) -> list[PlateauFactor]:
    cfg = config or DEFAULT_CONFIG
    return [
        _velocity_factor(perf, cfg),
        _volume_factor(perf),
        _recovery_factor(perf),
        _consistency_factor(perf, cfg),
        _fatigue_factor(perf),
        _periodization_factor(perf, phase),
        _training_age_factor(perf),
    ]


def plateau_risk(factors: Sequence[PlateauFactor]) -> float:
    """Impact-weighted mean severity, clamped to [0, 1]."""
    total_weight = sum(PLATEAU_IMPACT_WEIGHTS[f.impact] for f in factors)
    if total_weight == 0:
        return 0.0
    return clamp(sum(f.severity * PLATEAU_IMPACT_WEIGHTS[f.impact] for f in factors) / total_weight, 0.0, 1.0)


# ======================================================================
# Recommendations & narrative
# ======================================================================

_LEVEL_ACTIONS: dict[PlateauLevel, str] = {
    PlateauLevel.CRITICAL: "Take a deload week now",
    PlateauLevel.SEVERE: "Reduce training volume by 40-60% for 1-2 weeks",
    PlateauLevel.MODERATE: "Add an extra rest day between sessions of this exercise",
    PlateauLevel.EARLY_WARNING: "Monitor progress closely and review technique",
}

_FACTOR_ACTIONS: dict[PlateauFactorType, str] = {
    PlateauFactorType.PROGRESSION_VELOCITY: "Use smaller, steadier weight increases",
    PlateauFactorType.RECOVERY_INDICATORS: "Adjust rest between sessions of this exercise towards the optimal gap",
    PlateauFactorType.FATIGUE_ACCUMULATION: "Reduce volume or schedule a deload week",
    PlateauFactorType.VOLUME_STAGNATION: "Add a set or vary the rep range to restart volume progression",
    PlateauFactorType.CONSISTENCY_BREAKDOWN: "Train this exercise on a fixed weekly schedule",
}


def _top_factor(factors: Sequence[PlateauFactor]) -> Optional[PlateauFactor]:
    informative = [f for f in factors if f.severity > 0]
    return max(informative, key=lambda f: f.severity) if informative else None


def _recommended_actions(level: PlateauLevel, factors: Sequence[PlateauFactor]) -> list[str]:
    actions: list[str] = []
    if level in _LEVEL_ACTIONS:
        actions.append(_LEVEL_ACTIONS[level])
    top = _top_factor(factors)
    if top is not None and top.factor in _FACTOR_ACTIONS and top.severity >= 0.5:
        actions.append(_FACTOR_ACTIONS[top.factor])
    if not actions:
        actions.append("Keep progressing as planned")
    return actions


def estimate_time_to_plateau(perf: ExercisePerformance, factors: Sequence[PlateauFactor]) -> Optional[float]:
    """Weeks until progress stalls; 0 when already stalled, ``None`` when no factor is declining."""
    if len(perf.sessions) < MIN_DATA_POINTS:
        return None
    velocity = perf.progression.velocity_kg_per_week
    if velocity <= 0:
        return 0.0
    declining = [f for f in factors if f.trend == FactorTrend.DECLINING]
    if not declining:
        return None
    worst = max(declining, key=lambda f: f.severity)
    return round(4 * (1 - worst.severity) * max(0.5, velocity / 0.2), 1)


def analysis_confidence(perf: ExercisePerformance, factors: Sequence[PlateauFactor]) -> float:
    confidence = 0.5
    n = len(perf.sessions)
    if n > 10:
        confidence += 0.2
    elif n > 5:
        confidence += 0.1
    informative = sum(1 for f in factors if f.data_points >= MIN_DATA_POINTS and f.severity > 0)
    confidence += min(0.2, informative * 0.05)
    if perf.frequency.consistency_score > 0.7:
        confidence += 0.1
    return clamp(confidence, 0.0, 1.0)


_LEVEL_SUMMARIES: dict[PlateauLevel, str] = {
    PlateauLevel.NONE: "Progressing well with no sign of a plateau",
    PlateauLevel.EARLY_WARNING: "Early signs that progress is slowing",
    PlateauLevel.MODERATE: "Progress is stalling; recovery needs attention",
    PlateauLevel.SEVERE: "Clear plateau forming; reduce training stress",
    PlateauLevel.CRITICAL: "Plateaued; a deload is needed to restart progress",
}


# ======================================================================
# Deload
# ======================================================================

_DELOAD_RATIONALES: dict[PlateauFactorType, str] = {
    PlateauFactorType.RECOVERY_INDICATORS: "Recovery between sessions is not keeping up with training.",
    PlateauFactorType.FATIGUE_ACCUMULATION: "Training volume has outpaced recovery and fatigue is accumulating.",
    PlateauFactorType.PROGRESSION_VELOCITY: "Strength gains have slowed markedly and need a recovery block.",
}


def recommend_deload(analysis: PlateauAnalysis) -> Optional[DeloadRecommendation]:
    """Deload guidance for ``moderate`` or worse plateaus, ``None`` otherwise."""
    band = DELOAD_BANDS.get(analysis.plateau_level)
    if band is None:
        return None
    deload_type, weeks, volume_pct, weight_pct = band

    top = _top_factor(analysis.factors)
    rationale = _DELOAD_RATIONALES.get(top.factor if top else None,
                                       "Several indicators show a deload will restore progression.")

    unit = "week" if weeks == 1 else "weeks"
    if analysis.plateau_risk > 0.8:
        expected = f"After {weeks} {unit}, expect 90-95% of previous performance with renewed progression."
    elif analysis.plateau_risk > 0.6:
        expected = f"After {weeks} {unit}, expect 95-100% of previous performance with restored gains."
    else:
        expected = f"After {weeks} {unit}, expect near-peak performance with better recovery."

    checklist = ["Energy levels improve during the deload", "Sleep quality and morning readiness",
                 "Motivation to train returns"]
    factor_types = {f.factor for f in analysis.factors if f.severity >= 0.5}
    if PlateauFactorType.RECOVERY_INDICATORS in factor_types:
        checklist.append("Rest periods feel sufficient")
    if PlateauFactorType.FATIGUE_ACCUMULATION in factor_types:
        checklist.append("Volume feels manageable, not challenging")

    return DeloadRecommendation(deload_type=deload_type, duration_weeks=weeks, volume_reduction_pct=volume_pct,
                                weight_reduction_pct=weight_pct, rationale=rationale, expected_recovery=expected,
                                monitoring_checklist=checklist, )


# ======================================================================
# Main entry points
# ======================================================================


def analyze_plateau(athlete_id: str, exercise_id: str, sets: Sequence[ExerciseSetRecord], as_of: datetime.date,
                    phase: Optional[Phase] = None, exercise_name: Optional[str] = None,
                    config: Optional[PlateauConfig] = None, ) -> PlateauAnalysis:
    """Analyse plateau risk of one exercise from its set history.

    Sets after ``as_of`` or older than the analysis window are ignored.
    Sparse histories yield ``plateau_level="none"`` with
    ``sufficient_data=False``; this function never raises on missing data.
    """
    cfg = config or DEFAULT_CONFIG
    athlete_id = validate_identifier(athlete_id, "athlete id")
    exercise_id = validate_identifier(exercise_id, "exercise id")

    start = as_of - datetime.timedelta(weeks=cfg.window_weeks)
    window = [s for s in sets if start < s.session_date <= as_of]
    perf = compute_exercise_performance(athlete_id, exercise_id, window)

    factors = evaluate_factors(perf, phase, cfg)
    risk = plateau_risk(factors)
    level = label_plateau(risk)

    detailed = [f"{f.factor.value}: {f.description} (severity {f.severity:.1f}, {f.impact.value})" for f in
                sorted(factors, key=lambda f: f.severity, reverse=True) if f.severity > 0.3]

    analysis = PlateauAnalysis(athlete_id=athlete_id, exercise_id=exercise_id,
                               exercise_name=exercise_name or "Unknown Exercise", as_of=as_of, plateau_level=level,
                               plateau_risk=risk, factors=factors,
                               recommended_actions=_recommended_actions(level, factors),
                               time_to_plateau_weeks=estimate_time_to_plateau(perf, factors),
                               confidence=analysis_confidence(perf, factors), summary=_LEVEL_SUMMARIES[level],
                               detailed_analysis=detailed, data_points=len(perf.sessions),
                               sufficient_data=len(perf.sessions) >= MIN_DATA_POINTS, )
    analysis = analysis.model_copy(update={"deload": recommend_deload(analysis)})

    logger.debug("Plateau analysed", athlete_id=athlete_id, exercise_id=exercise_id, level=level.value,
                 risk=round(risk, 3), sessions=len(perf.sessions))
    return analysis


def compute_plateau_analysis(store, athlete_id: str, exercise_id: str, as_of: datetime.date,
                             phase: Optional[Phase] = None,
                             config: Optional[PlateauConfig] = None, ) -> PlateauAnalysis:
    """Read the exercise history from ``store`` and analyse it."""
    cfg = config or DEFAULT_CONFIG
    athlete_id = validate_identifier(athlete_id, "athlete id")
    exercise_id = validate_identifier(exercise_id, "exercise id")

    sets = store.fetch_exercise_sets(athlete_id, exercise_id, limit=cfg.max_sets, end=as_of)
    info = store.get_exercise(exercise_id)
    return analyze_plateau(athlete_id, exercise_id, sets, as_of, phase, info.name if info else None, cfg)
