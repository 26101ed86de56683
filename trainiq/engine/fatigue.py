"""
Overtraining risk and fatigue pattern detection.

Five independent patterns are evaluated on the per-session volume series of
the fatigue window (default 12 weeks):

- ``acute_fatigue``         : last 3 sessions vs the 3 before,
- ``chronic_fatigue``       : last 8 sessions vs the 8 before,
- ``recovery_stall``        : a run of consecutive sessions each dropping
  from the previous one,
- ``performance_decline``   : negative regression slope relative to the
  series mean,
- ``inconsistent_recovery`` : dispersion of the rest gaps.

The aggregate score adds the pattern severity weights to the load-model
score of the training context, then reuses the load model's 30/60/80
buckets.  Drop thresholds are tunable heuristics (see
:class:`FatigueConfig`), not validated physiological constants.
"""

from __future__ import annotations

import datetime
from typing import Optional, Sequence

from loguru import logger
from pydantic import BaseModel, Field

from trainiq.core.exceptions import validate_identifier
from trainiq.engine.constants import (
    AVERAGE_REST_POINTS,
    LOAD_INTENSITY_POINTS,
    PATTERN_SEVERITY_WEIGHTS,
    REASSESSMENT_DAYS,
    REST_CONSISTENCY_POINTS,
    RISK_CATEGORY_POINTS,
)
from trainiq.engine.context import (
    ContextConfig,
    completed_sessions,
    label_risk,
    rest_gaps,
    resolve_muscle_groups,
    summarize_training_context,
    window_start,
)
from trainiq.engine.stats import clamp, coefficient_of_variation, linear_regression, mean, relative_change
from trainiq.schemas.common import PRIORITY_ORDER, RISK_ORDER, Priority, RiskLevel, Trend
from trainiq.schemas.context import TrainingContextSummary
from trainiq.schemas.fatigue import (
    FatiguePattern,
    InterventionType,
    OvertrainingAssessment,
    PatternTrend,
    PatternType,
    RecommendedAction,
    RecoveryIntervention,
    RecoveryNeeds,
)
from trainiq.schemas.log import WorkoutSessionRecord

# ======================================================================
# Configuration
# ======================================================================


class FatigueConfig(BaseModel):
    """Windows and drop thresholds of the pattern detector."""

    window_weeks: int = Field(12, ge=4, le=26)
    min_sessions: int = Field(4, ge=4)

    acute_drop: float = Field(0.20, gt=0.0, lt=1.0)
    acute_high_drop: float = Field(0.40, gt=0.0, lt=1.0)

    chronic_drop: float = Field(0.15, gt=0.0, lt=1.0)
    chronic_critical_drop: float = Field(0.30, gt=0.0, lt=1.0)

    stall_pair_drop: float = Field(0.15, gt=0.0, lt=1.0)
    stall_min_run: int = Field(2, ge=2)
    stall_high_run: int = Field(4, ge=2)

    decline_slope: float = Field(0.05, gt=0.0, description="|normalized slope| threshold")
    decline_high_slope: float = Field(0.10, gt=0.0)

    inconsistency_cv: float = Field(60.0, gt=0.0, description="Rest-gap CV threshold (%)")
    inconsistency_moderate_cv: float = Field(80.0, gt=0.0)


# Singleton default config
DEFAULT_CONFIG = FatigueConfig()


# ======================================================================
# Pattern detection
# ======================================================================


def _drop(recent: Sequence[float], previous: Sequence[float]) -> float:
    """Relative drop of ``mean(recent)`` below ``mean(previous)`` (positive = decline)."""
    return -relative_change(mean(recent), mean(previous))


def _pattern(pattern_type: PatternType, severity: RiskLevel, confidence: float, first_detected: datetime.date,
             as_of: datetime.date, indicators: list[str], trend: PatternTrend, action: str, ) -> FatiguePattern:
    return FatiguePattern(pattern_type=pattern_type, severity=severity, confidence=clamp(confidence, 0.0, 1.0),
                          duration_days=max(0, (as_of - first_detected).days), indicators=indicators,
                          first_detected=first_detected, trend=trend, recommended_action=action, )


def _detect_acute_fatigue(volumes: list[float], dates: list[datetime.date], as_of: datetime.date,
                          cfg: FatigueConfig, ) -> Optional[FatiguePattern]:
    recent, previous = volumes[-3:], volumes[-6:-3]
    if len(previous) < 2:
        return None
    drop = _drop(recent, previous)
    if drop <= cfg.acute_drop:
        return None
    severity = RiskLevel.HIGH if drop > cfg.acute_high_drop else RiskLevel.MODERATE
    return _pattern(PatternType.ACUTE_FATIGUE, severity, min(0.9, 0.6 + drop), dates[-3], as_of,
                    [f"Last 3 sessions averaged {drop:.0%} less volume than the 3 before"], PatternTrend.WORSENING,
                    "Reduce volume for the next 2-3 sessions and add a rest day", )


def _detect_chronic_fatigue(volumes: list[float], dates: list[datetime.date], as_of: datetime.date,
                            cfg: FatigueConfig, ) -> Optional[FatiguePattern]:
    recent, previous = volumes[-8:], volumes[-16:-8]
    if len(volumes) < 8 or len(previous) < 4:
        return None
    drop = _drop(recent, previous)
    if drop <= cfg.chronic_drop:
        return None
    severity = RiskLevel.CRITICAL if drop > cfg.chronic_critical_drop else RiskLevel.HIGH
    trend = PatternTrend.WORSENING if drop > 0.25 else PatternTrend.STABLE
    return _pattern(PatternType.CHRONIC_FATIGUE, severity, min(0.95, 0.7 + drop), dates[-8], as_of,
                    [f"Last 8 sessions averaged {drop:.0%} less volume than the 8 before"], trend,
                    "Schedule a deload week before resuming progression", )


def _longest_drop_run(volumes: list[float], threshold: float) -> tuple[int, int]:
    """Longest run of consecutive session pairs each dropping by more than ``threshold``.

    Returns ``(run_length, index of the first session of the run)``; the most
    recent run wins ties.
    """
    best_len, best_start = 0, 0
    run_len, run_start = 0, 0
    for i in range(1, len(volumes)):
        if volumes[i - 1] > 0 and _drop([volumes[i]], [volumes[i - 1]]) > threshold:
            if run_len == 0:
                run_start = i - 1
            run_len += 1
            if run_len >= best_len:
                best_len, best_start = run_len, run_start
        else:
            run_len = 0
    return best_len, best_start


def _detect_recovery_stall(volumes: list[float], dates: list[datetime.date], as_of: datetime.date,
                           cfg: FatigueConfig, ) -> Optional[FatiguePattern]:
    run, start = _longest_drop_run(volumes, cfg.stall_pair_drop)
    if run < cfg.stall_min_run:
        return None
    severity = RiskLevel.HIGH if run >= cfg.stall_high_run else RiskLevel.MODERATE
    return _pattern(PatternType.RECOVERY_STALL, severity, min(0.85, 0.5 + run * 0.1), dates[start], as_of,
                    [f"{run} consecutive sessions each dropped more than {cfg.stall_pair_drop:.0%} in volume"],
                    PatternTrend.WORSENING if start + run == len(volumes) - 1 else PatternTrend.STABLE,
                    "Add a full rest day between sessions until volume recovers", )


def _detect_performance_decline(volumes: list[float], dates: list[datetime.date], as_of: datetime.date,
                                cfg: FatigueConfig, ) -> Optional[FatiguePattern]:
    if len(volumes) < 6:
        return None
    avg = mean(volumes)
    if avg <= 0:
        return None
    regression = linear_regression(volumes)
    slope = regression.slope / avg
    if slope >= -cfg.decline_slope:
        return None
    severity = RiskLevel.HIGH if abs(slope) > cfg.decline_high_slope else RiskLevel.MODERATE
    return _pattern(PatternType.PERFORMANCE_DECLINE, severity, regression.r_squared, dates[0], as_of,
                    [f"Session volume falls {abs(slope):.1%} of its mean per session (R² {regression.r_squared:.2f})"],
                    PatternTrend.WORSENING, "Review programming, sleep and nutrition; consider a deload", )


def _detect_inconsistent_recovery(sessions: list[WorkoutSessionRecord], as_of: datetime.date,
                                  cfg: FatigueConfig, ) -> Optional[FatiguePattern]:
    gaps = rest_gaps(sessions)
    if len(sessions) < 6 or len(gaps) < 4:
        return None
    cv = coefficient_of_variation(gaps)
    if cv <= cfg.inconsistency_cv:
        return None
    severity = RiskLevel.MODERATE if cv > cfg.inconsistency_moderate_cv else RiskLevel.LOW
    return _pattern(PatternType.INCONSISTENT_RECOVERY, severity, min(0.8, cv / 100.0), sessions[0].session_date,
                    as_of, [f"Rest gaps vary by {cv:.0f}% around their mean"], PatternTrend.STABLE,
                    "Train on fixed days to make recovery predictable", )


def detect_fatigue_patterns(sessions: Sequence[WorkoutSessionRecord], as_of: datetime.date,
                            config: Optional[FatigueConfig] = None, ) -> list[FatiguePattern]:
    """Evaluate the five fatigue patterns over the fatigue window.

    Fewer than ``min_sessions`` completed sessions produce no pattern.
    """
    cfg = config or DEFAULT_CONFIG
    window = completed_sessions(sessions, window_start(as_of, cfg.window_weeks), as_of)
    if len(window) < cfg.min_sessions:
        return []

    volumes = [s.total_volume for s in window]
    dates = [s.session_date for s in window]

    candidates = [
        _detect_acute_fatigue(volumes, dates, as_of, cfg),
        _detect_chronic_fatigue(volumes, dates, as_of, cfg),
        _detect_recovery_stall(volumes, dates, as_of, cfg),
        _detect_performance_decline(volumes, dates, as_of, cfg),
        _detect_inconsistent_recovery(window, as_of, cfg),
    ]
    return [p for p in candidates if p is not None]


# ======================================================================
# Risk scoring
# ======================================================================


def _threshold_points(value: float, table: list[tuple[float, float]]) -> float:
    for upper, points in table:
        if value < upper:
            return points
    return 0.0


def load_model_score(summary: TrainingContextSummary) -> float:
    """Score the training context on 0-100.

    Overtraining-risk category points, plus rest consistency and average
    rest points (only when rest gaps exist), plus load intensity points.
    """
    load = summary.training_load_metrics
    rest = summary.rest_period_analysis

    score = RISK_CATEGORY_POINTS[load.overtraining_risk]
    if rest.rest_gaps:
        score += _threshold_points(rest.rest_consistency, REST_CONSISTENCY_POINTS)
        score += _threshold_points(rest.average_rest_days, AVERAGE_REST_POINTS)
    score += LOAD_INTENSITY_POINTS[load.load_intensity]
    return clamp(score, 0.0, 100.0)


def overtraining_risk_score(summary: TrainingContextSummary, patterns: Sequence[FatiguePattern]) -> float:
    return clamp(load_model_score(summary) + sum(PATTERN_SEVERITY_WEIGHTS[p.severity] for p in patterns), 0.0, 100.0)


# ======================================================================
# Assessment details
# ======================================================================

_PATTERN_ACTIONS: dict[PatternType, tuple[str, str]] = {
    PatternType.ACUTE_FATIGUE: ("volume", "Cut volume by 20% for the next sessions"),
    PatternType.CHRONIC_FATIGUE: ("deload", "Schedule a deload week"),
    PatternType.RECOVERY_STALL: ("rest", "Add a rest day between sessions"),
    PatternType.PERFORMANCE_DECLINE: ("programming", "Review programme structure and lifestyle factors"),
    PatternType.INCONSISTENT_RECOVERY: ("schedule", "Standardise the weekly training schedule"),
}

_SEVERITY_PRIORITY: dict[RiskLevel, Priority] = {
    RiskLevel.CRITICAL: Priority.URGENT,
    RiskLevel.HIGH: Priority.HIGH,
    RiskLevel.MODERATE: Priority.MEDIUM,
    RiskLevel.LOW: Priority.LOW,
}


def _recommended_actions(risk: RiskLevel, patterns: Sequence[FatiguePattern]) -> list[RecommendedAction]:
    actions: list[RecommendedAction] = []
    if risk == RiskLevel.CRITICAL:
        actions.append(RecommendedAction(priority=Priority.URGENT, category="deload",
                                         action="Start a deload immediately",
                                         rationale="Aggregate overtraining risk is critical", ))
    elif risk == RiskLevel.HIGH:
        actions.append(RecommendedAction(priority=Priority.HIGH, category="frequency",
                                         action="Drop one session per week for the next two weeks",
                                         rationale="Aggregate overtraining risk is high", ))

    for p in patterns:
        category, action = _PATTERN_ACTIONS[p.pattern_type]
        actions.append(RecommendedAction(priority=_SEVERITY_PRIORITY[p.severity], category=category, action=action,
                                         rationale=p.indicators[0] if p.indicators else p.pattern_type.value, ))

    if not actions:
        actions.append(RecommendedAction(priority=Priority.LOW, category="maintenance",
                                         action="Continue current training and keep logging sessions",
                                         rationale="No fatigue pattern detected", ))
    # sorted() is stable, so equal priorities keep their insertion order
    return sorted(actions, key=lambda a: PRIORITY_ORDER[a.priority])


def _recovery_needs(risk: RiskLevel, summary: TrainingContextSummary,
                    patterns: Sequence[FatiguePattern], ) -> RecoveryNeeds:
    needs = RecoveryNeeds()
    if RISK_ORDER[risk] >= RISK_ORDER[RiskLevel.HIGH]:
        needs.immediate += ["Take 2-3 complete rest days", "Prioritise 8+ hours of sleep"]
    elif risk == RiskLevel.MODERATE:
        needs.immediate.append("Add one extra rest day this week")

    if patterns:
        needs.short_term.append("Reduce volume by 20-30% for 1-2 weeks")
    if summary.rest_period_analysis.rest_gaps and summary.rest_period_analysis.rest_consistency < 70:
        needs.short_term.append("Keep rest between sessions close to the optimal gap")

    if RISK_ORDER[risk] >= RISK_ORDER[RiskLevel.MODERATE]:
        needs.long_term.append("Plan a deload week every 4-6 weeks")
    else:
        needs.long_term.append("Keep following the current periodization cycle")
    return needs


def _secondary_indicators(summary: TrainingContextSummary) -> list[str]:
    load = summary.training_load_metrics
    rest = summary.rest_period_analysis
    indicators: list[str] = []
    if load.recovery_demand > 70:
        indicators.append(f"Recovery demand at {load.recovery_demand:.0f}/100")
    if rest.rest_gaps and rest.average_rest_days < 3.5:
        indicators.append(f"Average rest of {rest.average_rest_days:.1f} days")
    if load.load_trend == Trend.INCREASING:
        indicators.append("Training load is rising")
    return indicators


def _monitoring_points(patterns: Sequence[FatiguePattern]) -> list[str]:
    points = ["Session volume compared with the previous week", "Subjective energy and sleep quality"]
    types = {p.pattern_type for p in patterns}
    if types & {PatternType.ACUTE_FATIGUE, PatternType.CHRONIC_FATIGUE, PatternType.PERFORMANCE_DECLINE}:
        points.append("Top-set weight and reps on main lifts")
    if PatternType.INCONSISTENT_RECOVERY in types or PatternType.RECOVERY_STALL in types:
        points.append("Days of rest between sessions")
    return points


# ======================================================================
# Main entry points
# ======================================================================


def assess_overtraining(summary: TrainingContextSummary, sessions: Sequence[WorkoutSessionRecord],
                        as_of: datetime.date, config: Optional[FatigueConfig] = None, ) -> OvertrainingAssessment:
    """Combine the training context with the fatigue patterns of ``sessions``."""
    cfg = config or DEFAULT_CONFIG
    patterns = detect_fatigue_patterns(sessions, as_of, cfg)
    model_score = load_model_score(summary)
    score = overtraining_risk_score(summary, patterns)
    risk = label_risk(score)

    primary = [indicator for p in patterns for indicator in p.indicators]
    if summary.training_load_metrics.overtraining_risk != RiskLevel.LOW:
        primary.insert(0, f"Load model risk is {summary.training_load_metrics.overtraining_risk.value}")

    days = REASSESSMENT_DAYS[risk]
    logger.debug("Overtraining assessed", athlete_id=summary.athlete_id, risk=risk.value, score=round(score, 1),
                 patterns=[p.pattern_type.value for p in patterns])

    return OvertrainingAssessment(athlete_id=summary.athlete_id, as_of=as_of, risk_level=risk, risk_score=score,
                                  load_model_score=model_score, patterns=patterns, primary_indicators=primary,
                                  secondary_indicators=_secondary_indicators(summary),
                                  recovery_needs=_recovery_needs(risk, summary, patterns),
                                  recommended_actions=_recommended_actions(risk, patterns),
                                  monitoring_points=_monitoring_points(patterns), reassessment_days=days,
                                  next_assessment_date=as_of + datetime.timedelta(days=days), )


def compute_overtraining_assessment(store, athlete_id: str, as_of: datetime.date,
                                    config: Optional[FatigueConfig] = None,
                                    context_config: Optional[ContextConfig] = None,
                                    summary: Optional[TrainingContextSummary] = None, ) -> OvertrainingAssessment:
    """Read the fatigue window from ``store`` and assess overtraining risk.

    ``summary`` may be passed when the caller already computed the training
    context for the same ``as_of``.
    """
    cfg = config or DEFAULT_CONFIG
    athlete_id = validate_identifier(athlete_id, "athlete id")

    sessions = store.fetch_sessions(athlete_id, window_start(as_of, cfg.window_weeks), as_of)
    if summary is None:
        summary = summarize_training_context(athlete_id, sessions, as_of, context_config,
                                             resolve_muscle_groups(store, sessions))
    return assess_overtraining(summary, sessions, as_of, cfg)


# ======================================================================
# Recovery intervention
# ======================================================================

# risk -> (type, days, intensity %, description)
_INTERVENTIONS: dict[RiskLevel, tuple[InterventionType, int, int, str]] = {
    RiskLevel.CRITICAL: (InterventionType.DELOAD, 14, 30, "Two-week deload at greatly reduced intensity"),
    RiskLevel.HIGH: (InterventionType.FREQUENCY_REDUCTION, 10, 50, "Fewer sessions per week at moderate intensity"),
    RiskLevel.MODERATE: (InterventionType.VOLUME_REDUCTION, 7, 70, "One week with fewer sets per exercise"),
    RiskLevel.LOW: (InterventionType.ACTIVE_RECOVERY, 3, 90, "Light active recovery between normal sessions"),
}


def generate_recovery_intervention(assessment: OvertrainingAssessment) -> RecoveryIntervention:
    """Map an assessment's risk level to a concrete recovery intervention."""
    kind, days, intensity, description = _INTERVENTIONS[assessment.risk_level]

    guidelines = [f"Keep training intensity around {intensity}% of normal", "Stop sets 2-3 reps short of failure"]
    if kind in (InterventionType.DELOAD, InterventionType.FREQUENCY_REDUCTION):
        guidelines.append("Replace missed sessions with walking or mobility work")
    if kind == InterventionType.VOLUME_REDUCTION:
        guidelines.append("Halve the number of accessory sets")

    return RecoveryIntervention(intervention_type=kind, duration_days=days, intensity_pct=intensity,
                                description=description, guidelines=guidelines,
                                success_metrics=["Session volume back to the previous 4-week average",
                                                 "No fatigue pattern at the next assessment"], )
