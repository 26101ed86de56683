"""
Training context aggregation.

Turns the completed sessions of a trailing window into a
:class:`TrainingContextSummary`: session metrics, rest-period analysis, the
training-load model and derived recovery factors.

Key design choices
------------------

1. **Two windows**: rest and session analysis use the analysis window
   (default 8 weeks); the load model uses the most recent ``load_weeks``
   (default 4) of it.
2. **Relative load**: ``sustainable_load`` is a fraction of the current
   load (scaled by a history-length factor), so ``load_ratio`` expresses how
   far the athlete is running above what the engine considers repeatable.
3. **Neutral defaults**: fewer than two completed sessions never raise;
   :func:`neutral_training_context` documents every default value.
4. **Pure core**: :func:`summarize_training_context` takes the session
   records directly; :func:`compute_training_context` only adds the store
   read around it.
"""

from __future__ import annotations

import datetime
from collections import defaultdict
from typing import Mapping, Optional, Sequence

from loguru import logger
from pydantic import BaseModel, Field

from trainiq.core.exceptions import validate_identifier
from trainiq.engine.constants import (
    DEFAULT_SESSION_DURATION_MINUTES,
    LOAD_INTENSITY_THRESHOLDS,
    NEUTRAL_OPTIMAL_REST_DAYS,
    NEUTRAL_RECOVERY_DEMAND,
    NEUTRAL_SUSTAINABLE_LOAD,
    OPTIMAL_REST_FALLBACK,
    OPTIMAL_REST_TABLE,
    RISK_THRESHOLDS,
)
from trainiq.engine.stats import clamp, half_trend, mean, round_half_up, round_to_step
from trainiq.schemas.common import LoadIntensity, Priority, RiskLevel, Trend
from trainiq.schemas.context import (
    AnalysisPeriod,
    ContextInsight,
    ContextRecommendation,
    InsightCategory,
    MuscleGroupBalance,
    RecoveryFactors,
    RecoveryStatus,
    RestAdjustment,
    RestPatternIssue,
    RestPeriodAnalysis,
    SessionMetrics,
    TrainingContextSummary,
    TrainingLoadMetrics,
)
from trainiq.schemas.log import WorkoutSessionRecord

FALLBACK_MUSCLE_GROUP = "Full Body"

# ======================================================================
# Configuration
# ======================================================================


class ContextConfig(BaseModel):
    """Windows and cut-offs of the context aggregation."""

    analysis_weeks: int = Field(8, ge=4, le=12)
    load_weeks: int = Field(4, ge=4, le=12)

    rest_trend_threshold: float = Field(0.10, gt=0.0)
    load_trend_threshold: float = Field(0.15, gt=0.0)
    duration_trend_threshold: float = Field(0.10, gt=0.0)

    high_volume_threshold: float = Field(1000.0, ge=0.0, description="Avg session volume above which load is bumped")
    high_volume_multiplier: float = Field(1.2, ge=1.0)
    full_history_sessions: int = Field(10, ge=1, description="Sessions needed for a consistency factor of 1.0")
    partial_history_factor: float = Field(0.8, gt=0.0, le=1.0)
    sustainable_fraction: float = Field(0.85, gt=0.0, le=1.0)


# Singleton default config
DEFAULT_CONFIG = ContextConfig()

# ======================================================================
# Labelling
# ======================================================================


def optimal_rest_days(sessions_per_week: float) -> float:
    """Optimal rest between sessions for a weekly frequency.

    ``>= 5 -> 1.5``, ``>= 3 -> 2.5``, ``>= 2 -> 3.5``, else ``5``.
    """
    for min_frequency, rest_days in OPTIMAL_REST_TABLE:
        if sessions_per_week >= min_frequency:
            return rest_days
    return OPTIMAL_REST_FALLBACK


def _label_load_intensity(load_ratio: float) -> LoadIntensity:
    for label, low, high in LOAD_INTENSITY_THRESHOLDS:
        if low <= load_ratio < high:
            return label
    return LoadIntensity.VERY_HIGH


def label_risk(score: float) -> RiskLevel:
    """Bucket a 0-100 risk score: <30 low, <60 moderate, <80 high, else critical."""
    for label, low, high in RISK_THRESHOLDS:
        if low <= score < high:
            return label
    return RiskLevel.CRITICAL


# ======================================================================
# Session selection
# ======================================================================


def completed_sessions(sessions: Sequence[WorkoutSessionRecord], start: datetime.date,
                       end: datetime.date, ) -> list[WorkoutSessionRecord]:
    """Completed sessions dated within ``[start, end]``, oldest first."""
    selected = [s for s in sessions if s.is_completed and start <= s.session_date <= end]
    return sorted(selected, key=lambda s: (s.session_date, s.completed_at, s.id))


def window_start(as_of: datetime.date, weeks: int) -> datetime.date:
    return as_of - datetime.timedelta(days=weeks * 7 - 1)


def rest_gaps(sessions: Sequence[WorkoutSessionRecord]) -> list[int]:
    """Days between consecutive (chronological) sessions."""
    return [(b.session_date - a.session_date).days for a, b in zip(sessions, sessions[1:])]


# ======================================================================
# Rest-period analysis
# ======================================================================


def rest_consistency(gaps: Sequence[int], optimal: float) -> float:
    """``100 - mean(|gap - optimal|) / (0.5 x optimal) x 100``, clamped to [0, 100]."""
    if not gaps:
        return 100.0
    avg_deviation = mean([abs(g - optimal) for g in gaps])
    return clamp(100.0 - avg_deviation / (optimal * 0.5) * 100.0, 0.0, 100.0)


def _rest_pattern_issues(gaps: Sequence[int], consistency: float,
                         sessions_per_week: float, ) -> list[RestPatternIssue]:
    issues: list[RestPatternIssue] = []

    back_to_back = sum(1 for g in gaps if g < 1)
    if back_to_back:
        issues.append(RestPatternIssue(pattern="insufficient_recovery",
                                       description="Sessions logged on the same day with no rest in between",
                                       severity=RiskLevel.HIGH, occurrences=back_to_back, ))
    if consistency < 60:
        issues.append(RestPatternIssue(pattern="inconsistent_scheduling",
                                       description="Rest between sessions varies widely around the optimal gap",
                                       severity=RiskLevel.MODERATE, occurrences=len(gaps), ))
    if sessions_per_week > 5:
        issues.append(RestPatternIssue(pattern="overtraining_frequency",
                                       description=f"{sessions_per_week:.1f} sessions per week leaves little recovery",
                                       severity=RiskLevel.HIGH, occurrences=1, ))
    return issues


_ISSUE_ADJUSTMENTS: dict[str, tuple[str, str]] = {
    "insufficient_recovery": ("Avoid training the same muscle groups on consecutive sessions without rest",
                              "Back-to-back sessions accumulate fatigue faster than it dissipates"),
    "inconsistent_scheduling": ("Plan fixed training days for the coming weeks",
                                "Regular spacing makes recovery predictable"),
    "overtraining_frequency": ("Cap training at five sessions per week",
                               "Higher frequencies leave too little time for adaptation"),
}


def _rest_adjustments(average_rest: float, optimal: float, consistency: float,
                      issues: Sequence[RestPatternIssue], ) -> list[RestAdjustment]:
    adjustments: list[RestAdjustment] = []

    if average_rest < optimal * 0.8:
        adjustments.append(RestAdjustment(horizon="immediate", action="Add an extra rest day before the next session",
                                          rationale=(f"Average rest of {average_rest:.1f} days is below the "
                                                     f"optimal {optimal} days"), ))
    if consistency < 70:
        adjustments.append(RestAdjustment(horizon="short_term", action="Keep rest periods close to the optimal gap",
                                          rationale=f"Rest consistency is {consistency:.0f}%", ))
    for issue in issues:
        action, rationale = _ISSUE_ADJUSTMENTS[issue.pattern]
        adjustments.append(RestAdjustment(horizon="long_term", action=action, rationale=rationale))
    return adjustments


def analyze_rest_periods(sessions: Sequence[WorkoutSessionRecord], weeks: int,
                         config: Optional[ContextConfig] = None, ) -> RestPeriodAnalysis:
    """Rest-day analysis over chronologically ordered completed sessions."""
    cfg = config or DEFAULT_CONFIG
    if len(sessions) < 2:
        return RestPeriodAnalysis(average_rest_days=0.0, optimal_rest_days=NEUTRAL_OPTIMAL_REST_DAYS,
                                  rest_consistency=100.0, rest_period_trend=Trend.STABLE, )

    sessions_per_week = len(sessions) / weeks
    optimal = optimal_rest_days(sessions_per_week)
    gaps = rest_gaps(sessions)
    average_rest = mean(gaps)
    consistency = rest_consistency(gaps, optimal)
    issues = _rest_pattern_issues(gaps, consistency, sessions_per_week)

    return RestPeriodAnalysis(average_rest_days=average_rest, optimal_rest_days=optimal,
                              rest_consistency=consistency,
                              rest_period_trend=half_trend(gaps, cfg.rest_trend_threshold, min_points=3),
                              rest_gaps=gaps, problematic_patterns=issues,
                              recommended_adjustments=_rest_adjustments(average_rest, optimal, consistency, issues), )


# ======================================================================
# Load model
# ======================================================================


def _muscle_group_recovery(balance_ratio: float, days_since: int) -> RecoveryStatus:
    if balance_ratio > 150 and days_since < 2:
        return RecoveryStatus.OVERTRAINED
    if balance_ratio > 120 or days_since < 2:
        return RecoveryStatus.FATIGUED
    if days_since > 7:
        return RecoveryStatus.FRESH
    return RecoveryStatus.OPTIMAL


def muscle_group_balance(sessions: Sequence[WorkoutSessionRecord], muscle_groups: Mapping[str, str],
                         as_of: datetime.date, ) -> list[MuscleGroupBalance]:
    """Volume per muscle group against the mean across all trained groups.

    Exercises missing from ``muscle_groups`` count towards ``"Full Body"``.
    """
    volumes: dict[str, float] = defaultdict(float)
    last_trained: dict[str, datetime.date] = {}
    for session in sessions:
        for s in session.sets:
            group = muscle_groups.get(s.exercise_id) or FALLBACK_MUSCLE_GROUP
            volumes[group] += s.volume
            if group not in last_trained or session.session_date > last_trained[group]:
                last_trained[group] = session.session_date

    if not volumes:
        return []

    target = mean(list(volumes.values()))
    balance: list[MuscleGroupBalance] = []
    for group in sorted(volumes):
        ratio = clamp(volumes[group] / target * 100.0, 0.0, 200.0) if target > 0 else 0.0
        days_since = (as_of - last_trained[group]).days
        balance.append(MuscleGroupBalance(muscle_group=group, volume=volumes[group], target_volume=target,
                                          balance_ratio=ratio, last_trained=last_trained[group],
                                          recovery_status=_muscle_group_recovery(ratio, days_since), ))
    return balance


def neutral_load_metrics() -> TrainingLoadMetrics:
    return TrainingLoadMetrics(current_load=0, sustainable_load=NEUTRAL_SUSTAINABLE_LOAD, load_ratio=0.0,
                               load_trend=Trend.STABLE, load_intensity=LoadIntensity.LOW,
                               recovery_demand=NEUTRAL_RECOVERY_DEMAND, risk_score=0.0,
                               overtraining_risk=RiskLevel.LOW, )


def calculate_training_load(sessions: Sequence[WorkoutSessionRecord], weeks: int, as_of: datetime.date,
                            muscle_groups: Optional[Mapping[str, str]] = None,
                            config: Optional[ContextConfig] = None, ) -> TrainingLoadMetrics:
    """Load model over chronologically ordered completed sessions of a ``weeks`` window."""
    cfg = config or DEFAULT_CONFIG
    if not sessions:
        return neutral_load_metrics()

    volumes = [s.total_volume for s in sessions]
    sessions_per_week = len(sessions) / weeks
    avg_volume = mean(volumes)

    multiplier = cfg.high_volume_multiplier if avg_volume > cfg.high_volume_threshold else 1.0
    current_load = round_half_up(avg_volume * sessions_per_week * multiplier)

    consistency_factor = 1.0 if len(sessions) >= cfg.full_history_sessions else cfg.partial_history_factor
    sustainable_load = round_half_up(current_load * consistency_factor * cfg.sustainable_fraction)

    load_ratio = current_load / sustainable_load if sustainable_load > 0 else 0.0
    recovery_demand = min(100.0, load_ratio * min(sessions_per_week / 3.0, 2.0) * 50.0)
    risk_score = clamp((load_ratio - 1.0) * 50.0 + recovery_demand, 0.0, 100.0)

    return TrainingLoadMetrics(current_load=current_load, sustainable_load=sustainable_load, load_ratio=load_ratio,
                               load_trend=half_trend(volumes, cfg.load_trend_threshold, min_points=4),
                               load_intensity=_label_load_intensity(load_ratio), recovery_demand=recovery_demand,
                               risk_score=risk_score, overtraining_risk=label_risk(risk_score),
                               sessions_per_week=sessions_per_week, average_volume_per_session=avg_volume,
                               load_balance=muscle_group_balance(sessions, muscle_groups or {}, as_of), )


# ======================================================================
# Session metrics & recovery factors
# ======================================================================


def calculate_session_metrics(sessions: Sequence[WorkoutSessionRecord],
                              config: Optional[ContextConfig] = None, ) -> SessionMetrics:
    cfg = config or DEFAULT_CONFIG
    if not sessions:
        return SessionMetrics()

    durations = [float(s.duration_minutes if s.duration_minutes is not None else DEFAULT_SESSION_DURATION_MINUTES)
                 for s in sessions]
    with_sets = sum(1 for s in sessions if s.sets)

    return SessionMetrics(average_duration_minutes=mean(durations),
                          duration_trend=half_trend(durations, cfg.duration_trend_threshold, min_points=4),
                          average_exercises_per_session=mean([len(s.exercise_ids) for s in sessions]),
                          average_sets_per_session=mean([len(s.sets) for s in sessions]),
                          average_volume_per_session=mean([s.total_volume for s in sessions]),
                          completion_rate=with_sets / len(sessions) * 100.0, )


def calculate_recovery_factors(rest: RestPeriodAnalysis, load: TrainingLoadMetrics) -> RecoveryFactors:
    return RecoveryFactors(current_recovery_demand=load.recovery_demand,
                           recovery_efficiency=max(0.0, 100.0 - (100.0 - rest.rest_consistency) * 0.5),
                           fatigue_accumulation=min(100.0, load.recovery_demand * 1.2),
                           recommended_rest_days=rest.optimal_rest_days, )


# ======================================================================
# Insights & recommendations
# ======================================================================


def _generate_insights(metrics: SessionMetrics, rest: RestPeriodAnalysis,
                       load: TrainingLoadMetrics, ) -> list[ContextInsight]:
    insights: list[ContextInsight] = []

    if metrics.duration_trend == Trend.INCREASING:
        insights.append(ContextInsight(category=InsightCategory.NEUTRAL,
                                       message="Sessions are getting longer; watch for fatigue late in workouts"))
    if rest.rest_consistency > 80:
        insights.append(ContextInsight(category=InsightCategory.POSITIVE,
                                       message="Rest periods are consistent with your training frequency"))
    elif rest.rest_consistency < 60:
        insights.append(ContextInsight(category=InsightCategory.CONCERNING,
                                       message="Irregular rest periods are limiting recovery"))
    if load.overtraining_risk in (RiskLevel.HIGH, RiskLevel.CRITICAL):
        insights.append(ContextInsight(category=InsightCategory.CONCERNING,
                                       message=f"Overtraining risk is {load.overtraining_risk.value}"))
    return insights


def _generate_recommendations(metrics: SessionMetrics, rest: RestPeriodAnalysis,
                              load: TrainingLoadMetrics, ) -> list[ContextRecommendation]:
    recommendations: list[ContextRecommendation] = []

    if rest.rest_gaps and rest.average_rest_days < rest.optimal_rest_days * 0.9:
        recommendations.append(ContextRecommendation(priority=Priority.HIGH, area="rest_periods",
                                                     message=(f"Increase rest to about {rest.optimal_rest_days} "
                                                              f"days between sessions"), ))
    if load.current_load > load.sustainable_load * 1.1:
        recommendations.append(ContextRecommendation(priority=Priority.URGENT, area="volume",
                                                     message="Reduce weekly volume towards the sustainable load", ))
    if metrics.average_duration_minutes > 90:
        recommendations.append(ContextRecommendation(priority=Priority.MEDIUM, area="session_length",
                                                     message="Keep sessions under 90 minutes", ))
    return recommendations


# ======================================================================
# Training frequency
# ======================================================================


def estimate_training_frequency(session_dates: Sequence[datetime.date], as_of: datetime.date,
                                weeks: int = 12, ) -> float:
    """Empirical sessions per week.

    Distinct session dates in the trailing ``weeks`` window, divided by
    ``weeks``, rounded to the nearest 0.5 and clamped to [1, 7].  Fewer than
    two sessions return the default of 3.
    """
    start = window_start(as_of, weeks)
    distinct = {d for d in session_dates if start <= d <= as_of}
    if len(distinct) < 2:
        return 3.0
    return clamp(round_to_step(len(distinct) / weeks, 0.5), 1.0, 7.0)


# ======================================================================
# Main entry points
# ======================================================================


def neutral_training_context(athlete_id: str, as_of: datetime.date, weeks: int,
                             total_sessions: int = 0, ) -> TrainingContextSummary:
    """Documented defaults for a window with fewer than two completed sessions.

    Load 0 against a sustainable load of 50, recovery demand 20, optimal rest
    3 days, rest consistency 100, every trend stable and overtraining risk low.
    """
    rest = RestPeriodAnalysis(average_rest_days=0.0, optimal_rest_days=NEUTRAL_OPTIMAL_REST_DAYS,
                              rest_consistency=100.0, )
    load = neutral_load_metrics()
    return TrainingContextSummary(athlete_id=athlete_id, as_of=as_of,
                                  analysis_period=AnalysisPeriod(start_date=window_start(as_of, weeks),
                                                                 end_date=as_of, weeks=weeks,
                                                                 total_sessions=total_sessions, ),
                                  session_metrics=SessionMetrics(), rest_period_analysis=rest,
                                  training_load_metrics=load,
                                  recovery_factors=calculate_recovery_factors(rest, load),
                                  insights=[ContextInsight(category=InsightCategory.NEUTRAL,
                                                           message="Log a few more sessions to unlock load analysis")],
                                  is_neutral=True, )


def summarize_training_context(athlete_id: str, sessions: Sequence[WorkoutSessionRecord], as_of: datetime.date,
                               config: Optional[ContextConfig] = None,
                               muscle_groups: Optional[Mapping[str, str]] = None, ) -> TrainingContextSummary:
    """Compute the training context from raw session records.

    Args:
        athlete_id: Athlete identifier (validated).
        sessions: Session records; incomplete or out-of-window sessions are
            ignored, so callers may pass a superset.
        as_of: Reference date, the last day of the window.
        config: Optional :class:`ContextConfig` override.
        muscle_groups: ``exercise_id -> muscle group`` lookup for the load
            balance.

    Returns:
        :class:`TrainingContextSummary`; the neutral summary when fewer than
        two completed sessions fall in the analysis window.
    """
    cfg = config or DEFAULT_CONFIG
    athlete_id = validate_identifier(athlete_id, "athlete id")

    window = completed_sessions(sessions, window_start(as_of, cfg.analysis_weeks), as_of)
    if len(window) < 2:
        logger.debug("Insufficient sessions for training context", athlete_id=athlete_id, sessions=len(window))
        return neutral_training_context(athlete_id, as_of, cfg.analysis_weeks, total_sessions=len(window))

    load_window = completed_sessions(window, window_start(as_of, cfg.load_weeks), as_of)

    metrics = calculate_session_metrics(window, cfg)
    rest = analyze_rest_periods(window, cfg.analysis_weeks, cfg)
    load = calculate_training_load(load_window, cfg.load_weeks, as_of, muscle_groups, cfg)
    recovery = calculate_recovery_factors(rest, load)

    logger.debug("Training context computed", athlete_id=athlete_id, sessions=len(window),
                 current_load=load.current_load, risk=load.overtraining_risk.value)

    return TrainingContextSummary(athlete_id=athlete_id, as_of=as_of,
                                  analysis_period=AnalysisPeriod(start_date=window_start(as_of, cfg.analysis_weeks),
                                                                 end_date=as_of, weeks=cfg.analysis_weeks,
                                                                 total_sessions=len(window), ),
                                  session_metrics=metrics, rest_period_analysis=rest, training_load_metrics=load,
                                  recovery_factors=recovery, insights=_generate_insights(metrics, rest, load),
                                  recommendations=_generate_recommendations(metrics, rest, load), )


def compute_training_context(store, athlete_id: str, as_of: datetime.date,
                             config: Optional[ContextConfig] = None, ) -> TrainingContextSummary:
    """Read the analysis window from ``store`` and summarise it.

    ``store`` provides ``fetch_sessions`` and ``get_exercise`` (see
    :mod:`trainiq.store.base`).  Store failures propagate as
    :class:`~trainiq.core.exceptions.StoreUnavailableError`.
    """
    cfg = config or DEFAULT_CONFIG
    athlete_id = validate_identifier(athlete_id, "athlete id")

    sessions = store.fetch_sessions(athlete_id, window_start(as_of, cfg.analysis_weeks), as_of)
    muscle_groups = resolve_muscle_groups(store, sessions)
    return summarize_training_context(athlete_id, sessions, as_of, cfg, muscle_groups)


def resolve_muscle_groups(catalog, sessions: Sequence[WorkoutSessionRecord]) -> dict[str, str]:
    """Look up the muscle group of every exercise in ``sessions``."""
    groups: dict[str, str] = {}
    for exercise_id in sorted({s.exercise_id for session in sessions for s in session.sets}):
        info = catalog.get_exercise(exercise_id)
        groups[exercise_id] = info.muscle_group if info and info.muscle_group else FALLBACK_MUSCLE_GROUP
    return groups
