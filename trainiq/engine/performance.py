"""
Per-exercise performance analytics.

Collapses the set history of one exercise into per-session performance
and derives the series the plateau analyzer works on: progression metrics,
weekly volume, an Epley strength curve, training frequency and recovery
indicators.
"""

from __future__ import annotations

import datetime
from collections import OrderedDict
from typing import Sequence

from trainiq.engine.stats import clamp, coefficient_of_variation, epley_one_rep_max, mean, relative_change, split_halves
from trainiq.schemas.log import ExerciseSetRecord
from trainiq.schemas.performance import (
    ConsistencyPattern,
    ExercisePerformance,
    FrequencyMetrics,
    ProgressionMetrics,
    RecoveryIndicators,
    SessionPerformance,
    StrengthPoint,
    WeeklyVolume,
)

# Max-weight improvement below which a session counts as stagnant
STAGNATION_THRESHOLD = 0.02


def group_sessions(sets: Sequence[ExerciseSetRecord]) -> list[SessionPerformance]:
    """Collapse sets into one :class:`SessionPerformance` per session, oldest first."""
    grouped: OrderedDict[tuple[datetime.date, str], list[ExerciseSetRecord]] = OrderedDict()
    for record in sorted(sets, key=lambda r: (r.session_date, r.session_id)):
        grouped.setdefault((record.session_date, record.session_id), []).append(record)

    sessions: list[SessionPerformance] = []
    for (session_date, _), records in grouped.items():
        sessions.append(SessionPerformance(session_date=session_date, set_count=len(records),
                                           total_reps=sum(r.reps for r in records),
                                           max_weight=max(r.weight_kg for r in records),
                                           total_volume=sum(r.volume for r in records),
                                           best_set_volume=max(r.volume for r in records),
                                           estimated_one_rep_max=max(epley_one_rep_max(r.weight_kg, r.reps)
                                                                     for r in records), ))
    return sessions


def period_velocity(sessions: Sequence[SessionPerformance]) -> float:
    """Max-weight change per week between the first and last session."""
    if len(sessions) < 2:
        return 0.0
    weeks = (sessions[-1].session_date - sessions[0].session_date).days / 7.0
    if weeks <= 0:
        return 0.0
    return (sessions[-1].max_weight - sessions[0].max_weight) / weeks


def _progression_metrics(sessions: Sequence[SessionPerformance]) -> ProgressionMetrics:
    if len(sessions) < 2:
        return ProgressionMetrics()

    pairs = list(zip(sessions, sessions[1:]))
    weight_changes = [relative_change(b.max_weight, a.max_weight) for a, b in pairs]
    volume_changes = [relative_change(b.total_volume, a.total_volume) for a, b in pairs]
    progressed = sum(1 for a, b in pairs if b.max_weight > a.max_weight or b.total_volume > a.total_volume)

    recent_pairs = list(zip(sessions[-5:], sessions[-5:][1:]))
    stagnant = sum(1 for a, b in recent_pairs if relative_change(b.max_weight, a.max_weight) < STAGNATION_THRESHOLD)

    return ProgressionMetrics(weight_increase_rate=mean(weight_changes), volume_increase_rate=mean(volume_changes),
                              velocity_kg_per_week=period_velocity(sessions),
                              progression_consistency=progressed / len(pairs),
                              recent_stagnation=stagnant / len(recent_pairs) if recent_pairs else 0.0, )


def _weekly_volume(sessions: Sequence[SessionPerformance]) -> list[WeeklyVolume]:
    buckets: OrderedDict[datetime.date, list[SessionPerformance]] = OrderedDict()
    for s in sessions:
        week_start = s.session_date - datetime.timedelta(days=s.session_date.weekday())
        buckets.setdefault(week_start, []).append(s)
    return [WeeklyVolume(week_start=week, volume=sum(s.total_volume for s in items), sessions=len(items))
            for week, items in buckets.items()]


def _frequency(sessions: Sequence[SessionPerformance]) -> FrequencyMetrics:
    if len(sessions) < 2:
        return FrequencyMetrics(sessions_per_week=float(len(sessions)))

    span_weeks = max(1.0, (sessions[-1].session_date - sessions[0].session_date).days / 7.0)
    gaps = [(b.session_date - a.session_date).days for a, b in zip(sessions, sessions[1:])]
    cv = coefficient_of_variation(gaps)

    pattern = ConsistencyPattern.IRREGULAR
    if len(gaps) >= 2:
        earlier, recent = split_halves(gaps)
        change = relative_change(mean(recent), mean(earlier))
        if cv < 30:
            pattern = ConsistencyPattern.REGULAR
        elif change > 0.2:
            pattern = ConsistencyPattern.DECLINING
        elif change < -0.2:
            pattern = ConsistencyPattern.INCREASING

    return FrequencyMetrics(sessions_per_week=len(sessions) / span_weeks, consistency_pattern=pattern,
                            consistency_score=clamp(1.0 - cv / 100.0, 0.0, 1.0), )


def _recovery(sessions: Sequence[SessionPerformance]) -> RecoveryIndicators:
    if len(sessions) < 2:
        return RecoveryIndicators(fatigue_scores=[0.0] * len(sessions))

    gaps: list[int] = []
    after_rest: list[float] = []
    fatigue = [0.0]
    for previous, current in zip(sessions, sessions[1:]):
        gaps.append((current.session_date - previous.session_date).days)
        if previous.estimated_one_rep_max > 0:
            after_rest.append(current.estimated_one_rep_max / previous.estimated_one_rep_max)
        volume_ratio = current.total_volume / previous.total_volume if previous.total_volume > 0 else 1.0
        fatigue.append(clamp((volume_ratio - 0.8) / 0.4, 0.0, 1.0))

    return RecoveryIndicators(rest_gaps=gaps, average_rest_days=mean(gaps), performance_after_rest=after_rest,
                              fatigue_scores=fatigue, )


def compute_exercise_performance(athlete_id: str, exercise_id: str,
                                 sets: Sequence[ExerciseSetRecord], ) -> ExercisePerformance:
    """Derive every performance series of one exercise from its sets."""
    sessions = group_sessions([s for s in sets if s.exercise_id == exercise_id])
    return ExercisePerformance(athlete_id=athlete_id, exercise_id=exercise_id, sessions=sessions,
                               progression=_progression_metrics(sessions), weekly_volume=_weekly_volume(sessions),
                               strength_curve=[StrengthPoint(session_date=s.session_date,
                                                             estimated_one_rep_max=s.estimated_one_rep_max)
                                               for s in sessions],
                               frequency=_frequency(sessions), recovery=_recovery(sessions), )
