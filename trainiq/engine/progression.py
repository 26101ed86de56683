"""
Per-exercise weight and rep progression.

The suggested weight is the last working weight grown by a multiplicative
increment::

    total_increment = base_increment x volume_multiplier x recovery_factor x plateau_adjustment
    suggested_weight = quantize(last_weight x (1 + total_increment))

Key design choices
------------------
- **Conservative under sparse data**: a missing profile or an empty context
  takes the fallback path (+5 %, reps clamped to 6-12, confidence 0.5)
  instead of guessing an experience tier.  A tier is only inferred from an
  explicit programme split.
- **Bounded factors**: every factor is clamped, so one extreme input can
  never produce an unbounded jump.
- **Quantized output**: weights are always multiples of the plate quantum
  (0.25 kg by default) and never negative.
- **Whole-athlete recency**: rest days and weekly volume count every
  exercise the athlete trained, not only the one being progressed.
"""

from __future__ import annotations

import datetime
import math
from collections import OrderedDict
from typing import Optional, Sequence

from loguru import logger
from pydantic import BaseModel, Field

from trainiq.core.exceptions import validate_identifier
from trainiq.engine.constants import (
    BASE_INCREMENT_TABLE,
    CONFIDENCE_RISK_PENALTIES,
    DEFAULT_TRAINING_FREQUENCY,
    FALLBACK_CONFIDENCE,
    FALLBACK_INCREMENT,
    PLATEAU_LEVEL_ORDER,
    REST_DAY_RECOVERY_FACTORS,
    RISK_PLATEAU_ADJUSTMENTS,
)
from trainiq.engine.context import ContextConfig, compute_training_context, estimate_training_frequency, window_start
from trainiq.engine.fatigue import FatigueConfig, compute_overtraining_assessment
from trainiq.engine.periodization import apply_phase_adjustments, resolve_cycle
from trainiq.engine.plateau import compute_plateau_analysis
from trainiq.engine.stats import clamp, quantize, relative_change, round_half_up
from trainiq.schemas.common import LoadIntensity, RiskLevel
from trainiq.schemas.context import TrainingContextSummary, TrainingLoadMetrics
from trainiq.schemas.fatigue import OvertrainingAssessment
from trainiq.schemas.log import ExerciseSetRecord, WorkoutSessionRecord
from trainiq.schemas.periodization import Phase
from trainiq.schemas.plateau import PlateauAnalysis, PlateauLevel
from trainiq.schemas.profile import AthleteProfile, ExperienceLevel, TrainingGoal
from trainiq.schemas.progression import (
    AlternativeKind,
    ProgressionAlternative,
    ProgressionFactors,
    ProgressionRecommendation,
    RecentTraining,
)

# ======================================================================
# Configuration
# ======================================================================


class ProgressionConfig(BaseModel):
    quantum: float = Field(0.25, gt=0.0, description="Smallest loadable weight step in kg")
    set_limit: int = Field(24, ge=6, le=200, description="Recent sets read for the plateau check")
    plateau_min_sets: int = Field(6, ge=3)
    plateau_sessions: int = Field(4, ge=3)
    plateau_threshold: float = Field(0.02, ge=0.0, le=0.5, description="Improvement below this counts as stalled")
    frequency_weeks: int = Field(12, ge=1, le=52)


# Singleton default config
DEFAULT_CONFIG = ProgressionConfig()

_MIN_REPS, _MAX_REPS = 6, 12
_TECHNIQUE_MAX_REPS = 15

# ======================================================================
# Factors
# ======================================================================


def base_increment(experience: ExperienceLevel, frequency: float) -> float:
    """Weekly base increment for an experience tier and sessions/week.

    Fractional frequencies round half up, e.g. 2.5 sessions/week uses the
    3x/week column.
    """
    column = int(clamp(math.floor(frequency + 0.5), 1, 7)) - 1
    return BASE_INCREMENT_TABLE[ExperienceLevel(experience)][column]


def volume_multiplier(weekly_volume: float) -> float:
    return clamp(1.0 - weekly_volume / 10000.0 * 0.3, 0.7, 1.0)


def recovery_factor(rest_days: int, frequency: float, load: TrainingLoadMetrics) -> float:
    if rest_days >= 7 and frequency <= 2:
        factor = 1.1
    else:
        factor = next(value for low, value in REST_DAY_RECOVERY_FACTORS if rest_days >= low)

    if load.load_intensity == LoadIntensity.VERY_HIGH:
        factor *= 0.9
    elif load.load_intensity == LoadIntensity.LOW:
        factor *= 1.1
    if load.recovery_demand > 70:
        factor *= 0.95
    if load.overtraining_risk in (RiskLevel.HIGH, RiskLevel.CRITICAL):
        factor *= 0.8
    return clamp(factor, 0.5, 1.3)


def plateau_adjustment(load: TrainingLoadMetrics) -> float:
    adjustment = RISK_PLATEAU_ADJUSTMENTS[load.overtraining_risk]
    if load.load_intensity == LoadIntensity.LOW:
        adjustment *= 1.1
    return clamp(adjustment, 0.5, 1.2)


def suggested_reps(last_reps: int, goal: Optional[TrainingGoal]) -> int:
    base = int(clamp(last_reps, _MIN_REPS, _MAX_REPS))
    if goal == TrainingGoal.STRENGTH:
        return int(clamp(round_half_up(base * 0.8), 1, 6))
    if goal == TrainingGoal.FAT_LOSS:
        return int(clamp(round_half_up(base * 1.2), 12, 20))
    return base


# ======================================================================
# Recent history
# ======================================================================


def _best_volume_per_session(sets: Sequence[ExerciseSetRecord]) -> list[float]:
    best: OrderedDict[tuple[datetime.date, str], float] = OrderedDict()
    for record in sorted(sets, key=lambda r: (r.session_date, r.session_id)):
        key = (record.session_date, record.session_id)
        best[key] = max(best.get(key, 0.0), record.volume)
    return list(best.values())


def detect_local_plateau(sets: Sequence[ExerciseSetRecord], config: Optional[ProgressionConfig] = None) -> bool:
    """Quick plateau check over the recent sets of one exercise.

    Sets are grouped by session and the best set volume of the last four
    sessions is compared pairwise; the exercise is plateaued when at least
    two of the three pairs improve by less than 2 %.
    """
    cfg = config or DEFAULT_CONFIG
    if len(sets) < cfg.plateau_min_sets:
        return False
    volumes = _best_volume_per_session(sets)[-cfg.plateau_sessions:]
    if len(volumes) < 3:
        return False
    stalled = sum(1 for a, b in zip(volumes, volumes[1:]) if relative_change(b, a) < cfg.plateau_threshold)
    return stalled >= 2


def summarize_recent_training(sessions: Sequence[WorkoutSessionRecord], as_of: datetime.date) -> RecentTraining:
    """Rest, weekly volume and streak across all of an athlete's exercises.

    Only completed sessions on or before ``as_of`` count.  The weekly volume
    covers the 7 days ending on ``as_of``.  The streak walks back from the
    latest session and tolerates one missed day between sessions.
    """
    completed = [s for s in sessions if s.is_completed and s.session_date <= as_of]
    if not completed:
        return RecentTraining()

    dates = sorted({s.session_date for s in completed}, reverse=True)
    last = dates[0]
    streak = 0
    check = last
    for date in dates:
        if (check - date).days > 1:
            break
        streak += 1
        check = date - datetime.timedelta(days=1)

    start = window_start(as_of, 1)
    week = [s for s in completed if s.session_date >= start]
    per_set = [s.total_volume / len(s.sets) if s.sets else 0.0 for s in week]

    return RecentTraining(rest_days_since_last=(as_of - last).days,
                          weekly_volume=sum(s.total_volume for s in week), current_streak=streak,
                          average_set_volume=sum(per_set) / len(per_set) if per_set else 0.0,
                          last_session_date=last, )


def _recent_training_from_context(summary: TrainingContextSummary, sessions_per_week: float) -> RecentTraining:
    # Stand-in when the caller has no session list: typical rest and a typical week
    rest = summary.rest_period_analysis
    rest_days = rest.average_rest_days if rest.rest_gaps else rest.optimal_rest_days
    return RecentTraining(rest_days_since_last=round_half_up(rest_days),
                          weekly_volume=summary.session_metrics.average_volume_per_session * sessions_per_week, )


def derive_experience_level(programme_type: Optional[str]) -> ExperienceLevel:
    """Infer an experience tier from the programme split an athlete follows.

    An upper/lower split (``ulul``) reads as intermediate and push/pull/legs
    (``ppl``) as advanced; anything else, or no programme, as beginner.
    """
    split = (programme_type or "").lower()
    if "ulul" in split:
        return ExperienceLevel.INTERMEDIATE
    if "ppl" in split:
        return ExperienceLevel.ADVANCED
    return ExperienceLevel.BEGINNER


# ======================================================================
# Alternatives & confidence
# ======================================================================


def _alternatives(last_weight: float, reps: int, increment: float, summary: TrainingContextSummary,
                  weight: float, quantum: float, ) -> list[ProgressionAlternative]:
    load = summary.training_load_metrics
    options: list[ProgressionAlternative] = []

    if load.overtraining_risk != RiskLevel.LOW:
        options.append(ProgressionAlternative(kind=AlternativeKind.CONSERVATIVE,
                                              weight=quantize(last_weight * (1 + increment * 0.7), quantum),
                                              reps=reps, description="Smaller step while fatigue is elevated"))
    if load.load_intensity == LoadIntensity.LOW and summary.rest_period_analysis.rest_consistency >= 80:
        options.append(ProgressionAlternative(kind=AlternativeKind.AGGRESSIVE,
                                              weight=quantize(last_weight * (1 + increment * 1.3), quantum),
                                              reps=max(1, reps - 1),
                                              description="Bigger step; load is low and recovery consistent"))
    if summary.session_metrics.average_duration_minutes > 60:
        options.append(ProgressionAlternative(kind=AlternativeKind.TECHNIQUE, weight=weight,
                                              reps=min(_TECHNIQUE_MAX_REPS, reps + 2),
                                              description="Same weight, more reps with strict technique"))
    return options[:2]


def progression_confidence(summary: TrainingContextSummary) -> float:
    rest_consistency = summary.rest_period_analysis.rest_consistency
    efficiency = summary.recovery_factors.recovery_efficiency
    penalty = CONFIDENCE_RISK_PENALTIES.get(summary.training_load_metrics.overtraining_risk, 0.0)
    return clamp(0.8 + (rest_consistency - 50) * 0.001 - penalty + (efficiency - 50) * 0.0005, 0.3, 0.95)


def _deload_recommended(plateau_detected: bool, assessment: Optional[OvertrainingAssessment],
                        phase: Optional[Phase], plateau: Optional[PlateauAnalysis], ) -> bool:
    if plateau_detected or phase == Phase.DELOAD:
        return True
    if assessment is not None and assessment.risk_level == RiskLevel.CRITICAL:
        return True
    return (plateau is not None
            and PLATEAU_LEVEL_ORDER[plateau.plateau_level] >= PLATEAU_LEVEL_ORDER[PlateauLevel.MODERATE])


# ======================================================================
# Main entry points
# ======================================================================


def fallback_recommendation(athlete_id: str, exercise_id: str, last_weight: float, last_reps: int,
                            reason: str, exercise_name: Optional[str] = None,
                            config: Optional[ProgressionConfig] = None, ) -> ProgressionRecommendation:
    """Default +5 % step used when the profile or the training context is missing."""
    cfg = config or DEFAULT_CONFIG
    return ProgressionRecommendation(athlete_id=athlete_id, exercise_id=exercise_id,
                                     exercise_name=exercise_name or "Unknown Exercise",
                                     suggested_weight=quantize(last_weight * (1 + FALLBACK_INCREMENT), cfg.quantum),
                                     suggested_reps=int(clamp(last_reps, _MIN_REPS, _MAX_REPS)),
                                     confidence=FALLBACK_CONFIDENCE,
                                     reasoning=[f"Default progression used: {reason}",
                                                f"Standard {FALLBACK_INCREMENT:.0%} increase on the last weight"],
                                     used_defaults=True, )


def recommend_progression(athlete_id: str, exercise_id: str, last_weight: float, last_reps: int,
                          profile: Optional[AthleteProfile], summary: Optional[TrainingContextSummary],
                          recent_sets: Sequence[ExerciseSetRecord], as_of: datetime.date,
                          assessment: Optional[OvertrainingAssessment] = None, phase: Optional[Phase] = None,
                          plateau: Optional[PlateauAnalysis] = None, exercise_name: Optional[str] = None,
                          frequency: Optional[float] = None, recent_training: Optional[RecentTraining] = None,
                          config: Optional[ProgressionConfig] = None, ) -> ProgressionRecommendation:
    """Suggest the next weight and reps for one exercise.

    Args:
        last_weight: Last working weight in kg.
        last_reps: Reps performed at ``last_weight``.
        profile: Athlete profile; ``None`` takes the fallback path, as does
            a profile with neither an experience level nor a programme type
            to infer one from.
        summary: Training context; ``None`` or the neutral summary takes the
            fallback path.
        recent_sets: Recent sets of this exercise, any order; sets after
            ``as_of`` are ignored.
        assessment: Optional fatigue assessment feeding the deload flag.
        phase: Current periodization phase, recorded and feeding the deload flag.
        plateau: Optional plateau analysis feeding the deload flag.
        frequency: Sessions/week when the profile has none.
        recent_training: Whole-athlete rest and weekly volume, normally from
            :func:`summarize_recent_training`; without it both are
            approximated from ``summary``.

    Raises:
        InvalidInputError: When an identifier is missing or malformed.
    """
    cfg = config or DEFAULT_CONFIG
    athlete_id = validate_identifier(athlete_id, "athlete id")
    exercise_id = validate_identifier(exercise_id, "exercise id")

    recent_sets = [s for s in recent_sets if s.session_date <= as_of]
    plateau_detected = detect_local_plateau(recent_sets, cfg)
    deload = _deload_recommended(plateau_detected, assessment, phase, plateau)

    experience = None
    if profile is not None:
        experience = profile.experience_level
        if experience is None and profile.programme_type:
            experience = derive_experience_level(profile.programme_type)

    if experience is None:
        result = fallback_recommendation(athlete_id, exercise_id, last_weight, last_reps,
                                         "no athlete profile", exercise_name, cfg)
        return result.model_copy(update={"plateau_detected": plateau_detected, "deload_recommended": deload,
                                         "phase": phase})
    if summary is None or summary.is_neutral:
        result = fallback_recommendation(athlete_id, exercise_id, last_weight, last_reps,
                                         "not enough training history", exercise_name, cfg)
        return result.model_copy(update={"plateau_detected": plateau_detected, "deload_recommended": deload,
                                         "phase": phase})

    load = summary.training_load_metrics
    sessions_per_week = profile.training_frequency or frequency or DEFAULT_TRAINING_FREQUENCY
    if recent_training is None:
        recent_training = _recent_training_from_context(summary, sessions_per_week)
    rest_days = recent_training.rest_days_since_last
    if rest_days is None:
        rest_days = round_half_up(summary.rest_period_analysis.optimal_rest_days)
    weekly_volume = recent_training.weekly_volume

    base = base_increment(experience, sessions_per_week)
    volume = volume_multiplier(weekly_volume)
    recovery = recovery_factor(rest_days, sessions_per_week, load)
    adjustment = plateau_adjustment(load)
    increment = base * volume * recovery * adjustment

    weight = quantize(last_weight * (1 + increment), cfg.quantum)
    reps = suggested_reps(last_reps, profile.primary_goal)

    reasoning = [
        f"Base increment {base:.1%} for a {experience.value} lifter "
        f"training {sessions_per_week:g}x/week",
        f"Volume multiplier {volume:.2f} from {weekly_volume:.0f} kg this week",
        f"Recovery factor {recovery:.2f} after {rest_days} rest day(s)",
        f"Plateau adjustment {adjustment:.2f} at {load.overtraining_risk.value} overtraining risk",
    ]
    if profile.experience_level is None:
        reasoning.append(f"Experience level inferred from the {profile.programme_type} programme")
    if plateau_detected:
        reasoning.append("Recent sessions show a plateau; consider a deload or variation")
    if deload and not plateau_detected:
        reasoning.append("A deload is recommended by the current fatigue or phase assessment")

    recommendation = ProgressionRecommendation(
        athlete_id=athlete_id, exercise_id=exercise_id, exercise_name=exercise_name or "Unknown Exercise",
        suggested_weight=weight, suggested_reps=reps, confidence=progression_confidence(summary),
        reasoning=reasoning,
        alternative_options=_alternatives(last_weight, reps, increment, summary, weight, cfg.quantum),
        plateau_detected=plateau_detected, deload_recommended=deload,
        factors=ProgressionFactors(base_increment=base, volume_multiplier=volume, recovery_factor=recovery,
                                   plateau_adjustment=adjustment, total_increment=increment, ),
        phase=phase, recent_training=recent_training, )

    logger.debug("Progression recommended", athlete_id=athlete_id, exercise_id=exercise_id,
                 last_weight=last_weight, suggested_weight=weight, increment=round(increment, 4))
    return recommendation


def compute_progression(store, athlete_id: str, exercise_id: str, as_of: datetime.date,
                        last_weight: Optional[float] = None, last_reps: Optional[int] = None,
                        include_plateau: bool = False, apply_phase: bool = False,
                        config: Optional[ProgressionConfig] = None, context_config: Optional[ContextConfig] = None,
                        fatigue_config: Optional[FatigueConfig] = None, ) -> ProgressionRecommendation:
    """Run the full pipeline for one exercise against ``store``.

    ``last_weight``/``last_reps`` default to the heaviest set of the most
    recent session.  With no logged set and no explicit last weight the
    fallback recommendation starts from 0 kg.
    """
    cfg = config or DEFAULT_CONFIG
    athlete_id = validate_identifier(athlete_id, "athlete id")
    exercise_id = validate_identifier(exercise_id, "exercise id")

    recent_sets = store.fetch_exercise_sets(athlete_id, exercise_id, limit=cfg.set_limit, end=as_of)
    info = store.get_exercise(exercise_id)
    exercise_name = info.name if info else None

    if last_weight is None or last_reps is None:
        if recent_sets:
            latest = max(s.session_date for s in recent_sets)
            top = max((s for s in recent_sets if s.session_date == latest), key=lambda s: (s.weight_kg, s.reps))
            last_weight = top.weight_kg if last_weight is None else last_weight
            last_reps = top.reps if last_reps is None else last_reps
        else:
            return fallback_recommendation(athlete_id, exercise_id, last_weight or 0.0, last_reps or _MIN_REPS,
                                           "no logged sets for this exercise", exercise_name, cfg)

    summary = compute_training_context(store, athlete_id, as_of, context_config)
    assessment = compute_overtraining_assessment(store, athlete_id, as_of, fatigue_config, context_config,
                                                 summary=summary)
    sessions = store.fetch_sessions(athlete_id, window_start(as_of, cfg.frequency_weeks), as_of)
    session_dates = [s.session_date for s in sessions]
    cycle = resolve_cycle(store, athlete_id, as_of, session_dates)
    plateau = (compute_plateau_analysis(store, athlete_id, exercise_id, as_of, phase=cycle.phase)
               if include_plateau else None)

    profile = store.get_profile(athlete_id)
    frequency = estimate_training_frequency(session_dates, as_of, cfg.frequency_weeks)
    recent_training = summarize_recent_training(sessions, as_of)

    recommendation = recommend_progression(athlete_id, exercise_id, last_weight, last_reps, profile, summary,
                                           recent_sets, as_of, assessment=assessment, phase=cycle.phase,
                                           plateau=plateau, exercise_name=exercise_name, frequency=frequency,
                                           recent_training=recent_training, config=cfg)
    if apply_phase and not recommendation.used_defaults:
        recommendation = apply_phase_adjustments(recommendation, cycle.phase, cfg.quantum)
    return recommendation
