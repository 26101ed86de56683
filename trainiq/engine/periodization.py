"""
Periodization phase engine.

A strictly cyclic state machine::

    accumulation -> intensification -> realization -> deload -> accumulation

Phase selection (:func:`recommend_phase`) is a pure function of four
numbers from the training context; it is the single source of truth
whether the current cycle is reconstructed from history or read from a
:class:`~trainiq.store.base.CycleStore`.

Cycle reconstruction
--------------------

Without a persisted cycle the start is the first run of 6 sessions that
spans at most 8 weeks (otherwise 8 weeks before ``as_of``).  The current
phase follows from the elapsed weeks modulo the nominal 10-week cycle
(4 + 3 + 2 + 1).
"""

from __future__ import annotations

import datetime
from typing import Optional, Sequence

from loguru import logger

from trainiq.core.exceptions import validate_identifier
from trainiq.engine.constants import (
    CYCLE_LENGTH_WEEKS,
    EARLY_TRANSITION_MIN_SHARE,
    PHASE_CHARACTERISTICS,
    PHASE_SEQUENCE,
    PLATEAU_LEVEL_ORDER,
)
from trainiq.engine.context import ContextConfig, resolve_muscle_groups, summarize_training_context, window_start
from trainiq.engine.stats import quantize
from trainiq.schemas.common import RISK_ORDER, RiskLevel, Trend
from trainiq.schemas.context import TrainingContextSummary, TrainingLoadMetrics
from trainiq.schemas.fatigue import OvertrainingAssessment
from trainiq.schemas.periodization import (
    CycleSource,
    Phase,
    PhaseAlternative,
    PhaseCharacteristics,
    PeriodizationCycle,
    PeriodizationRecommendation,
    TransitionRisk,
)
from trainiq.schemas.plateau import PlateauLevel
from trainiq.schemas.progression import ProgressionRecommendation

_CYCLE_DETECTION_SESSIONS = 6
_CYCLE_DETECTION_WEEKS = 8
_HISTORY_WEEKS = 12

# ======================================================================
# State machine
# ======================================================================


def next_phase(phase: Phase) -> Phase:
    """The phase that follows ``phase`` in the fixed cycle."""
    index = PHASE_SEQUENCE.index(Phase(phase))
    return PHASE_SEQUENCE[(index + 1) % len(PHASE_SEQUENCE)]


def get_phase_characteristics(phase: Phase) -> PhaseCharacteristics:
    return PHASE_CHARACTERISTICS[Phase(phase)]


# ======================================================================
# Phase recommendation
# ======================================================================


def _match_phase_rule(current_load: float, rest_consistency: float, average_rest_days: float,
                      overtraining_risk: RiskLevel, ) -> tuple[Phase, str]:
    """First matching rule wins; returns the phase and why it matched."""
    if overtraining_risk == RiskLevel.CRITICAL:
        return Phase.DELOAD, "Overtraining risk is critical"
    if average_rest_days < 3:
        if current_load > 70:
            return Phase.DELOAD, f"Short rest ({average_rest_days:.1f} days) under a high load ({current_load:.0f})"
        return Phase.ACCUMULATION, f"Short rest ({average_rest_days:.1f} days) with a manageable load"
    if current_load < 50:
        return Phase.ACCUMULATION, f"Training load ({current_load:.0f}) leaves room to build volume"
    if current_load <= 80 and rest_consistency > 70:
        return Phase.INTENSIFICATION, "Moderate load with consistent recovery supports heavier work"
    if current_load > 80 and rest_consistency > 80:
        return Phase.REALIZATION, "High load with very consistent recovery supports peaking"
    return Phase.ACCUMULATION, "No specific condition met; default to building volume"


def recommend_phase(current_load: float, rest_consistency: float, average_rest_days: float,
                    overtraining_risk: RiskLevel | str, ) -> Phase:
    """Recommend a phase; deterministic in its four inputs.

    1. critical overtraining risk -> deload
    2. average rest < 3 days -> deload if load > 70 else accumulation
    3. load < 50 -> accumulation
    4. 50 <= load <= 80 and rest consistency > 70 -> intensification
    5. load > 80 and rest consistency > 80 -> realization
    6. accumulation
    """
    phase, _ = _match_phase_rule(current_load, rest_consistency, average_rest_days, RiskLevel(overtraining_risk))
    return phase


def _effective_risk(summary: TrainingContextSummary, assessment: Optional[OvertrainingAssessment]) -> RiskLevel:
    risk = summary.training_load_metrics.overtraining_risk
    if assessment is not None and RISK_ORDER[assessment.risk_level] > RISK_ORDER[risk]:
        return assessment.risk_level
    return risk


# ======================================================================
# Cycle reconstruction
# ======================================================================


def detect_cycle_start(session_dates: Sequence[datetime.date], as_of: datetime.date) -> datetime.date:
    """First run of 6 sessions spanning at most 8 weeks, else 8 weeks before ``as_of``."""
    dates = sorted({d for d in session_dates if d <= as_of})
    span = datetime.timedelta(weeks=_CYCLE_DETECTION_WEEKS)
    for i in range(len(dates) - _CYCLE_DETECTION_SESSIONS + 1):
        if dates[i + _CYCLE_DETECTION_SESSIONS - 1] - dates[i] <= span:
            return dates[i]
    return as_of - span


def _phase_at(cycle_start: datetime.date, as_of: datetime.date) -> tuple[Phase, datetime.date]:
    elapsed_weeks = max(0, (as_of - cycle_start).days // 7)
    position = elapsed_weeks % CYCLE_LENGTH_WEEKS
    current_cycle_start = cycle_start + datetime.timedelta(weeks=elapsed_weeks - position)

    offset = 0
    for phase in PHASE_SEQUENCE:
        duration = PHASE_CHARACTERISTICS[phase].duration_weeks
        if position < offset + duration:
            return phase, current_cycle_start + datetime.timedelta(weeks=offset)
        offset += duration
    return Phase.DELOAD, current_cycle_start + datetime.timedelta(weeks=CYCLE_LENGTH_WEEKS - 1)


def reconstruct_cycle(athlete_id: str, session_dates: Sequence[datetime.date],
                      as_of: datetime.date, ) -> PeriodizationCycle:
    """Rebuild the current cycle heuristically from session dates."""
    start = detect_cycle_start(session_dates, as_of)
    phase, phase_start = _phase_at(start, as_of)
    return PeriodizationCycle(athlete_id=athlete_id, cycle_start=start, phase=phase, phase_start=phase_start,
                              source=CycleSource.RECONSTRUCTED, )


def advance_cycle(cycle: PeriodizationCycle, as_of: datetime.date) -> PeriodizationCycle:
    """Return a new cycle moved to the next phase starting at ``as_of``."""
    following = next_phase(cycle.phase)
    cycle_start = as_of if following == Phase.ACCUMULATION else cycle.cycle_start
    return PeriodizationCycle(athlete_id=cycle.athlete_id, cycle_start=cycle_start, phase=following,
                              phase_start=as_of, source=cycle.source, )


# ======================================================================
# Transitions
# ======================================================================


def should_transition(cycle: PeriodizationCycle, as_of: datetime.date, load: TrainingLoadMetrics) -> bool:
    """Whether the current phase is due to end.

    Due when the weeks spent in the phase reach its nominal duration, or on
    an early trigger once the phase has run at least half its nominal
    duration (a phase that started on ``as_of`` is never due):

    - accumulation: load is stable and above 80,
    - intensification: recovery demand above 70 or any overtraining risk,
    - realization: high or critical overtraining risk,
    - deload: recovery demand below 40 while load is increasing.
    """
    duration = PHASE_CHARACTERISTICS[cycle.phase].duration_weeks
    weeks = cycle.weeks_in_phase(as_of)
    if weeks >= duration:
        return True
    if weeks <= 0 or weeks < duration * EARLY_TRANSITION_MIN_SHARE:
        return False

    if cycle.phase == Phase.ACCUMULATION:
        return load.load_trend == Trend.STABLE and load.current_load > 80
    if cycle.phase == Phase.INTENSIFICATION:
        return load.recovery_demand > 70 or load.overtraining_risk != RiskLevel.LOW
    if cycle.phase == Phase.REALIZATION:
        return load.overtraining_risk in (RiskLevel.HIGH, RiskLevel.CRITICAL)
    return load.recovery_demand < 40 and load.load_trend == Trend.INCREASING


def assess_transition_risk(target: Phase, summary: TrainingContextSummary,
                           overtraining_risk: Optional[RiskLevel] = None, ) -> TransitionRisk:
    """Risk of moving into ``target`` now; ``high`` callers should confirm before applying."""
    load = summary.training_load_metrics
    risk = overtraining_risk or load.overtraining_risk

    score = 0
    if target == Phase.REALIZATION and risk != RiskLevel.LOW:
        score += 40
    if target == Phase.DELOAD and load.current_load < 30:
        score += 20
    if summary.rest_period_analysis.rest_consistency < 50:
        score += 30
    if load.load_trend == Trend.DECREASING and target != Phase.DELOAD:
        score += 25

    if score >= 60:
        return TransitionRisk.HIGH
    if score >= 30:
        return TransitionRisk.MEDIUM
    return TransitionRisk.LOW


def transition_timeline(cycle: PeriodizationCycle, as_of: datetime.date, has_history: bool = True) -> str:
    if not has_history:
        return "Start immediately"
    duration = PHASE_CHARACTERISTICS[cycle.phase].duration_weeks
    weeks = cycle.weeks_in_phase(as_of)
    if weeks < duration * 0.75:
        return f"Continue {cycle.phase.value} for about {duration - weeks:.1f} more week(s)"
    if weeks < duration:
        days = max(1, round((duration - weeks) * 7))
        return f"Transition at the end of the {cycle.phase.value} phase (within {days} day(s))"
    return "Transition immediately"


# ======================================================================
# Reasoning, benefits, alternatives
# ======================================================================

_PHASE_BENEFITS: dict[Phase, list[str]] = {
    Phase.ACCUMULATION: ["Increased work capacity", "Muscle growth from higher volume",
                         "A base for later intensity work"],
    Phase.INTENSIFICATION: ["Strength gains from heavier loads", "Better neural efficiency"],
    Phase.REALIZATION: ["Peak strength expression", "Testing of accumulated adaptations"],
    Phase.DELOAD: ["Fatigue dissipation", "Reduced injury risk", "Supercompensation before the next cycle"],
}


def _alternatives(recommended: Phase, summary: TrainingContextSummary, risk: RiskLevel,
                  plateau_level: Optional[PlateauLevel], ) -> list[PhaseAlternative]:
    load = summary.training_load_metrics
    alternatives: list[PhaseAlternative] = []

    if recommended == Phase.REALIZATION and risk != RiskLevel.LOW:
        alternatives.append(PhaseAlternative(phase=Phase.DELOAD, suitability=80,
                                             reason="Recover first; overtraining risk is not low"))
    if recommended == Phase.INTENSIFICATION and summary.rest_period_analysis.rest_consistency < 60:
        alternatives.append(PhaseAlternative(phase=Phase.ACCUMULATION, suitability=70,
                                             reason="Irregular recovery favours building volume first"))
    if recommended == Phase.DELOAD and load.current_load < 40:
        alternatives.append(PhaseAlternative(phase=Phase.ACCUMULATION, suitability=65,
                                             reason="Training load is already low"))
    if (plateau_level is not None and recommended != Phase.DELOAD
            and PLATEAU_LEVEL_ORDER[plateau_level] >= PLATEAU_LEVEL_ORDER[PlateauLevel.SEVERE]):
        alternatives.append(PhaseAlternative(phase=Phase.DELOAD, suitability=75,
                                             reason=f"Plateau analysis is {plateau_level.value}"))
    return alternatives


def apply_phase_adjustments(recommendation: ProgressionRecommendation, phase: Phase,
                            quantum: float = 0.25, ) -> ProgressionRecommendation:
    """Shift reps and scale weight by the phase characteristics.

    Weight moves by half of the phase's intensity change
    (``1 + (intensity - 1) x 0.5``); reps never drop below 1.
    """
    characteristics = PHASE_CHARACTERISTICS[Phase(phase)]
    weight = quantize(recommendation.suggested_weight * (1 + (characteristics.intensity_multiplier - 1) * 0.5),
                      quantum)
    reps = max(1, recommendation.suggested_reps + characteristics.rep_adjustment)
    reasoning = recommendation.reasoning + [
        f"Adjusted for the {Phase(phase).value} phase: {characteristics.rep_adjustment:+d} reps, "
        f"intensity x{characteristics.intensity_multiplier}"]
    return recommendation.model_copy(update={"suggested_weight": weight, "suggested_reps": reps,
                                             "reasoning": reasoning, "phase": Phase(phase)})


# ======================================================================
# Main entry points
# ======================================================================


def generate_periodization_recommendation(summary: TrainingContextSummary, cycle: PeriodizationCycle,
                                          as_of: datetime.date,
                                          assessment: Optional[OvertrainingAssessment] = None,
                                          plateau_level: Optional[PlateauLevel] = None, ) -> PeriodizationRecommendation:
    """Recommend a phase and describe the transition from ``cycle``.

    The overtraining risk fed to the rules is the worse of the load model's
    risk and the fatigue ``assessment`` risk.  ``transition_risk`` scores the
    move into ``next_phase(cycle.phase)``, the phase a transition enters.
    """
    load = summary.training_load_metrics
    rest = summary.rest_period_analysis
    risk = _effective_risk(summary, assessment)

    recommended, reason = _match_phase_rule(load.current_load, rest.rest_consistency, rest.average_rest_days, risk)
    due = should_transition(cycle, as_of, load)
    following = next_phase(cycle.phase)

    reasoning = [reason, f"Currently {cycle.weeks_in_phase(as_of):.1f} week(s) into {cycle.phase.value}"]
    if due:
        reasoning.append(f"The {cycle.phase.value} phase is due to end")
    if recommended != cycle.phase and not due:
        reasoning.append(f"Consider moving to {recommended.value} at the end of the current phase")

    recommendation = PeriodizationRecommendation(
        athlete_id=summary.athlete_id, as_of=as_of, current_phase=cycle.phase, recommended_phase=recommended,
        next_phase=following, characteristics=PHASE_CHARACTERISTICS[recommended],
        should_transition=due, weeks_in_phase=cycle.weeks_in_phase(as_of), reasoning=reasoning,
        expected_benefits=list(_PHASE_BENEFITS[recommended]),
        transition_timeline=transition_timeline(cycle, as_of, has_history=not summary.is_neutral),
        transition_risk=assess_transition_risk(following, summary, risk),
        alternatives=_alternatives(recommended, summary, risk, plateau_level), )

    logger.debug("Periodization recommended", athlete_id=summary.athlete_id, current=cycle.phase.value,
                 recommended=recommended.value, should_transition=due)
    return recommendation


def resolve_cycle(store, athlete_id: str, as_of: datetime.date,
                  session_dates: Optional[Sequence[datetime.date]] = None, ) -> PeriodizationCycle:
    """The persisted cycle when the store has one, else a reconstructed one."""
    cycle = store.get_cycle(athlete_id)
    if cycle is not None and cycle.phase_start <= as_of:
        return cycle
    if session_dates is None:
        sessions = store.fetch_sessions(athlete_id, window_start(as_of, _HISTORY_WEEKS), as_of)
        session_dates = [s.session_date for s in sessions]
    return reconstruct_cycle(athlete_id, session_dates, as_of)


def compute_periodization(store, athlete_id: str, as_of: datetime.date,
                          summary: Optional[TrainingContextSummary] = None,
                          assessment: Optional[OvertrainingAssessment] = None,
                          plateau_level: Optional[PlateauLevel] = None,
                          context_config: Optional[ContextConfig] = None, ) -> PeriodizationRecommendation:
    """Read history from ``store`` and recommend a phase."""
    athlete_id = validate_identifier(athlete_id, "athlete id")

    sessions = store.fetch_sessions(athlete_id, window_start(as_of, _HISTORY_WEEKS), as_of)
    if summary is None:
        summary = summarize_training_context(athlete_id, sessions, as_of, context_config,
                                             resolve_muscle_groups(store, sessions))
    cycle = resolve_cycle(store, athlete_id, as_of, [s.session_date for s in sessions])
    return generate_periodization_recommendation(summary, cycle, as_of, assessment, plateau_level)
