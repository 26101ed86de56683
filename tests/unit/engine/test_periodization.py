"""Tests for the periodization state machine and phase recommendation."""

import datetime

import pytest

from trainiq.engine.constants import PHASE_CHARACTERISTICS
from trainiq.engine.context import summarize_training_context
from trainiq.engine.fatigue import assess_overtraining
from trainiq.engine.periodization import (
    advance_cycle,
    apply_phase_adjustments,
    assess_transition_risk,
    compute_periodization,
    detect_cycle_start,
    generate_periodization_recommendation,
    next_phase,
    reconstruct_cycle,
    recommend_phase,
    resolve_cycle,
    should_transition,
    transition_timeline,
)
from trainiq.engine.progression import fallback_recommendation
from trainiq.schemas.common import LoadIntensity, RiskLevel, Trend
from trainiq.schemas.context import TrainingLoadMetrics
from trainiq.schemas.log import SetRecord, WorkoutSessionRecord
from trainiq.schemas.periodization import CycleSource, PeriodizationCycle, Phase, TransitionRisk
from trainiq.schemas.plateau import PlateauLevel
from trainiq.store.memory import InMemoryTrainingStore

AS_OF = datetime.date(2026, 3, 31)


# ======================================================================
# Helpers
# ======================================================================


def _make_sessions(count: int = 8, step_days: int = 3) -> list[WorkoutSessionRecord]:
    sessions = []
    for i in range(count):
        date = AS_OF - datetime.timedelta(days=step_days * (count - 1 - i))
        sessions.append(WorkoutSessionRecord(
            id=f"s{i}", athlete_id="athlete-1", session_date=date,
            completed_at=datetime.datetime.combine(date, datetime.time(18, 0)),
            sets=(SetRecord(exercise_id="back_squat", weight_kg=100.0, reps=10),),
        ))
    return sessions


def _make_cycle(phase: Phase, weeks_ago: float, source: CycleSource = CycleSource.RECONSTRUCTED) -> PeriodizationCycle:
    phase_start = AS_OF - datetime.timedelta(days=round(weeks_ago * 7))
    return PeriodizationCycle(athlete_id="athlete-1", cycle_start=phase_start, phase=phase,
                              phase_start=phase_start, source=source)


def _make_load(current_load: int = 60, trend: Trend = Trend.STABLE, recovery_demand: float = 30.0,
               risk: RiskLevel = RiskLevel.LOW) -> TrainingLoadMetrics:
    return TrainingLoadMetrics(current_load=current_load, sustainable_load=60, load_ratio=1.0, load_trend=trend,
                               load_intensity=LoadIntensity.HIGH, recovery_demand=recovery_demand, risk_score=20.0,
                               overtraining_risk=risk)


# ======================================================================
# State machine
# ======================================================================


class TestNextPhase:
    @pytest.mark.parametrize(
        "phase, expected",
        [
            (Phase.ACCUMULATION, Phase.INTENSIFICATION),
            (Phase.INTENSIFICATION, Phase.REALIZATION),
            (Phase.REALIZATION, Phase.DELOAD),
            (Phase.DELOAD, Phase.ACCUMULATION),
        ],
    )
    def test_fixed_cycle(self, phase, expected):
        assert next_phase(phase) == expected

    def test_accepts_plain_string(self):
        assert next_phase("deload") == Phase.ACCUMULATION


class TestRecommendPhase:
    @pytest.mark.parametrize(
        "load, consistency, rest, risk, expected",
        [
            (60, 90, 4, RiskLevel.CRITICAL, Phase.DELOAD),
            (75, 90, 2, RiskLevel.LOW, Phase.DELOAD),
            (60, 90, 2, RiskLevel.LOW, Phase.ACCUMULATION),
            (40, 90, 4, RiskLevel.LOW, Phase.ACCUMULATION),
            (50, 71, 4, RiskLevel.LOW, Phase.INTENSIFICATION),
            (80, 71, 4, RiskLevel.LOW, Phase.INTENSIFICATION),
            (50, 70, 4, RiskLevel.LOW, Phase.ACCUMULATION),
            (81, 81, 4, RiskLevel.LOW, Phase.REALIZATION),
            (81, 80, 4, RiskLevel.LOW, Phase.ACCUMULATION),
        ],
    )
    def test_rules(self, load, consistency, rest, risk, expected):
        assert recommend_phase(load, consistency, rest, risk) == expected

    def test_deterministic_with_string_risk(self):
        assert recommend_phase(60, 90, 4, "critical") == recommend_phase(60, 90, 4, RiskLevel.CRITICAL)


# ======================================================================
# Cycle reconstruction
# ======================================================================


class TestCycleReconstruction:
    def test_no_history_starts_eight_weeks_back(self):
        cycle = reconstruct_cycle("athlete-1", [], AS_OF)

        assert cycle.cycle_start == AS_OF - datetime.timedelta(weeks=8)
        assert cycle.phase == Phase.REALIZATION
        assert cycle.phase_start == AS_OF - datetime.timedelta(weeks=1)
        assert cycle.source == CycleSource.RECONSTRUCTED

    @pytest.mark.parametrize(
        "weeks_ago, phase, phase_offset_weeks",
        [
            (2, Phase.ACCUMULATION, 0),
            (5, Phase.INTENSIFICATION, 4),
            (8, Phase.REALIZATION, 7),
            (9, Phase.DELOAD, 9),
            (10, Phase.ACCUMULATION, 10),
        ],
    )
    def test_phase_from_elapsed_weeks(self, weeks_ago, phase, phase_offset_weeks):
        start = AS_OF - datetime.timedelta(weeks=weeks_ago)
        dates = [start + datetime.timedelta(days=i) for i in range(6)]

        cycle = reconstruct_cycle("athlete-1", dates, AS_OF)

        assert cycle.cycle_start == start
        assert cycle.phase == phase
        assert cycle.phase_start == start + datetime.timedelta(weeks=phase_offset_weeks)

    def test_detect_start_skips_sparse_runs(self):
        sparse = [AS_OF - datetime.timedelta(days=200 - 30 * i) for i in range(3)]
        dense = [AS_OF - datetime.timedelta(days=40 - 3 * i) for i in range(6)]
        assert detect_cycle_start(sparse + dense, AS_OF) == dense[0]

    def test_future_dates_ignored(self):
        future = [AS_OF + datetime.timedelta(days=i) for i in range(1, 7)]
        assert detect_cycle_start(future, AS_OF) == AS_OF - datetime.timedelta(weeks=8)


class TestAdvanceCycle:
    def test_deload_wraps_and_restarts_cycle(self):
        cycle = _make_cycle(Phase.DELOAD, 1)
        advanced = advance_cycle(cycle, AS_OF)

        assert advanced.phase == Phase.ACCUMULATION
        assert advanced.cycle_start == AS_OF
        assert advanced.phase_start == AS_OF

    def test_mid_cycle_keeps_cycle_start(self):
        cycle = _make_cycle(Phase.ACCUMULATION, 4, source=CycleSource.PERSISTED)
        advanced = advance_cycle(cycle, AS_OF)

        assert advanced.phase == Phase.INTENSIFICATION
        assert advanced.cycle_start == cycle.cycle_start
        assert advanced.source == CycleSource.PERSISTED
        assert cycle.phase == Phase.ACCUMULATION


# ======================================================================
# Transitions
# ======================================================================


class TestShouldTransition:
    def test_nominal_duration_reached(self):
        assert should_transition(_make_cycle(Phase.ACCUMULATION, 4), AS_OF, _make_load())

    def test_accumulation_early_trigger(self):
        cycle = _make_cycle(Phase.ACCUMULATION, 2)
        assert should_transition(cycle, AS_OF, _make_load(current_load=100))
        assert not should_transition(cycle, AS_OF, _make_load(current_load=50))
        assert not should_transition(cycle, AS_OF, _make_load(current_load=100, trend=Trend.INCREASING))

    def test_intensification_on_recovery_demand(self):
        cycle = _make_cycle(Phase.INTENSIFICATION, 2)
        assert should_transition(cycle, AS_OF, _make_load(recovery_demand=75))
        assert should_transition(cycle, AS_OF, _make_load(risk=RiskLevel.MODERATE))
        assert not should_transition(cycle, AS_OF, _make_load())

    def test_realization_on_high_risk(self):
        cycle = _make_cycle(Phase.REALIZATION, 1)
        assert should_transition(cycle, AS_OF, _make_load(risk=RiskLevel.HIGH))
        assert not should_transition(cycle, AS_OF, _make_load(risk=RiskLevel.MODERATE))

    def test_deload_on_recovered_and_rising_load(self):
        cycle = _make_cycle(Phase.DELOAD, 0.5)
        assert should_transition(cycle, AS_OF, _make_load(recovery_demand=30, trend=Trend.INCREASING))
        assert not should_transition(cycle, AS_OF, _make_load(recovery_demand=30))

    @pytest.mark.parametrize(
        "phase, weeks_ago",
        [
            (Phase.ACCUMULATION, 1),
            (Phase.INTENSIFICATION, 1),
            (Phase.REALIZATION, 0.5),
            (Phase.DELOAD, 0),
        ],
    )
    def test_early_trigger_needs_half_the_phase(self, phase, weeks_ago):
        load = _make_load(current_load=100, recovery_demand=30, trend=Trend.INCREASING, risk=RiskLevel.CRITICAL)
        stable = _make_load(current_load=100, recovery_demand=80, risk=RiskLevel.CRITICAL)
        cycle = _make_cycle(phase, weeks_ago)
        assert not should_transition(cycle, AS_OF, load)
        assert not should_transition(cycle, AS_OF, stable)

    def test_phase_started_today_is_never_due(self):
        for phase in Phase:
            cycle = _make_cycle(phase, 0)
            assert not should_transition(cycle, AS_OF, _make_load(current_load=100, risk=RiskLevel.CRITICAL))


class TestTransitionTimeline:
    def test_stages(self):
        assert transition_timeline(_make_cycle(Phase.ACCUMULATION, 1), AS_OF) == \
            "Continue accumulation for about 3.0 more week(s)"
        assert transition_timeline(_make_cycle(Phase.ACCUMULATION, 3), AS_OF) == \
            "Transition at the end of the accumulation phase (within 7 day(s))"
        assert transition_timeline(_make_cycle(Phase.ACCUMULATION, 4), AS_OF) == "Transition immediately"

    def test_no_history(self):
        assert transition_timeline(_make_cycle(Phase.ACCUMULATION, 1), AS_OF, has_history=False) == \
            "Start immediately"


class TestAssessTransitionRisk:
    def test_realization_under_risk_with_irregular_rest(self):
        summary = summarize_training_context("athlete-1", _make_sessions(), AS_OF)
        # risk not low +40, rest consistency 20 +30
        assert assess_transition_risk(Phase.REALIZATION, summary) == TransitionRisk.HIGH

    def test_deload_with_irregular_rest(self):
        summary = summarize_training_context("athlete-1", _make_sessions(), AS_OF)
        assert assess_transition_risk(Phase.DELOAD, summary) == TransitionRisk.MEDIUM

    def test_neutral_context_is_low(self):
        summary = summarize_training_context("athlete-1", [], AS_OF)
        assert assess_transition_risk(Phase.ACCUMULATION, summary) == TransitionRisk.LOW


# ======================================================================
# Recommendation
# ======================================================================


class TestGeneratePeriodizationRecommendation:
    def test_critical_assessment_forces_deload(self):
        sessions = _make_sessions()
        summary = summarize_training_context("athlete-1", sessions, AS_OF)
        assessment = assess_overtraining(summary, sessions, AS_OF)
        cycle = reconstruct_cycle("athlete-1", [s.session_date for s in sessions], AS_OF)

        recommendation = generate_periodization_recommendation(summary, cycle, AS_OF, assessment)

        assert cycle.phase == Phase.ACCUMULATION
        assert recommendation.current_phase == Phase.ACCUMULATION
        assert recommendation.recommended_phase == Phase.DELOAD
        assert recommendation.next_phase == Phase.INTENSIFICATION
        assert recommendation.characteristics == PHASE_CHARACTERISTICS[Phase.DELOAD]
        assert recommendation.weeks_in_phase == pytest.approx(3.0)
        assert recommendation.should_transition
        assert recommendation.transition_risk == TransitionRisk.MEDIUM
        assert recommendation.reasoning[0] == "Overtraining risk is critical"

    def test_load_model_risk_alone(self):
        sessions = _make_sessions()
        summary = summarize_training_context("athlete-1", sessions, AS_OF)
        cycle = reconstruct_cycle("athlete-1", [s.session_date for s in sessions], AS_OF)

        recommendation = generate_periodization_recommendation(summary, cycle, AS_OF)

        assert recommendation.recommended_phase == Phase.ACCUMULATION
        assert recommendation.expected_benefits[0] == "Increased work capacity"

    def test_transition_risk_scores_the_phase_entered(self):
        sessions = _make_sessions()
        summary = summarize_training_context("athlete-1", sessions, AS_OF)
        cycle = _make_cycle(Phase.INTENSIFICATION, 2)

        recommendation = generate_periodization_recommendation(summary, cycle, AS_OF)

        # recommended accumulation would score 30; entering realization at high risk adds 40
        assert recommendation.recommended_phase == Phase.ACCUMULATION
        assert recommendation.next_phase == Phase.REALIZATION
        assert recommendation.should_transition
        assert recommendation.transition_risk == TransitionRisk.HIGH

    def test_severe_plateau_offers_deload(self):
        sessions = _make_sessions()
        summary = summarize_training_context("athlete-1", sessions, AS_OF)
        cycle = reconstruct_cycle("athlete-1", [s.session_date for s in sessions], AS_OF)

        recommendation = generate_periodization_recommendation(summary, cycle, AS_OF,
                                                               plateau_level=PlateauLevel.SEVERE)

        assert [(a.phase, a.suitability) for a in recommendation.alternatives] == [(Phase.DELOAD, 75)]

    def test_neutral_context(self):
        summary = summarize_training_context("athlete-1", [], AS_OF)
        cycle = reconstruct_cycle("athlete-1", [], AS_OF)

        recommendation = generate_periodization_recommendation(summary, cycle, AS_OF)

        # no rest gaps -> short rest rule with a low load
        assert recommendation.recommended_phase == Phase.ACCUMULATION
        assert recommendation.transition_timeline == "Start immediately"


class TestResolveCycle:
    def test_persisted_cycle_wins(self):
        store = InMemoryTrainingStore(sessions=_make_sessions())
        saved = store.save_cycle(_make_cycle(Phase.REALIZATION, 1))

        assert resolve_cycle(store, "athlete-1", AS_OF) == saved
        assert saved.source == CycleSource.PERSISTED

    def test_future_persisted_cycle_ignored(self):
        store = InMemoryTrainingStore(sessions=_make_sessions())
        store.save_cycle(_make_cycle(Phase.REALIZATION, -2))

        cycle = resolve_cycle(store, "athlete-1", AS_OF)
        assert cycle.source == CycleSource.RECONSTRUCTED
        assert cycle.phase == Phase.ACCUMULATION

    def test_compute_from_store(self):
        store = InMemoryTrainingStore(sessions=_make_sessions())
        recommendation = compute_periodization(store, "athlete-1", AS_OF)
        assert recommendation.current_phase == Phase.ACCUMULATION
        assert recommendation.recommended_phase == Phase.ACCUMULATION


class TestApplyPhaseAdjustments:
    @pytest.mark.parametrize(
        "phase, weight, reps",
        [
            (Phase.ACCUMULATION, 92.5, 10),
            (Phase.INTENSIFICATION, 102.5, 7),
            (Phase.REALIZATION, 105.0, 6),
            (Phase.DELOAD, 90.0, 9),
        ],
    )
    def test_adjustments(self, phase, weight, reps):
        base = fallback_recommendation("athlete-1", "back_squat", 100.0, 8, "test").model_copy(
            update={"suggested_weight": 100.0, "suggested_reps": 8})

        adjusted = apply_phase_adjustments(base, phase)

        assert adjusted.suggested_weight == pytest.approx(weight)
        assert adjusted.suggested_reps == reps
        assert adjusted.phase == phase
        assert adjusted.reasoning[-1].startswith(f"Adjusted for the {phase.value} phase")
        assert base.suggested_weight == 100.0

    def test_reps_floor_at_one(self):
        base = fallback_recommendation("athlete-1", "back_squat", 100.0, 8, "test").model_copy(
            update={"suggested_reps": 1})
        assert apply_phase_adjustments(base, Phase.REALIZATION).suggested_reps == 1
