"""Tests for the plateau analyzer and deload guidance."""

import datetime

import pytest

from trainiq.core.exceptions import InvalidInputError
from trainiq.engine.performance import compute_exercise_performance
from trainiq.engine.plateau import (
    analyze_plateau,
    compute_plateau_analysis,
    estimate_time_to_plateau,
    label_plateau,
    plateau_risk,
    recommend_deload,
)
from trainiq.schemas.common import RiskLevel
from trainiq.schemas.log import ExerciseSetRecord, SetRecord, WorkoutSessionRecord
from trainiq.schemas.periodization import Phase
from trainiq.schemas.plateau import (
    DeloadType,
    FactorTrend,
    PlateauAnalysis,
    PlateauFactor,
    PlateauFactorType,
    PlateauLevel,
)
from trainiq.store.memory import InMemoryTrainingStore

AS_OF = datetime.date(2026, 3, 31)


# ======================================================================
# Helpers
# ======================================================================


def _weekly_sets(weights: list[float], reps: int = 5) -> list[ExerciseSetRecord]:
    """One set per week, the last on AS_OF."""
    n = len(weights)
    records = []
    for i, weight in enumerate(weights):
        date = AS_OF - datetime.timedelta(days=7 * (n - 1 - i))
        records.append(ExerciseSetRecord(session_id=f"s{i}", session_date=date, exercise_id="back_squat",
                                         weight_kg=weight, reps=reps))
    return records


def _make_factor(factor: PlateauFactorType, severity: float, impact: RiskLevel,
                 trend: FactorTrend = FactorTrend.STABLE) -> PlateauFactor:
    return PlateauFactor(factor=factor, severity=severity, impact=impact, trend=trend, data_points=8,
                         description="test")


def _factors(analysis: PlateauAnalysis) -> dict[PlateauFactorType, PlateauFactor]:
    return {f.factor: f for f in analysis.factors}


# ======================================================================
# Labelling & scoring
# ======================================================================


class TestLabelPlateau:
    @pytest.mark.parametrize(
        "risk, expected",
        [
            (0.0, PlateauLevel.NONE),
            (0.19, PlateauLevel.NONE),
            (0.2, PlateauLevel.EARLY_WARNING),
            (0.4, PlateauLevel.MODERATE),
            (0.6, PlateauLevel.SEVERE),
            (0.8, PlateauLevel.CRITICAL),
            (1.0, PlateauLevel.CRITICAL),
        ],
    )
    def test_boundaries(self, risk, expected):
        assert label_plateau(risk) == expected


class TestPlateauRisk:
    def test_impact_weighted_mean(self):
        factors = [
            _make_factor(PlateauFactorType.PROGRESSION_VELOCITY, 0.8, RiskLevel.CRITICAL),
            _make_factor(PlateauFactorType.VOLUME_STAGNATION, 0.2, RiskLevel.LOW),
        ]
        # (0.8 x 3 + 0.2 x 0.5) / 3.5
        assert plateau_risk(factors) == pytest.approx(2.5 / 3.5)

    def test_no_factors(self):
        assert plateau_risk([]) == 0.0


# ======================================================================
# Analysis
# ======================================================================


class TestAnalyzePlateau:
    def test_sparse_history_is_neutral(self):
        analysis = analyze_plateau("athlete-1", "back_squat", _weekly_sets([100.0, 102.5]), AS_OF)

        assert analysis.plateau_level == PlateauLevel.NONE
        assert analysis.plateau_risk == 0.0
        assert not analysis.sufficient_data
        assert analysis.data_points == 2
        assert analysis.time_to_plateau_weeks is None
        assert analysis.deload is None
        assert all(f.severity == 0.0 and f.impact == RiskLevel.LOW for f in analysis.factors)
        assert analysis.recommended_actions == ["Keep progressing as planned"]

    def test_flat_weights_early_warning(self):
        analysis = analyze_plateau("athlete-1", "back_squat", _weekly_sets([100.0] * 8), AS_OF)
        factors = _factors(analysis)

        assert len(analysis.factors) == 7
        assert factors[PlateauFactorType.PROGRESSION_VELOCITY].severity == pytest.approx(0.2)
        assert factors[PlateauFactorType.VOLUME_STAGNATION].severity == pytest.approx(0.4)
        # 7-day gaps against a 5-day optimum
        assert factors[PlateauFactorType.RECOVERY_INDICATORS].severity == pytest.approx(0.5)
        assert factors[PlateauFactorType.CONSISTENCY_BREAKDOWN].severity == pytest.approx(0.1)
        assert factors[PlateauFactorType.FATIGUE_ACCUMULATION].severity == pytest.approx(0.2)
        assert factors[PlateauFactorType.PERIODIZATION_CONTEXT].severity == 0.0
        assert factors[PlateauFactorType.TRAINING_AGE].trend == FactorTrend.DECLINING

        assert analysis.plateau_risk == pytest.approx(1.65 / 5.0)
        assert analysis.plateau_level == PlateauLevel.EARLY_WARNING
        assert analysis.time_to_plateau_weeks == 0.0
        assert analysis.confidence == pytest.approx(0.9)
        assert analysis.deload is None
        assert analysis.recommended_actions == [
            "Monitor progress closely and review technique",
            "Adjust rest between sessions of this exercise towards the optimal gap",
        ]

    def test_stalled_realization_recommends_deload(self):
        analysis = analyze_plateau("athlete-1", "back_squat", _weekly_sets([100.0] * 8), AS_OF,
                                   phase=Phase.REALIZATION)

        periodization = _factors(analysis)[PlateauFactorType.PERIODIZATION_CONTEXT]
        assert periodization.severity == pytest.approx(0.7)
        assert periodization.impact == RiskLevel.HIGH

        assert analysis.plateau_risk == pytest.approx(3.05 / 6.5)
        assert analysis.plateau_level == PlateauLevel.MODERATE

        deload = analysis.deload
        assert deload.deload_type == DeloadType.VOLUME_REDUCTION
        assert (deload.duration_weeks, deload.volume_reduction_pct, deload.weight_reduction_pct) == (1, 30, 5)
        assert deload.expected_recovery.startswith("After 1 week,")
        assert "Rest periods feel sufficient" in deload.monitoring_checklist

    def test_steady_progress(self):
        analysis = analyze_plateau("athlete-1", "back_squat", _weekly_sets([100.0 + 5 * i for i in range(8)]),
                                   AS_OF)

        assert analysis.plateau_risk == pytest.approx(0.225)
        assert analysis.plateau_level == PlateauLevel.EARLY_WARNING
        assert analysis.time_to_plateau_weeks is None
        assert _factors(analysis)[PlateauFactorType.VOLUME_STAGNATION].trend == FactorTrend.IMPROVING

    def test_window_excludes_future_and_old_sets(self):
        sets = _weekly_sets([100.0] * 4)
        stale = ExerciseSetRecord(session_id="old", session_date=AS_OF - datetime.timedelta(weeks=30),
                                  exercise_id="back_squat", weight_kg=50.0, reps=5)
        future = ExerciseSetRecord(session_id="next", session_date=AS_OF + datetime.timedelta(days=2),
                                   exercise_id="back_squat", weight_kg=150.0, reps=5)

        analysis = analyze_plateau("athlete-1", "back_squat", sets + [stale, future], AS_OF)
        assert analysis.data_points == 4

    def test_malformed_exercise_id(self):
        with pytest.raises(InvalidInputError):
            analyze_plateau("athlete-1", "", _weekly_sets([100.0] * 4), AS_OF)

    def test_compute_from_store_uses_catalog_name(self):
        store = InMemoryTrainingStore()
        for record in _weekly_sets([100.0] * 6):
            store.add_session(WorkoutSessionRecord(
                id=record.session_id, athlete_id="athlete-1", session_date=record.session_date,
                completed_at=datetime.datetime.combine(record.session_date, datetime.time(9, 0)),
                sets=(SetRecord(exercise_id="back_squat", weight_kg=record.weight_kg, reps=record.reps),),
            ))

        analysis = compute_plateau_analysis(store, "athlete-1", "back_squat", AS_OF)

        assert analysis.exercise_name == "Back Squat"
        assert analysis.data_points == 6


class TestEstimateTimeToPlateau:
    def test_scales_with_velocity(self):
        perf = compute_exercise_performance("athlete-1", "back_squat", _weekly_sets([100.0 + 5 * i for i in range(8)]))
        factors = [_make_factor(PlateauFactorType.FATIGUE_ACCUMULATION, 0.5, RiskLevel.MODERATE,
                                FactorTrend.DECLINING)]
        # 4 x (1 - 0.5) x (5 kg/week / 0.2)
        assert estimate_time_to_plateau(perf, factors) == pytest.approx(50.0)

    def test_already_stalled(self):
        perf = compute_exercise_performance("athlete-1", "back_squat", _weekly_sets([100.0] * 4))
        assert estimate_time_to_plateau(perf, []) == 0.0


# ======================================================================
# Deload
# ======================================================================


class TestRecommendDeload:
    def _analysis(self, level: PlateauLevel, risk: float, factors: list[PlateauFactor]) -> PlateauAnalysis:
        return PlateauAnalysis(athlete_id="athlete-1", exercise_id="back_squat", as_of=AS_OF, plateau_level=level,
                               plateau_risk=risk, factors=factors, confidence=0.7, summary="test")

    def test_critical_complete_deload(self):
        analysis = self._analysis(PlateauLevel.CRITICAL, 0.85, [
            _make_factor(PlateauFactorType.FATIGUE_ACCUMULATION, 0.8, RiskLevel.HIGH),
        ])

        deload = recommend_deload(analysis)

        assert deload.deload_type == DeloadType.COMPLETE_DELOAD
        assert (deload.duration_weeks, deload.volume_reduction_pct, deload.weight_reduction_pct) == (2, 70, 20)
        assert deload.rationale == "Training volume has outpaced recovery and fatigue is accumulating."
        assert deload.expected_recovery.startswith("After 2 weeks, expect 90-95%")
        assert "Volume feels manageable, not challenging" in deload.monitoring_checklist

    def test_severe_volume_reduction(self):
        analysis = self._analysis(PlateauLevel.SEVERE, 0.65, [
            _make_factor(PlateauFactorType.TRAINING_AGE, 0.7, RiskLevel.HIGH),
        ])

        deload = recommend_deload(analysis)

        assert deload.deload_type == DeloadType.VOLUME_REDUCTION
        assert (deload.duration_weeks, deload.volume_reduction_pct, deload.weight_reduction_pct) == (2, 50, 10)
        assert deload.rationale == "Several indicators show a deload will restore progression."

    @pytest.mark.parametrize("level", [PlateauLevel.NONE, PlateauLevel.EARLY_WARNING])
    def test_below_moderate_has_none(self, level):
        assert recommend_deload(self._analysis(level, 0.1, [])) is None
