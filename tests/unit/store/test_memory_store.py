"""Tests for the in-memory training store."""

import datetime

from trainiq.schemas.log import SetRecord, WorkoutSessionRecord
from trainiq.schemas.periodization import CycleSource, PeriodizationCycle, Phase
from trainiq.schemas.profile import AthleteProfile, ExerciseInfo
from trainiq.store.memory import InMemoryTrainingStore

AS_OF = datetime.date(2026, 3, 31)


def _make_session(session_id: str, days_ago: int, sets: tuple[SetRecord, ...], completed: bool = True,
                  athlete_id: str = "athlete-1") -> WorkoutSessionRecord:
    date = AS_OF - datetime.timedelta(days=days_ago)
    return WorkoutSessionRecord(id=session_id, athlete_id=athlete_id, session_date=date,
                                completed_at=datetime.datetime.combine(date, datetime.time(18, 0)) if completed
                                else None, sets=sets)


def _squat(weight: float, reps: int = 5) -> SetRecord:
    return SetRecord(exercise_id="back_squat", weight_kg=weight, reps=reps)


class TestFetchSessions:
    def test_window_and_completion_filter(self):
        store = InMemoryTrainingStore(sessions=[
            _make_session("a", 10, (_squat(100),)),
            _make_session("b", 3, (_squat(100),)),
            _make_session("c", 1, (_squat(100),), completed=False),
            _make_session("d", 30, (_squat(100),)),
            _make_session("e", 2, (_squat(100),), athlete_id="someone-else"),
        ])

        sessions = store.fetch_sessions("athlete-1", AS_OF - datetime.timedelta(days=14), AS_OF)

        assert [s.id for s in sessions] == ["a", "b"]

    def test_unknown_athlete_is_empty(self):
        assert InMemoryTrainingStore().fetch_sessions("nobody", AS_OF, AS_OF) == []


class TestFetchExerciseSets:
    def test_newest_first_with_limit(self):
        store = InMemoryTrainingStore(sessions=[
            _make_session("old", 7, (_squat(90), _squat(95))),
            _make_session("new", 0, (_squat(100), SetRecord(exercise_id="bench_press", weight_kg=60, reps=8))),
        ])

        sets = store.fetch_exercise_sets("athlete-1", "back_squat", limit=2)

        assert [s.session_id for s in sets] == ["new", "old"]
        assert sets[0].weight_kg == 100
        assert all(s.exercise_id == "back_squat" for s in sets)

    def test_end_date_bound(self):
        store = InMemoryTrainingStore(sessions=[
            _make_session("old", 7, (_squat(90),)),
            _make_session("new", 0, (_squat(100),)),
        ])
        sets = store.fetch_exercise_sets("athlete-1", "back_squat", end=AS_OF - datetime.timedelta(days=1))
        assert [s.session_id for s in sets] == ["old"]


class TestLookups:
    def test_exercise_override_and_catalog_fallback(self):
        store = InMemoryTrainingStore(exercises=[ExerciseInfo(exercise_id="back_squat", name="High-Bar Squat")])

        assert store.get_exercise("back_squat").name == "High-Bar Squat"
        assert store.get_exercise("bench_press").name == "Bench Press"
        assert store.get_exercise("mystery") is None

    def test_profiles(self):
        store = InMemoryTrainingStore()
        store.add_profile(AthleteProfile(athlete_id="athlete-1", training_frequency=4.0))

        assert store.get_profile("athlete-1").training_frequency == 4.0
        assert store.get_profile("athlete-2") is None


class TestCycles:
    def test_save_marks_persisted(self):
        store = InMemoryTrainingStore()
        cycle = PeriodizationCycle(athlete_id="athlete-1", cycle_start=AS_OF, phase=Phase.ACCUMULATION,
                                   phase_start=AS_OF)

        saved = store.save_cycle(cycle)

        assert saved.source == CycleSource.PERSISTED
        assert cycle.source == CycleSource.RECONSTRUCTED
        assert store.get_cycle("athlete-1") == saved
        assert store.get_cycle("athlete-2") is None
