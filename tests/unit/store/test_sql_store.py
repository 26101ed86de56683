"""Tests for the SQLModel-backed training store against in-memory SQLite."""

import datetime

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import trainiq.db.base  # noqa: F401
from trainiq.core.exceptions import StoreUnavailableError
from trainiq.db.init_db import seed_exercises
from trainiq.db.repositories.athlete import AthleteRepository
from trainiq.db.repositories.workout import WorkoutRepository
from trainiq.models import Athlete, Exercise, SetLog, WorkoutSession
from trainiq.schemas.periodization import CycleSource, PeriodizationCycle, Phase
from trainiq.schemas.profile import ExperienceLevel, TrainingGoal
from trainiq.store.sql import SqlTrainingStore

AS_OF = datetime.date(2026, 3, 31)


# ======================================================================
# Helpers
# ======================================================================


def _make_engine(create_tables: bool = True):
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    if create_tables:
        SQLModel.metadata.create_all(engine)
    return engine


def _log_session(session: Session, days_ago: int, sets: list[tuple[str, float, int]], completed: bool = True,
                 athlete_id: str = "athlete-1") -> WorkoutSession:
    date = AS_OF - datetime.timedelta(days=days_ago)
    repo = WorkoutRepository(session)
    workout = repo.create_session(WorkoutSession(
        athlete_id=athlete_id, session_date=date, duration_minutes=55,
        completed_at=datetime.datetime.combine(date, datetime.time(18, 0)) if completed else None,
    ))
    repo.add_sets([SetLog(session_id=workout.id, exercise_id=exercise_id, set_order=i + 1, weight_kg=weight,
                          reps=reps, logged_at=datetime.datetime.combine(date, datetime.time(18, i)))
                   for i, (exercise_id, weight, reps) in enumerate(sets)])
    return workout


@pytest.fixture
def session():
    engine = _make_engine()
    with Session(engine) as db:
        AthleteRepository(db).create(Athlete(athlete_id="athlete-1", experience_level="beginner",
                                             primary_goal="strength", training_frequency=3.0))
        yield db


# ======================================================================
# Tests
# ======================================================================


class TestFetchSessions:
    def test_completed_sessions_in_range_with_sets(self, session):
        _log_session(session, 10, [("back_squat", 100.0, 5), ("bench_press", 60.0, 8)])
        _log_session(session, 3, [("back_squat", 102.5, 5)])
        _log_session(session, 1, [("back_squat", 105.0, 5)], completed=False)
        _log_session(session, 40, [("back_squat", 90.0, 5)])
        store = SqlTrainingStore(session)

        sessions = store.fetch_sessions("athlete-1", AS_OF - datetime.timedelta(days=14), AS_OF)

        assert [s.session_date for s in sessions] == [AS_OF - datetime.timedelta(days=10),
                                                      AS_OF - datetime.timedelta(days=3)]
        assert [st.exercise_id for st in sessions[0].sets] == ["back_squat", "bench_press"]
        assert sessions[0].total_volume == pytest.approx(980.0)
        assert sessions[0].duration_minutes == 55

    def test_empty_for_unknown_athlete(self, session):
        assert SqlTrainingStore(session).fetch_sessions("nobody", AS_OF, AS_OF) == []


class TestFetchExerciseSets:
    def test_newest_first_limited_and_bounded(self, session):
        _log_session(session, 7, [("back_squat", 95.0, 5), ("back_squat", 97.5, 5)])
        _log_session(session, 3, [("back_squat", 100.0, 5), ("bench_press", 60.0, 8)])
        _log_session(session, 0, [("back_squat", 102.5, 5)])
        store = SqlTrainingStore(session)

        sets = store.fetch_exercise_sets("athlete-1", "back_squat", limit=3, end=AS_OF - datetime.timedelta(days=1))

        assert [s.weight_kg for s in sets] == [100.0, 97.5, 95.0]
        assert all(s.exercise_id == "back_squat" for s in sets)


class TestLookups:
    def test_profile_maps_enums(self, session):
        profile = SqlTrainingStore(session).get_profile("athlete-1")

        assert profile.experience_level == ExperienceLevel.BEGINNER
        assert profile.primary_goal == TrainingGoal.STRENGTH
        assert profile.training_frequency == 3.0

    def test_profile_carries_programme_type(self, session):
        AthleteRepository(session).create(Athlete(athlete_id="athlete-2", programme_type="ppl"))

        profile = SqlTrainingStore(session).get_profile("athlete-2")

        assert profile.programme_type == "ppl"
        assert profile.experience_level is None

    def test_missing_profile(self, session):
        assert SqlTrainingStore(session).get_profile("athlete-2") is None

    def test_exercise_table_overrides_catalog(self, session):
        session.add(Exercise(exercise_id="back_squat", name="Safety Bar Squat", muscle_group="Quadriceps"))
        session.commit()
        store = SqlTrainingStore(session)

        assert store.get_exercise("back_squat").name == "Safety Bar Squat"
        assert store.get_exercise("bench_press").name == "Bench Press"
        assert store.get_exercise("mystery") is None

    def test_seeded_catalog(self, session):
        added = seed_exercises(session)

        assert added > 0
        assert seed_exercises(session) == 0
        assert SqlTrainingStore(session).get_exercise("deadlift").muscle_group == "Hamstrings"


class TestCycles:
    def test_save_and_overwrite(self, session):
        store = SqlTrainingStore(session)
        first = PeriodizationCycle(athlete_id="athlete-1", cycle_start=AS_OF, phase=Phase.ACCUMULATION,
                                   phase_start=AS_OF)

        saved = store.save_cycle(first)
        assert saved.source == CycleSource.PERSISTED
        assert store.get_cycle("athlete-1").phase == Phase.ACCUMULATION

        later = AS_OF + datetime.timedelta(weeks=4)
        store.save_cycle(first.model_copy(update={"phase": Phase.INTENSIFICATION, "phase_start": later}))

        cycle = store.get_cycle("athlete-1")
        assert cycle.phase == Phase.INTENSIFICATION
        assert cycle.phase_start == later
        assert cycle.cycle_start == AS_OF
        assert cycle.source == CycleSource.PERSISTED

    def test_no_cycle(self, session):
        assert SqlTrainingStore(session).get_cycle("athlete-1") is None


class TestWorkoutRepository:
    def test_delete_session_removes_sets(self, session):
        workout = _log_session(session, 0, [("back_squat", 100.0, 5)])
        repo = WorkoutRepository(session)

        assert repo.delete_session(workout.id)
        assert repo.get_by_id(workout.id) is None
        assert repo.get_sets_for_sessions([workout.id]) == []
        assert not repo.delete_session(workout.id)


class TestStoreUnavailable:
    def test_database_error_is_wrapped(self):
        engine = _make_engine(create_tables=False)
        with Session(engine) as db:
            store = SqlTrainingStore(db)

            with pytest.raises(StoreUnavailableError) as exc_info:
                store.fetch_sessions("athlete-1", AS_OF, AS_OF)

        assert exc_info.value.details["operation"] == "fetch_sessions"
        assert exc_info.value.__cause__ is not None

    def test_profile_read_error_is_wrapped(self):
        engine = _make_engine(create_tables=False)
        with Session(engine) as db:
            with pytest.raises(StoreUnavailableError):
                SqlTrainingStore(db).get_profile("athlete-1")
