"""
SQL-backed training store.

Adapts the SQLModel repositories to the engine's store interfaces.  Every
database failure is logged and re-raised as
:class:`~trainiq.core.exceptions.StoreUnavailableError` with the original
exception chained, so callers can tell a broken database from an athlete
who simply has no data yet.
"""

from __future__ import annotations

import datetime
from contextlib import contextmanager
from typing import Iterator, Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from trainiq.catalog.exercise_catalog import get_exercise_info
from trainiq.core.exceptions import StoreUnavailableError
from trainiq.db.repositories.athlete import AthleteRepository
from trainiq.db.repositories.cycle import TrainingCycleRepository
from trainiq.db.repositories.exercise import ExerciseRepository
from trainiq.db.repositories.workout import WorkoutRepository
from trainiq.schemas.log import ExerciseSetRecord, SetRecord, WorkoutSessionRecord
from trainiq.schemas.periodization import CycleSource, Phase, PeriodizationCycle
from trainiq.schemas.profile import AthleteProfile, ExerciseInfo
from trainiq.store.base import TrainingStore


@contextmanager
def _store_access(operation: str, **context) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Training store read failed", operation=operation, error=str(exc), **context)
        raise StoreUnavailableError(f"Training store unavailable during {operation}",
                                    details={"operation": operation, **context}) from exc


class SqlTrainingStore(TrainingStore):
    """:class:`TrainingStore` over one SQLModel session.

    A session must not be shared across threads; create one store per
    request or worker.
    """

    def __init__(self, session: Session):
        self.session = session
        self.workouts = WorkoutRepository(session)
        self.athletes = AthleteRepository(session)
        self.exercises = ExerciseRepository(session)
        self.cycles = TrainingCycleRepository(session)

    # ------------------------------------------------------------------
    # LogStore
    # ------------------------------------------------------------------

    def fetch_sessions(self, athlete_id: str, start: datetime.date,
                       end: datetime.date, ) -> list[WorkoutSessionRecord]:
        with _store_access("fetch_sessions", athlete_id=athlete_id):
            rows = self.workouts.get_completed_by_date_range(athlete_id, start, end)
            sets_by_session: dict[int, list[SetRecord]] = {}
            for set_log in self.workouts.get_sets_for_sessions([row.id for row in rows]):
                sets_by_session.setdefault(set_log.session_id, []).append(
                    SetRecord(exercise_id=set_log.exercise_id, weight_kg=set_log.weight_kg, reps=set_log.reps,
                              logged_at=set_log.logged_at, ))

        return [WorkoutSessionRecord(id=str(row.id), athlete_id=row.athlete_id, session_date=row.session_date,
                                     completed_at=row.completed_at, duration_minutes=row.duration_minutes,
                                     sets=tuple(sets_by_session.get(row.id, [])), ) for row in rows]

    def fetch_exercise_sets(self, athlete_id: str, exercise_id: str, limit: int = 24,
                            end: Optional[datetime.date] = None, ) -> list[ExerciseSetRecord]:
        with _store_access("fetch_exercise_sets", athlete_id=athlete_id, exercise_id=exercise_id):
            rows = self.workouts.get_recent_exercise_sets(athlete_id, exercise_id, limit, end)

        return [ExerciseSetRecord(session_id=str(workout.id), session_date=workout.session_date,
                                  exercise_id=set_log.exercise_id, weight_kg=set_log.weight_kg, reps=set_log.reps,
                                  logged_at=set_log.logged_at, ) for set_log, workout in rows]

    # ------------------------------------------------------------------
    # ExerciseCatalog / AthleteProfileStore
    # ------------------------------------------------------------------

    def get_exercise(self, exercise_id: str) -> Optional[ExerciseInfo]:
        with _store_access("get_exercise", exercise_id=exercise_id):
            row = self.exercises.get(exercise_id)
        if row is None:
            return get_exercise_info(exercise_id)
        return ExerciseInfo(exercise_id=row.exercise_id, name=row.name, muscle_group=row.muscle_group,
                            category=row.category, )

    def get_profile(self, athlete_id: str) -> Optional[AthleteProfile]:
        with _store_access("get_profile", athlete_id=athlete_id):
            row = self.athletes.get(athlete_id)
        if row is None:
            return None
        return AthleteProfile(athlete_id=row.athlete_id, experience_level=row.experience_level,
                              primary_goal=row.primary_goal, training_frequency=row.training_frequency,
                              programme_type=row.programme_type, body_weight_kg=row.body_weight_kg,
                              height_cm=row.height_cm, age=row.age, )

    # ------------------------------------------------------------------
    # CycleStore
    # ------------------------------------------------------------------

    def get_cycle(self, athlete_id: str) -> Optional[PeriodizationCycle]:
        with _store_access("get_cycle", athlete_id=athlete_id):
            row = self.cycles.get_by_athlete(athlete_id)
        if row is None:
            return None
        return PeriodizationCycle(athlete_id=row.athlete_id, cycle_start=row.cycle_start, phase=Phase(row.phase),
                                  phase_start=row.phase_start, source=CycleSource.PERSISTED, )

    def save_cycle(self, cycle: PeriodizationCycle) -> PeriodizationCycle:
        with _store_access("save_cycle", athlete_id=cycle.athlete_id):
            try:
                self.cycles.upsert(cycle.athlete_id, cycle.cycle_start, cycle.phase.value, cycle.phase_start)
            except SQLAlchemyError:
                self.session.rollback()
                raise
        return cycle.model_copy(update={"source": CycleSource.PERSISTED})
