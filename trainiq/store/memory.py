"""
In-memory training store.

Backs the unit tests, the simulation script and any caller that already
holds the log in memory.  Exercise lookups fall back to the built-in
catalog.
"""

from __future__ import annotations

import datetime
from typing import Iterable, Optional

from trainiq.catalog.exercise_catalog import get_exercise_info
from trainiq.schemas.log import ExerciseSetRecord, WorkoutSessionRecord
from trainiq.schemas.periodization import CycleSource, PeriodizationCycle
from trainiq.schemas.profile import AthleteProfile, ExerciseInfo
from trainiq.store.base import TrainingStore


class InMemoryTrainingStore(TrainingStore):
    """Training store holding sessions, profiles and exercises in dicts."""

    def __init__(self, sessions: Iterable[WorkoutSessionRecord] = (),
                 profiles: Iterable[AthleteProfile] = (),
                 exercises: Iterable[ExerciseInfo] = (), ):
        self._sessions: dict[str, list[WorkoutSessionRecord]] = {}
        self._profiles: dict[str, AthleteProfile] = {p.athlete_id: p for p in profiles}
        self._exercises: dict[str, ExerciseInfo] = {e.exercise_id: e for e in exercises}
        self._cycles: dict[str, PeriodizationCycle] = {}
        for session in sessions:
            self.add_session(session)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def add_session(self, session: WorkoutSessionRecord) -> None:
        self._sessions.setdefault(session.athlete_id, []).append(session)

    def add_profile(self, profile: AthleteProfile) -> None:
        self._profiles[profile.athlete_id] = profile

    # ------------------------------------------------------------------
    # LogStore
    # ------------------------------------------------------------------

    def fetch_sessions(self, athlete_id: str, start: datetime.date,
                       end: datetime.date, ) -> list[WorkoutSessionRecord]:
        sessions = [s for s in self._sessions.get(athlete_id, []) if
                    s.is_completed and start <= s.session_date <= end]
        return sorted(sessions, key=lambda s: (s.session_date, s.completed_at, s.id))

    def fetch_exercise_sets(self, athlete_id: str, exercise_id: str, limit: int = 24,
                            end: Optional[datetime.date] = None, ) -> list[ExerciseSetRecord]:
        records: list[ExerciseSetRecord] = []
        for session in self._sessions.get(athlete_id, []):
            if not session.is_completed or (end is not None and session.session_date > end):
                continue
            for s in session.sets:
                if s.exercise_id != exercise_id:
                    continue
                records.append(ExerciseSetRecord(session_id=session.id, session_date=session.session_date,
                                                 exercise_id=s.exercise_id, weight_kg=s.weight_kg, reps=s.reps,
                                                 logged_at=s.logged_at or session.completed_at, ))
        records.sort(key=lambda r: (r.session_date, r.logged_at or datetime.datetime.min), reverse=True)
        return records[:limit]

    # ------------------------------------------------------------------
    # ExerciseCatalog / AthleteProfileStore
    # ------------------------------------------------------------------

    def get_exercise(self, exercise_id: str) -> Optional[ExerciseInfo]:
        return self._exercises.get(exercise_id) or get_exercise_info(exercise_id)

    def get_profile(self, athlete_id: str) -> Optional[AthleteProfile]:
        return self._profiles.get(athlete_id)

    # ------------------------------------------------------------------
    # CycleStore
    # ------------------------------------------------------------------

    def get_cycle(self, athlete_id: str) -> Optional[PeriodizationCycle]:
        return self._cycles.get(athlete_id)

    def save_cycle(self, cycle: PeriodizationCycle) -> PeriodizationCycle:
        stored = cycle.model_copy(update={"source": CycleSource.PERSISTED})
        self._cycles[cycle.athlete_id] = stored
        return stored
