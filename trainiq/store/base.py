"""
Abstract collaborators the engine reads from.

Every store operation is read-only except :meth:`CycleStore.save_cycle`,
which persists the engine's own periodization state.  Implementations must
raise :class:`~trainiq.core.exceptions.StoreUnavailableError` when the
backing system fails, and return empty results (never raise) when there is
simply no data yet.
"""

from __future__ import annotations

import datetime
from abc import ABC, abstractmethod
from typing import Optional

from trainiq.schemas.log import ExerciseSetRecord, WorkoutSessionRecord
from trainiq.schemas.periodization import PeriodizationCycle
from trainiq.schemas.profile import AthleteProfile, ExerciseInfo


class LogStore(ABC):
    """Completed workout sessions and their sets."""

    @abstractmethod
    def fetch_sessions(self, athlete_id: str, start: datetime.date,
                       end: datetime.date, ) -> list[WorkoutSessionRecord]:
        """Completed sessions dated within ``[start, end]`` with their sets, oldest first."""

    @abstractmethod
    def fetch_exercise_sets(self, athlete_id: str, exercise_id: str, limit: int = 24,
                            end: Optional[datetime.date] = None, ) -> list[ExerciseSetRecord]:
        """The ``limit`` most recent sets of one exercise, newest first."""


class ExerciseCatalog(ABC):
    """Exercise metadata lookup."""

    @abstractmethod
    def get_exercise(self, exercise_id: str) -> Optional[ExerciseInfo]:
        """Return ``None`` for unknown exercises."""


class AthleteProfileStore(ABC):

    @abstractmethod
    def get_profile(self, athlete_id: str) -> Optional[AthleteProfile]:
        """Return ``None`` when the athlete has no profile."""


class CycleStore(ABC):
    """Optional persistence of the current periodization cycle."""

    @abstractmethod
    def get_cycle(self, athlete_id: str) -> Optional[PeriodizationCycle]:
        ...

    @abstractmethod
    def save_cycle(self, cycle: PeriodizationCycle) -> PeriodizationCycle:
        ...


class TrainingStore(LogStore, ExerciseCatalog, AthleteProfileStore, CycleStore, ABC):
    """Everything the full analysis pipeline reads, behind one object."""
