"""
Workout log repository.

Handles database operations for :class:`WorkoutSession` and :class:`SetLog`,
including the windowed reads the analytics engine depends on.
"""

import datetime
from typing import Optional

from sqlmodel import Session, select

from trainiq.models.workout import SetLog, WorkoutSession


class WorkoutRepository:
    """Repository for workout sessions and their sets."""

    def __init__(self, session: Session):
        self.session = session

    def create_session(self, entry: WorkoutSession) -> WorkoutSession:
        self.session.add(entry)
        self.session.commit()
        self.session.refresh(entry)
        return entry

    def add_sets(self, sets: list[SetLog]) -> list[SetLog]:
        self.session.add_all(sets)
        self.session.commit()
        for entry in sets:
            self.session.refresh(entry)
        return sets

    def get_by_id(self, session_id: int) -> Optional[WorkoutSession]:
        return self.session.get(WorkoutSession, session_id)

    def get_completed_by_date_range(self, athlete_id: str, start: datetime.date,
                                    end: datetime.date, ) -> list[WorkoutSession]:
        statement = (select(WorkoutSession).where(WorkoutSession.athlete_id == athlete_id,
                                                  WorkoutSession.completed_at.is_not(None),
                                                  WorkoutSession.session_date >= start,
                                                  WorkoutSession.session_date <= end, ).order_by(
            WorkoutSession.session_date, WorkoutSession.completed_at, WorkoutSession.id))
        return list(self.session.exec(statement).all())

    def get_sets_for_sessions(self, session_ids: list[int]) -> list[SetLog]:
        if not session_ids:
            return []
        statement = (select(SetLog).where(SetLog.session_id.in_(session_ids)).order_by(SetLog.session_id,
                                                                                       SetLog.set_order))
        return list(self.session.exec(statement).all())

    def get_recent_exercise_sets(self, athlete_id: str, exercise_id: str, limit: int,
                                 end: Optional[datetime.date] = None, ) -> list[tuple[SetLog, WorkoutSession]]:
        """The ``limit`` most recent sets of one exercise from completed sessions, newest first."""
        statement = (select(SetLog, WorkoutSession).join(WorkoutSession, SetLog.session_id == WorkoutSession.id)
                     .where(WorkoutSession.athlete_id == athlete_id, WorkoutSession.completed_at.is_not(None),
                            SetLog.exercise_id == exercise_id, ))
        if end is not None:
            statement = statement.where(WorkoutSession.session_date <= end)
        statement = statement.order_by(WorkoutSession.session_date.desc(), SetLog.logged_at.desc()).limit(limit)
        return list(self.session.exec(statement).all())

    def delete_session(self, session_id: int) -> bool:
        entry = self.get_by_id(session_id)
        if entry:
            for set_log in self.get_sets_for_sessions([session_id]):
                self.session.delete(set_log)
            self.session.delete(entry)
            self.session.commit()
            return True
        return False
