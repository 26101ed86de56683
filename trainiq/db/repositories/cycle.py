"""Periodization cycle repository."""

import datetime
from typing import Optional

from sqlmodel import Session

from trainiq.models.cycle import TrainingCycle


class TrainingCycleRepository:
    """One cycle row per athlete; :meth:`upsert` replaces it."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_athlete(self, athlete_id: str) -> Optional[TrainingCycle]:
        return self.session.get(TrainingCycle, athlete_id)

    def upsert(self, athlete_id: str, cycle_start: datetime.date, phase: str,
               phase_start: datetime.date, ) -> TrainingCycle:
        row = self.get_by_athlete(athlete_id)
        if row is None:
            row = TrainingCycle(athlete_id=athlete_id, cycle_start=cycle_start, phase=phase, phase_start=phase_start)
        else:
            row.cycle_start = cycle_start
            row.phase = phase
            row.phase_start = phase_start
            row.updated_at = datetime.datetime.utcnow()
        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        return row
