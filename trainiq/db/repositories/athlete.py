"""Athlete profile repository."""

from typing import Optional

from sqlmodel import Session

from trainiq.models.athlete import Athlete


class AthleteRepository:
    """Repository for Athlete database operations."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, athlete_id: str) -> Optional[Athlete]:
        return self.session.get(Athlete, athlete_id)

    def create(self, athlete: Athlete) -> Athlete:
        self.session.add(athlete)
        self.session.commit()
        self.session.refresh(athlete)
        return athlete
