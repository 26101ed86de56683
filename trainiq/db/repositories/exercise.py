"""Exercise metadata repository."""

from typing import Optional

from sqlmodel import Session, select

from trainiq.models.exercise import Exercise


class ExerciseRepository:

    def __init__(self, session: Session):
        self.session = session

    def get(self, exercise_id: str) -> Optional[Exercise]:
        return self.session.get(Exercise, exercise_id)

    def get_all(self) -> list[Exercise]:
        return list(self.session.exec(select(Exercise).order_by(Exercise.exercise_id)).all())

    def create(self, exercise: Exercise) -> Exercise:
        self.session.add(exercise)
        self.session.commit()
        self.session.refresh(exercise)
        return exercise
