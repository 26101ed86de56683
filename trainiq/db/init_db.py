"""
Database initialization.

Creates all tables and seeds the exercise table from the built-in catalog.
"""

from loguru import logger
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel

import trainiq.db.base  # noqa: F401
from trainiq.catalog.exercise_catalog import EXERCISE_CATALOG
from trainiq.db.repositories.exercise import ExerciseRepository
from trainiq.models.exercise import Exercise


def seed_exercises(session: Session) -> int:
    """Insert built-in catalog entries missing from the exercise table."""
    repo = ExerciseRepository(session)
    existing = {row.exercise_id for row in repo.get_all()}
    added = 0
    for entry in EXERCISE_CATALOG.values():
        if entry.exercise_id in existing:
            continue
        repo.create(Exercise(exercise_id=entry.exercise_id, name=entry.display_name, muscle_group=entry.muscle_group,
                             category=entry.category))
        added += 1
    return added


def init_db(engine: Engine) -> None:
    """Create every SQLModel table and seed the exercise catalog."""
    logger.info("Creating database tables")
    SQLModel.metadata.create_all(engine)

    with Session(engine) as session:
        added = seed_exercises(session)
    logger.info("Database initialization complete", exercises_seeded=added)


if __name__ == "__main__":
    from trainiq.db.session import engine as default_engine

    init_db(default_engine)
