"""
Exercise metadata model.

Rows here override or extend the built-in catalog in
:mod:`trainiq.catalog.exercise_catalog`.
"""

from typing import Optional

from sqlmodel import Field, SQLModel


class Exercise(SQLModel, table=True):
    __tablename__ = "exercises"

    exercise_id: str = Field(primary_key=True, max_length=64)
    name: str = Field(nullable=False, max_length=255)
    muscle_group: str = Field(default="Full Body", max_length=100)
    category: Optional[str] = Field(default=None, max_length=50)
