"""
Built-in exercise catalog.

Each entry is an :class:`ExerciseEntry` carrying the display name and the
primary muscle group used by the load-balance analysis.  Exercises that are
not listed here are still analysed: lookups return ``None`` and callers fall
back to ``"Unknown Exercise"`` / ``"Full Body"``.

To add a new exercise, call :func:`register_exercise` or simply append to
``EXERCISE_CATALOG`` at import time.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from trainiq.schemas.profile import ExerciseInfo
from trainiq.store.base import ExerciseCatalog


class MovementType(str, Enum):
    """Whether the exercise is multi-joint (compound) or single-joint."""
    COMPOUND = "compound"
    ISOLATION = "isolation"


class ExerciseEntry(BaseModel):
    exercise_id: str
    display_name: str
    muscle_group: str = Field(..., description="Primary muscle group")
    secondary_muscles: list[str] = Field(default_factory=list)
    movement_type: MovementType
    category: str

    def to_info(self) -> ExerciseInfo:
        return ExerciseInfo(exercise_id=self.exercise_id, name=self.display_name, muscle_group=self.muscle_group,
                            category=self.category, )


# ======================================================================
# Catalog storage
# ======================================================================

EXERCISE_CATALOG: dict[str, ExerciseEntry] = {}


def register_exercise(entry: ExerciseEntry) -> None:
    """Register an exercise in the global catalog."""
    EXERCISE_CATALOG[entry.exercise_id] = entry


def get_exercise(exercise_id: str) -> ExerciseEntry | None:
    """Look up an exercise by its ID.  Returns ``None`` if not found."""
    return EXERCISE_CATALOG.get(exercise_id)


def get_exercise_info(exercise_id: str) -> ExerciseInfo | None:
    entry = get_exercise(exercise_id)
    return entry.to_info() if entry else None


class BuiltinExerciseCatalog(ExerciseCatalog):
    """:class:`ExerciseCatalog` over ``EXERCISE_CATALOG``."""

    def get_exercise(self, exercise_id: str) -> Optional[ExerciseInfo]:
        return get_exercise_info(exercise_id)


# ======================================================================
# Built-in exercises
# ======================================================================

C = MovementType.COMPOUND
I = MovementType.ISOLATION

# (id, display name, muscle group, secondary muscles, movement, category)
_EXERCISES: list[tuple[str, str, str, list[str], MovementType, str]] = [
    # ── Lower Body ────────────────────────────────────────────────
    ("back_squat", "Back Squat", "Quadriceps", ["glutes", "hamstrings", "core"], C, "lower_body"),
    ("front_squat", "Front Squat", "Quadriceps", ["glutes", "core", "upper_back"], C, "lower_body"),
    ("deadlift", "Deadlift", "Hamstrings", ["glutes", "erectors", "traps"], C, "lower_body"),
    ("romanian_deadlift", "Romanian Deadlift", "Hamstrings", ["glutes", "erectors"], C, "lower_body"),
    ("leg_press", "Leg Press", "Quadriceps", ["glutes"], C, "lower_body"),
    ("bulgarian_split_squat", "Bulgarian Split Squat", "Quadriceps", ["glutes", "hip_stabilisers"], C,
     "lower_body"),
    ("leg_extension", "Leg Extension", "Quadriceps", [], I, "lower_body"),
    ("leg_curl", "Leg Curl", "Hamstrings", [], I, "lower_body"),
    ("hip_thrust", "Hip Thrust", "Glutes", ["hamstrings"], C, "lower_body"),
    ("calf_raise", "Standing Calf Raise", "Calves", [], I, "lower_body"),

    # ── Upper Push ────────────────────────────────────────────────
    ("bench_press", "Bench Press", "Pectorals", ["triceps", "front_delts"], C, "upper_push"),
    ("incline_db_press", "Incline Dumbbell Press", "Pectorals", ["front_delts", "triceps"], C, "upper_push"),
    ("overhead_press", "Overhead Press", "Deltoids", ["triceps", "upper_chest", "core"], C, "upper_push"),
    ("dip", "Dip", "Triceps", ["pectorals", "front_delts"], C, "upper_push"),
    ("lateral_raise", "Lateral Raise", "Deltoids", [], I, "upper_push"),
    ("tricep_pushdown", "Tricep Pushdown", "Triceps", [], I, "upper_push"),

    # ── Upper Pull ────────────────────────────────────────────────
    ("barbell_row", "Barbell Row", "Lats", ["rhomboids", "rear_delts", "biceps"], C, "upper_pull"),
    ("pull_up", "Pull-Up", "Lats", ["biceps", "rear_delts"], C, "upper_pull"),
    ("lat_pulldown", "Lat Pulldown", "Lats", ["biceps"], C, "upper_pull"),
    ("weighted_chin_up", "Weighted Chin-Up", "Lats", ["biceps", "brachialis"], C, "upper_pull"),
    ("face_pull", "Face Pull", "Deltoids", ["rhomboids", "rotator_cuff"], I, "upper_pull"),
    ("bicep_curl", "Bicep Curl", "Biceps", ["brachialis"], I, "upper_pull"),

    # ── Core / Carry / Olympic ────────────────────────────────────
    ("cable_pallof_press", "Cable Pallof Press", "Core", ["obliques"], I, "core"),
    ("hanging_leg_raise", "Hanging Leg Raise", "Core", ["hip_flexors"], I, "core"),
    ("farmers_carry", "Farmer's Carry", "Full Body", ["forearms", "traps", "core"], C, "carry"),
    ("power_clean", "Power Clean", "Full Body", ["hamstrings", "glutes", "traps"], C, "olympic"),
]

# Auto-register all built-in exercises
for _id, _name, _group, _secondary, _movement, _category in _EXERCISES:
    register_exercise(ExerciseEntry(exercise_id=_id, display_name=_name, muscle_group=_group,
                                    secondary_muscles=_secondary, movement_type=_movement, category=_category, ))
