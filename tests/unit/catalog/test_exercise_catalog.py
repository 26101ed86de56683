"""Tests for the built-in exercise catalog."""

import pytest

from trainiq.catalog.exercise_catalog import (
    EXERCISE_CATALOG,
    BuiltinExerciseCatalog,
    ExerciseEntry,
    MovementType,
    get_exercise,
    get_exercise_info,
    register_exercise,
)


class TestCatalogContents:
    def test_ids_match_keys(self):
        assert all(key == entry.exercise_id for key, entry in EXERCISE_CATALOG.items())

    def test_every_entry_has_a_muscle_group(self):
        assert all(entry.muscle_group for entry in EXERCISE_CATALOG.values())

    @pytest.mark.parametrize(
        "exercise_id, name, group",
        [
            ("back_squat", "Back Squat", "Quadriceps"),
            ("bench_press", "Bench Press", "Pectorals"),
            ("deadlift", "Deadlift", "Hamstrings"),
        ],
    )
    def test_known_exercises(self, exercise_id, name, group):
        entry = get_exercise(exercise_id)
        assert entry.display_name == name
        assert entry.muscle_group == group
        assert entry.movement_type == MovementType.COMPOUND


class TestLookup:
    def test_unknown_exercise(self):
        assert get_exercise("underwater_basket_weaving") is None
        assert get_exercise_info("underwater_basket_weaving") is None

    def test_info_conversion(self):
        info = get_exercise_info("back_squat")
        assert info.exercise_id == "back_squat"
        assert info.name == "Back Squat"
        assert info.muscle_group == "Quadriceps"
        assert info.category == "lower_body"

    def test_builtin_catalog_adapter(self):
        catalog = BuiltinExerciseCatalog()
        assert catalog.get_exercise("bench_press").name == "Bench Press"
        assert catalog.get_exercise("nope") is None


class TestRegisterExercise:
    def test_register_and_lookup(self):
        entry = ExerciseEntry(exercise_id="test_sled_push", display_name="Sled Push", muscle_group="Quadriceps",
                              movement_type=MovementType.COMPOUND, category="conditioning")
        register_exercise(entry)
        try:
            assert get_exercise_info("test_sled_push").name == "Sled Push"
        finally:
            EXERCISE_CATALOG.pop("test_sled_push", None)
