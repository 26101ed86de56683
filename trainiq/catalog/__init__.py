"""Built-in exercise catalog."""

from trainiq.catalog.exercise_catalog import (BuiltinExerciseCatalog, EXERCISE_CATALOG, get_exercise,
                                              get_exercise_info, register_exercise, )

__all__ = ["BuiltinExerciseCatalog", "EXERCISE_CATALOG", "get_exercise", "get_exercise_info", "register_exercise"]
