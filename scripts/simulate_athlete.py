"""Simulate the analytics pipeline on a synthetic 12-week training log.

The athlete trains three times a week on a push / pull / legs template.
Loads rise linearly for eight weeks, then stall while the session volume
creeps up, which should surface as a plateau and rising fatigue.

Usage:
    python scripts/simulate_athlete.py
"""

import datetime
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from trainiq.core.logger import setup_logger
from trainiq.engine.context import compute_training_context
from trainiq.engine.fatigue import compute_overtraining_assessment
from trainiq.engine.periodization import compute_periodization
from trainiq.engine.plateau import compute_plateau_analysis
from trainiq.engine.progression import compute_progression
from trainiq.schemas.log import SetRecord, WorkoutSessionRecord
from trainiq.schemas.profile import AthleteProfile, ExperienceLevel, TrainingGoal
from trainiq.store.memory import InMemoryTrainingStore

ATHLETE_ID = "sim-athlete"
START = datetime.date(2026, 1, 5)  # a Monday
WEEKS = 12
STALL_WEEK = 8

# ─── Weekly template: weekday -> [(exercise, start kg, kg/week, reps, sets)] ───
TEMPLATE = {
    0: [("bench_press", 60.0, 2.5, 8, 3), ("overhead_press", 35.0, 1.25, 8, 3), ("dip", 0.0, 0.0, 10, 3)],
    2: [("deadlift", 100.0, 5.0, 5, 3), ("barbell_row", 55.0, 2.5, 8, 3), ("bicep_curl", 12.0, 0.5, 12, 2)],
    4: [("back_squat", 80.0, 5.0, 6, 4), ("romanian_deadlift", 70.0, 2.5, 8, 3), ("calf_raise", 40.0, 2.5, 12, 3)],
}

CHECK_EXERCISES = ["bench_press", "back_squat", "deadlift"]


def build_log() -> list[WorkoutSessionRecord]:
    sessions = []
    for week in range(WEEKS):
        progress_weeks = min(week, STALL_WEEK)
        extra_sets = max(0, week - STALL_WEEK)
        for weekday, exercises in TEMPLATE.items():
            date = START + datetime.timedelta(weeks=week, days=weekday)
            sets = []
            for exercise_id, start_kg, step, reps, n_sets in exercises:
                weight = start_kg + step * progress_weeks
                sets.extend(SetRecord(exercise_id=exercise_id, weight_kg=weight, reps=reps)
                            for _ in range(n_sets + extra_sets))
            completed = datetime.datetime.combine(date, datetime.time(19, 0))
            sessions.append(WorkoutSessionRecord(id=f"s{week:02d}{weekday}", athlete_id=ATHLETE_ID,
                                                 session_date=date, completed_at=completed,
                                                 duration_minutes=55 + 5 * extra_sets, sets=tuple(sets)))
    return sessions


def main():
    setup_logger(level="WARNING")

    profile = AthleteProfile(athlete_id=ATHLETE_ID, experience_level=ExperienceLevel.INTERMEDIATE,
                             primary_goal=TrainingGoal.STRENGTH, training_frequency=3)
    store = InMemoryTrainingStore(sessions=build_log(), profiles=[profile])

    print()
    print("=" * 100)
    print(f"{'Date':<12} {'Load':>5} {'Sust':>5} {'Rest':>5} {'Cons':>6} {'Risk':<9} {'Score':>6} "
          f"{'Phase':<16} {'Recommended':<16} {'Move'}")
    print("=" * 100)

    end = START + datetime.timedelta(weeks=WEEKS)
    check = START + datetime.timedelta(weeks=2)
    while check <= end:
        summary = compute_training_context(store, ATHLETE_ID, check)
        assessment = compute_overtraining_assessment(store, ATHLETE_ID, check, summary=summary)
        periodization = compute_periodization(store, ATHLETE_ID, check, summary=summary, assessment=assessment)
        load = summary.training_load_metrics
        rest = summary.rest_period_analysis
        print(f"{check.isoformat():<12} {load.current_load:>5} {load.sustainable_load:>5} "
              f"{rest.average_rest_days:>5.1f} {rest.rest_consistency:>6.1f} {assessment.risk_level.value:<9} "
              f"{assessment.risk_score:>6.1f} {periodization.current_phase.value:<16} "
              f"{periodization.recommended_phase.value:<16} {'yes' if periodization.should_transition else ''}")
        check += datetime.timedelta(weeks=1)

    print()
    print("=" * 100)
    print(f"{'Exercise':<14} {'Suggested':>10} {'Reps':>5} {'Conf':>5} {'Plateau':<15} {'Risk':>5} {'Deload'}")
    print("=" * 100)
    for exercise_id in CHECK_EXERCISES:
        progression = compute_progression(store, ATHLETE_ID, exercise_id, end, include_plateau=True)
        plateau = compute_plateau_analysis(store, ATHLETE_ID, exercise_id, end)
        deload = plateau.deload.deload_type.value if plateau.deload else "-"
        print(f"{exercise_id:<14} {progression.suggested_weight:>10.2f} {progression.suggested_reps:>5} "
              f"{progression.confidence:>5.2f} {plateau.plateau_level.value:<15} {plateau.plateau_risk:>5.2f} "
              f"{deload}")
        for line in progression.reasoning:
            print(f"    - {line}")


if __name__ == "__main__":
    main()
