"""Pydantic value objects exchanged with the engine."""

from trainiq.schemas.common import LoadIntensity, Priority, RiskLevel, Trend
from trainiq.schemas.context import TrainingContextSummary
from trainiq.schemas.fatigue import FatiguePattern, OvertrainingAssessment, RecoveryIntervention
from trainiq.schemas.log import ExerciseSetRecord, SetRecord, WorkoutSessionRecord
from trainiq.schemas.performance import ExercisePerformance
from trainiq.schemas.periodization import Phase, PeriodizationCycle, PeriodizationRecommendation
from trainiq.schemas.plateau import DeloadRecommendation, PlateauAnalysis, PlateauLevel
from trainiq.schemas.profile import AthleteProfile, ExerciseInfo, ExperienceLevel, TrainingGoal
from trainiq.schemas.progression import ProgressionRecommendation

__all__ = [
    "LoadIntensity",
    "Priority",
    "RiskLevel",
    "Trend",
    "TrainingContextSummary",
    "FatiguePattern",
    "OvertrainingAssessment",
    "RecoveryIntervention",
    "ExerciseSetRecord",
    "SetRecord",
    "WorkoutSessionRecord",
    "ExercisePerformance",
    "Phase",
    "PeriodizationCycle",
    "PeriodizationRecommendation",
    "DeloadRecommendation",
    "PlateauAnalysis",
    "PlateauLevel",
    "AthleteProfile",
    "ExerciseInfo",
    "ExperienceLevel",
    "TrainingGoal",
    "ProgressionRecommendation",
]
