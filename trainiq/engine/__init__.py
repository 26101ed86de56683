"""Training analytics: context, fatigue, periodization, progression and plateau analysis."""

from trainiq.engine.context import ContextConfig, compute_training_context, summarize_training_context
from trainiq.engine.fatigue import FatigueConfig, compute_overtraining_assessment, generate_recovery_intervention
from trainiq.engine.periodization import compute_periodization, recommend_phase
from trainiq.engine.plateau import PlateauConfig, compute_plateau_analysis, recommend_deload
from trainiq.engine.progression import ProgressionConfig, compute_progression

__all__ = [
    "ContextConfig",
    "compute_training_context",
    "summarize_training_context",
    "FatigueConfig",
    "compute_overtraining_assessment",
    "generate_recovery_intervention",
    "compute_periodization",
    "recommend_phase",
    "PlateauConfig",
    "compute_plateau_analysis",
    "recommend_deload",
    "ProgressionConfig",
    "compute_progression",
]
