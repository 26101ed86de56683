"""Business logic services."""

from trainiq.services.training_intelligence_service import TrainingIntelligenceService

__all__ = [
    "TrainingIntelligenceService",
]
