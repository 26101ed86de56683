"""
Shared API dependencies.

Reusable FastAPI dependencies for store and service access.
"""

from fastapi import Depends
from sqlmodel import Session

from trainiq.db.session import get_db
from trainiq.services.training_intelligence_service import TrainingIntelligenceService
from trainiq.store.base import TrainingStore
from trainiq.store.sql import SqlTrainingStore


def get_training_store(db: Session = Depends(get_db)) -> TrainingStore:
    """A SQL-backed training store bound to the request's session."""
    return SqlTrainingStore(db)


def get_intelligence_service(store: TrainingStore = Depends(get_training_store), ) -> TrainingIntelligenceService:
    return TrainingIntelligenceService(store)
