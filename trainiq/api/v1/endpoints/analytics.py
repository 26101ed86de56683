"""
Analytics endpoints: training context, overtraining risk, periodization,
progression and plateau analysis.

Every GET is read-only.  The periodization POST is the one write: it stores
the advanced cycle when a low-risk transition is due.
"""

import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from trainiq.api.dependencies import get_intelligence_service
from trainiq.schemas.context import TrainingContextSummary
from trainiq.schemas.fatigue import OvertrainingAssessment, RecoveryIntervention
from trainiq.schemas.periodization import PeriodizationRecommendation
from trainiq.schemas.plateau import DeloadRecommendation, PlateauAnalysis
from trainiq.schemas.progression import ProgressionRecommendation
from trainiq.services.training_intelligence_service import TrainingIntelligenceService

router = APIRouter()


@router.get(
    "/{athlete_id}/context",
    summary="Get the training context (sessions, rest, load, recovery).",
    response_model=TrainingContextSummary,
)
def get_training_context(
    athlete_id: str,
    as_of: Optional[datetime.date] = Query(
        None, description="Reference date (defaults to today)"
    ),
    service: TrainingIntelligenceService = Depends(get_intelligence_service),
):
    return service.get_context(athlete_id, as_of or datetime.date.today())


@router.get(
    "/{athlete_id}/overtraining",
    summary="Get the overtraining risk assessment and fatigue patterns.",
    response_model=OvertrainingAssessment,
)
def get_overtraining(
    athlete_id: str,
    as_of: Optional[datetime.date] = Query(
        None, description="Reference date (defaults to today)"
    ),
    service: TrainingIntelligenceService = Depends(get_intelligence_service),
):
    return service.get_overtraining(athlete_id, as_of or datetime.date.today())


@router.get(
    "/{athlete_id}/recovery",
    summary="Get a recovery intervention matched to the overtraining risk.",
    response_model=RecoveryIntervention,
)
def get_recovery_intervention(
    athlete_id: str,
    as_of: Optional[datetime.date] = Query(
        None, description="Reference date (defaults to today)"
    ),
    service: TrainingIntelligenceService = Depends(get_intelligence_service),
):
    return service.get_recovery_intervention(athlete_id, as_of or datetime.date.today())


@router.get(
    "/{athlete_id}/periodization",
    summary="Get the periodization phase recommendation.",
    response_model=PeriodizationRecommendation,
)
def get_periodization(
    athlete_id: str,
    as_of: Optional[datetime.date] = Query(
        None, description="Reference date (defaults to today)"
    ),
    service: TrainingIntelligenceService = Depends(get_intelligence_service),
):
    return service.get_periodization(athlete_id, as_of or datetime.date.today())


@router.post(
    "/{athlete_id}/periodization/advance",
    summary="Advance and store the cycle when a low-risk transition is due.",
    response_model=PeriodizationRecommendation,
)
def advance_periodization(
    athlete_id: str,
    as_of: Optional[datetime.date] = Query(
        None, description="Reference date (defaults to today)"
    ),
    service: TrainingIntelligenceService = Depends(get_intelligence_service),
):
    return service.get_periodization(athlete_id, as_of or datetime.date.today(), persist=True)


@router.get(
    "/{athlete_id}/exercises/{exercise_id}/progression",
    summary="Get the next weight/rep suggestion for one exercise.",
    response_model=ProgressionRecommendation,
)
def get_progression(
    athlete_id: str,
    exercise_id: str,
    as_of: Optional[datetime.date] = Query(
        None, description="Reference date (defaults to today)"
    ),
    last_weight: Optional[float] = Query(
        None, ge=0.0, description="Last working weight (defaults to the latest logged set)"
    ),
    last_reps: Optional[int] = Query(
        None, ge=1, description="Reps at the last working weight"
    ),
    include_plateau: bool = Query(False, description="Run the plateau analysis for the deload flag"),
    apply_phase: bool = Query(False, description="Adjust weight and reps for the current phase"),
    service: TrainingIntelligenceService = Depends(get_intelligence_service),
):
    return service.get_progression(athlete_id, exercise_id, as_of or datetime.date.today(), last_weight, last_reps,
                                   include_plateau=include_plateau, apply_phase=apply_phase)


@router.get(
    "/{athlete_id}/exercises/{exercise_id}/plateau",
    summary="Get the plateau analysis for one exercise.",
    response_model=PlateauAnalysis,
)
def get_plateau(
    athlete_id: str,
    exercise_id: str,
    as_of: Optional[datetime.date] = Query(
        None, description="Reference date (defaults to today)"
    ),
    service: TrainingIntelligenceService = Depends(get_intelligence_service),
):
    return service.get_plateau(athlete_id, exercise_id, as_of or datetime.date.today())


@router.get(
    "/{athlete_id}/exercises/{exercise_id}/deload",
    summary="Get deload guidance for one exercise (404 when none is needed).",
    response_model=DeloadRecommendation,
)
def get_deload(
    athlete_id: str,
    exercise_id: str,
    as_of: Optional[datetime.date] = Query(
        None, description="Reference date (defaults to today)"
    ),
    service: TrainingIntelligenceService = Depends(get_intelligence_service),
):
    return service.get_deload(athlete_id, exercise_id, as_of or datetime.date.today())
