"""
Training intelligence service.

Runs the analytics pipeline against a training store in dependency order
(context -> fatigue -> periodization -> progression / plateau) and maps
engine errors onto HTTP errors:

- :class:`InvalidInputError`     -> 422
- :class:`StoreUnavailableError` -> 503
"""

import datetime
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import HTTPException, status
from loguru import logger

from trainiq.core.config import Settings, settings as default_settings
from trainiq.core.exceptions import InvalidInputError, StoreUnavailableError, validate_identifier
from trainiq.engine.context import ContextConfig, compute_training_context
from trainiq.engine.fatigue import FatigueConfig, compute_overtraining_assessment, generate_recovery_intervention
from trainiq.engine.periodization import advance_cycle, compute_periodization, resolve_cycle
from trainiq.engine.plateau import compute_plateau_analysis, recommend_deload
from trainiq.engine.progression import ProgressionConfig, compute_progression
from trainiq.schemas.context import TrainingContextSummary
from trainiq.schemas.fatigue import OvertrainingAssessment, RecoveryIntervention
from trainiq.schemas.periodization import PeriodizationRecommendation, TransitionRisk
from trainiq.schemas.plateau import DeloadRecommendation, PlateauAnalysis
from trainiq.schemas.progression import ProgressionRecommendation
from trainiq.store.base import TrainingStore


@contextmanager
def _engine_errors() -> Iterator[None]:
    try:
        yield
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.message, )
    except StoreUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message, )


class TrainingIntelligenceService:
    """Service for the training analytics pipeline."""

    def __init__(self, store: TrainingStore, config: Optional[Settings] = None):
        cfg = config or default_settings
        self.store = store
        self.context_config = ContextConfig(analysis_weeks=cfg.CONTEXT_WINDOW_WEEKS, load_weeks=cfg.LOAD_WINDOW_WEEKS)
        self.fatigue_config = FatigueConfig(window_weeks=cfg.FATIGUE_WINDOW_WEEKS)
        self.progression_config = ProgressionConfig(quantum=cfg.WEIGHT_QUANTUM)

    def get_context(self, athlete_id: str, as_of: datetime.date) -> TrainingContextSummary:
        logger.info("Training context requested", athlete_id=athlete_id, as_of=str(as_of))
        with _engine_errors():
            return compute_training_context(self.store, athlete_id, as_of, self.context_config)

    def get_overtraining(self, athlete_id: str, as_of: datetime.date) -> OvertrainingAssessment:
        logger.info("Overtraining assessment requested", athlete_id=athlete_id, as_of=str(as_of))
        with _engine_errors():
            return compute_overtraining_assessment(self.store, athlete_id, as_of, self.fatigue_config,
                                                   self.context_config)

    def get_recovery_intervention(self, athlete_id: str, as_of: datetime.date) -> RecoveryIntervention:
        return generate_recovery_intervention(self.get_overtraining(athlete_id, as_of))

    def get_periodization(self, athlete_id: str, as_of: datetime.date,
                          persist: bool = False, ) -> PeriodizationRecommendation:
        """Recommend a phase.

        With ``persist`` the cycle is advanced and stored when the move is due
        and low risk.  The stored phase starts on ``as_of``, so repeating the
        call for the same date leaves it unchanged.
        """
        logger.info("Periodization requested", athlete_id=athlete_id, as_of=str(as_of))
        with _engine_errors():
            summary = compute_training_context(self.store, athlete_id, as_of, self.context_config)
            assessment = compute_overtraining_assessment(self.store, athlete_id, as_of, self.fatigue_config,
                                                         self.context_config, summary=summary)
            recommendation = compute_periodization(self.store, athlete_id, as_of, summary=summary,
                                                   assessment=assessment, context_config=self.context_config)

            if persist and recommendation.should_transition and recommendation.transition_risk == TransitionRisk.LOW:
                cycle = resolve_cycle(self.store, athlete_id, as_of)
                if cycle.phase == recommendation.current_phase and cycle.phase_start < as_of:
                    cycle = self.store.save_cycle(advance_cycle(cycle, as_of))
                    logger.info("Periodization cycle advanced", athlete_id=athlete_id, phase=cycle.phase.value)
            return recommendation

    def get_progression(self, athlete_id: str, exercise_id: str, as_of: datetime.date,
                        last_weight: Optional[float] = None, last_reps: Optional[int] = None,
                        include_plateau: bool = False, apply_phase: bool = False, ) -> ProgressionRecommendation:
        logger.info("Progression requested", athlete_id=athlete_id, exercise_id=exercise_id, as_of=str(as_of))
        with _engine_errors():
            return compute_progression(self.store, athlete_id, exercise_id, as_of, last_weight, last_reps,
                                       include_plateau=include_plateau, apply_phase=apply_phase,
                                       config=self.progression_config, context_config=self.context_config,
                                       fatigue_config=self.fatigue_config)

    def get_plateau(self, athlete_id: str, exercise_id: str, as_of: datetime.date) -> PlateauAnalysis:
        logger.info("Plateau analysis requested", athlete_id=athlete_id, exercise_id=exercise_id, as_of=str(as_of))
        with _engine_errors():
            athlete_id = validate_identifier(athlete_id, "athlete id")
            phase = resolve_cycle(self.store, athlete_id, as_of).phase
            return compute_plateau_analysis(self.store, athlete_id, exercise_id, as_of, phase=phase)

    def get_deload(self, athlete_id: str, exercise_id: str, as_of: datetime.date) -> DeloadRecommendation:
        analysis = self.get_plateau(athlete_id, exercise_id, as_of)
        deload = recommend_deload(analysis)
        if deload is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND,
                                detail=f"No deload needed (plateau level: {analysis.plateau_level.value})", )
        return deload
