"""Tests for the analytics API endpoints.

The SQL store dependency is overridden with an in-memory store so no
database is needed.
"""

import datetime

import pytest
from fastapi.testclient import TestClient

from trainiq.api.dependencies import get_training_store
from trainiq.core.exceptions import StoreUnavailableError
from trainiq.main import app
from trainiq.schemas.log import SetRecord, WorkoutSessionRecord
from trainiq.schemas.periodization import PeriodizationCycle, Phase
from trainiq.schemas.profile import AthleteProfile, ExperienceLevel, TrainingGoal
from trainiq.store.memory import InMemoryTrainingStore

AS_OF = datetime.date(2026, 3, 31)


def _make_sessions(count: int, step_days: int) -> list[WorkoutSessionRecord]:
    sessions = []
    for i in range(count):
        date = AS_OF - datetime.timedelta(days=step_days * (count - 1 - i))
        sessions.append(WorkoutSessionRecord(
            id=f"s{i}", athlete_id="athlete-1", session_date=date,
            completed_at=datetime.datetime.combine(date, datetime.time(18, 0)), duration_minutes=60,
            sets=(SetRecord(exercise_id="back_squat", weight_kg=100.0, reps=10),),
        ))
    return sessions


def _make_store() -> InMemoryTrainingStore:
    sessions = _make_sessions(8, 3)
    profile = AthleteProfile(athlete_id="athlete-1", experience_level=ExperienceLevel.BEGINNER,
                             primary_goal=TrainingGoal.HYPERTROPHY, training_frequency=3.0)
    return InMemoryTrainingStore(sessions=sessions, profiles=[profile])


class _BrokenStore(InMemoryTrainingStore):
    def fetch_sessions(self, athlete_id, start, end):
        raise StoreUnavailableError("database down")


@pytest.fixture
def store():
    return _make_store()


@pytest.fixture
def client(store):
    app.dependency_overrides[get_training_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestAthleteEndpoints:
    def test_context(self, client):
        response = client.get("/api/v1/athletes/athlete-1/context", params={"as_of": AS_OF.isoformat()})

        assert response.status_code == 200
        body = response.json()
        assert body["analysis_period"]["total_sessions"] == 8
        assert body["training_load_metrics"]["load_intensity"] == "very_high"

    def test_overtraining(self, client):
        response = client.get("/api/v1/athletes/athlete-1/overtraining", params={"as_of": AS_OF.isoformat()})

        assert response.status_code == 200
        assert response.json()["risk_level"] == "critical"
        assert response.json()["reassessment_days"] == 7

    def test_recovery(self, client):
        response = client.get("/api/v1/athletes/athlete-1/recovery", params={"as_of": AS_OF.isoformat()})
        assert response.status_code == 200
        assert response.json()["intervention_type"] == "deload"

    def test_periodization_is_read_only(self, client, store):
        response = client.get("/api/v1/athletes/athlete-1/periodization", params={"as_of": AS_OF.isoformat()})

        assert response.status_code == 200
        assert response.json()["recommended_phase"] == "deload"
        assert store.get_cycle("athlete-1") is None

    def test_advance_with_risky_transition_stores_nothing(self, client, store):
        # every third day: 20% rest consistency keeps the move out of low risk
        response = client.post("/api/v1/athletes/athlete-1/periodization/advance", params={"as_of": AS_OF.isoformat()})

        assert response.status_code == 200
        assert response.json()["transition_risk"] != "low"
        assert store.get_cycle("athlete-1") is None

    def test_advance_is_stable_within_a_day(self):
        store = InMemoryTrainingStore(sessions=_make_sessions(28, 2))
        start = AS_OF - datetime.timedelta(weeks=4)
        store.save_cycle(PeriodizationCycle(athlete_id="athlete-1", cycle_start=start,
                                            phase=Phase.ACCUMULATION, phase_start=start))
        app.dependency_overrides[get_training_store] = lambda: store
        try:
            client = TestClient(app)
            first = client.post("/api/v1/athletes/athlete-1/periodization/advance", params={"as_of": AS_OF.isoformat()})
            second = client.post("/api/v1/athletes/athlete-1/periodization/advance", params={"as_of": AS_OF.isoformat()})
            read = client.get("/api/v1/athletes/athlete-1/periodization", params={"as_of": AS_OF.isoformat()})
        finally:
            app.dependency_overrides.clear()

        assert first.json()["current_phase"] == "accumulation"
        assert second.json()["current_phase"] == "intensification"
        assert second.json()["should_transition"] is False
        assert read.json()["current_phase"] == "intensification"
        assert store.get_cycle("athlete-1").phase == Phase.INTENSIFICATION
        assert store.get_cycle("athlete-1").phase_start == AS_OF

    def test_malformed_athlete_is_422(self, client):
        response = client.get("/api/v1/athletes/bad id!/context")
        assert response.status_code == 422


class TestExerciseEndpoints:
    def test_progression(self, client):
        response = client.get("/api/v1/athletes/athlete-1/exercises/back_squat/progression",
                              params={"as_of": AS_OF.isoformat()})

        assert response.status_code == 200
        body = response.json()
        assert body["exercise_name"] == "Back Squat"
        assert body["suggested_weight"] == 102.75
        assert body["plateau_detected"] is True

    def test_progression_with_explicit_last_set(self, client):
        response = client.get("/api/v1/athletes/athlete-1/exercises/back_squat/progression",
                              params={"as_of": AS_OF.isoformat(), "last_weight": 80, "last_reps": 10})
        assert response.status_code == 200
        assert response.json()["suggested_weight"] < 85

    def test_progression_rejects_negative_weight(self, client):
        response = client.get("/api/v1/athletes/athlete-1/exercises/back_squat/progression",
                              params={"last_weight": -5, "last_reps": 5})
        assert response.status_code == 422

    def test_plateau(self, client):
        response = client.get("/api/v1/athletes/athlete-1/exercises/back_squat/plateau",
                              params={"as_of": AS_OF.isoformat()})

        assert response.status_code == 200
        body = response.json()
        assert body["exercise_name"] == "Back Squat"
        assert len(body["factors"]) == 7

    def test_deload_not_needed(self, client):
        response = client.get("/api/v1/athletes/athlete-1/exercises/deadlift/deload",
                              params={"as_of": AS_OF.isoformat()})
        assert response.status_code == 404


class TestStoreFailure:
    def test_503(self):
        app.dependency_overrides[get_training_store] = lambda: _BrokenStore()
        try:
            response = TestClient(app).get("/api/v1/athletes/athlete-1/context")
        finally:
            app.dependency_overrides.clear()
        assert response.status_code == 503
