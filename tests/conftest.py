import os
from datetime import datetime, timezone

import pytest

os.environ.setdefault("SECRET_KEY", "test-secret")

from fastapi.testclient import TestClient
from sqlmodel import SQLModel

from scoreguard.app import build_intake, create_app
from scoreguard.core import AntiCheatSettings, build_engine
from scoreguard.services import SessionStore, SessionSubmission

NOW = datetime(2025, 3, 14, 12, 0, 0, tzinfo=timezone.utc)

# Matches a realistic 45 second run of the game.
LEGIT_PAYLOAD = {
    "sessionId": "4821337",
    "durationSeconds": 45,
    "finalScore": 150,
    "coinsCollected": 150,
    "obstaclesHit": 3,
    "powerupsCollected": 2,
    "distanceTraveled": 8000,
    "gameResult": "died",
}


def make_submission(submitted_at=NOW, **overrides):
    fields = dict(
        client_session_token="4821337",
        duration_seconds=45,
        final_score=150,
        coins_collected=150,
        obstacles_hit=3,
        powerups_collected=2,
        distance_traveled=8000,
        outcome="died",
        submitted_at=submitted_at,
    )
    fields.update(overrides)
    return SessionSubmission(**fields)


def perfect_submission(submitted_at=NOW, score=250):
    return make_submission(submitted_at=submitted_at, obstacles_hit=0, final_score=score)


@pytest.fixture()
def settings():
    return AntiCheatSettings()


@pytest.fixture()
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}", timeout=10.0)
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def store(engine):
    return SessionStore(engine)


@pytest.fixture()
def intake(settings, store):
    return build_intake(settings, store)


@pytest.fixture()
def app(settings, engine):
    return create_app(settings, engine)


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client
