"""FastAPI application factory and configuration."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel
from starlette.middleware.sessions import SessionMiddleware

from . import models  # noqa: F401 - ensure models are registered with SQLModel
from .api import register_routes
from .core import (
    ALLOWED_CORS_ORIGINS,
    COOKIE_SAMESITE,
    COOKIE_SECURE,
    DB_RESET,
    SECRET_KEY,
    AntiCheatSettings,
    build_engine,
    setup_logging,
)
from .services import (
    IdentityResolver,
    LeaderboardAggregator,
    PatternDetector,
    PlausibilityValidator,
    RateLimiter,
    SessionIntake,
    SessionStore,
    StripedLock,
)

logger = logging.getLogger(__name__)


def build_intake(settings: AntiCheatSettings, store: SessionStore) -> SessionIntake:
    """Wire the intake pipeline; each stateful stage gets its own lock pool."""

    def locks() -> StripedLock:
        return StripedLock(settings.lock_stripes, settings.lock_timeout_seconds)

    return SessionIntake(
        store=store,
        resolver=IdentityResolver(store, locks()),
        rate_limiter=RateLimiter(
            settings.rate_limit_count, settings.rate_limit_window_seconds, locks()
        ),
        validator=PlausibilityValidator(settings),
        patterns=PatternDetector(settings, locks()),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    engine = app.state.engine
    if DB_RESET:
        SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    logger.info("Database ready at %s", engine.url.render_as_string(hide_password=True))
    yield
    engine.dispose()


def create_app(
    settings: Optional[AntiCheatSettings] = None,
    engine: Optional[Engine] = None,
) -> FastAPI:
    setup_logging()
    settings = settings or AntiCheatSettings.from_env()
    engine = engine or build_engine()
    store = SessionStore(engine)

    app = FastAPI(title="Runner Session API", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.intake = build_intake(settings, store)
    app.state.leaderboard = LeaderboardAggregator(store)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(
        SessionMiddleware,
        secret_key=SECRET_KEY,
        session_cookie="sid",
        https_only=COOKIE_SECURE,
        same_site=COOKIE_SAMESITE,
    )

    register_routes(app)
    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("scoreguard.app:create_app", factory=True, host="127.0.0.1", port=5000)
