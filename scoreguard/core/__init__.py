"""Core configuration and infrastructure helpers."""

from .config import (
    ALLOWED_CORS_ORIGINS,
    COOKIE_SAMESITE,
    COOKIE_SECURE,
    DATABASE_URL,
    DB_RESET,
    DB_TIMEOUT_SECONDS,
    LEADERBOARD_DEFAULT_LIMIT,
    LEADERBOARD_MAX_LIMIT,
    SECRET_KEY,
    AntiCheatSettings,
)
from .database import build_engine
from .logging import setup_logging
from .time import as_utc, utcnow

__all__ = [
    "ALLOWED_CORS_ORIGINS",
    "AntiCheatSettings",
    "COOKIE_SAMESITE",
    "COOKIE_SECURE",
    "DATABASE_URL",
    "DB_RESET",
    "DB_TIMEOUT_SECONDS",
    "LEADERBOARD_DEFAULT_LIMIT",
    "LEADERBOARD_MAX_LIMIT",
    "SECRET_KEY",
    "as_utc",
    "build_engine",
    "setup_logging",
    "utcnow",
]
