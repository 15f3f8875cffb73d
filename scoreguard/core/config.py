"""Application settings and environment helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List

from dotenv import load_dotenv

load_dotenv(override=False)


def _require_env(name: str) -> str:
    """Return a required environment variable or raise an error."""

    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer") from exc


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be a number") from exc


def _split_csv(raw: str | None) -> List[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def _unique(values: Iterable[str]) -> List[str]:
    seen = set()
    ordered: List[str] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


@dataclass(frozen=True)
class AntiCheatSettings:
    """Thresholds used by the intake pipeline.

    Defaults mirror the limits the game client enforces on itself; the server
    treats them as the outer bound of plausible play.
    """

    # Plausibility
    score_per_second: int = 10
    score_floor: int = 1000
    max_distance_per_second: float = 800.0
    max_coins_per_second: float = 5.0
    max_obstacles_per_second: float = 2.0
    min_score_per_coin: float = 1.0
    max_score_per_coin: float = 2.0

    # Pattern detection
    perfect_score: int = 200
    perfect_game_limit: int = 3
    pattern_window_seconds: int = 3600
    pattern_history_size: int = 1024

    # Rate limiting
    rate_limit_count: int = 10
    rate_limit_window_seconds: int = 60

    # Concurrency
    lock_stripes: int = 64
    lock_timeout_seconds: float = 5.0

    @classmethod
    def from_env(cls) -> "AntiCheatSettings":
        defaults = cls()
        return cls(
            score_per_second=_env_int("K_SCORE", defaults.score_per_second),
            score_floor=_env_int("FLOOR_SCORE", defaults.score_floor),
            max_distance_per_second=_env_float(
                "MAX_DISTANCE_RATE", defaults.max_distance_per_second
            ),
            max_coins_per_second=_env_float("MAX_COIN_RATE", defaults.max_coins_per_second),
            max_obstacles_per_second=_env_float(
                "MAX_OBSTACLE_RATE", defaults.max_obstacles_per_second
            ),
            min_score_per_coin=_env_float("MIN_SCORE_PER_COIN", defaults.min_score_per_coin),
            max_score_per_coin=_env_float("MAX_SCORE_PER_COIN", defaults.max_score_per_coin),
            perfect_score=_env_int("PERFECT_SCORE", defaults.perfect_score),
            perfect_game_limit=_env_int("PERFECT_GAME_LIMIT", defaults.perfect_game_limit),
            pattern_window_seconds=_env_int(
                "PATTERN_WINDOW_SECONDS", defaults.pattern_window_seconds
            ),
            pattern_history_size=_env_int(
                "PATTERN_HISTORY_SIZE", defaults.pattern_history_size
            ),
            rate_limit_count=_env_int("RATE_LIMIT_COUNT", defaults.rate_limit_count),
            rate_limit_window_seconds=_env_int(
                "RATE_LIMIT_WINDOW_SECONDS", defaults.rate_limit_window_seconds
            ),
            lock_stripes=_env_int("LOCK_STRIPES", defaults.lock_stripes),
            lock_timeout_seconds=_env_float(
                "LOCK_TIMEOUT_SECONDS", defaults.lock_timeout_seconds
            ),
        )


# Application security -------------------------------------------------------
SECRET_KEY = _require_env("SECRET_KEY")

_local_dev_origins = [
    "http://localhost:5000",
    "http://127.0.0.1:5000",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

ALLOWED_CORS_ORIGINS = _unique(
    [
        *_split_csv(os.getenv("ALLOWED_CORS_ORIGINS")),
        *_local_dev_origins,
    ]
)

COOKIE_SECURE = _env_bool("COOKIE_SECURE", False)
COOKIE_SAMESITE = os.getenv("COOKIE_SAMESITE", "lax")


# Storage --------------------------------------------------------------------
_PROJECT_ROOT = Path(__file__).resolve().parents[2]
DATA_DIR = Path(os.getenv("DATA_DIR", str(_PROJECT_ROOT / "data")))
DATABASE_URL = os.getenv("DATABASE_URL") or f"sqlite:///{DATA_DIR / 'app.db'}"
DB_TIMEOUT_SECONDS = _env_float("DB_TIMEOUT_SECONDS", 5.0)
DB_RESET = _env_bool("DB_RESET", False)


# Runtime behaviour ----------------------------------------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LEADERBOARD_DEFAULT_LIMIT = _env_int("LEADERBOARD_DEFAULT_LIMIT", 20)
LEADERBOARD_MAX_LIMIT = _env_int("LEADERBOARD_MAX_LIMIT", 50)


__all__ = [
    "ALLOWED_CORS_ORIGINS",
    "AntiCheatSettings",
    "COOKIE_SAMESITE",
    "COOKIE_SECURE",
    "DATABASE_URL",
    "DATA_DIR",
    "DB_RESET",
    "DB_TIMEOUT_SECONDS",
    "LEADERBOARD_DEFAULT_LIMIT",
    "LEADERBOARD_MAX_LIMIT",
    "LOG_LEVEL",
    "SECRET_KEY",
]
