"""Database engine configuration."""

from __future__ import annotations

from pathlib import Path

from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlmodel import create_engine

from .config import DATABASE_URL, DB_TIMEOUT_SECONDS


def build_engine(url: str = DATABASE_URL, timeout: float = DB_TIMEOUT_SECONDS) -> Engine:
    """Create an engine whose blocking calls give up after ``timeout`` seconds."""

    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite":
        if parsed.database and parsed.database != ":memory:":
            Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)
        return create_engine(
            url, connect_args={"check_same_thread": False, "timeout": timeout}
        )
    return create_engine(url, pool_timeout=timeout, pool_pre_ping=True)


__all__ = ["build_engine"]
