"""Database model for accepted gameplay sessions."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field as ORMField, SQLModel

from ..core.time import utcnow


class GameSession(SQLModel, table=True):
    """An accepted gameplay session.

    Exactly one of ``user_id`` and ``guest_number`` is set.
    """

    __tablename__ = "game_session"

    id: Optional[int] = ORMField(default=None, primary_key=True)
    user_id: Optional[int] = ORMField(default=None, index=True)
    guest_number: Optional[int] = ORMField(
        default=None, index=True, foreign_key="guest_identity.guest_number"
    )
    session_token: str = ORMField(max_length=255)
    duration_seconds: int
    final_score: int = ORMField(index=True)
    coins_collected: int = 0
    obstacles_hit: int = 0
    powerups_collected: int = 0
    distance_traveled: int = 0
    game_result: str
    created_at: datetime = ORMField(default_factory=utcnow, index=True)


__all__ = ["GameSession"]
