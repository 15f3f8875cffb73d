"""Value types shared across the intake pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

GAME_RESULTS = frozenset({"completed", "died", "quit", "timeout"})

# Largest value a stored counter or duration can hold (signed 64-bit).
MAX_COUNTER = 2**63 - 1


class ReasonCode(str, Enum):
    """Outcome codes returned to callers and used as telemetry keys."""

    INVALID_SCORE = "INVALID_SCORE"
    INVALID_DURATION = "INVALID_DURATION"
    SPEED_VIOLATION = "SPEED_VIOLATION"
    COIN_RATE_VIOLATION = "COIN_RATE_VIOLATION"
    OBSTACLE_RATE_VIOLATION = "OBSTACLE_RATE_VIOLATION"
    SCORE_COIN_MISMATCH = "SCORE_COIN_MISMATCH"
    INVALID_RESULT = "INVALID_RESULT"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    PATTERN_SUSPICION = "PATTERN_SUSPICION"
    IDENTITY_RESOLUTION_FAILURE = "IDENTITY_RESOLUTION_FAILURE"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


@dataclass(frozen=True)
class Verdict:
    """Result of a single pipeline check."""

    ok: bool
    reason: Optional[ReasonCode] = None
    message: str = ""

    @classmethod
    def accept(cls) -> "Verdict":
        return cls(ok=True)

    @classmethod
    def reject(cls, reason: ReasonCode, message: str) -> "Verdict":
        return cls(ok=False, reason=reason, message=message)


@dataclass(frozen=True)
class Identity:
    """Canonical player identity: a registered user id or a guest number."""

    kind: str
    value: int

    REGISTERED = "user"
    GUEST = "guest"

    @classmethod
    def registered(cls, user_id: int) -> "Identity":
        return cls(cls.REGISTERED, int(user_id))

    @classmethod
    def guest(cls, guest_number: int) -> "Identity":
        return cls(cls.GUEST, int(guest_number))

    @property
    def is_guest(self) -> bool:
        return self.kind == self.GUEST

    @property
    def key(self) -> str:
        return f"{self.kind}:{self.value}"

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class SessionSubmission:
    """One client-reported gameplay session.

    Numeric fields are ``None`` when the client omitted them or sent
    something other than an integer; the validator rejects those.
    """

    client_session_token: str
    duration_seconds: Optional[int]
    final_score: Optional[int]
    coins_collected: Optional[int]
    obstacles_hit: Optional[int]
    powerups_collected: Optional[int]
    distance_traveled: Optional[int]
    outcome: Optional[str]
    submitted_at: datetime


@dataclass(frozen=True)
class LeaderboardEntry:
    rank: int
    identity: Identity
    display_name: str
    score: int
    outcome: str
    timestamp: datetime
    session_id: int

    def to_dict(self) -> dict:
        return {
            "rank": self.rank,
            "displayName": self.display_name,
            "score": self.score,
            "outcome": self.outcome,
            "timestamp": self.timestamp.isoformat(),
        }


__all__ = [
    "GAME_RESULTS",
    "Identity",
    "LeaderboardEntry",
    "MAX_COUNTER",
    "ReasonCode",
    "SessionSubmission",
    "Verdict",
]
