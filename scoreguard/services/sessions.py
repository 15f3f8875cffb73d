"""Helpers for session domain objects."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from ..core.time import as_utc
from ..models import GameSession
from .types import MAX_COUNTER, SessionSubmission

# Guests who send no token are bucketed by client address under this prefix.
ADDRESS_TOKEN_PREFIX = "addr:"


class InvalidPayload(ValueError):
    """The request body cannot be read as a session at all."""


def _int_field(body: Dict[str, Any], name: str, default: Optional[int] = None) -> Optional[int]:
    """Read an integer field.

    Anything that is not an integer, or does not fit a signed 64-bit column,
    becomes ``None``.
    """

    value = body.get(name)
    if value is None:
        return default
    # bool is an int subclass; true/false is not a count.
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int) and -MAX_COUNTER - 1 <= value <= MAX_COUNTER:
        return value
    return None


def _str_field(body: Dict[str, Any], name: str) -> Optional[str]:
    value = body.get(name)
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return None


def submission_from_payload(body: Dict[str, Any], submitted_at: datetime) -> SessionSubmission:
    """Build a submission from an untrusted request body.

    Only ``sessionId`` is required here; every other problem is left for the
    plausibility rules to report with a specific reason code.
    """

    if not isinstance(body, dict):
        raise InvalidPayload("Session payload must be an object")
    session_id = _str_field(body, "sessionId")
    if not session_id:
        raise InvalidPayload("Valid session data is required")

    outcome = body.get("gameResult")
    return SessionSubmission(
        client_session_token=session_id,
        duration_seconds=_int_field(body, "durationSeconds"),
        final_score=_int_field(body, "finalScore"),
        coins_collected=_int_field(body, "coinsCollected", 0),
        obstacles_hit=_int_field(body, "obstaclesHit", 0),
        powerups_collected=_int_field(body, "powerupsCollected", 0),
        distance_traveled=_int_field(body, "distanceTraveled", 0),
        outcome=outcome if isinstance(outcome, str) else None,
        submitted_at=submitted_at,
    )


def guest_token_from_payload(body: Dict[str, Any]) -> Optional[str]:
    token = _str_field(body, "guestId")
    if token and token.startswith(ADDRESS_TOKEN_PREFIX):
        raise InvalidPayload("guestId uses a reserved prefix")
    return token


def session_to_dict(record: GameSession) -> Dict[str, Any]:
    """Serialise a stored session to an API-friendly dict."""

    return {
        "id": record.id,
        "sessionId": record.session_token,
        "durationSeconds": record.duration_seconds,
        "finalScore": record.final_score,
        "coinsCollected": record.coins_collected,
        "obstaclesHit": record.obstacles_hit,
        "powerupsCollected": record.powerups_collected,
        "distanceTraveled": record.distance_traveled,
        "gameResult": record.game_result,
        "created_at": as_utc(record.created_at).isoformat() if record.created_at else None,
    }


__all__ = [
    "ADDRESS_TOKEN_PREFIX",
    "InvalidPayload",
    "guest_token_from_payload",
    "session_to_dict",
    "submission_from_payload",
]
