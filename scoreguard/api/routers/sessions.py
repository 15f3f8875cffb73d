"""Gameplay session submission endpoints."""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from ...core import utcnow
from ...services import (
    ADDRESS_TOKEN_PREFIX,
    IntakeError,
    InvalidPayload,
    LeaderboardAggregator,
    RateLimitExceeded,
    SessionIntake,
    display_name,
    guest_token_from_payload,
    session_to_dict,
    submission_from_payload,
)
from ..deps import current_user_id, get_intake, get_leaderboard

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sessions", tags=["sessions"])

MY_SESSIONS_LIMIT = 50


def _raise_http(exc: IntakeError) -> NoReturn:
    """Translate a pipeline rejection into the HTTP error callers see."""

    if isinstance(exc, RateLimitExceeded):
        retry_after = max(1, math.ceil(exc.retry_after))
        raise HTTPException(
            status_code=429,
            detail={
                "reason": exc.reason.value,
                "message": exc.public_message,
                "retryAfter": retry_after,
            },
            headers={"Retry-After": str(retry_after)},
        ) from exc
    if exc.status_code < 500:
        raise HTTPException(
            status_code=exc.status_code,
            detail={"reason": exc.reason.value, "message": exc.public_message},
        ) from exc
    raise HTTPException(status_code=500, detail="Internal server error") from exc


def _guest_token(body: Dict[str, Any], request: Request) -> Optional[str]:
    token = guest_token_from_payload(body)
    if token:
        return token
    # Guests without a client token are bucketed by address.
    if request.client and request.client.host:
        return f"{ADDRESS_TOKEN_PREFIX}{request.client.host}"
    return None


@router.post("")
def submit_session(
    body: Dict[str, Any],
    request: Request,
    user_id: Optional[int] = Depends(current_user_id),
    intake: SessionIntake = Depends(get_intake),
):
    """Validate and store a finished gameplay session."""

    try:
        submission = submission_from_payload(body, utcnow())
        guest_token = None if user_id is not None else _guest_token(body, request)
    except InvalidPayload as exc:
        raise HTTPException(
            400, {"reason": "INVALID_REQUEST", "message": str(exc)}
        ) from exc

    try:
        accepted = intake.submit(submission, registered_user_id=user_id, guest_token=guest_token)
    except IntakeError as exc:
        _raise_http(exc)

    return {
        "message": "Session saved successfully!",
        "sessionId": accepted.record.id,
        "player": display_name(accepted.identity),
    }


@router.get("/my")
def my_sessions(
    user_id: Optional[int] = Depends(current_user_id),
    leaderboard: LeaderboardAggregator = Depends(get_leaderboard),
):
    """List the signed-in player's accepted sessions, best first."""

    if user_id is None:
        raise HTTPException(401, "Sign in to view your sessions")
    try:
        records = leaderboard.sessions_for_user(user_id, MY_SESSIONS_LIMIT)
    except IntakeError as exc:
        logger.error("Session history unavailable for user %s: %s", user_id, exc.message)
        _raise_http(exc)

    return {"sessions": [session_to_dict(record) for record in records]}


__all__ = ["router"]
