"""Request-scoped dependencies shared by the routers."""

from __future__ import annotations

from typing import Optional

from fastapi import Request

from ..services import LeaderboardAggregator, SessionIntake


def get_intake(request: Request) -> SessionIntake:
    return request.app.state.intake


def get_leaderboard(request: Request) -> LeaderboardAggregator:
    return request.app.state.leaderboard


def current_user_id(request: Request) -> Optional[int]:
    """Registered user id vouched for by the signed session cookie, if any.

    The authentication service stores ``uid`` in the session after login;
    anything else about the caller is untrusted.
    """

    uid = request.session.get("uid")
    if uid is None:
        return None
    try:
        return int(uid)
    except (TypeError, ValueError):
        return None


__all__ = ["current_user_id", "get_intake", "get_leaderboard"]
