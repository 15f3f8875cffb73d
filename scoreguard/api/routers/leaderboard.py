"""Leaderboard endpoints."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ...core import LEADERBOARD_DEFAULT_LIMIT, LEADERBOARD_MAX_LIMIT, utcnow
from ...services import LeaderboardAggregator, StoreUnavailable
from ..deps import get_leaderboard

router = APIRouter(prefix="/api/leaderboard", tags=["leaderboard"])


@router.get("")
def get_leaderboard_view(
    hours: int = Query(24, ge=1, le=24 * 31),
    limit: int = Query(LEADERBOARD_DEFAULT_LIMIT, ge=1),
    leaderboard: LeaderboardAggregator = Depends(get_leaderboard),
):
    """Best session per player over the last ``hours`` hours."""

    try:
        view = leaderboard.rolling(hours, min(limit, LEADERBOARD_MAX_LIMIT))
    except StoreUnavailable as exc:
        raise HTTPException(503, "Leaderboard temporarily unavailable") from exc
    return view.to_dict()


@router.get("/winners")
def get_winners(
    day: Optional[date] = Query(None, alias="date"),
    leaderboard: LeaderboardAggregator = Depends(get_leaderboard),
):
    """Top three players for a UTC calendar date (default today)."""

    target = day or utcnow().date()
    try:
        view = leaderboard.winners_for_date(target)
    except StoreUnavailable as exc:
        raise HTTPException(503, "Leaderboard temporarily unavailable") from exc
    return {"date": target.isoformat(), **view.to_dict()}


__all__ = ["router"]
