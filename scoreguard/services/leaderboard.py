"""Deduplicated, ranked leaderboard views over accepted sessions.

Each identity appears at most once, represented by its best session. Equal
scores are broken by the earlier session timestamp (the first player to
reach a score keeps the higher rank), then by the lower session id.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from threading import Lock
from typing import Callable, Hashable, List, Optional, Tuple

from ..core.time import as_utc, utcnow
from ..models import GameSession
from .errors import StoreUnavailable
from .identity import display_name
from .store import SessionStore
from .types import Identity, LeaderboardEntry

logger = logging.getLogger(__name__)

WINNERS_COUNT = 3


@dataclass(frozen=True)
class LeaderboardView:
    window_start: datetime
    window_end: datetime
    entries: List[LeaderboardEntry] = field(default_factory=list)
    stale: bool = False

    def to_dict(self) -> dict:
        return {
            "window": {
                "start": self.window_start.isoformat(),
                "end": self.window_end.isoformat(),
            },
            "stale": self.stale,
            "entries": [entry.to_dict() for entry in self.entries],
        }


def identity_of(record: GameSession) -> Identity:
    if record.guest_number is not None:
        return Identity.guest(record.guest_number)
    return Identity.registered(record.user_id)


def _rank_key(record: GameSession) -> Tuple[int, datetime, int]:
    return (-record.final_score, as_utc(record.created_at), record.id)


class LeaderboardAggregator:
    """Computes leaderboard views on demand from the session store.

    Reads fail open: the last good answer for each query shape is kept and
    served, marked stale, when the store cannot be reached.
    """

    def __init__(self, store: SessionStore, cache_size: int = 256) -> None:
        self.store = store
        self._last_good: "OrderedDict[Hashable, List[LeaderboardEntry]]" = OrderedDict()
        self._cache_size = cache_size
        self._lock = Lock()

    def top_n(self, window_start: datetime, window_end: datetime, n: int) -> List[LeaderboardEntry]:
        if n <= 0:
            return []
        rows = self.store.sessions_between(window_start, window_end)
        rows.sort(key=lambda row: _rank_key(row[0]))

        entries: List[LeaderboardEntry] = []
        seen = set()
        for record, username in rows:
            identity = identity_of(record)
            if identity.key in seen:
                continue
            seen.add(identity.key)
            entries.append(
                LeaderboardEntry(
                    rank=len(entries) + 1,
                    identity=identity,
                    display_name=display_name(identity, username),
                    score=record.final_score,
                    outcome=record.game_result,
                    timestamp=as_utc(record.created_at),
                    session_id=record.id,
                )
            )
            if len(entries) >= n:
                break
        return entries

    def rolling(self, hours: int, n: int, now: Optional[datetime] = None) -> LeaderboardView:
        end = now or utcnow()
        start = end - timedelta(hours=hours)
        entries, stale = self._read_through(
            ("rolling", hours, n), lambda: self.top_n(start, end, n)
        )
        return LeaderboardView(start, end, entries, stale)

    def winners_for_date(self, day: date) -> LeaderboardView:
        start = datetime.combine(day, time.min, tzinfo=timezone.utc)
        if day == date.max:
            end = datetime.max.replace(tzinfo=timezone.utc)
        else:
            end = start + timedelta(days=1)
        entries, stale = self._read_through(
            ("winners", day.isoformat()), lambda: self.top_n(start, end, WINNERS_COUNT)
        )
        return LeaderboardView(start, end, entries, stale)

    def sessions_for_user(self, user_id: int, limit: int) -> List[GameSession]:
        return self.store.sessions_for_user(user_id, limit)

    def _read_through(
        self, key: Hashable, compute: Callable[[], List[LeaderboardEntry]]
    ) -> Tuple[List[LeaderboardEntry], bool]:
        try:
            entries = compute()
        except StoreUnavailable as exc:
            with self._lock:
                cached = self._last_good.get(key)
            if cached is None:
                logger.error("Leaderboard read failed with nothing cached: %s", exc.message)
                raise
            logger.warning("Serving stale leaderboard for %s: %s", key, exc.message)
            return cached, True

        with self._lock:
            self._last_good[key] = entries
            self._last_good.move_to_end(key)
            while len(self._last_good) > self._cache_size:
                self._last_good.popitem(last=False)
        return entries, False


__all__ = ["LeaderboardAggregator", "LeaderboardView", "WINNERS_COUNT", "identity_of"]
