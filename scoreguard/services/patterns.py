"""Cross-session detection of suspiciously perfect play."""

from __future__ import annotations

import logging
from collections import deque
from datetime import datetime
from typing import Deque, Dict, Optional, Tuple

from ..core.config import AntiCheatSettings
from .locks import StripedLock
from .types import Identity, ReasonCode, SessionSubmission, Verdict

logger = logging.getLogger(__name__)

# (timestamp, flagged)
Event = Tuple[float, bool]


class PatternDetector:
    """Tracks recent flagged/unflagged sessions per identity.

    A session is flagged when it hits no obstacles yet scores at least
    ``perfect_score``. Once ``perfect_game_limit`` flagged sessions fall
    inside ``pattern_window_seconds``, further sessions are rejected until
    old flags age out. Every observation is recorded, including the one that
    trips the limit.
    """

    def __init__(self, settings: AntiCheatSettings, locks: Optional[StripedLock] = None) -> None:
        self.perfect_score = settings.perfect_score
        self.limit = settings.perfect_game_limit
        self.window = settings.pattern_window_seconds
        self.history_size = settings.pattern_history_size
        self._history: Dict[str, Deque[Event]] = {}
        self._locks = locks or StripedLock()

    def is_flag_candidate(self, submission: SessionSubmission) -> bool:
        return submission.obstacles_hit == 0 and submission.final_score >= self.perfect_score

    def observe(self, identity: Identity, submission: SessionSubmission) -> Verdict:
        ts = submission.submitted_at.timestamp()
        flagged = self.is_flag_candidate(submission)

        with self._locks.hold(identity.key):
            events = self._history.get(identity.key)
            if events is None:
                events = self._history[identity.key] = deque(maxlen=self.history_size)
            self._evict(events, ts)
            events.append((ts, flagged))
            count = sum(1 for _, was_flagged in events if was_flagged)

        if count >= self.limit:
            logger.warning(
                "Pattern suspicion for %s: %d perfect games in %ss",
                identity, count, self.window,
            )
            return Verdict.reject(
                ReasonCode.PATTERN_SUSPICION, "Too many perfect games in a short period"
            )
        return Verdict.accept()

    def flag_count(self, identity: Identity, now: datetime) -> int:
        with self._locks.hold(identity.key):
            events = self._history.get(identity.key)
            if not events:
                return 0
            self._evict(events, now.timestamp())
            return sum(1 for _, flagged in events if flagged)

    def sweep(self, now: datetime) -> int:
        ts = now.timestamp()
        dropped = 0
        for key in list(self._history):
            with self._locks.hold(key):
                events = self._history.get(key)
                if events is None:
                    continue
                self._evict(events, ts)
                if not events:
                    del self._history[key]
                    dropped += 1
        return dropped

    def _evict(self, events: Deque[Event], ts: float) -> None:
        while events and events[0][0] <= ts - self.window:
            events.popleft()


__all__ = ["PatternDetector"]
