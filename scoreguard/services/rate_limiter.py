"""Per-identity sliding-window rate limiting."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Deque, Dict, Optional

from .locks import StripedLock
from .types import Identity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateDecision:
    allowed: bool
    retry_after: float = 0.0


class RateLimiter:
    """At most ``limit`` attempts per identity in any ``window`` seconds.

    Only allowed attempts are recorded, so a bucket never holds more than
    ``limit`` timestamps no matter how hard a client floods.
    """

    def __init__(self, limit: int, window: int, locks: Optional[StripedLock] = None) -> None:
        if limit <= 0 or window <= 0:
            raise ValueError("limit and window must be positive")
        self.limit = limit
        self.window = window
        self._buckets: Dict[str, Deque[float]] = {}
        self._locks = locks or StripedLock()

    def check(self, identity: Identity, now: datetime) -> RateDecision:
        ts = now.timestamp()
        with self._locks.hold(identity.key):
            bucket = self._buckets.setdefault(identity.key, deque())
            while bucket and bucket[0] <= ts - self.window:
                bucket.popleft()

            if len(bucket) < self.limit:
                bucket.append(ts)
                return RateDecision(allowed=True)

            retry_after = max(bucket[0] + self.window - ts, 0.0)

        logger.info("Rate limit hit for %s (retry in %.1fs)", identity, retry_after)
        return RateDecision(allowed=False, retry_after=retry_after)

    def allow(self, identity: Identity, now: datetime) -> bool:
        return self.check(identity, now).allowed

    def sweep(self, now: datetime) -> int:
        """Drop buckets whose attempts have all expired. Returns the number dropped."""

        ts = now.timestamp()
        dropped = 0
        for key in list(self._buckets):
            with self._locks.hold(key):
                bucket = self._buckets.get(key)
                if bucket is not None and (not bucket or bucket[-1] <= ts - self.window):
                    del self._buckets[key]
                    dropped += 1
        return dropped

    def __len__(self) -> int:
        return len(self._buckets)


__all__ = ["RateDecision", "RateLimiter"]
