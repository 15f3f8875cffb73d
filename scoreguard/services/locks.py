"""Striped per-key locks.

Keys hash onto a fixed pool of ``threading.Lock`` objects, so callers working
on the same key are serialised while unrelated keys mostly proceed in
parallel, and memory stays constant however many keys are seen.
"""

from __future__ import annotations

import zlib
from contextlib import contextmanager
from threading import Lock
from typing import Iterator, List


class StripedLock:
    def __init__(self, stripes: int = 64, timeout_s: float = 5.0) -> None:
        if stripes <= 0:
            raise ValueError("stripes must be positive")
        self._locks: List[Lock] = [Lock() for _ in range(stripes)]
        self._timeout_s = timeout_s

    def _lock_for(self, key: str) -> Lock:
        # crc32 rather than hash(): stable across processes and PYTHONHASHSEED.
        return self._locks[zlib.crc32(key.encode("utf-8")) % len(self._locks)]

    @contextmanager
    def hold(self, key: str, *, timeout_s: float | None = None) -> Iterator[None]:
        """Hold the lock for ``key``.

        Raises:
            TimeoutError: the lock was not acquired within the timeout.
        """

        timeout = self._timeout_s if timeout_s is None else max(float(timeout_s), 0.0)
        lock = self._lock_for(key)
        if not lock.acquire(timeout=timeout):
            raise TimeoutError(f"lock timeout for key {key!r} (timeout_s={timeout})")
        try:
            yield
        finally:
            lock.release()


__all__ = ["StripedLock"]
