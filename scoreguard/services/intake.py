"""Session intake pipeline.

Stages run in a fixed order and the first failure short-circuits:

1. resolve identity
2. rate limit
3. plausibility
4. pattern history
5. persist

Rate and pattern state record the attempt even when a later stage rejects
it, so retrying until accepted does not reset either.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from threading import Lock
from typing import Dict, Optional

from ..models import GameSession
from .errors import (
    IdentityResolutionFailure,
    PatternSuspicion,
    RateLimitExceeded,
    StoreUnavailable,
    SubmissionRejected,
)
from .identity import IdentityResolver
from .patterns import PatternDetector
from .plausibility import PlausibilityValidator
from .rate_limiter import RateLimiter
from .store import SessionStore
from .types import Identity, ReasonCode, SessionSubmission

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AcceptedSession:
    identity: Identity
    record: GameSession


class SessionIntake:
    def __init__(
        self,
        store: SessionStore,
        resolver: IdentityResolver,
        rate_limiter: RateLimiter,
        validator: PlausibilityValidator,
        patterns: PatternDetector,
    ) -> None:
        self.store = store
        self.resolver = resolver
        self.rate_limiter = rate_limiter
        self.validator = validator
        self.patterns = patterns
        self._rejections: Counter = Counter()
        self._rejections_lock = Lock()

    def submit(
        self,
        submission: SessionSubmission,
        registered_user_id: Optional[int] = None,
        guest_token: Optional[str] = None,
    ) -> AcceptedSession:
        try:
            identity = self.resolver.resolve(registered_user_id, guest_token)
        except IdentityResolutionFailure as exc:
            self._count(exc.reason)
            logger.error("Identity resolution failed: %s", exc.message)
            raise

        try:
            decision = self.rate_limiter.check(identity, submission.submitted_at)
        except TimeoutError as exc:
            self._count(ReasonCode.STORE_UNAVAILABLE)
            logger.error("Rate limiter unavailable for %s: %s", identity, exc)
            raise StoreUnavailable(f"rate limiter lock timed out: {exc}") from exc
        if not decision.allowed:
            self._count(ReasonCode.RATE_LIMIT_EXCEEDED)
            raise RateLimitExceeded(decision.retry_after)

        verdict = self.validator.validate(submission)
        if not verdict.ok:
            self._count(verdict.reason)
            logger.info(
                "Rejected session %r from %s: %s",
                submission.client_session_token, identity, verdict.reason.value,
            )
            raise SubmissionRejected(verdict)

        try:
            verdict = self.patterns.observe(identity, submission)
        except TimeoutError as exc:
            self._count(ReasonCode.STORE_UNAVAILABLE)
            logger.error("Pattern history unavailable for %s: %s", identity, exc)
            raise StoreUnavailable(f"pattern history lock timed out: {exc}") from exc
        if not verdict.ok:
            self._count(ReasonCode.PATTERN_SUSPICION)
            raise PatternSuspicion()

        try:
            record = self.store.save_session(identity, submission)
        except StoreUnavailable as exc:
            self._count(exc.reason)
            logger.exception("Failed to persist session for %s", identity)
            raise

        logger.info(
            "Accepted session %s for %s (score=%s)", record.id, identity, record.final_score
        )
        return AcceptedSession(identity=identity, record=record)

    def rejection_counts(self) -> Dict[str, int]:
        with self._rejections_lock:
            return {reason.value: count for reason, count in self._rejections.items()}

    def _count(self, reason: ReasonCode) -> None:
        with self._rejections_lock:
            self._rejections[reason] += 1


__all__ = ["AcceptedSession", "SessionIntake"]
