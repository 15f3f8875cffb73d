"""Exceptions raised by the intake pipeline and its collaborators."""

from __future__ import annotations

from typing import Optional

from .types import ReasonCode, Verdict


class IntakeError(Exception):
    """Base class for every rejection the pipeline can produce."""

    reason: ReasonCode = ReasonCode.STORE_UNAVAILABLE
    status_code: int = 500
    public_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class SubmissionRejected(IntakeError):
    """A plausibility rule failed."""

    status_code = 400

    def __init__(self, verdict: Verdict) -> None:
        super().__init__(verdict.message)
        self.reason = verdict.reason
        self.verdict = verdict
        self.public_message = verdict.message


class RateLimitExceeded(IntakeError):
    reason = ReasonCode.RATE_LIMIT_EXCEEDED
    status_code = 429
    public_message = "Too many submissions, try again later"

    def __init__(self, retry_after: float) -> None:
        super().__init__(self.public_message)
        self.retry_after = retry_after


class PatternSuspicion(IntakeError):
    reason = ReasonCode.PATTERN_SUSPICION
    status_code = 400
    public_message = "Too many perfect games in a short period"


class IdentityResolutionFailure(IntakeError):
    reason = ReasonCode.IDENTITY_RESOLUTION_FAILURE


class StoreUnavailable(IntakeError):
    reason = ReasonCode.STORE_UNAVAILABLE


__all__ = [
    "IdentityResolutionFailure",
    "IntakeError",
    "PatternSuspicion",
    "RateLimitExceeded",
    "StoreUnavailable",
    "SubmissionRejected",
]
