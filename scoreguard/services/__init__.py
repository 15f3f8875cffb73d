"""Service layer helpers."""

from .errors import (
    IdentityResolutionFailure,
    IntakeError,
    PatternSuspicion,
    RateLimitExceeded,
    StoreUnavailable,
    SubmissionRejected,
)
from .identity import IdentityResolver, display_name
from .intake import AcceptedSession, SessionIntake
from .leaderboard import LeaderboardAggregator, LeaderboardView
from .locks import StripedLock
from .patterns import PatternDetector
from .plausibility import PlausibilityValidator
from .rate_limiter import RateDecision, RateLimiter
from .sessions import (
    ADDRESS_TOKEN_PREFIX,
    InvalidPayload,
    guest_token_from_payload,
    session_to_dict,
    submission_from_payload,
)
from .store import SessionStore
from .types import (
    GAME_RESULTS,
    Identity,
    LeaderboardEntry,
    MAX_COUNTER,
    ReasonCode,
    SessionSubmission,
    Verdict,
)

__all__ = [
    "ADDRESS_TOKEN_PREFIX",
    "AcceptedSession",
    "GAME_RESULTS",
    "Identity",
    "IdentityResolutionFailure",
    "IdentityResolver",
    "IntakeError",
    "InvalidPayload",
    "LeaderboardAggregator",
    "LeaderboardEntry",
    "LeaderboardView",
    "MAX_COUNTER",
    "PatternDetector",
    "PatternSuspicion",
    "PlausibilityValidator",
    "RateDecision",
    "RateLimitExceeded",
    "RateLimiter",
    "ReasonCode",
    "SessionIntake",
    "SessionStore",
    "SessionSubmission",
    "StoreUnavailable",
    "StripedLock",
    "SubmissionRejected",
    "Verdict",
    "display_name",
    "guest_token_from_payload",
    "session_to_dict",
    "submission_from_payload",
]
