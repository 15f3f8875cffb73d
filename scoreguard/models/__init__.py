"""Database model exports."""

from .guest import GuestIdentity
from .session import GameSession
from .user import User

__all__ = [
    "GameSession",
    "GuestIdentity",
    "User",
]
