"""Database model for guest identity reconciliation."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field as ORMField, SQLModel

from ..core.time import utcnow


class GuestIdentity(SQLModel, table=True):
    """Maps a client-generated guest token to a server-assigned guest number.

    ``guest_number`` is an AUTOINCREMENT key so numbers are never reused.
    """

    __tablename__ = "guest_identity"
    __table_args__ = {"sqlite_autoincrement": True}

    guest_number: Optional[int] = ORMField(default=None, primary_key=True)
    token: str = ORMField(index=True, unique=True, max_length=128)
    created_at: datetime = ORMField(default_factory=utcnow)


__all__ = ["GuestIdentity"]
