"""Persistence for guest identities and accepted sessions.

Every method opens its own short-lived ``Session`` and reports failures as
:class:`StoreUnavailable`, so callers never see driver exceptions.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from ..models import GameSession, GuestIdentity, User
from .errors import StoreUnavailable
from .types import Identity, SessionSubmission


class GuestTokenTaken(Exception):
    """Another writer inserted the same guest token first."""


class SessionStore:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    # Guest identities -----------------------------------------------------

    def find_guest_number(self, token: str) -> Optional[int]:
        try:
            with Session(self.engine) as session:
                row = session.exec(
                    select(GuestIdentity).where(GuestIdentity.token == token)
                ).first()
                return row.guest_number if row else None
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"guest lookup failed: {exc}") from exc

    def insert_guest(self, token: str) -> int:
        """Insert a mapping for ``token`` and return its new guest number."""

        try:
            with Session(self.engine) as session:
                row = GuestIdentity(token=token)
                session.add(row)
                try:
                    session.commit()
                except IntegrityError as exc:
                    session.rollback()
                    raise GuestTokenTaken(token) from exc
                session.refresh(row)
                return row.guest_number
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"guest allocation failed: {exc}") from exc

    # Sessions -------------------------------------------------------------

    def save_session(self, identity: Identity, submission: SessionSubmission) -> GameSession:
        record = GameSession(
            user_id=None if identity.is_guest else identity.value,
            guest_number=identity.value if identity.is_guest else None,
            session_token=submission.client_session_token[:255],
            duration_seconds=submission.duration_seconds,
            final_score=submission.final_score,
            coins_collected=submission.coins_collected,
            obstacles_hit=submission.obstacles_hit,
            powerups_collected=submission.powerups_collected,
            distance_traveled=submission.distance_traveled,
            game_result=submission.outcome,
            created_at=submission.submitted_at,
        )
        try:
            with Session(self.engine) as session:
                session.add(record)
                session.commit()
                session.refresh(record)
                return record
        except (SQLAlchemyError, OverflowError) as exc:
            raise StoreUnavailable(f"session write failed: {exc}") from exc

    def sessions_between(
        self, start: datetime, end: datetime
    ) -> List[Tuple[GameSession, Optional[str]]]:
        """Accepted sessions in ``[start, end)``, best score first.

        Ties on score are ordered by earliest ``created_at``, then lowest id.
        """

        statement = (
            select(GameSession, User.username)
            .join(User, GameSession.user_id == User.id, isouter=True)
            .where(GameSession.created_at >= start, GameSession.created_at < end)
            .order_by(
                GameSession.final_score.desc(),
                GameSession.created_at.asc(),
                GameSession.id.asc(),
            )
        )
        try:
            with Session(self.engine) as session:
                return list(session.exec(statement).all())
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"leaderboard read failed: {exc}") from exc

    def sessions_for_user(self, user_id: int, limit: int) -> List[GameSession]:
        statement = (
            select(GameSession)
            .where(GameSession.user_id == user_id)
            .order_by(
                GameSession.final_score.desc(),
                GameSession.created_at.asc(),
                GameSession.id.asc(),
            )
            .limit(limit)
        )
        try:
            with Session(self.engine) as session:
                return list(session.exec(statement).all())
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"session history read failed: {exc}") from exc


__all__ = ["GuestTokenTaken", "SessionStore"]
