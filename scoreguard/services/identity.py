"""Guest identity reconciliation.

Registered players are canonical as soon as the identity provider vouches for
them. Guests send a client-generated token that the resolver maps onto a
server-assigned guest number, allocating one the first time a token is seen.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from threading import Lock
from typing import Optional

from .errors import IdentityResolutionFailure, StoreUnavailable
from .locks import StripedLock
from .store import GuestTokenTaken, SessionStore
from .types import Identity

logger = logging.getLogger(__name__)

MAX_TOKEN_LENGTH = 128


class IdentityResolver:
    """Maps ephemeral guest tokens to stable guest numbers.

    The store is authoritative; the in-memory map only remembers answers the
    store already gave. Allocation for a token happens inside that token's
    lock, and the unique index on ``guest_identity.token`` settles races with
    other processes: the losing insert re-reads the winner's row.
    """

    def __init__(
        self,
        store: SessionStore,
        locks: Optional[StripedLock] = None,
        cache_size: int = 10_000,
    ) -> None:
        self._store = store
        self._locks = locks or StripedLock()
        self._cache: "OrderedDict[str, int]" = OrderedDict()
        self._cache_lock = Lock()
        self._cache_size = cache_size

    def resolve(
        self,
        registered_user_id: Optional[int] = None,
        ephemeral_token: Optional[str] = None,
    ) -> Identity:
        if registered_user_id is not None:
            return Identity.registered(registered_user_id)

        token = (ephemeral_token or "").strip()
        if not token:
            raise IdentityResolutionFailure("no registered user and no guest token")
        if len(token) > MAX_TOKEN_LENGTH:
            raise IdentityResolutionFailure("guest token too long")

        cached = self._cached(token)
        if cached is not None:
            return Identity.guest(cached)

        try:
            with self._locks.hold(f"guest-token:{token}"):
                number = self._cached(token)
                if number is None:
                    number = self._lookup_or_allocate(token)
                    self._remember(token, number)
        except TimeoutError as exc:
            raise IdentityResolutionFailure(f"guest allocation lock timed out: {exc}") from exc
        except StoreUnavailable as exc:
            raise IdentityResolutionFailure(f"identity store unavailable: {exc}") from exc

        return Identity.guest(number)

    def _lookup_or_allocate(self, token: str) -> int:
        number = self._store.find_guest_number(token)
        if number is not None:
            return number

        try:
            number = self._store.insert_guest(token)
        except GuestTokenTaken:
            number = self._store.find_guest_number(token)
            if number is None:
                raise IdentityResolutionFailure(
                    "guest token conflict but no mapping found on re-read"
                )
            logger.debug("Guest token allocated concurrently, reusing Guest_%s", number)
            return number

        logger.info("Allocated guest number %s", number)
        return number

    def _cached(self, token: str) -> Optional[int]:
        with self._cache_lock:
            number = self._cache.get(token)
            if number is not None:
                self._cache.move_to_end(token)
            return number

    def _remember(self, token: str, number: int) -> None:
        with self._cache_lock:
            self._cache[token] = number
            self._cache.move_to_end(token)
            while len(self._cache) > self._cache_size:
                self._cache.popitem(last=False)


def display_name(identity: Identity, username: Optional[str] = None) -> str:
    """Public label for an identity; guests never expose their raw token."""

    if identity.is_guest:
        return f"Guest_{identity.value}"
    return username or f"Player_{identity.value}"


__all__ = ["IdentityResolver", "MAX_TOKEN_LENGTH", "display_name"]
