from concurrent.futures import ThreadPoolExecutor
from threading import Barrier

import pytest
from sqlmodel import Session, select

from scoreguard.models import GuestIdentity
from scoreguard.services import (
    Identity,
    IdentityResolutionFailure,
    IdentityResolver,
    SessionStore,
    StoreUnavailable,
    display_name,
)


class UnreachableStore:
    def find_guest_number(self, token):
        raise StoreUnavailable("connection refused")

    def insert_guest(self, token):
        raise StoreUnavailable("connection refused")


def _rows(engine, token):
    with Session(engine) as session:
        return session.exec(select(GuestIdentity).where(GuestIdentity.token == token)).all()


def test_registered_user_is_canonical_without_lookup():
    resolver = IdentityResolver(UnreachableStore())
    assert resolver.resolve(registered_user_id=42, ephemeral_token="ignored") == Identity.registered(42)


def test_same_token_resolves_to_same_guest(store):
    resolver = IdentityResolver(store)
    first = resolver.resolve(ephemeral_token="Guest_1710000000_abc")
    second = resolver.resolve(ephemeral_token="Guest_1710000000_abc")

    assert first == second
    assert first.is_guest


def test_distinct_tokens_get_increasing_numbers(store):
    resolver = IdentityResolver(store)
    a = resolver.resolve(ephemeral_token="token-a")
    b = resolver.resolve(ephemeral_token="token-b")

    assert b.value > a.value


def test_mapping_survives_a_new_resolver(store):
    original = IdentityResolver(store).resolve(ephemeral_token="persisted")
    assert IdentityResolver(store).resolve(ephemeral_token="persisted") == original


def test_cache_is_read_through(store):
    resolver = IdentityResolver(store, cache_size=1)
    a = resolver.resolve(ephemeral_token="a")
    resolver.resolve(ephemeral_token="b")
    # "a" was evicted from the cache and comes back from the store unchanged.
    assert resolver.resolve(ephemeral_token="a") == a
    assert len(resolver._cache) == 1


@pytest.mark.parametrize("token", [None, "", "   ", "x" * 129])
def test_unusable_token_fails(store, token):
    with pytest.raises(IdentityResolutionFailure):
        IdentityResolver(store).resolve(ephemeral_token=token)


def test_unreachable_store_fails_closed():
    with pytest.raises(IdentityResolutionFailure) as excinfo:
        IdentityResolver(UnreachableStore()).resolve(ephemeral_token="new-guest")
    assert isinstance(excinfo.value.__cause__, StoreUnavailable)


def test_concurrent_first_resolution_allocates_once(engine, store):
    resolver = IdentityResolver(store)
    workers = 16
    barrier = Barrier(workers)

    def resolve(_):
        barrier.wait()
        return resolver.resolve(ephemeral_token="brand-new-token")

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(resolve, range(workers)))

    assert len(set(results)) == 1
    assert len(_rows(engine, "brand-new-token")) == 1


def test_concurrent_resolvers_settle_on_the_stored_row(engine):
    # Separate resolvers share nothing in memory, like separate processes.
    workers = 8
    barrier = Barrier(workers)

    def resolve(_):
        resolver = IdentityResolver(SessionStore(engine))
        barrier.wait()
        return resolver.resolve(ephemeral_token="raced-token")

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(resolve, range(workers)))

    assert len(set(results)) == 1
    assert len(_rows(engine, "raced-token")) == 1


def test_display_name_never_uses_token():
    assert display_name(Identity.guest(17)) == "Guest_17"
    assert display_name(Identity.registered(3), "runner99") == "runner99"
    assert display_name(Identity.registered(3)) == "Player_3"
