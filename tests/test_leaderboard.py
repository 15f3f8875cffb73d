from datetime import date, timedelta

import pytest
from sqlmodel import Session

from scoreguard.models import GameSession, GuestIdentity, User
from scoreguard.services import Identity, LeaderboardAggregator, StoreUnavailable

from .conftest import NOW


def _add_session(engine, *, score, at, user_id=None, guest_number=None, result="died"):
    with Session(engine) as session:
        record = GameSession(
            user_id=user_id,
            guest_number=guest_number,
            session_token="s",
            duration_seconds=60,
            final_score=score,
            coins_collected=score,
            game_result=result,
            created_at=at,
        )
        session.add(record)
        session.commit()
        session.refresh(record)
        return record.id


@pytest.fixture()
def seeded(engine):
    with Session(engine) as session:
        session.add(User(id=1, username="alice"))
        session.add(User(id=2, username="bob"))
        session.add(GuestIdentity(guest_number=1, token="guest-token-1"))
        session.commit()

    _add_session(engine, score=300, at=NOW - timedelta(hours=3), user_id=1)
    _add_session(engine, score=500, at=NOW - timedelta(hours=2), user_id=1, result="completed")
    _add_session(engine, score=500, at=NOW - timedelta(hours=5), user_id=2)
    _add_session(engine, score=450, at=NOW - timedelta(hours=1), guest_number=1)
    _add_session(engine, score=120, at=NOW - timedelta(hours=1), guest_number=1)
    # Outside the 24h window.
    _add_session(engine, score=900, at=NOW - timedelta(hours=30), user_id=2)
    return engine


def test_one_entry_per_identity_best_score_first(store, seeded):
    board = LeaderboardAggregator(store)
    entries = board.top_n(NOW - timedelta(hours=24), NOW, 10)

    assert [(e.display_name, e.score) for e in entries] == [
        ("bob", 500),
        ("alice", 500),
        ("Guest_1", 450),
    ]
    assert [e.rank for e in entries] == [1, 2, 3]
    assert len({e.identity for e in entries}) == len(entries)


def test_equal_scores_rank_the_earlier_session_first(store, seeded):
    entries = LeaderboardAggregator(store).top_n(NOW - timedelta(hours=24), NOW, 2)
    bob, alice = entries
    assert bob.timestamp < alice.timestamp
    assert alice.outcome == "completed"


def test_top_n_is_deterministic(store, seeded):
    board = LeaderboardAggregator(store)
    start, end = NOW - timedelta(hours=24), NOW
    assert board.top_n(start, end, 10) == board.top_n(start, end, 10)


def test_top_n_limits_and_window(store, seeded):
    board = LeaderboardAggregator(store)
    assert len(board.top_n(NOW - timedelta(hours=24), NOW, 1)) == 1
    assert board.top_n(NOW - timedelta(hours=24), NOW, 0) == []

    wide = board.top_n(NOW - timedelta(hours=48), NOW, 10)
    assert wide[0].display_name == "bob" and wide[0].score == 900


def test_rolling_window_view(store, seeded):
    view = LeaderboardAggregator(store).rolling(24, 10, now=NOW)
    payload = view.to_dict()

    assert payload["stale"] is False
    assert payload["entries"][0] == {
        "rank": 1,
        "displayName": "bob",
        "score": 500,
        "outcome": "died",
        "timestamp": (NOW - timedelta(hours=5)).isoformat(),
    }


def test_winners_for_date_returns_top_three(engine, store):
    day = date(2025, 3, 14)
    for user_id in range(1, 6):
        _add_session(engine, score=100 * user_id, at=NOW, user_id=user_id)
    _add_session(engine, score=10_000, at=NOW + timedelta(days=1), user_id=9)

    view = LeaderboardAggregator(store).winners_for_date(day)
    assert [e.identity for e in view.entries] == [
        Identity.registered(5),
        Identity.registered(4),
        Identity.registered(3),
    ]
    assert [e.display_name for e in view.entries] == ["Player_5", "Player_4", "Player_3"]


class FlakyStore:
    def __init__(self, store):
        self.store = store
        self.down = False

    def sessions_between(self, start, end):
        if self.down:
            raise StoreUnavailable("database is locked")
        return self.store.sessions_between(start, end)


def test_reads_fail_open_to_last_good_result(store, seeded):
    flaky = FlakyStore(store)
    board = LeaderboardAggregator(flaky)
    fresh = board.rolling(24, 10, now=NOW)

    flaky.down = True
    stale = board.rolling(24, 10, now=NOW + timedelta(minutes=5))
    assert stale.stale is True
    assert stale.entries == fresh.entries


def test_read_failure_without_cache_raises(store):
    flaky = FlakyStore(store)
    flaky.down = True
    with pytest.raises(StoreUnavailable):
        LeaderboardAggregator(flaky).winners_for_date(date(2025, 3, 14))


def test_winners_for_last_representable_date(store):
    view = LeaderboardAggregator(store).winners_for_date(date.max)
    assert view.entries == []
    assert view.window_end > view.window_start


def test_last_good_cache_evicts_oldest_queries(store):
    flaky = FlakyStore(store)
    board = LeaderboardAggregator(flaky, cache_size=2)
    days = [date(2025, 3, 1) + timedelta(days=offset) for offset in range(5)]
    for day in days:
        board.winners_for_date(day)

    flaky.down = True
    assert board.winners_for_date(days[-1]).stale is True
    with pytest.raises(StoreUnavailable):
        board.winners_for_date(days[0])
