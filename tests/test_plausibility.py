import pytest

from scoreguard.core import AntiCheatSettings
from scoreguard.services import MAX_COUNTER, PlausibilityValidator, ReasonCode

from .conftest import make_submission


@pytest.fixture()
def validator(settings):
    return PlausibilityValidator(settings)


def test_legitimate_session_passes(validator):
    verdict = validator.validate(make_submission())
    assert verdict.ok is True
    assert verdict.reason is None


@pytest.mark.parametrize(
    "overrides, reason",
    [
        ({"final_score": -100}, ReasonCode.INVALID_SCORE),
        ({"final_score": None}, ReasonCode.INVALID_SCORE),
        ({"coins_collected": -1}, ReasonCode.INVALID_SCORE),
        ({"distance_traveled": None}, ReasonCode.INVALID_SCORE),
        ({"duration_seconds": 0}, ReasonCode.INVALID_DURATION),
        ({"duration_seconds": None}, ReasonCode.INVALID_DURATION),
        ({"duration_seconds": 1, "distance_traveled": 2000}, ReasonCode.SPEED_VIOLATION),
        ({"final_score": 999999}, ReasonCode.SPEED_VIOLATION),
        ({"coins_collected": 800, "distance_traveled": 100}, ReasonCode.COIN_RATE_VIOLATION),
        ({"obstacles_hit": 200}, ReasonCode.OBSTACLE_RATE_VIOLATION),
        ({"final_score": 50, "coins_collected": 100}, ReasonCode.SCORE_COIN_MISMATCH),
        ({"final_score": 301}, ReasonCode.SCORE_COIN_MISMATCH),
        ({"outcome": "invalid"}, ReasonCode.INVALID_RESULT),
        ({"outcome": None}, ReasonCode.INVALID_RESULT),
    ],
)
def test_rule_violations(validator, overrides, reason):
    verdict = validator.validate(make_submission(**overrides))
    assert verdict.ok is False
    assert verdict.reason == reason
    assert verdict.message


def test_first_failing_rule_wins(validator):
    # Negative score, zero duration and a bogus result all fail; score is checked first.
    verdict = validator.validate(
        make_submission(final_score=-5, duration_seconds=0, outcome="hacked")
    )
    assert verdict.reason == ReasonCode.INVALID_SCORE

    verdict = validator.validate(
        make_submission(coins_collected=800, final_score=50, outcome="hacked")
    )
    assert verdict.reason == ReasonCode.COIN_RATE_VIOLATION


def test_score_floor_tolerates_short_high_scoring_runs():
    # Coin rules relaxed so the score cap is the only limit in play.
    relaxed = PlausibilityValidator(AntiCheatSettings(max_coins_per_second=100.0))
    short_run = dict(
        duration_seconds=5, coins_collected=500, obstacles_hit=0, distance_traveled=1000
    )

    # 5 seconds * 10 points/s is 50, but the floor allows up to 1000.
    assert relaxed.validate(make_submission(final_score=1000, **short_run)).ok is True

    verdict = relaxed.validate(make_submission(final_score=1001, **short_run))
    assert verdict.reason == ReasonCode.SPEED_VIOLATION


@pytest.mark.parametrize(
    "overrides, reason",
    [
        ({"distance_traveled": 10**400}, ReasonCode.INVALID_SCORE),
        ({"coins_collected": 10**400}, ReasonCode.INVALID_SCORE),
        ({"final_score": MAX_COUNTER + 1}, ReasonCode.INVALID_SCORE),
        ({"duration_seconds": 2**70}, ReasonCode.INVALID_DURATION),
    ],
)
def test_values_beyond_storable_range_are_rejected(validator, overrides, reason):
    verdict = validator.validate(make_submission(**overrides))
    assert verdict.ok is False
    assert verdict.reason == reason


def test_long_duration_within_range_does_not_overflow(validator):
    verdict = validator.validate(
        make_submission(duration_seconds=MAX_COUNTER, distance_traveled=MAX_COUNTER)
    )
    assert verdict.ok is True


def test_zero_coins_requires_zero_score(validator):
    assert validator.validate(
        make_submission(final_score=0, coins_collected=0, outcome="quit")
    ).ok is True
    verdict = validator.validate(make_submission(final_score=10, coins_collected=0))
    assert verdict.reason == ReasonCode.SCORE_COIN_MISMATCH


def test_thresholds_come_from_settings():
    strict = PlausibilityValidator(AntiCheatSettings(max_coins_per_second=1.0))
    verdict = strict.validate(make_submission())
    assert verdict.reason == ReasonCode.COIN_RATE_VIOLATION
