"""Bounds and consistency checks for a single submitted session.

The validator is stateless and assumes every field is adversarial: whatever
the client claims to have clamped or checked is ignored. Rules run in a fixed
order and the first failure decides the verdict.
"""

from __future__ import annotations

from typing import Callable, List, Optional

from ..core.config import AntiCheatSettings
from .types import GAME_RESULTS, MAX_COUNTER, ReasonCode, SessionSubmission, Verdict

Rule = Callable[[SessionSubmission], Optional[Verdict]]


class PlausibilityValidator:
    def __init__(self, settings: AntiCheatSettings) -> None:
        self.settings = settings
        self._rules: List[Rule] = [
            self._check_score,
            self._check_duration,
            self._check_speed,
            self._check_coin_rate,
            self._check_obstacle_rate,
            self._check_score_matches_coins,
            self._check_result,
        ]

    def validate(self, submission: SessionSubmission) -> Verdict:
        for rule in self._rules:
            verdict = rule(submission)
            if verdict is not None:
                return verdict
        return Verdict.accept()

    def _check_score(self, s: SessionSubmission) -> Optional[Verdict]:
        if s.final_score is None or not 0 <= s.final_score <= MAX_COUNTER:
            return Verdict.reject(ReasonCode.INVALID_SCORE, "Invalid score")
        counters = (s.coins_collected, s.obstacles_hit, s.powerups_collected, s.distance_traveled)
        if any(value is None or not 0 <= value <= MAX_COUNTER for value in counters):
            return Verdict.reject(ReasonCode.INVALID_SCORE, "Invalid score: session counters")
        return None

    def _check_duration(self, s: SessionSubmission) -> Optional[Verdict]:
        if s.duration_seconds is None or not 0 < s.duration_seconds <= MAX_COUNTER:
            return Verdict.reject(ReasonCode.INVALID_DURATION, "Invalid duration")
        return None

    def _check_speed(self, s: SessionSubmission) -> Optional[Verdict]:
        cfg = self.settings
        max_score = max(s.duration_seconds * cfg.score_per_second, cfg.score_floor)
        if (
            s.final_score > max_score
            or s.distance_traveled > s.duration_seconds * cfg.max_distance_per_second
        ):
            return Verdict.reject(
                ReasonCode.SPEED_VIOLATION, "Game speed appears manipulated"
            )
        return None

    def _check_coin_rate(self, s: SessionSubmission) -> Optional[Verdict]:
        if s.coins_collected > s.duration_seconds * self.settings.max_coins_per_second:
            return Verdict.reject(
                ReasonCode.COIN_RATE_VIOLATION, "Coin collection appears manipulated"
            )
        return None

    def _check_obstacle_rate(self, s: SessionSubmission) -> Optional[Verdict]:
        if s.obstacles_hit > s.duration_seconds * self.settings.max_obstacles_per_second:
            return Verdict.reject(
                ReasonCode.OBSTACLE_RATE_VIOLATION, "Obstacle hit rate appears manipulated"
            )
        return None

    def _check_score_matches_coins(self, s: SessionSubmission) -> Optional[Verdict]:
        cfg = self.settings
        low = s.coins_collected * cfg.min_score_per_coin
        high = s.coins_collected * cfg.max_score_per_coin
        if not low <= s.final_score <= high:
            return Verdict.reject(
                ReasonCode.SCORE_COIN_MISMATCH,
                "Score must be between coins collected multiplied by "
                f"{cfg.min_score_per_coin:g} and {cfg.max_score_per_coin:g}",
            )
        return None

    def _check_result(self, s: SessionSubmission) -> Optional[Verdict]:
        if s.outcome not in GAME_RESULTS:
            return Verdict.reject(ReasonCode.INVALID_RESULT, "Invalid game result")
        return None


__all__ = ["PlausibilityValidator"]
