"""Trusted gameplay-session intake and leaderboards for the runner game."""

__version__ = "1.0.0"
