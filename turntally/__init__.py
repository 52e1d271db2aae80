"""TurnTally: turn timing, statistics and leaderboards for tabletop games."""

__version__ = "0.1.0"
