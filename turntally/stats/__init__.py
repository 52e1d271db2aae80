"""Statistics and leaderboards over finished sessions."""

from .aggregator import (
    GameSummary,
    Overview,
    PlayerSummary,
    StatsAggregator,
    summarize_game,
    summarize_player,
)
from .leaderboard import CATEGORIES, LeaderboardCategory, LeaderboardEngine, rank_category

__all__ = [
    "GameSummary",
    "Overview",
    "PlayerSummary",
    "StatsAggregator",
    "summarize_game",
    "summarize_player",
    "CATEGORIES",
    "LeaderboardCategory",
    "LeaderboardEngine",
    "rank_category",
]
