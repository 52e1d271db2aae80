"""
Leaderboards across fixed categories.

Each category ranks players with at least one session by one
PlayerSummary metric. Players scoring zero on that metric are left
off the board. Equal values keep their store order: the sort is
stable and no secondary key is applied.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..config import Config, resolve_config
from ..state.schema import LeaderboardEntry
from ..state.store import PersistenceStore
from ..systems.clock import ClockFn
from .aggregator import PlayerSummary, StatsAggregator


class LeaderboardCategory(str, Enum):
    FASTEST_AVERAGE = "fastest-average"
    MOST_SESSIONS = "most-sessions"
    MOST_GAMES = "most-games"
    FASTEST_TURN = "fastest-turn"
    TOTAL_TIME = "total-time"
    SPEED_DEMON = "speed-demon"
    MOST_ACTIVE = "most-active"


@dataclass(frozen=True)
class CategorySpec:
    label: str
    metric: str  # PlayerSummary field
    ascending: bool  # lower is better
    description: str  # {days} is the configured recent window


CATEGORIES: dict[LeaderboardCategory, CategorySpec] = {
    LeaderboardCategory.FASTEST_AVERAGE: CategorySpec(
        "Fastest Average", "avg_turn_time", True, "Lowest average turn time"
    ),
    LeaderboardCategory.MOST_SESSIONS: CategorySpec(
        "Most Sessions", "total_sessions", False, "Most games played"
    ),
    LeaderboardCategory.MOST_GAMES: CategorySpec(
        "Most Games", "games_played", False, "Most different games"
    ),
    LeaderboardCategory.FASTEST_TURN: CategorySpec(
        "Fastest Turn", "fastest_turn", True, "Quickest single turn"
    ),
    LeaderboardCategory.TOTAL_TIME: CategorySpec(
        "Total Play Time", "total_time", False, "Most time spent playing"
    ),
    LeaderboardCategory.SPEED_DEMON: CategorySpec(
        "Quick Turns", "turns_under_30s", False, "Most turns under 30 seconds"
    ),
    LeaderboardCategory.MOST_ACTIVE: CategorySpec(
        "Recent Activity", "recent_sessions", False, "Most sessions in the last {days} days"
    ),
}

# Categories whose values are durations in seconds
TIME_CATEGORIES = {
    LeaderboardCategory.FASTEST_AVERAGE,
    LeaderboardCategory.FASTEST_TURN,
    LeaderboardCategory.TOTAL_TIME,
}


def rank_category(
    summaries: list[PlayerSummary],
    category: LeaderboardCategory,
    limit: int = 10,
) -> list[LeaderboardEntry]:
    """Build one board from player summaries (already filtered to active players)."""
    spec = CATEGORIES[category]
    eligible = [s for s in summaries if getattr(s, spec.metric) > 0]
    ordered = sorted(eligible, key=lambda s: getattr(s, spec.metric), reverse=not spec.ascending)

    return [
        LeaderboardEntry(
            player_id=summary.player_id,
            player_name=summary.name,
            player_avatar=summary.avatar,
            value=getattr(summary, spec.metric),
            rank=position,
            category=spec.label,
        )
        for position, summary in enumerate(ordered[:limit], start=1)
    ]


class LeaderboardEngine:
    """Ranks players in every category from the injected store's records."""

    def __init__(
        self,
        store: PersistenceStore,
        clock: ClockFn | None = None,
        config: Config | None = None,
    ):
        self.config = resolve_config(config)
        self.aggregator = StatsAggregator(store, clock=clock, config=self.config)

    def _active_summaries(self) -> list[PlayerSummary]:
        return [s for s in self.aggregator.player_summaries() if s.total_sessions > 0]

    def compute(self) -> dict[str, list[LeaderboardEntry]]:
        """Every category's board, keyed by category value."""
        summaries = self._active_summaries()
        limit = self.config["leaderboard_size"]
        return {
            category.value: rank_category(summaries, category, limit)
            for category in LeaderboardCategory
        }

    def describe(self, category: LeaderboardCategory | str) -> str:
        """Category description with the configured recent window filled in."""
        spec = CATEGORIES[LeaderboardCategory(category)]
        return spec.description.format(days=self.config["recent_window_days"])

    def category(self, category: LeaderboardCategory | str) -> list[LeaderboardEntry]:
        """One category's board."""
        category = LeaderboardCategory(category)
        return rank_category(self._active_summaries(), category, self.config["leaderboard_size"])
