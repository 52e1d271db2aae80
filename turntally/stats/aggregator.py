"""
Statistics over finalized session records.

Everything here is a pure function of the records passed in (plus the
evaluation instant for "recent" counts). Empty inputs produce zeros,
never NaN or infinity, so rankings built on top stay stable.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel

from ..config import Config, resolve_config
from ..state.schema import (
    DEFAULT_GAME_AVATAR,
    UNKNOWN_GAME_TITLE,
    Game,
    Player,
)
from ..state.store import EntityKind, PersistenceStore
from ..systems.clock import ClockFn, now_ms

logger = logging.getLogger(__name__)

DAY_MS = 24 * 60 * 60 * 1000
QUICK_TURN_SECONDS = 30
LONG_TURN_SECONDS = 120


class PlayerSummary(BaseModel):
    player_id: str
    name: str
    avatar: str | None = None
    total_sessions: int = 0
    total_turns: int = 0
    total_time: int = 0
    avg_turn_time: float = 0.0
    fastest_turn: int = 0
    slowest_turn: int = 0
    games_played: int = 0
    turns_under_30s: int = 0
    turns_over_2min: int = 0
    recent_sessions: int = 0


class GameSummary(BaseModel):
    game_id: str
    title: str
    avatar: str | None = None
    thumbnail: str | None = None
    sessions_count: int = 0
    total_players: int = 0
    avg_session_length: float = 0.0  # seconds
    last_played: int | None = None


class Overview(BaseModel):
    total_games: int = 0
    total_players: int = 0
    total_sessions: int = 0
    total_play_time: int = 0


def summarize_player(player: Player, now: int, recent_window_days: int = 30) -> PlayerSummary:
    """
    Roll a player's whole history into one summary.

    Args:
        player: Player with their PlayerGameStats
        now: Evaluation instant (epoch ms) for the recent-session window
        recent_window_days: Sessions starting after now minus this count as recent
    """
    sessions = player.all_sessions
    durations = [d for session in sessions for d in session.durations]
    recent_cutoff = now - recent_window_days * DAY_MS

    total_time = sum(durations)
    return PlayerSummary(
        player_id=player.id,
        name=player.name,
        avatar=player.avatar,
        total_sessions=len(sessions),
        total_turns=len(durations),
        total_time=total_time,
        avg_turn_time=total_time / len(durations) if durations else 0.0,
        fastest_turn=min(durations) if durations else 0,
        slowest_turn=max(durations) if durations else 0,
        games_played=len({stats.game_id for stats in player.games if stats.sessions}),
        turns_under_30s=sum(1 for d in durations if d < QUICK_TURN_SECONDS),
        turns_over_2min=sum(1 for d in durations if d > LONG_TURN_SECONDS),
        recent_sessions=sum(1 for s in sessions if s.session_start > recent_cutoff),
    )


def summarize_game(game_id: str, players: list[Player], game: Game | None = None) -> GameSummary:
    """
    Roll every player's sessions of one game into a summary.

    sessions_count counts player-sessions (a 4-player session counts 4).
    Sessions that never ended are left out of avg_session_length.
    A game missing from the store is reported as unknown.
    """
    sessions_count = 0
    player_ids: set[str] = set()
    lengths: list[float] = []
    last_played: int | None = None

    for player in players:
        stats = player.get_game_stats(game_id)
        if stats is None:
            continue
        player_ids.add(player.id)
        sessions_count += len(stats.sessions)
        for session in stats.sessions:
            if session.length_seconds is not None:
                lengths.append(session.length_seconds)
            if last_played is None or session.session_start > last_played:
                last_played = session.session_start

    return GameSummary(
        game_id=game_id,
        title=game.title if game else UNKNOWN_GAME_TITLE,
        avatar=game.avatar if game else DEFAULT_GAME_AVATAR,
        thumbnail=game.thumbnail if game else None,
        sessions_count=sessions_count,
        total_players=len(player_ids),
        avg_session_length=sum(lengths) / len(lengths) if lengths else 0.0,
        last_played=last_played,
    )


class StatsAggregator:
    """
    Store-backed statistics.

    Reads the Game/Player/Session collections from the injected store
    on every call; holds no cached state.
    """

    def __init__(
        self,
        store: PersistenceStore,
        clock: ClockFn | None = None,
        config: Config | None = None,
    ):
        self.store = store
        self.now = clock or now_ms
        self.config = resolve_config(config)

    def _summarize(self, player: Player, now: int) -> PlayerSummary:
        return summarize_player(player, now, self.config["recent_window_days"])

    def player_summaries(self) -> list[PlayerSummary]:
        """Summaries for every stored player, in store order."""
        now = self.now()
        return [self._summarize(p, now) for p in self.store.get_all(EntityKind.PLAYER)]

    def player_summary(self, player_id: str) -> PlayerSummary | None:
        for player in self.store.get_all(EntityKind.PLAYER):
            if player.id == player_id:
                return self._summarize(player, self.now())
        return None

    def game_summaries(self) -> list[GameSummary]:
        """
        Summaries for every stored game, then any game ids that player
        records still reference after the game was deleted.
        """
        games = self.store.get_all(EntityKind.GAME)
        players = self.store.get_all(EntityKind.PLAYER)

        known = {game.id for game in games}
        orphaned: list[str] = []
        for player in players:
            for stats in player.games:
                if stats.game_id not in known and stats.game_id not in orphaned:
                    orphaned.append(stats.game_id)

        if orphaned:
            logger.debug(f"{len(orphaned)} game(s) referenced by history but not stored")

        summaries = [summarize_game(game.id, players, game) for game in games]
        summaries.extend(summarize_game(game_id, players) for game_id in orphaned)
        return summaries

    def game_summary(self, game_id: str) -> GameSummary:
        games = {game.id: game for game in self.store.get_all(EntityKind.GAME)}
        return summarize_game(game_id, self.store.get_all(EntityKind.PLAYER), games.get(game_id))

    def overview(self) -> Overview:
        """Totals across the whole store."""
        players = self.store.get_all(EntityKind.PLAYER)
        now = self.now()
        return Overview(
            total_games=len(self.store.get_all(EntityKind.GAME)),
            total_players=len(players),
            total_sessions=len(self.store.get_all(EntityKind.SESSION)),
            total_play_time=sum(self._summarize(p, now).total_time for p in players),
        )
