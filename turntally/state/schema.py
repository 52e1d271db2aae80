"""
Pydantic models for TurnTally state.

Instants are epoch milliseconds, durations are whole seconds.
Designed to serialize to JSON but structured like database tables.
"""

from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, Field, model_validator


DEFAULT_GAME_AVATAR = "🎲"
UNKNOWN_GAME_TITLE = "Unknown Game"
UNKNOWN_PLAYER_NAME = "Unknown Player"

# Quick start list caps
RECENT_GAMES_LIMIT = 10
RECENT_COMBINATIONS_LIMIT = 5


def generate_id() -> str:
    return str(uuid4())


# -----------------------------------------------------------------------------
# Entities
# -----------------------------------------------------------------------------


class Game(BaseModel):
    """A game title that sessions can be played against."""
    id: str = Field(default_factory=generate_id)
    title: str
    avatar: str | None = None
    thumbnail: str | None = None
    description: str | None = None

    def display_image(self) -> tuple[Literal["thumbnail", "avatar"], str]:
        """Pick the image to show for this game: thumbnail, custom avatar, or the die."""
        if self.thumbnail:
            return "thumbnail", self.thumbnail
        if self.avatar and self.avatar != DEFAULT_GAME_AVATAR:
            return "avatar", self.avatar
        return "avatar", DEFAULT_GAME_AVATAR


class PlayerTurn(BaseModel):
    """One completed turn."""
    duration: int = Field(ge=0)  # seconds
    timestamp: int               # completion instant


class SessionNote(BaseModel):
    id: str = Field(default_factory=generate_id)
    timestamp: int
    player_id: str | None = None  # None = general session note
    note: str


class GameSession(BaseModel):
    """
    One player's finalized record of a session.

    Written once at session end and never edited afterwards.
    """
    session_id: str
    game_id: str
    session_start: int
    session_end: int | None = None
    player_turns: list[PlayerTurn] = Field(default_factory=list)
    notes: list[SessionNote] = Field(default_factory=list)

    @property
    def durations(self) -> list[int]:
        return [turn.duration for turn in self.player_turns]

    @property
    def length_seconds(self) -> float | None:
        """Wall-clock length of the session, or None if it never ended."""
        if self.session_end is None:
            return None
        return (self.session_end - self.session_start) / 1000


class PlayerGameStats(BaseModel):
    """Append-only history of one player's sessions for one game."""
    game_id: str
    sessions: list[GameSession] = Field(default_factory=list)


class Player(BaseModel):
    id: str = Field(default_factory=generate_id)
    name: str
    avatar: str | None = None
    games: list[PlayerGameStats] = Field(default_factory=list)

    def get_game_stats(self, game_id: str) -> PlayerGameStats | None:
        for stats in self.games:
            if stats.game_id == game_id:
                return stats
        return None

    def record_session(self, game_session: GameSession) -> PlayerGameStats:
        """Append a finalized session, creating the per-game entry if needed."""
        stats = self.get_game_stats(game_session.game_id)
        if stats is None:
            stats = PlayerGameStats(game_id=game_session.game_id)
            self.games.append(stats)
        stats.sessions.append(game_session)
        return stats

    @property
    def all_sessions(self) -> list[GameSession]:
        return [s for stats in self.games for s in stats.sessions]


# -----------------------------------------------------------------------------
# In-progress session
# -----------------------------------------------------------------------------


class Session(BaseModel):
    """
    A session being timed (or, once ended, the record of one).

    turns holds one list of recorded durations per roster position,
    so len(turns) always equals len(player_ids).
    """
    id: str = Field(default_factory=generate_id)
    game_id: str
    player_ids: list[str]
    start_time: int
    end_time: int | None = None
    current_player_index: int = 0
    is_active: bool = False
    is_paused: bool = False
    current_turn_start_time: int | None = None
    elapsed_at_pause: int | None = None
    notes: list[SessionNote] = Field(default_factory=list)
    turns: list[list[int]] = Field(default_factory=list)

    @model_validator(mode="after")
    def _align_turns(self) -> "Session":
        # Older records may carry no turns at all
        count = len(self.player_ids)
        if len(self.turns) < count:
            self.turns.extend([] for _ in range(count - len(self.turns)))
        elif len(self.turns) > count:
            del self.turns[count:]
        if self.player_ids and not 0 <= self.current_player_index < count:
            self.current_player_index = 0
        return self

    @property
    def completed_durations(self) -> list[int]:
        """Every recorded duration in the session, flattened by roster order."""
        return [d for durations in self.turns for d in durations]


# -----------------------------------------------------------------------------
# Leaderboards
# -----------------------------------------------------------------------------


class LeaderboardEntry(BaseModel):
    player_id: str
    player_name: str
    player_avatar: str | None = None
    value: float
    rank: int = 0  # set after sorting
    category: str


# -----------------------------------------------------------------------------
# Quick start (recent games and player groups)
# -----------------------------------------------------------------------------


class RecentGame(BaseModel):
    game_id: str
    last_played: int
    play_count: int = 1


class RecentPlayerCombination(BaseModel):
    player_ids: list[str]  # sorted, so the same group always matches
    last_used: int
    use_count: int = 1


class QuickStartData(BaseModel):
    """Recently played games and player groups, newest first."""
    recent_games: list[RecentGame] = Field(default_factory=list)
    recent_player_combinations: list[RecentPlayerCombination] = Field(default_factory=list)

    def record(self, game_id: str, player_ids: list[str], now: int) -> None:
        """Count one more play of game_id by this group of players."""
        for recent in self.recent_games:
            if recent.game_id == game_id:
                recent.last_played = now
                recent.play_count += 1
                break
        else:
            self.recent_games.append(RecentGame(game_id=game_id, last_played=now))

        self.recent_games.sort(key=lambda g: g.last_played, reverse=True)
        del self.recent_games[RECENT_GAMES_LIMIT:]

        key = sorted(player_ids)
        for combo in self.recent_player_combinations:
            if sorted(combo.player_ids) == key:
                combo.last_used = now
                combo.use_count += 1
                break
        else:
            self.recent_player_combinations.append(
                RecentPlayerCombination(player_ids=key, last_used=now)
            )

        self.recent_player_combinations.sort(key=lambda c: c.last_used, reverse=True)
        del self.recent_player_combinations[RECENT_COMBINATIONS_LIMIT:]
