"""
Session lifecycle management.

Handles setup of a new session, reopening the current one, listing and
deleting finished sessions, and the quick start lists. The timing
itself is SessionState's job (systems/session.py).
"""

import logging
from pathlib import Path

from pydantic import BaseModel

from ..config import Config, resolve_config
from ..systems.clock import ClockFn, now_ms
from .event_bus import EventBus, EventType, get_event_bus
from .schema import (
    DEFAULT_GAME_AVATAR,
    UNKNOWN_GAME_TITLE,
    UNKNOWN_PLAYER_NAME,
    QuickStartData,
    Session,
)
from .store import EntityKind, JsonStore, PersistenceStore

logger = logging.getLogger(__name__)


class SessionRecord(BaseModel):
    """A stored session with the names needed to display it."""
    session: Session
    game_title: str
    game_image: tuple[str, str]
    player_names: list[str]


class SessionManager:
    """
    Manages session setup and history.

    Storage is delegated to a PersistenceStore implementation:
    - JsonStore for production (file-based)
    - MemoryStore for testing (in-memory)
    """

    def __init__(
        self,
        store: PersistenceStore | Path | str = "data",
        clock: ClockFn | None = None,
        bus: EventBus | None = None,
        config: Config | None = None,
    ):
        """
        Initialize with a store.

        Args:
            store: PersistenceStore instance, or path for JsonStore
            clock: Epoch-ms clock, defaults to wall time
            bus: Event bus, defaults to the process-wide one
            config: Timer/leaderboard settings
        """
        if isinstance(store, (Path, str)):
            self.store = JsonStore(store)
        else:
            self.store = store
        self.clock = clock
        self.config = resolve_config(config)
        self._bus = bus or get_event_bus()

    def _now(self) -> int:
        return (self.clock or now_ms)()

    # -------------------------------------------------------------------------
    # Current session
    # -------------------------------------------------------------------------

    def current_session(self) -> Session | None:
        return self.store.get_current()

    def create_session(self, game_id: str, player_ids: list[str]) -> Session | None:
        """
        Set up a new session in the NOT_STARTED state.

        Requires a stored game, at least two distinct stored players in
        turn order, and no other session in progress.
        """
        if self.store.get_current() is not None:
            logger.warning("A session is already in progress")
            return None

        games = {game.id for game in self.store.get_all(EntityKind.GAME)}
        if game_id not in games:
            logger.warning(f"Unknown game: {game_id}")
            return None

        if len(player_ids) < 2 or len(set(player_ids)) != len(player_ids):
            logger.warning("A session needs at least 2 distinct players")
            return None

        known_players = {player.id for player in self.store.get_all(EntityKind.PLAYER)}
        missing = [pid for pid in player_ids if pid not in known_players]
        if missing:
            logger.warning(f"Unknown players: {', '.join(missing)}")
            return None

        session = Session(
            game_id=game_id,
            player_ids=list(player_ids),
            start_time=self._now(),
        )
        self.store.set_current(session)

        logger.info(f"Created session {session.id} for game {game_id}")
        self._bus.emit(EventType.SESSION_CREATED, session_id=session.id, game_id=game_id)
        return session

    def open_session(self, clock: ClockFn | None = None, use_ticker: bool = True):
        """
        SessionState bound to this manager's store, bus and config.

        Args:
            clock: Epoch-ms clock for this session, defaults to the manager's
            use_ticker: Sample the running clock on a background thread
        """
        from ..systems.session import SessionState

        return SessionState(
            self.store,
            clock=clock or self.clock,
            bus=self._bus,
            config=self.config,
            use_ticker=use_ticker,
        )

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    def list_sessions(self) -> list[SessionRecord]:
        """Finished sessions, newest first, with game and player names filled in."""
        games = {game.id: game for game in self.store.get_all(EntityKind.GAME)}
        names = {player.id: player.name for player in self.store.get_all(EntityKind.PLAYER)}

        records = []
        for session in self.store.get_all(EntityKind.SESSION):
            game = games.get(session.game_id)
            records.append(SessionRecord(
                session=session,
                game_title=game.title if game else UNKNOWN_GAME_TITLE,
                game_image=game.display_image() if game else ("avatar", DEFAULT_GAME_AVATAR),
                player_names=[names.get(pid, UNKNOWN_PLAYER_NAME) for pid in session.player_ids],
            ))

        records.sort(key=lambda r: r.session.start_time, reverse=True)
        return records

    def delete_session(self, session_id: str) -> bool:
        """
        Remove a finished session everywhere it was recorded.

        Drops the session record and each player's GameSession for it;
        per-game stats left without sessions are removed too.
        Returns True if anything was deleted.
        """
        sessions = self.store.get_all(EntityKind.SESSION)
        remaining = [s for s in sessions if s.id != session_id]
        found = len(remaining) != len(sessions)

        players = self.store.get_all(EntityKind.PLAYER)
        touched = False
        for player in players:
            for stats in player.games:
                kept = [s for s in stats.sessions if s.session_id != session_id]
                if len(kept) != len(stats.sessions):
                    stats.sessions = kept
                    touched = True
            player.games = [stats for stats in player.games if stats.sessions]

        if not found and not touched:
            return False

        self.store.replace_all(EntityKind.SESSION, remaining)
        self.store.replace_all(EntityKind.PLAYER, players)

        logger.info(f"Deleted session {session_id}")
        self._bus.emit(EventType.SESSION_DELETED, session_id=session_id)
        return True

    def quick_start(self) -> QuickStartData:
        """Recently played games and player groups."""
        return self.store.get_quick_start()
