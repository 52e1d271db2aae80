"""
Session timer state machine.

Owns the player rotation, the turn clock, notes and turn-duration
history of the session in progress:

    NOT_STARTED → RUNNING ⇄ PAUSED → ENDED

Every state-affecting operation writes the session back to the store,
so a crash or reload loses at most the running turn's unsaved seconds.
Operations attempted in the wrong phase, or with no current session,
are rejected as no-ops.

Usage:
    state = SessionState(store)
    state.start()
    state.advance_turn()            # record the turn, next player
    state.scrap_turn()              # next player, discard the timing
    state.pause(); state.resume()
    finished = state.end()          # finalize into player history
"""

from __future__ import annotations

import logging
import threading
from enum import Enum

from ..config import Config, resolve_config
from ..state.event_bus import EventBus, EventType, get_event_bus
from ..state.schema import GameSession, PlayerTurn, Session, SessionNote
from ..state.store import EntityKind, PersistenceStore
from .anomaly import NORMAL, TimerWarning, classify_turn
from .clock import ClockFn, TurnClock
from .ticker import TurnTicker

logger = logging.getLogger(__name__)


class SessionPhase(str, Enum):
    NOT_STARTED = "not_started"  # Set up, clock never started
    RUNNING = "running"          # Clock running for the current player
    PAUSED = "paused"            # Clock frozen
    ENDED = "ended"              # Finalized into player history


# Phases each operation may be invoked from
ALLOWED_PHASES: dict[str, set[SessionPhase]] = {
    "start": {SessionPhase.NOT_STARTED},
    "pause": {SessionPhase.RUNNING},
    "resume": {SessionPhase.PAUSED},
    "advance_turn": {SessionPhase.RUNNING, SessionPhase.PAUSED},
    "end": {SessionPhase.RUNNING, SessionPhase.PAUSED},
    "apply_player_set": {SessionPhase.NOT_STARTED, SessionPhase.RUNNING, SessionPhase.PAUSED},
    "add_note": {SessionPhase.NOT_STARTED, SessionPhase.RUNNING, SessionPhase.PAUSED},
}

MIN_PLAYERS = 2


def phase_of(session: Session) -> SessionPhase:
    """Derive the phase from a session record."""
    if session.end_time is not None:
        return SessionPhase.ENDED
    if not session.is_active:
        return SessionPhase.NOT_STARTED
    if session.is_paused:
        return SessionPhase.PAUSED
    return SessionPhase.RUNNING


def reproject_turns(
    old_player_ids: list[str],
    old_turns: list[list[int]],
    new_player_ids: list[str],
) -> list[list[int]]:
    """
    Carry each player's recorded durations to their position in a new roster.

    Lookup is by player id, not index. Players new to the roster start
    empty; players no longer in it are dropped.
    """
    by_player = dict(zip(old_player_ids, old_turns))
    return [list(by_player.get(player_id, [])) for player_id in new_player_ids]


class SessionState:
    """
    Controller for the current session.

    Collaborators are injected: the store holding the session, an
    optional clock (epoch-ms callable) and an optional event bus.

    With use_ticker=True a TurnTicker samples the clock every
    tick_interval seconds while RUNNING and feeds the anomaly
    classifier; it stops on pause, end or suspend(). Ticks and the
    state-changing operations are serialized by one lock. Tests pass
    use_ticker=False and call tick() directly.
    """

    def __init__(
        self,
        store: PersistenceStore,
        clock: ClockFn | None = None,
        bus: EventBus | None = None,
        config: Config | None = None,
        use_ticker: bool = True,
    ):
        self.store = store
        self.clock = TurnClock(clock)
        self.config = resolve_config(config)
        self._bus = bus or get_event_bus()

        self.session: Session | None = store.get_current()
        self.warning: TimerWarning = NORMAL
        self._finalized: Session | None = None
        # Guards session and warning against the ticker thread
        self._lock = threading.RLock()

        self._ticker: TurnTicker | None = None
        if use_ticker:
            self._ticker = TurnTicker(
                self.tick,
                interval=self.config["tick_interval"],
                name=f"TurnTicker-{self.session.id[:8]}" if self.session else "TurnTicker",
            )
            if self.phase == SessionPhase.RUNNING:
                # Reloaded mid-turn: the reference instant is still valid
                self._ticker.start()

    # ─── Accessors ───────────────────────────────────────────────

    @property
    def phase(self) -> SessionPhase | None:
        """Current phase, or None when there is no session at all."""
        if self.session is None:
            return SessionPhase.ENDED if self._finalized else None
        return phase_of(self.session)

    @property
    def finalized(self) -> Session | None:
        """The ended session record, once end() has run."""
        return self._finalized

    @property
    def elapsed(self) -> int:
        """Seconds on the clock for the current turn."""
        phase = self.phase
        if phase == SessionPhase.RUNNING and self.session.current_turn_start_time is not None:
            return self.clock.elapsed(self.session.current_turn_start_time)
        if phase == SessionPhase.PAUSED:
            return self.session.elapsed_at_pause or 0
        return 0

    @property
    def current_player_id(self) -> str | None:
        if self.session is None:
            return None
        return self.session.player_ids[self.session.current_player_index]

    @property
    def turn_number(self) -> int:
        """1-based number of the current player's turn in progress."""
        if self.session is None:
            return 0
        return len(self.session.turns[self.session.current_player_index]) + 1

    @property
    def completed_durations(self) -> list[int]:
        if self.session is None:
            return []
        return self.session.completed_durations

    @property
    def is_ticking(self) -> bool:
        return self._ticker is not None and self._ticker.is_running

    # ─── Internals ───────────────────────────────────────────────

    def _allowed(self, operation: str) -> bool:
        if self.session is None:
            logger.debug(f"Ignoring {operation}: no current session")
            return False
        phase = self.phase
        if phase not in ALLOWED_PHASES[operation]:
            logger.debug(f"Ignoring {operation} during {phase.value} phase")
            return False
        return True

    def _persist(self) -> None:
        self.store.set_current(self.session)

    def _emit(self, event_type: EventType, **data) -> None:
        session_id = self.session.id if self.session else ""
        self._bus.emit(event_type, session_id=session_id, **data)

    def _start_ticking(self) -> None:
        if self._ticker is not None:
            self._ticker.start()

    def _stop_ticking(self) -> None:
        if self._ticker is not None:
            self._ticker.stop()

    def _set_warning(self, warning: TimerWarning) -> None:
        if warning != self.warning:
            self.warning = warning
            self._emit(
                EventType.TIMER_WARNING_CHANGED,
                level=warning.level.value,
                message=warning.message,
                should_pulse=warning.should_pulse,
            )

    # ─── Clock control ───────────────────────────────────────────

    def start(self) -> bool:
        """Start the clock for the first player."""
        with self._lock:
            if not self._allowed("start"):
                return False

            session = self.session
            session.is_active = True
            session.is_paused = False
            session.current_turn_start_time = self.clock.start()
            session.elapsed_at_pause = None
            self.warning = NORMAL
            self._persist()

            self._start_ticking()
            logger.info(f"Session {session.id} started")
            self._emit(EventType.SESSION_STARTED, player_id=self.current_player_id)
            return True

    def pause(self) -> bool:
        """Freeze the clock."""
        with self._lock:
            if not self._allowed("pause"):
                return False

            session = self.session
            reference = session.current_turn_start_time
            session.elapsed_at_pause = self.clock.pause(reference) if reference is not None else 0
            session.is_paused = True
            self._persist()

            logger.info(f"Session {session.id} paused at {session.elapsed_at_pause}s")
            self._emit(EventType.SESSION_PAUSED, elapsed=session.elapsed_at_pause)

        # Outside the lock: a tick waiting on it must be able to finish
        self._stop_ticking()
        return True

    def resume(self) -> bool:
        """Restart the clock from where it was paused."""
        with self._lock:
            if not self._allowed("resume"):
                return False

            session = self.session
            elapsed = session.elapsed_at_pause or 0
            session.current_turn_start_time = self.clock.resume(elapsed)
            session.elapsed_at_pause = None
            session.is_paused = False
            self._persist()

            self._start_ticking()
            logger.info(f"Session {session.id} resumed at {elapsed}s")
            self._emit(EventType.SESSION_RESUMED, elapsed=elapsed)
            return True

    def suspend(self) -> None:
        """Stop sampling the clock without touching the session (e.g. view closed)."""
        self._stop_ticking()

    def tick(self) -> TimerWarning | None:
        """
        Sample the running clock and reclassify the turn.

        Called by the ticker every interval. Does nothing unless RUNNING.
        Holds the lock throughout, so a turn change either happens before
        the sample or after the warning is set.
        """
        with self._lock:
            if self.phase != SessionPhase.RUNNING:
                return None

            warning = classify_turn(
                self.elapsed,
                self.session.completed_durations,
                min_samples=self.config["min_turn_samples"],
                grace_seconds=self.config["warning_grace_seconds"],
            )
            self._set_warning(warning)
            return warning

    # ─── Turns ───────────────────────────────────────────────────

    def advance_turn(self, save: bool = True) -> bool:
        """
        Hand the turn to the next player.

        Args:
            save: Record the current elapsed time for the current player.
                False scraps the timing but still moves on.
        """
        with self._lock:
            if not self._allowed("advance_turn"):
                return False

            session = self.session
            index = session.current_player_index
            player_id = session.player_ids[index]
            duration = self.elapsed

            if save:
                session.turns[index].append(duration)

            session.current_player_index = (index + 1) % len(session.player_ids)
            session.current_turn_start_time = self.clock.start()
            if session.is_paused:
                # Next player's clock waits at zero until resumed
                session.elapsed_at_pause = 0
            self._persist()
            self._set_warning(NORMAL)

            if save:
                logger.debug(f"Recorded {duration}s for {player_id}")
                self._emit(EventType.TURN_RECORDED, player_id=player_id, duration=duration)
            else:
                logger.debug(f"Scrapped {duration}s turn for {player_id}")
                self._emit(EventType.TURN_SCRAPPED, player_id=player_id, duration=duration)
            return True

    def scrap_turn(self) -> bool:
        """Move to the next player without recording the turn."""
        return self.advance_turn(save=False)

    # ─── Roster & notes ──────────────────────────────────────────

    def apply_player_set(self, player_ids: list[str]) -> bool:
        """
        Replace the roster mid-session.

        Recorded turns follow each player to their new position. Rosters
        under two players or with duplicates are rejected.
        """
        with self._lock:
            if not self._allowed("apply_player_set"):
                return False

            new_ids = list(player_ids)
            if len(new_ids) < MIN_PLAYERS:
                logger.warning(f"Rejected roster of {len(new_ids)} player(s); need {MIN_PLAYERS}")
                return False
            if len(set(new_ids)) != len(new_ids):
                logger.warning("Rejected roster with duplicate players")
                return False

            session = self.session
            session.turns = reproject_turns(session.player_ids, session.turns, new_ids)
            session.player_ids = new_ids
            session.current_player_index = min(session.current_player_index, len(new_ids) - 1)
            self._persist()

            logger.info(f"Session {session.id} roster is now {len(new_ids)} players")
            self._emit(EventType.ROSTER_CHANGED, player_ids=list(new_ids))
            return True

    def add_note(self, text: str, player_id: str | None = None) -> SessionNote | None:
        """Attach a timestamped note, optionally about one player."""
        with self._lock:
            if not self._allowed("add_note"):
                return None

            text = text.strip()
            if not text:
                return None

            note = SessionNote(timestamp=self.clock.now(), player_id=player_id, note=text)
            self.session.notes.append(note)
            self._persist()

            self._emit(EventType.NOTE_ADDED, note_id=note.id, player_id=player_id)
            return note

    # ─── Finalization ────────────────────────────────────────────

    def end(self) -> Session | None:
        """
        End the session and write it into every player's history.

        A running clock's in-flight turn is recorded first. Must run at
        most once per session; afterwards there is no current session
        and further calls are no-ops.

        Returns:
            The finalized Session record
        """
        with self._lock:
            session = self._finalize()
        if session is not None:
            self._stop_ticking()
        return session

    def _finalize(self) -> Session | None:
        if not self._allowed("end"):
            return None

        session = self.session

        if self.phase == SessionPhase.RUNNING and session.current_turn_start_time is not None:
            session.turns[session.current_player_index].append(self.elapsed)

        session_end = self.clock.now()
        notes = list(session.notes)

        players = self.store.get_all(EntityKind.PLAYER)
        by_id = {player.id: player for player in players}

        for player_id, durations in zip(session.player_ids, session.turns):
            player = by_id.get(player_id)
            if player is None:
                logger.warning(f"Player {player_id} no longer exists; turns not saved")
                continue

            player.record_session(GameSession(
                session_id=session.id,
                game_id=session.game_id,
                session_start=session.start_time,
                session_end=session_end,
                player_turns=[
                    PlayerTurn(duration=duration, timestamp=session_end)
                    for duration in durations
                ],
                notes=[note.model_copy() for note in notes],
            ))

        self.store.replace_all(EntityKind.PLAYER, players)

        session.is_active = False
        session.is_paused = False
        session.end_time = session_end
        session.current_turn_start_time = None
        session.elapsed_at_pause = None

        sessions = self.store.get_all(EntityKind.SESSION)
        sessions.append(session)
        self.store.replace_all(EntityKind.SESSION, sessions)

        quick_start = self.store.get_quick_start()
        quick_start.record(session.game_id, session.player_ids, session_end)
        self.store.set_quick_start(quick_start)

        self.store.set_current(None)

        total_turns = sum(len(durations) for durations in session.turns)
        logger.info(f"Session {session.id} ended with {total_turns} turns")
        self._emit(EventType.SESSION_ENDED, total_turns=total_turns, end_time=session_end)

        self._finalized = session
        self.session = None
        self.warning = NORMAL
        return session
