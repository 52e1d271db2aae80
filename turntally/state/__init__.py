"""State management for TurnTally sessions."""

from .schema import (
    Game,
    Player,
    PlayerGameStats,
    GameSession,
    PlayerTurn,
    SessionNote,
    Session,
    LeaderboardEntry,
    QuickStartData,
)
from .store import EntityKind, PersistenceStore, JsonStore, MemoryStore
from .event_bus import (
    EventBus,
    EventType,
    SessionEvent,
    get_event_bus,
    reset_event_bus,
)
from .manager import SessionManager, SessionRecord

__all__ = [
    # Schema
    "Game",
    "Player",
    "PlayerGameStats",
    "GameSession",
    "PlayerTurn",
    "SessionNote",
    "Session",
    "LeaderboardEntry",
    "QuickStartData",
    # Store
    "EntityKind",
    "PersistenceStore",
    "JsonStore",
    "MemoryStore",
    # Event Bus
    "EventBus",
    "EventType",
    "SessionEvent",
    "get_event_bus",
    "reset_event_bus",
    # Manager
    "SessionManager",
    "SessionRecord",
]
