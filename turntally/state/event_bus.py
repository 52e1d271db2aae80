"""
Event bus for TurnTally session changes.

Provides decoupled communication between the session state machine and
whatever is displaying it. Components subscribe to events and react
without tight coupling.

Usage:
    from .event_bus import get_event_bus, EventType

    bus = get_event_bus()
    bus.on(EventType.TIMER_WARNING_CHANGED, my_handler)

    # Emitted by SessionState on every tick that changes the level
    bus.emit(EventType.TIMER_WARNING_CHANGED, session_id=sid, level="slow")

    def my_handler(event: SessionEvent):
        print(f"Warning is now {event.data['level']}")
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Session events that can be published."""

    # Session lifecycle
    SESSION_CREATED = "session.created"
    SESSION_STARTED = "session.started"
    SESSION_PAUSED = "session.paused"
    SESSION_RESUMED = "session.resumed"
    SESSION_ENDED = "session.ended"
    SESSION_DELETED = "session.deleted"

    # Turns
    TURN_RECORDED = "turn.recorded"
    TURN_SCRAPPED = "turn.scrapped"

    # Session content
    NOTE_ADDED = "note.added"
    ROSTER_CHANGED = "roster.changed"

    # Live timer
    TIMER_WARNING_CHANGED = "timer.warning_changed"


@dataclass
class SessionEvent:
    """
    Event payload for the event bus.

    Attributes:
        type: The event type (from EventType enum)
        data: Event-specific payload as dict
        session_id: ID of the session this event belongs to
        timestamp: When the event was emitted
    """

    type: EventType
    data: dict = field(default_factory=dict)
    session_id: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"[{self.type.value}] {self.data}"


EventHandler = Callable[[SessionEvent], None]


class EventBus:
    """
    Synchronous event bus.

    Listeners are called immediately on emit(), on the emitting thread
    (the tick thread for timer warnings).
    """

    def __init__(self):
        self._listeners: dict[EventType, list[EventHandler]] = {}
        self._history: list[SessionEvent] = []
        self._history_limit = 100

    def on(self, event_type: EventType, handler: EventHandler) -> None:
        """Subscribe to an event type."""
        if event_type not in self._listeners:
            self._listeners[event_type] = []
        if handler not in self._listeners[event_type]:
            self._listeners[event_type].append(handler)

    def off(self, event_type: EventType, handler: EventHandler) -> None:
        """Unsubscribe from an event type."""
        if event_type in self._listeners and handler in self._listeners[event_type]:
            self._listeners[event_type].remove(handler)

    def emit(self, event_type: EventType, session_id: str = "", **data) -> SessionEvent:
        """
        Emit an event to all subscribers.

        Args:
            event_type: The type of event
            session_id: Session context (optional)
            **data: Event-specific data

        Returns:
            The emitted SessionEvent (for chaining/testing)
        """
        event = SessionEvent(type=event_type, data=data, session_id=session_id)

        self._history.append(event)
        if len(self._history) > self._history_limit:
            self._history = self._history[-self._history_limit :]

        for handler in list(self._listeners.get(event_type, [])):
            try:
                handler(event)
            except Exception:
                # One bad listener shouldn't break the others
                logger.exception(f"Error in handler for {event_type.value}")

        return event

    def clear(self) -> None:
        """Clear all listeners. Useful for testing."""
        self._listeners.clear()

    def get_history(self, event_type: EventType | None = None) -> list[SessionEvent]:
        """Recent events, optionally filtered by type."""
        if event_type is None:
            return list(self._history)
        return [e for e in self._history if e.type == event_type]

    def listener_count(self, event_type: EventType) -> int:
        return len(self._listeners.get(event_type, []))


_event_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """Get the process-wide event bus instance."""
    global _event_bus
    if _event_bus is None:
        _event_bus = EventBus()
    return _event_bus


def reset_event_bus() -> None:
    """Reset the process-wide event bus. Useful for testing."""
    global _event_bus
    _event_bus = None
