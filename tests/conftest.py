"""
Pytest fixtures for TurnTally tests.

Provides in-memory stores, a hand-driven clock and seeded entities.
"""

import pytest

from turntally.state import (
    EventBus,
    EntityKind,
    Game,
    MemoryStore,
    Player,
    SessionManager,
)
from turntally.systems import SessionState

# 2026-01-01T00:00:00Z
T0 = 1_767_225_600_000


class FakeClock:
    """Epoch-ms clock that only moves when told to."""

    def __init__(self, start: int = T0):
        self.ms = start

    def __call__(self) -> int:
        return self.ms

    def advance(self, seconds: float) -> None:
        self.ms += int(seconds * 1000)


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def bus():
    """Isolated event bus."""
    return EventBus()


@pytest.fixture
def memory_store():
    """In-memory store for testing."""
    return MemoryStore()


@pytest.fixture
def seeded_store(memory_store):
    """Store with one game and three players."""
    memory_store.replace_all(EntityKind.GAME, [
        Game(id="catan", title="Catan", avatar="🐑"),
        Game(id="azul", title="Azul"),
    ])
    memory_store.replace_all(EntityKind.PLAYER, [
        Player(id="ana", name="Ana"),
        Player(id="ben", name="Ben"),
        Player(id="cy", name="Cy"),
    ])
    return memory_store


@pytest.fixture
def manager(seeded_store, fake_clock, bus):
    """Session manager over the seeded store."""
    return SessionManager(seeded_store, clock=fake_clock, bus=bus)


@pytest.fixture
def session_state(manager):
    """Ana and Ben set up to play Catan, clock not started, no ticker thread."""
    manager.create_session("catan", ["ana", "ben"])
    return manager.open_session(use_ticker=False)


def play_turns(state: SessionState, clock: FakeClock, durations: list[int]) -> None:
    """Run one recorded turn per duration, rotating players as the table would."""
    for seconds in durations:
        clock.advance(seconds)
        state.advance_turn()
