"""
Timing systems for TurnTally.

The clock, the live anomaly classifier, the tick producer and the
session state machine that drives them.
"""

from .clock import TurnClock, now_ms
from .anomaly import TimerWarning, WarningLevel, classify_turn
from .ticker import TurnTicker
from .session import SessionState, SessionPhase, reproject_turns

__all__ = [
    "TurnClock",
    "now_ms",
    "TimerWarning",
    "WarningLevel",
    "classify_turn",
    "TurnTicker",
    "SessionState",
    "SessionPhase",
    "reproject_turns",
]
