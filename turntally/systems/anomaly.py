"""
Live turn-duration warnings.

Scores the running turn's elapsed time against every turn completed so
far in the session and maps the z-score to a warning level:

    z < -1.5         fast
    z > 2            extremely-slow (pulses)
    1.5 < z <= 2     very-slow
    1 < z <= 1.5     slow
    otherwise        normal

Nothing is flagged until enough turns exist to compare against, or
before the turn has been running for the grace period.
"""

import math
from dataclasses import dataclass
from enum import Enum


class WarningLevel(str, Enum):
    FAST = "fast"
    NORMAL = "normal"
    SLOW = "slow"
    VERY_SLOW = "very-slow"
    EXTREMELY_SLOW = "extremely-slow"


@dataclass(frozen=True)
class TimerWarning:
    level: WarningLevel = WarningLevel.NORMAL
    message: str = ""
    should_pulse: bool = False


NORMAL = TimerWarning()

WARNINGS: dict[WarningLevel, TimerWarning] = {
    WarningLevel.FAST: TimerWarning(WarningLevel.FAST, "Lightning fast! ⚡"),
    WarningLevel.EXTREMELY_SLOW: TimerWarning(
        WarningLevel.EXTREMELY_SLOW, "Time to decide! ⏰", should_pulse=True
    ),
    WarningLevel.VERY_SLOW: TimerWarning(WarningLevel.VERY_SLOW, "Taking your time..."),
    WarningLevel.SLOW: TimerWarning(WarningLevel.SLOW, "Consider your options"),
    WarningLevel.NORMAL: NORMAL,
}

# Checked in order, first match wins
FAST_Z = -1.5
EXTREMELY_SLOW_Z = 2.0
VERY_SLOW_Z = 1.5
SLOW_Z = 1.0


def turn_z_score(current_elapsed: float, durations: list[int]) -> float:
    """Population z-score of current_elapsed. 0 when every duration is equal."""
    mean = sum(durations) / len(durations)
    variance = sum((d - mean) ** 2 for d in durations) / len(durations)
    std_dev = math.sqrt(variance)
    if std_dev == 0:
        return 0.0
    return (current_elapsed - mean) / std_dev


def classify_turn(
    current_elapsed: int,
    completed_durations: list[int],
    min_samples: int = 3,
    grace_seconds: int = 10,
) -> TimerWarning:
    """
    Classify the running turn against the session's completed turns.

    Args:
        current_elapsed: Seconds the current turn has been running
        completed_durations: Every recorded duration in the session,
            all players, excluding the turn in progress
        min_samples: Fewest completed turns needed to classify
        grace_seconds: Turns at or under this length are never flagged

    Returns:
        TimerWarning (NORMAL when classification is suppressed)
    """
    # Zero-length turns are skips, not data
    population = [d for d in completed_durations if d > 0]
    if len(population) < min_samples or current_elapsed <= grace_seconds:
        return NORMAL

    z = turn_z_score(current_elapsed, population)

    if z < FAST_Z:
        return WARNINGS[WarningLevel.FAST]
    if z > EXTREMELY_SLOW_Z:
        return WARNINGS[WarningLevel.EXTREMELY_SLOW]
    if z > VERY_SLOW_Z:
        return WARNINGS[WarningLevel.VERY_SLOW]
    if z > SLOW_Z:
        return WARNINGS[WarningLevel.SLOW]
    return NORMAL
