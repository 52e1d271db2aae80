"""Terminal reports for TurnTally."""
