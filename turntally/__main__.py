"""
Run the TurnTally CLI.

Usage:
    python -m turntally leaderboard
"""

import sys

from .interface.cli import main

if __name__ == "__main__":
    sys.exit(main())
