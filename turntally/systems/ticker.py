"""
Background tick producer for the live turn timer.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class TurnTicker:
    """
    Calls a callback at a fixed interval on a daemon thread.

    stop() is the cancel point: the loop waits on an Event, so a stop
    takes effect immediately instead of after the current interval.
    """

    def __init__(self, callback: Callable[[], object], interval: float = 1.0, name: str = "TurnTicker"):
        self._callback = callback
        self.interval = interval
        self.name = name
        self._thread: threading.Thread | None = None
        self._stop_event: threading.Event | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> bool:
        """Start ticking. Returns False if already running."""
        if self.is_running:
            return False

        # Fresh event per run, so a loop told to stop stays stopped
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run, args=(self._stop_event,), name=self.name, daemon=True
        )
        self._thread.start()
        logger.debug(f"Started {self.name} ({self.interval}s)")
        return True

    def stop(self) -> None:
        """Stop ticking and wait for the thread to exit."""
        if not self._thread:
            return

        self._stop_event.set()
        if self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout=2)
        self._thread = None
        logger.debug(f"Stopped {self.name}")

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.interval):
            try:
                self._callback()
            except Exception:
                logger.exception(f"{self.name} callback failed")
