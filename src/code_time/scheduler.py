"""Cancellable periodic tasks backed by daemon threads."""

from __future__ import annotations

import logging
import threading
from datetime import timedelta
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicTask:
    """Run ``callback`` every ``interval`` until cancelled.

    ``cancel()`` waits for the worker thread, so once it returns the callback
    will not fire again.
    """

    def __init__(self, name: str, interval: timedelta, callback: Callable[[], None]) -> None:
        self.name = name
        self.interval = interval
        self._callback = callback
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run_loop, name=f"task-{self.name}", daemon=True)
        self._thread.start()
        logger.debug("[%s] started (interval=%.1fs)", self.name, self.interval.total_seconds())

    def cancel(self) -> None:
        self._stop_event.set()
        thread = self._thread
        self._thread = None
        if thread and thread.is_alive() and thread is not threading.current_thread():
            thread.join()
        logger.debug("[%s] cancelled", self.name)

    @property
    def running(self) -> bool:
        return self._thread is not None and not self._stop_event.is_set()

    def _run_loop(self) -> None:
        interval = self.interval.total_seconds()
        while not self._stop_event.wait(interval):
            try:
                self._callback()
            except Exception:
                logger.exception("[%s] periodic callback failed", self.name)
