"""Idle-aware session tracking that turns host events into recorded time."""

from __future__ import annotations

import logging
import math
import threading
from datetime import datetime
from typing import Callable, Optional, Protocol

from .config import TrackerSettings
from .ledger import Ledger
from .models import UNKNOWN, CurrentFile, FileDescriptor, SessionState
from .scheduler import PeriodicTask

logger = logging.getLogger(__name__)

ActivityCallback = Callable[[], None]
FileChangedCallback = Callable[[Optional[FileDescriptor]], None]


class EventSource(Protocol):
    """A host that reports edits and active-file switches."""

    def subscribe(
        self, on_activity: ActivityCallback, on_active_file_changed: FileChangedCallback
    ) -> Callable[[], None]:
        """Register callbacks and return a function that unregisters them."""

    def active_file(self) -> Optional[FileDescriptor]:
        """Return the file the host currently considers active, if any."""


class Accumulator:
    """Converts ``activity`` and ``active_file_changed`` events into deltas.

    Gaps of at least ``settings.idle_threshold`` are never counted. A periodic
    idle sweep resets the activity clock while the user is away, so the gap is
    not charged once activity resumes.
    """

    def __init__(
        self,
        ledger: Ledger,
        settings: Optional[TrackerSettings] = None,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.ledger = ledger
        self.settings = settings or TrackerSettings()
        self._clock = clock
        self._lock = threading.Lock()
        self._state = SessionState()
        self._unsubscribers: list[Callable[[], None]] = []
        self._idle_task: Optional[PeriodicTask] = None

    @property
    def is_tracking(self) -> bool:
        return self._state.is_tracking

    @property
    def state(self) -> SessionState:
        return self._state

    def start(self, source: Optional[EventSource] = None) -> None:
        with self._lock:
            if self._state.is_tracking:
                return
            self._state = SessionState(is_tracking=True, last_activity_at=self._clock())

        if source is not None:
            self._unsubscribers.append(
                source.subscribe(self.activity, self.active_file_changed)
            )
            current = source.active_file()
            if current is not None:
                self.active_file_changed(current)

        self._idle_task = PeriodicTask(
            "idle-sweep", self.settings.idle_check_interval, self.check_idle
        )
        self._idle_task.start()
        logger.info(
            "Tracking started (idle threshold %.0fs).",
            self.settings.idle_threshold.total_seconds(),
        )

    def stop(self) -> None:
        with self._lock:
            if not self._state.is_tracking:
                return
            self._state.is_tracking = False
            unsubscribers, self._unsubscribers = self._unsubscribers, []
            idle_task, self._idle_task = self._idle_task, None

        for unsubscribe in unsubscribers:
            try:
                unsubscribe()
            except Exception:
                logger.exception("Failed to release event subscription.")
        if idle_task is not None:
            idle_task.cancel()

        with self._lock:
            self._state = SessionState()
        logger.info("Tracking stopped.")

    def active_file_changed(self, file: Optional[FileDescriptor]) -> None:
        """Switch the active file, then flush like :meth:`activity`.

        The file is replaced before the flush, so the interval that elapsed
        before the switch is credited to the newly active file.
        """
        with self._lock:
            if not self._state.is_tracking:
                return
            if file is None:
                self._state.current_file = None
                return
            self._state.current_file = CurrentFile.from_descriptor(file)
            self._flush_locked()

    def activity(self) -> None:
        with self._lock:
            if not self._state.is_tracking:
                return
            self._flush_locked()

    def check_idle(self) -> None:
        with self._lock:
            last = self._state.last_activity_at
            if last is None:
                return
            now = self._clock()
            if now - last >= self.settings.idle_threshold:
                logger.debug("Idle since %s; resetting activity clock.", last)
                self._state.last_activity_at = now

    def _flush_locked(self) -> None:
        now = self._clock()
        last = self._state.last_activity_at
        current = self._state.current_file
        if last is not None and current is not None:
            elapsed = now - last
            if elapsed < self.settings.idle_threshold:
                seconds = math.floor(elapsed.total_seconds())
                if seconds > 0:
                    try:
                        self.ledger.record_activity(
                            seconds,
                            current.language or UNKNOWN,
                            current.extension or UNKNOWN,
                            current.name or UNKNOWN,
                        )
                    except Exception:
                        logger.exception("Failed to record %ds of activity.", seconds)
        self._state.last_activity_at = now
