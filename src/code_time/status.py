"""Status line shown to the host: today's coded time."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from .config import TrackerSettings
from .ledger import Ledger
from .scheduler import PeriodicTask

logger = logging.getLogger(__name__)

STATUS_TOOLTIP = "Time coded today - run `codetime stats` for details"


@dataclass(slots=True, frozen=True)
class StatusText:
    text: str
    tooltip: str


def format_status(total_seconds: int) -> str:
    hours, remainder = divmod(max(0, int(total_seconds)), 3600)
    return f"{hours}h {remainder // 60}m"


class StatusRefresher:
    """Recomputes the status line on demand and on a periodic timer."""

    def __init__(
        self,
        ledger: Ledger,
        settings: Optional[TrackerSettings] = None,
        sink: Optional[Callable[[StatusText], None]] = None,
    ) -> None:
        self.ledger = ledger
        self.settings = settings or TrackerSettings()
        self._sink = sink
        self._lock = threading.Lock()
        self._latest: Optional[StatusText] = None
        self._task: Optional[PeriodicTask] = None

    @property
    def latest(self) -> Optional[StatusText]:
        return self._latest

    def refresh(self) -> StatusText:
        today = self.ledger.today_stats()
        status = StatusText(text=format_status(today.total_seconds), tooltip=STATUS_TOOLTIP)
        with self._lock:
            self._latest = status
        if self._sink is not None:
            self._sink(status)
        return status

    def start(self) -> None:
        if self._task is not None:
            return
        self.refresh()
        self._task = PeriodicTask(
            "status-refresh", self.settings.status_refresh_interval, self.refresh
        )
        self._task.start()

    def stop(self) -> None:
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
