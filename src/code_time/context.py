"""Process-wide wiring of the ledger, accumulator and status refresher."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from .accumulator import Accumulator, EventSource
from .config import TrackerSettings
from .ledger import Ledger
from .paths import get_data_dir
from .status import StatusRefresher, StatusText

logger = logging.getLogger(__name__)


class AppContext:
    """Built once at startup and handed to whatever needs the tracker."""

    def __init__(
        self,
        storage_root: Optional[Path] = None,
        settings: Optional[TrackerSettings] = None,
        *,
        status_sink: Optional[Callable[[StatusText], None]] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.storage_root = Path(storage_root or get_data_dir())
        self.settings = settings or TrackerSettings()
        self.ledger = Ledger(self.storage_root, clock=clock)
        self.accumulator = Accumulator(self.ledger, self.settings, clock=clock)
        self.status = StatusRefresher(self.ledger, self.settings, sink=status_sink)

    def start(self, source: Optional[EventSource] = None) -> None:
        self.accumulator.start(source)
        self.status.start()
        logger.info("Code time tracker started; records in %s", self.ledger.data_path)

    def stop(self) -> None:
        self.status.stop()
        self.accumulator.stop()

    def __enter__(self) -> "AppContext":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
