"""Polling directory watcher that acts as an editor host.

Modification times under a project directory are sampled on a fixed interval.
The most recently modified file among the changed ones is treated as the
active file: switching to a different file reports ``active_file_changed``,
further writes to the same file report ``activity``.
"""

from __future__ import annotations

import logging
import os
import threading
from datetime import timedelta
from pathlib import Path
from typing import Callable, Iterable, Optional

from .accumulator import ActivityCallback, FileChangedCallback
from .models import FileDescriptor
from .normalization import describe_file
from .scheduler import PeriodicTask

logger = logging.getLogger(__name__)

IGNORED_DIRS = frozenset({
    "__pycache__",
    "node_modules",
    "venv",
    "build",
    "dist",
    "target",
})


class DirectoryWatcher:
    """Event source reporting edits below ``root``."""

    def __init__(
        self,
        root: Path,
        interval: timedelta = timedelta(seconds=2),
        exclude: Iterable[Path] = (),
    ) -> None:
        self.root = Path(root).resolve()
        self.interval = interval
        self._exclude = {Path(path).resolve() for path in exclude}
        self._lock = threading.Lock()
        self._mtimes: dict[str, int] = {}
        self._active: Optional[FileDescriptor] = None
        self._on_activity: Optional[ActivityCallback] = None
        self._on_file_changed: Optional[FileChangedCallback] = None
        self._task: Optional[PeriodicTask] = None

    def active_file(self) -> Optional[FileDescriptor]:
        with self._lock:
            return self._active

    def subscribe(
        self, on_activity: ActivityCallback, on_active_file_changed: FileChangedCallback
    ) -> Callable[[], None]:
        with self._lock:
            self._on_activity = on_activity
            self._on_file_changed = on_active_file_changed
            self._mtimes = self.scan()
        self._task = PeriodicTask(f"watch-{self.root.name}", self.interval, self.poll)
        self._task.start()
        logger.info("Watching %s (%d files)", self.root, len(self._mtimes))
        return self._unsubscribe

    def scan(self) -> dict[str, int]:
        """Return ``{path: mtime_ns}`` for every tracked file below the root."""
        mtimes: dict[str, int] = {}
        for dirpath, dirnames, filenames in os.walk(self.root):
            current = Path(dirpath)
            dirnames[:] = [
                name
                for name in dirnames
                if not name.startswith(".")
                and name not in IGNORED_DIRS
                and (current / name).resolve() not in self._exclude
            ]
            for name in filenames:
                if name.startswith("."):
                    continue
                path = current / name
                try:
                    mtimes[str(path)] = path.stat().st_mtime_ns
                except OSError:
                    continue
        return mtimes

    def poll(self) -> None:
        snapshot = self.scan()
        with self._lock:
            changed = [
                path
                for path, mtime in snapshot.items()
                if self._mtimes.get(path) != mtime
            ]
            self._mtimes = snapshot
            if not changed:
                return
            latest = max(changed, key=lambda path: snapshot[path])
            switched = self._active is None or self._active.name != latest
            if switched:
                self._active = describe_file(latest)
            active = self._active
            on_activity = self._on_activity
            on_file_changed = self._on_file_changed

        if switched:
            logger.debug("Active file is now %s", latest)
            if on_file_changed is not None:
                on_file_changed(active)
        elif on_activity is not None:
            on_activity()

    def _unsubscribe(self) -> None:
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
        with self._lock:
            self._on_activity = None
            self._on_file_changed = None
        logger.info("Stopped watching %s", self.root)
