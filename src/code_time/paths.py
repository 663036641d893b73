"""Helpers for locating application directories."""

from __future__ import annotations

from pathlib import Path

from platformdirs import PlatformDirs


APP_NAME = "CodeTime"
APP_AUTHOR = "CodeTime"
RECORDS_DIRNAME = "codetime-data"


def get_data_dir() -> Path:
    """Return the base directory for persistent data."""
    dirs = PlatformDirs(appname=APP_NAME, appauthor=APP_AUTHOR, roaming=True)
    path = Path(dirs.user_data_path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_records_dir(root: Path) -> Path:
    return Path(root) / RECORDS_DIRNAME


def get_log_path(root: Path) -> Path:
    return Path(root) / "codetime.log"
