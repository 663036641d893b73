"""Domain models for recorded coding time."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

HOURS_PER_DAY = 24
UNKNOWN = "unknown"


def empty_hours() -> list[int]:
    return [0] * HOURS_PER_DAY


@dataclass(slots=True)
class FileDescriptor:
    """A file reported by the host as the active one."""

    name: str
    language: Optional[str] = None

    @property
    def extension(self) -> Optional[str]:
        basename = self.name.replace("\\", "/").rsplit("/", 1)[-1]
        if "." not in basename:
            return None
        return basename.rsplit(".", 1)[-1] or None


@dataclass(slots=True, frozen=True)
class CurrentFile:
    name: Optional[str]
    language: Optional[str]
    extension: Optional[str]

    @classmethod
    def from_descriptor(cls, descriptor: FileDescriptor) -> "CurrentFile":
        return cls(
            name=descriptor.name or None,
            language=descriptor.language or None,
            extension=descriptor.extension,
        )


@dataclass(slots=True)
class SessionState:
    """In-memory tracking state; never persisted."""

    is_tracking: bool = False
    last_activity_at: Optional[datetime] = None
    current_file: Optional[CurrentFile] = None


@dataclass(slots=True)
class DailyRecord:
    """Time recorded for a single calendar date.

    ``language_seconds``, ``file_seconds`` and ``hourly_breakdown`` each sum to
    ``total_seconds`` for records produced by the ledger.
    """

    date: date
    total_seconds: int = 0
    language_seconds: dict[str, int] = field(default_factory=dict)
    file_seconds: dict[str, int] = field(default_factory=dict)
    hourly_breakdown: list[int] = field(default_factory=empty_hours)
    last_updated: Optional[datetime] = None

    @property
    def key(self) -> str:
        return self.date.strftime("%Y-%m-%d")


@dataclass(slots=True)
class AggregateStats:
    """Rollup of several daily records; derived, never persisted."""

    daily_data: list[DailyRecord] = field(default_factory=list)
    total_seconds: int = 0
    languages: dict[str, int] = field(default_factory=dict)
    files: dict[str, int] = field(default_factory=dict)
    hourly_breakdown: list[int] = field(default_factory=empty_hours)
    average_per_day: float = 0.0
    most_productive_day: Optional[DailyRecord] = None
    most_productive_hour: Optional[int] = None
