"""Durable per-day record store for coding time."""

from __future__ import annotations

import contextlib
import copy
import datetime as dt
import logging
import os
import re
import threading
from pathlib import Path
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import HOURS_PER_DAY, AggregateStats, DailyRecord, empty_hours
from .normalization import file_key
from .paths import get_records_dir

logger = logging.getLogger(__name__)

DATE_FMT = "%Y-%m-%d"
RECORD_SUFFIX = ".json"

_RECORD_NAME_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}\.json$")


class RecordDocument(BaseModel):
    """On-disk shape of a daily record; missing fields default to zero/empty."""

    day: Optional[dt.date] = Field(default=None, alias="date")
    total_seconds: int = Field(default=0, alias="totalSeconds", ge=0)
    languages: dict[str, int] = Field(default_factory=dict)
    files: dict[str, int] = Field(default_factory=dict)
    hourly_breakdown: list[int] = Field(default_factory=empty_hours, alias="hourlyBreakdown")
    last_updated: Optional[dt.datetime] = Field(default=None, alias="lastUpdated")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("hourly_breakdown", mode="before")
    @classmethod
    def _fit_hours(cls, value: Any) -> Any:
        if value is None:
            return empty_hours()
        if isinstance(value, list):
            hours = [slot or 0 for slot in value[:HOURS_PER_DAY]]
            return hours + [0] * (HOURS_PER_DAY - len(hours))
        return value

    @field_validator("total_seconds", mode="before")
    @classmethod
    def _none_to_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("languages", "files", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, dict):
            return {key: seconds or 0 for key, seconds in value.items()}
        return value

    @classmethod
    def from_record(cls, record: DailyRecord) -> "RecordDocument":
        return cls(
            day=record.date,
            total_seconds=record.total_seconds,
            languages=dict(record.language_seconds),
            files=dict(record.file_seconds),
            hourly_breakdown=list(record.hourly_breakdown),
            last_updated=record.last_updated,
        )

    def to_record(self, day: dt.date) -> DailyRecord:
        return DailyRecord(
            date=day,
            total_seconds=self.total_seconds,
            language_seconds=dict(self.languages),
            file_seconds=dict(self.files),
            hourly_breakdown=list(self.hourly_breakdown),
            last_updated=self.last_updated,
        )


def record_payload(record: DailyRecord) -> dict[str, Any]:
    """Return the record in its persisted (camelCase) document shape."""
    return RecordDocument.from_record(record).model_dump(mode="json", by_alias=True)


class Ledger:
    """Owns one JSON document per calendar date under the storage root.

    Every public entry point first checks whether the wall-clock date moved
    past the loaded record and, if so, switches to today's record. All reads
    and writes happen under a single lock.
    """

    def __init__(
        self,
        storage_root: Path,
        *,
        clock: Callable[[], dt.datetime] = dt.datetime.now,
    ) -> None:
        self.storage_root = Path(storage_root)
        self.data_path = get_records_dir(self.storage_root)
        self._clock = clock
        self._lock = threading.RLock()
        self.data_path.mkdir(parents=True, exist_ok=True)
        self._today_key = self._current_key()
        self._today = self._load_today()

    @property
    def today_path(self) -> Path:
        return self._path_for(self._today_key)

    def record_activity(
        self,
        seconds: int,
        language: str,
        extension: str,
        file_name: str,
    ) -> None:
        """Add ``seconds`` to today's total, language, file and hour buckets."""
        if seconds < 0:
            raise ValueError(f"seconds must be non-negative, got {seconds}")
        with self._lock:
            self._ensure_current_day()
            if seconds == 0:
                return
            now = self._clock()
            record = self._today
            record.total_seconds += seconds
            record.language_seconds[language] = record.language_seconds.get(language, 0) + seconds
            key = file_key(file_name)
            record.file_seconds[key] = record.file_seconds.get(key, 0) + seconds
            record.hourly_breakdown[now.hour] += seconds
            logger.debug(
                "Recorded %ds for %s (%s, .%s) at hour %d",
                seconds,
                key,
                language,
                extension,
                now.hour,
            )
            self._save()

    def today_stats(self) -> DailyRecord:
        with self._lock:
            self._ensure_current_day()
            return copy.deepcopy(self._today)

    def get_stats(self, days: int = 30) -> AggregateStats:
        """Roll up today's record and the ``days - 1`` most recent other days."""
        if days < 1:
            raise ValueError(f"days must be at least 1, got {days}")
        with self._lock:
            self._ensure_current_day()
            daily_data = [copy.deepcopy(self._today)]
            for path in self._history_files()[: days - 1]:
                record = self._read_record(path)
                if record is not None:
                    daily_data.append(record)
        return aggregate(daily_data)

    def reset_stats(self) -> bool:
        """Delete every persisted record and start an empty one for today."""
        with self._lock:
            try:
                for path in self._data_files():
                    path.unlink()
                self._today_key = self._current_key()
                self._today = self._new_record()
            except OSError:
                logger.exception("Failed to reset stats in %s", self.data_path)
                return False
        logger.info("Reset all recorded stats in %s", self.data_path)
        return True

    def _ensure_current_day(self) -> None:
        key = self._current_key()
        if key != self._today_key:
            logger.info("Date changed from %s to %s; switching records.", self._today_key, key)
            self._today_key = key
            self._today = self._load_today()

    def _current_key(self) -> str:
        return self._clock().strftime(DATE_FMT)

    def _path_for(self, key: str) -> Path:
        return self.data_path / f"{key}{RECORD_SUFFIX}"

    def _load_today(self) -> DailyRecord:
        path = self.today_path
        if not path.exists():
            return self._new_record()
        try:
            return self._parse(path)
        except (OSError, ValueError):
            logger.exception("Failed to load %s; starting a fresh record.", path)
            return self._new_record()

    def _new_record(self) -> DailyRecord:
        record = DailyRecord(
            date=dt.datetime.strptime(self._today_key, DATE_FMT).date(),
            last_updated=self._clock(),
        )
        self._today = record
        self._save()
        return record

    def _save(self) -> None:
        record = self._today
        record.last_updated = self._clock()
        path = self.today_path
        tmp_path = path.with_suffix(".tmp")
        try:
            document = RecordDocument.from_record(record)
            tmp_path.write_text(document.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError:
            logger.exception("Failed to save %s; keeping totals in memory.", path)
            with contextlib.suppress(OSError):
                tmp_path.unlink(missing_ok=True)

    def _parse(self, path: Path) -> DailyRecord:
        text = path.read_text(encoding="utf-8")
        document = RecordDocument.model_validate_json(text)
        day = dt.datetime.strptime(path.stem, DATE_FMT).date()
        if document.day is not None and document.day != day:
            logger.warning("%s is dated %s; using %s from its name.", path, document.day, day)
        return document.to_record(day)

    def _read_record(self, path: Path) -> Optional[DailyRecord]:
        try:
            return self._parse(path)
        except (OSError, ValueError) as exc:
            logger.warning("Skipping unreadable record %s: %s", path, exc)
            return None

    def _data_files(self) -> list[Path]:
        try:
            return [
                path
                for path in self.data_path.iterdir()
                if path.is_file() and path.suffix == RECORD_SUFFIX
            ]
        except OSError:
            logger.exception("Failed to list %s", self.data_path)
            return []

    def _history_files(self) -> list[Path]:
        today_name = self.today_path.name
        return sorted(
            (
                path
                for path in self._data_files()
                if _RECORD_NAME_PATTERN.match(path.name) and path.name != today_name
            ),
            key=lambda path: path.name,
            reverse=True,
        )


def aggregate(daily_data: list[DailyRecord]) -> AggregateStats:
    """Merge records in order; earlier entries win ties."""
    stats = AggregateStats(daily_data=daily_data)
    best_day_seconds = 0
    for day in daily_data:
        stats.total_seconds += day.total_seconds
        if day.total_seconds > best_day_seconds:
            best_day_seconds = day.total_seconds
            stats.most_productive_day = day
        for language, seconds in day.language_seconds.items():
            stats.languages[language] = stats.languages.get(language, 0) + seconds
        for name, seconds in day.file_seconds.items():
            stats.files[name] = stats.files.get(name, 0) + seconds
        for hour, seconds in enumerate(day.hourly_breakdown[:HOURS_PER_DAY]):
            stats.hourly_breakdown[hour] += seconds

    best_hour_seconds = 0
    for hour, seconds in enumerate(stats.hourly_breakdown):
        if seconds > best_hour_seconds:
            best_hour_seconds = seconds
            stats.most_productive_hour = hour

    stats.average_per_day = stats.total_seconds / len(daily_data) if daily_data else 0.0
    return stats
