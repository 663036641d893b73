"""Shared fixtures: a controllable clock and a ledger rooted in tmp_path."""

import json
from datetime import datetime, timedelta

import pytest

from code_time.ledger import Ledger


class FakeClock:
    """Callable clock whose time only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 10, 19, 14, 0, 0))


@pytest.fixture
def ledger(tmp_path, clock):
    return Ledger(tmp_path, clock=clock)


@pytest.fixture
def write_record(tmp_path):
    """Write a raw daily document into the records directory."""
    def _write(key: str, total: int = 0, hours: dict | None = None, **extra) -> None:
        breakdown = [0] * 24
        for hour, seconds in (hours or {}).items():
            breakdown[hour] = seconds
        document = {
            "date": key,
            "totalSeconds": total,
            "languages": {"python": total} if total else {},
            "files": {"a.py": total} if total else {},
            "hourlyBreakdown": breakdown,
            "lastUpdated": f"{key}T12:00:00",
        }
        document.update(extra)
        records = tmp_path / "codetime-data"
        records.mkdir(parents=True, exist_ok=True)
        (records / f"{key}.json").write_text(json.dumps(document))
    return _write
