"""Tests for code_time.ledger: daily records, rollover and rollups."""

import json
from datetime import date, datetime

import pytest

import code_time.ledger as ledger_module
from code_time.ledger import Ledger, aggregate


def _load(tmp_path, key):
    return json.loads((tmp_path / "codetime-data" / f"{key}.json").read_text())


class TestRecordActivity:
    def test_single_delta(self, ledger):
        ledger.record_activity(90, "python", "py", "a.py")
        today = ledger.today_stats()
        assert today.total_seconds == 90
        assert today.language_seconds == {"python": 90}
        assert today.file_seconds == {"a.py": 90}
        assert today.hourly_breakdown[14] == 90
        assert sum(today.hourly_breakdown) == 90

    def test_sum_invariants(self, ledger, clock):
        ledger.record_activity(10, "python", "py", "/src/a.py")
        ledger.record_activity(25, "go", "go", "/src/main.go")
        clock.advance(hours=2)
        ledger.record_activity(7, "unknown", "unknown", "unknown")
        today = ledger.today_stats()
        assert today.total_seconds == 42
        assert sum(today.language_seconds.values()) == 42
        assert sum(today.file_seconds.values()) == 42
        assert sum(today.hourly_breakdown) == 42
        assert today.hourly_breakdown[16] == 7

    def test_file_key_is_basename(self, ledger):
        ledger.record_activity(5, "python", "py", r"C:\work\proj\util.py")
        ledger.record_activity(5, "python", "py", "/home/me/proj/util.py")
        assert ledger.today_stats().file_seconds == {"util.py": 10}

    def test_zero_is_noop(self, ledger):
        before = ledger.today_stats()
        ledger.record_activity(0, "python", "py", "a.py")
        assert ledger.today_stats() == before

    def test_negative_rejected(self, ledger):
        with pytest.raises(ValueError):
            ledger.record_activity(-1, "python", "py", "a.py")

    def test_persists_after_every_update(self, ledger, tmp_path):
        ledger.record_activity(12, "python", "py", "a.py")
        doc = _load(tmp_path, "2026-10-19")
        assert doc["totalSeconds"] == 12
        assert doc["languages"] == {"python": 12}
        assert doc["files"] == {"a.py": 12}
        assert doc["hourlyBreakdown"][14] == 12

    def test_state_survives_restart(self, tmp_path, clock):
        Ledger(tmp_path, clock=clock).record_activity(30, "python", "py", "a.py")
        reopened = Ledger(tmp_path, clock=clock)
        reopened.record_activity(15, "python", "py", "b.py")
        today = reopened.today_stats()
        assert today.total_seconds == 45
        assert today.file_seconds == {"a.py": 30, "b.py": 15}

    def test_write_failure_keeps_memory_totals(self, ledger, monkeypatch, tmp_path):
        def broken_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(ledger_module.os, "replace", broken_replace)
        ledger.record_activity(20, "python", "py", "a.py")
        assert ledger.today_stats().total_seconds == 20
        assert not list((tmp_path / "codetime-data").glob("*.tmp"))


class TestNewRecord:
    def test_created_and_persisted_on_startup(self, ledger, tmp_path):
        doc = _load(tmp_path, "2026-10-19")
        assert doc["date"] == "2026-10-19"
        assert doc["totalSeconds"] == 0
        assert doc["languages"] == {}
        assert doc["files"] == {}
        assert doc["hourlyBreakdown"] == [0] * 24
        assert doc["lastUpdated"]

    def test_today_stats_is_stable(self, ledger):
        assert ledger.today_stats() == ledger.today_stats()

    def test_snapshot_is_detached(self, ledger):
        snapshot = ledger.today_stats()
        snapshot.language_seconds["python"] = 999
        assert ledger.today_stats().language_seconds == {}

    def test_corrupt_today_falls_back_to_empty(self, tmp_path, clock):
        records = tmp_path / "codetime-data"
        records.mkdir(parents=True)
        (records / "2026-10-19.json").write_text("{not json")
        fresh = Ledger(tmp_path, clock=clock)
        today = fresh.today_stats()
        assert today.total_seconds == 0
        assert today.date == date(2026, 10, 19)

    def test_missing_fields_default(self, tmp_path, clock):
        records = tmp_path / "codetime-data"
        records.mkdir(parents=True)
        (records / "2026-10-19.json").write_text(
            json.dumps({"totalSeconds": 40, "hourlyBreakdown": [5, 5], "extra": True})
        )
        today = Ledger(tmp_path, clock=clock).today_stats()
        assert today.total_seconds == 40
        assert today.language_seconds == {}
        assert today.hourly_breakdown == [5, 5] + [0] * 22
        assert today.date == date(2026, 10, 19)

    def test_null_values_load_as_zero(self, tmp_path, clock):
        records = tmp_path / "codetime-data"
        records.mkdir(parents=True)
        hours = [None] * 24
        hours[9] = 600
        (records / "2026-10-19.json").write_text(json.dumps({
            "date": "2026-10-19",
            "totalSeconds": None,
            "languages": {"python": 600, "go": None},
            "files": {"a.py": 600},
            "hourlyBreakdown": hours,
        }))
        ledger = Ledger(tmp_path, clock=clock)
        today = ledger.today_stats()
        assert today.total_seconds == 0
        assert today.language_seconds == {"python": 600, "go": 0}
        assert today.file_seconds == {"a.py": 600}
        assert today.hourly_breakdown[9] == 600
        assert _load(tmp_path, "2026-10-19")["languages"]["python"] == 600

    def test_file_name_is_the_record_date(self, tmp_path, clock):
        records = tmp_path / "codetime-data"
        records.mkdir(parents=True)
        (records / "2026-10-19.json").write_text(
            json.dumps({"date": "2026-10-18", "totalSeconds": 30})
        )
        ledger = Ledger(tmp_path, clock=clock)
        assert ledger.today_stats().date == date(2026, 10, 19)
        ledger.record_activity(5, "python", "py", "a.py")
        assert _load(tmp_path, "2026-10-19")["date"] == "2026-10-19"


class TestRollover:
    def test_record_after_midnight_starts_new_day(self, tmp_path, clock):
        clock.now = datetime(2026, 10, 19, 23, 59, 30)
        ledger = Ledger(tmp_path, clock=clock)
        ledger.record_activity(10, "python", "py", "a.py")
        before = _load(tmp_path, "2026-10-19")

        clock.advance(minutes=1)
        ledger.record_activity(5, "python", "py", "a.py")

        assert _load(tmp_path, "2026-10-19") == before
        after = _load(tmp_path, "2026-10-20")
        assert after["totalSeconds"] == 5
        assert after["hourlyBreakdown"][0] == 5
        assert ledger.today_stats().date == date(2026, 10, 20)

    def test_today_stats_rolls_over_without_activity(self, ledger, clock, tmp_path):
        ledger.record_activity(10, "python", "py", "a.py")
        clock.advance(days=1)
        today = ledger.today_stats()
        assert today.date == date(2026, 10, 20)
        assert today.total_seconds == 0
        assert (tmp_path / "codetime-data" / "2026-10-20.json").exists()

    def test_rollover_loads_existing_record(self, ledger, clock, write_record):
        write_record("2026-10-20", total=100, hours={9: 100})
        clock.advance(days=1)
        ledger.record_activity(10, "python", "py", "a.py")
        assert ledger.today_stats().total_seconds == 110


class TestGetStats:
    def test_window_takes_most_recent_days(self, ledger, write_record):
        for day, total in [("2026-10-15", 50), ("2026-10-16", 60),
                           ("2026-10-17", 70), ("2026-10-18", 80)]:
            write_record(day, total=total, hours={10: total})
        ledger.record_activity(30, "python", "py", "a.py")

        stats = ledger.get_stats(3)
        assert [r.key for r in stats.daily_data] == ["2026-10-19", "2026-10-18", "2026-10-17"]
        assert stats.total_seconds == 30 + 80 + 70
        assert stats.total_seconds == sum(r.total_seconds for r in stats.daily_data)
        assert stats.average_per_day == pytest.approx(180 / 3)
        assert stats.languages == {"python": 180}

    def test_window_larger_than_history(self, ledger, write_record):
        write_record("2026-10-18", total=10)
        stats = ledger.get_stats(7)
        assert len(stats.daily_data) == 2

    def test_single_day(self, ledger, write_record):
        write_record("2026-10-18", total=10)
        stats = ledger.get_stats(1)
        assert [r.key for r in stats.daily_data] == ["2026-10-19"]

    def test_today_wins_ties(self, ledger, write_record):
        write_record("2026-10-18", total=100, hours={9: 100})
        ledger.record_activity(100, "python", "py", "a.py")
        stats = ledger.get_stats(7)
        assert stats.most_productive_day.key == "2026-10-19"

    def test_most_recent_history_wins_ties(self, ledger, write_record):
        write_record("2026-10-17", total=100)
        write_record("2026-10-18", total=100)
        stats = ledger.get_stats(7)
        assert stats.most_productive_day.key == "2026-10-18"

    def test_most_productive_hour_uses_summed_hours(self, ledger, write_record):
        write_record("2026-10-17", total=40, hours={9: 40})
        write_record("2026-10-18", total=30, hours={9: 30})
        ledger.record_activity(50, "python", "py", "a.py")
        stats = ledger.get_stats(7)
        assert stats.hourly_breakdown[9] == 70
        assert stats.hourly_breakdown[14] == 50
        assert stats.most_productive_hour == 9

    def test_empty_window(self, ledger):
        stats = ledger.get_stats(7)
        assert stats.total_seconds == 0
        assert stats.average_per_day == 0
        assert stats.most_productive_day is None
        assert stats.most_productive_hour is None

    def test_unreadable_file_skipped(self, ledger, write_record, tmp_path):
        write_record("2026-10-17", total=20)
        (tmp_path / "codetime-data" / "2026-10-18.json").write_text("garbage")
        stats = ledger.get_stats(7)
        assert [r.key for r in stats.daily_data] == ["2026-10-19", "2026-10-17"]
        assert stats.total_seconds == 20

    def test_null_values_keep_day_in_rollup(self, ledger, write_record):
        write_record("2026-10-18", total=40, languages={"python": None, "go": 40})
        stats = ledger.get_stats(7)
        assert [r.key for r in stats.daily_data] == ["2026-10-19", "2026-10-18"]
        assert stats.languages == {"python": 0, "go": 40}

    def test_history_keyed_by_file_name(self, ledger, write_record):
        write_record("2026-10-18", total=50, date="2026-10-19")
        ledger.record_activity(10, "python", "py", "a.py")
        stats = ledger.get_stats(7)
        assert [r.key for r in stats.daily_data] == ["2026-10-19", "2026-10-18"]
        assert stats.most_productive_day.key == "2026-10-18"

    def test_non_record_files_ignored(self, ledger, write_record, tmp_path):
        write_record("2026-10-18", total=20)
        (tmp_path / "codetime-data" / "notes.json").write_text("{}")
        stats = ledger.get_stats(7)
        assert len(stats.daily_data) == 2

    def test_days_must_be_positive(self, ledger):
        with pytest.raises(ValueError):
            ledger.get_stats(0)


class TestResetStats:
    def test_reset_then_read(self, ledger, write_record, tmp_path):
        write_record("2026-10-18", total=20)
        ledger.record_activity(30, "python", "py", "a.py")
        assert ledger.reset_stats() is True

        today = ledger.today_stats()
        assert today.date == date(2026, 10, 19)
        assert today.total_seconds == 0
        assert today.hourly_breakdown == [0] * 24
        remaining = sorted(p.name for p in (tmp_path / "codetime-data").iterdir())
        assert remaining == ["2026-10-19.json"]

    def test_reset_failure_returns_false(self, ledger, write_record, monkeypatch):
        write_record("2026-10-18", total=20)

        def broken_unlink(self, missing_ok=False):
            raise PermissionError("read-only")

        monkeypatch.setattr(ledger_module.Path, "unlink", broken_unlink)
        assert ledger.reset_stats() is False


class TestAggregate:
    def test_no_records(self):
        stats = aggregate([])
        assert stats.average_per_day == 0
        assert stats.daily_data == []
