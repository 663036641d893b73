"""Simple reporting utilities for CLI output."""

from __future__ import annotations

from typing import Iterable

from .ledger import Ledger
from .models import AggregateStats, DailyRecord
from .status import format_status


class SummaryPrinter:
    """Render human-readable summaries in the console."""

    def __init__(self, ledger: Ledger) -> None:
        self.ledger = ledger

    def print_today(self) -> None:
        record = self.ledger.today_stats()
        print(f"Summary for {record.key}")
        print("-" * 40)
        print(f"Coded today: {format_status(record.total_seconds)}")
        if not record.total_seconds:
            print("No activity recorded today.")
            return

        print()
        _print_top("Top languages:", record.language_seconds.items())
        print()
        _print_top("Top files:", record.file_seconds.items())

    def print_stats(self, days: int) -> None:
        stats = self.ledger.get_stats(days)
        print(f"Last {len(stats.daily_data)} day(s)")
        print("-" * 40)
        print(f"Total time:      {format_duration(stats.total_seconds)}")
        print(f"Average per day: {format_duration(stats.average_per_day)}")
        print(f"Best day:        {_describe_day(stats)}")
        print(f"Best hour:       {_describe_hour(stats)}")
        if stats.languages:
            print()
            _print_top("Top languages:", stats.languages.items())
        print()
        print("Daily totals:")
        for record in stats.daily_data:
            print(f"  {record.key}  {format_duration(record.total_seconds)}")


def top_entries(items: Iterable[tuple[str, int]]) -> list[tuple[str, int]]:
    return sorted(items, key=lambda item: item[1], reverse=True)


def _print_top(title: str, items: Iterable[tuple[str, int]], limit: int = 5) -> None:
    print(title)
    for name, seconds in top_entries(items)[:limit]:
        print(f"  {name[:30]:<30} {format_duration(seconds)}")


def _describe_day(stats: AggregateStats) -> str:
    best: DailyRecord | None = stats.most_productive_day
    if best is None:
        return "-"
    return f"{best.key} ({format_duration(best.total_seconds)})"


def _describe_hour(stats: AggregateStats) -> str:
    hour = stats.most_productive_hour
    if hour is None:
        return "-"
    return f"{hour:02d}:00-{hour:02d}:59 ({format_duration(stats.hourly_breakdown[hour])})"


def format_duration(seconds: float) -> str:
    total_seconds = int(round(seconds))
    hours, remainder = divmod(total_seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"
