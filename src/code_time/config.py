"""Configuration models and helpers for the code time tracker."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta


@dataclass(slots=True)
class TrackerSettings:
    """Runtime configuration for the accumulator and its periodic tasks."""

    idle_threshold: timedelta = timedelta(minutes=5)
    idle_check_interval: timedelta = timedelta(seconds=30)
    status_refresh_interval: timedelta = timedelta(seconds=60)
    sample_interval: timedelta = timedelta(seconds=2)

    @classmethod
    def from_intervals(
        cls,
        idle_minutes: float,
        sample_seconds: float | None = None,
        idle_check_seconds: float | None = None,
        status_refresh_seconds: float | None = None,
    ) -> "TrackerSettings":
        idle_check = (
            idle_check_seconds
            if idle_check_seconds is not None
            else min(30.0, idle_minutes * 60.0 / 2)
        )
        return cls(
            idle_threshold=timedelta(minutes=idle_minutes),
            idle_check_interval=timedelta(seconds=idle_check),
            status_refresh_interval=timedelta(
                seconds=status_refresh_seconds if status_refresh_seconds is not None else 60.0
            ),
            sample_interval=timedelta(
                seconds=sample_seconds if sample_seconds is not None else 2.0
            ),
        )
