"""FastAPI application that exposes the tracker's events and statistics."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict

from .config import TrackerSettings
from .context import AppContext
from .ledger import record_payload
from .models import AggregateStats, FileDescriptor
from .watcher import DirectoryWatcher

logger = logging.getLogger(__name__)


class ActiveFilePayload(BaseModel):
    name: Optional[str] = None
    language: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


def create_app(
    *,
    storage_root: Optional[Path] = None,
    settings: Optional[TrackerSettings] = None,
    watch_path: Optional[Path] = None,
) -> FastAPI:
    """Instantiate the FastAPI application."""
    context = AppContext(storage_root=storage_root, settings=settings)
    resolved_settings = context.settings

    app = FastAPI(title="Code Time Tracker", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.context = context

    @app.on_event("startup")
    async def _startup() -> None:
        source = None
        if watch_path is not None:
            source = DirectoryWatcher(
                watch_path,
                interval=resolved_settings.sample_interval,
                exclude=[context.storage_root],
            )
        context.start(source)

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        context.stop()

    @app.get("/api/status")
    def status(request: Request) -> Dict[str, Any]:
        ctx: AppContext = request.app.state.context
        current = ctx.status.refresh()
        return {
            "tracking": ctx.accumulator.is_tracking,
            "text": current.text,
            "tooltip": current.tooltip,
            "storage_path": str(ctx.ledger.data_path),
            "idle_minutes": resolved_settings.idle_threshold.total_seconds() / 60.0,
        }

    @app.get("/api/today")
    def today(request: Request) -> Dict[str, Any]:
        return record_payload(request.app.state.context.ledger.today_stats())

    @app.get("/api/stats")
    def stats(
        request: Request,
        days: int = Query(
            default=30,
            ge=1,
            le=365,
            description="Number of days to roll up, today included.",
        ),
    ) -> Dict[str, Any]:
        return _stats_payload(request.app.state.context.ledger.get_stats(days))

    @app.post("/api/reset")
    def reset(request: Request) -> Dict[str, Any]:
        if not request.app.state.context.ledger.reset_stats():
            raise HTTPException(status_code=500, detail="Failed to reset stats.")
        return {"reset": True}

    @app.post("/api/events/activity")
    def activity(request: Request) -> Dict[str, Any]:
        accumulator = request.app.state.context.accumulator
        accumulator.activity()
        return {"tracking": accumulator.is_tracking}

    @app.post("/api/events/active-file")
    def active_file(payload: ActiveFilePayload, request: Request) -> Dict[str, Any]:
        accumulator = request.app.state.context.accumulator
        name = payload.name.strip() if payload.name else None
        descriptor = FileDescriptor(name=name, language=payload.language) if name else None
        accumulator.active_file_changed(descriptor)
        return {
            "tracking": accumulator.is_tracking,
            "file": name,
            "language": descriptor.language if descriptor else None,
        }

    return app


def _stats_payload(stats: AggregateStats) -> Dict[str, Any]:
    best_day = stats.most_productive_day
    best_hour = stats.most_productive_hour
    return {
        "dailyData": [record_payload(record) for record in stats.daily_data],
        "totalSeconds": stats.total_seconds,
        "languages": stats.languages,
        "files": stats.files,
        "hourlyBreakdown": stats.hourly_breakdown,
        "averagePerDay": stats.average_per_day,
        "mostProductiveDay": {
            "date": best_day.key if best_day else None,
            "seconds": best_day.total_seconds if best_day else 0,
        },
        "mostProductiveHour": {
            "hour": best_hour,
            "seconds": stats.hourly_breakdown[best_hour] if best_hour is not None else 0,
        },
    }
