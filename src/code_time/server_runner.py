"""Helpers to launch the local HTTP API."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import uvicorn

from .config import TrackerSettings
from .webapp import create_app


def run_dashboard(
    *,
    host: str = "127.0.0.1",
    port: int = 8765,
    storage_root: Optional[Path] = None,
    settings: Optional[TrackerSettings] = None,
    watch_path: Optional[Path] = None,
    log_level: str = "info",
) -> None:
    """Serve the FastAPI app until interrupted."""
    app = create_app(
        storage_root=storage_root,
        settings=settings or TrackerSettings(),
        watch_path=watch_path,
    )
    logging.getLogger("uvicorn.error").setLevel(log_level.upper())
    uvicorn.run(app, host=host, port=port, log_level=log_level)
