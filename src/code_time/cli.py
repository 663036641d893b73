"""Command-line interface for the code time tracker."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

import typer

from .config import TrackerSettings
from .paths import get_data_dir, get_log_path

app = typer.Typer(help="Measure how much time you spend editing code.")

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

DATA_DIR_HELP = "Storage root for daily records."


@app.callback(no_args_is_help=True)
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs.")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )


@app.command()
def watch(
    path: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=False,
        dir_okay=True,
        help="Project directory to watch for edits.",
    ),
    data_dir: Optional[Path] = typer.Option(None, "--data-dir", path_type=Path, help=DATA_DIR_HELP),
    idle_minutes: float = typer.Option(
        5.0,
        "--idle-threshold",
        min=0.5,
        help="Minutes without edits before time stops counting.",
    ),
    sample_seconds: float = typer.Option(
        2.0,
        "--interval",
        min=0.5,
        help="Seconds between directory scans.",
    ),
) -> None:
    """Track coding time in a directory until interrupted."""
    from .context import AppContext
    from .watcher import DirectoryWatcher

    root = data_dir or get_data_dir()
    root.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(get_log_path(root), encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.getLogger().addHandler(file_handler)

    settings = TrackerSettings.from_intervals(
        idle_minutes=idle_minutes, sample_seconds=sample_seconds
    )
    context = AppContext(
        storage_root=root,
        settings=settings,
        status_sink=lambda status: logger.info("Coded today: %s", status.text),
    )
    watcher = DirectoryWatcher(
        path, interval=settings.sample_interval, exclude=[root]
    )
    stop_event = threading.Event()
    context.start(watcher)
    try:
        while not stop_event.wait(1.0):
            pass
    except KeyboardInterrupt:
        logger.info("Interrupted; stopping tracker.")
    finally:
        context.stop()
        logging.getLogger().removeHandler(file_handler)
        file_handler.close()


@app.command()
def today(
    data_dir: Optional[Path] = typer.Option(None, "--data-dir", path_type=Path, help=DATA_DIR_HELP),
) -> None:
    """Print today's coding summary."""
    from .ledger import Ledger
    from .reporting import SummaryPrinter

    SummaryPrinter(Ledger(data_dir or get_data_dir())).print_today()


@app.command()
def stats(
    days: int = typer.Option(7, "--days", min=1, max=365, help="Days to include, today first."),
    data_dir: Optional[Path] = typer.Option(None, "--data-dir", path_type=Path, help=DATA_DIR_HELP),
) -> None:
    """Print statistics rolled up over recent days."""
    from .ledger import Ledger
    from .reporting import SummaryPrinter

    SummaryPrinter(Ledger(data_dir or get_data_dir())).print_stats(days)


@app.command()
def reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
    data_dir: Optional[Path] = typer.Option(None, "--data-dir", path_type=Path, help=DATA_DIR_HELP),
) -> None:
    """Delete every recorded day."""
    from .ledger import Ledger

    if not yes:
        typer.confirm("Delete all recorded coding time?", abort=True)
    if not Ledger(data_dir or get_data_dir()).reset_stats():
        typer.echo("Failed to reset stats.", err=True)
        raise typer.Exit(code=1)
    typer.echo("All stats have been reset.")


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind the dashboard."),
    port: int = typer.Option(
        8765, "--port", min=1, max=65535, help="TCP port for the dashboard."
    ),
    watch_path: Optional[Path] = typer.Option(
        None,
        "--watch",
        path_type=Path,
        exists=True,
        file_okay=False,
        help="Also track edits in this directory.",
    ),
    data_dir: Optional[Path] = typer.Option(None, "--data-dir", path_type=Path, help=DATA_DIR_HELP),
    idle_minutes: float = typer.Option(
        5.0,
        "--idle-threshold",
        min=0.5,
        help="Minutes without edits before time stops counting.",
    ),
) -> None:
    """Start the HTTP API that editors report events to."""
    from .server_runner import run_dashboard

    run_dashboard(
        host=host,
        port=port,
        storage_root=data_dir or get_data_dir(),
        settings=TrackerSettings.from_intervals(idle_minutes=idle_minutes),
        watch_path=watch_path,
    )
