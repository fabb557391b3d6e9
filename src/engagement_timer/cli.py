"""Command-line interface for the engagement timer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from .config import DEFAULT_CHECK_CALLBACKS_INTERVAL_MS, DEFAULT_IDLE_TIMEOUT_MS, TimerSettings
from .errors import ConfigurationError
from .paths import get_log_path

app = typer.Typer(help="Measure active engagement time reported by a web page.")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


@app.callback(no_args_is_help=True)
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs.")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind the service."),
    port: int = typer.Option(8766, "--port", min=1, max=65535, help="TCP port for the service."),
    idle_timeout_ms: float = typer.Option(
        DEFAULT_IDLE_TIMEOUT_MS,
        "--idle-timeout-ms",
        help="Milliseconds without activity before the user counts as idle.",
    ),
    tick_ms: float = typer.Option(
        DEFAULT_CHECK_CALLBACKS_INTERVAL_MS,
        "--tick-ms",
        help="Milliseconds between idle and callback checks.",
    ),
    throttle_ms: float = typer.Option(
        2000.0,
        "--throttle-ms",
        min=0.0,
        help="Minimum milliseconds between accepted activity signals.",
    ),
    log_file: bool = typer.Option(
        False,
        "--log-file/--no-log-file",
        help="Also write logs to the per-user log directory.",
    ),
    log_path: Optional[Path] = typer.Option(
        None,
        "--log-path",
        path_type=Path,
        help="Log file location (implies --log-file).",
    ),
) -> None:
    """Run the HTTP service until interrupted."""
    try:
        settings = TimerSettings(
            idle_timeout_ms=idle_timeout_ms,
            check_callbacks_interval_ms=tick_ms,
        )
    except ConfigurationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    if log_file or log_path:
        _add_file_handler(log_path or get_log_path())

    from .server_runner import run_server

    run_server(
        host=host,
        port=port,
        settings=settings,
        activity_throttle_ms=throttle_ms,
    )


def _add_file_handler(path: Path) -> None:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.getLogger().addHandler(handler)
    logging.getLogger(__name__).info("Logging to %s", path)
