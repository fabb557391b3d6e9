"""Helpers to launch the engagement HTTP service."""

from __future__ import annotations

import logging
from typing import Optional

import uvicorn

from .config import TimerSettings
from .webapp import DEFAULT_ACTIVITY_THROTTLE_MS, create_app


def run_server(
    *,
    host: str = "127.0.0.1",
    port: int = 8766,
    settings: Optional[TimerSettings] = None,
    activity_throttle_ms: float = DEFAULT_ACTIVITY_THROTTLE_MS,
    log_level: str = "info",
) -> None:
    """Start the FastAPI service with a ticking timer until interrupted."""
    app = create_app(
        settings=settings or TimerSettings(),
        activity_throttle_ms=activity_throttle_ms,
    )
    logging.getLogger("uvicorn.error").setLevel(log_level.upper())
    uvicorn.run(app, host=host, port=port, log_level=log_level)
