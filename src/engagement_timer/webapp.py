"""FastAPI application that lets a web page report engagement signals to a timer."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict

from .accumulator import Clock
from .config import TimerSettings
from .engine import EngagementTimer
from .errors import NotFoundError
from .reporting import describe_snapshot
from .signals import PeriodicTicker, Throttle

logger = logging.getLogger(__name__)

DEFAULT_ACTIVITY_THROTTLE_MS = 2000


class VisibilityPayload(BaseModel):
    visible: bool

    model_config = ConfigDict(extra="forbid")


class MeasurePayload(BaseModel):
    name: str
    start_mark: str
    end_mark: str

    model_config = ConfigDict(extra="forbid")


def create_app(
    settings: Optional[TimerSettings] = None,
    *,
    clock: Optional[Clock] = None,
    auto_tick: bool = True,
    activity_throttle_ms: float = DEFAULT_ACTIVITY_THROTTLE_MS,
) -> FastAPI:
    """Instantiate the FastAPI application around a single timer."""
    resolved_settings = settings or TimerSettings()
    timer = EngagementTimer(resolved_settings, clock=clock)
    throttled_activity = Throttle(timer.activity, window_ms=activity_throttle_ms, clock=clock)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if auto_tick:
            timer.attach(PeriodicTicker())
        logger.info(
            "Engagement timer serving; idle timeout %.0fms, tick %.0fms.",
            resolved_settings.idle_timeout_ms,
            resolved_settings.check_callbacks_interval_ms,
        )
        try:
            yield
        finally:
            timer.destroy()

    app = FastAPI(title="Engagement Timer", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.timer = timer

    @app.get("/api/status")
    def status() -> Dict[str, Any]:
        snapshot = timer.snapshot()
        return {
            "state": snapshot.state.value,
            "active": snapshot.is_active,
            "elapsed_ms": snapshot.elapsed_ms,
            "idle_ms": snapshot.idle_ms,
            "destroyed": snapshot.destroyed,
            "summary": describe_snapshot(snapshot),
            "idle_timeout_ms": resolved_settings.idle_timeout_ms,
            "check_callbacks_interval_ms": resolved_settings.check_callbacks_interval_ms,
        }

    @app.post("/api/activity")
    def activity() -> Dict[str, Any]:
        accepted = throttled_activity()
        return {"accepted": accepted, "state": timer.state.value}

    @app.post("/api/visibility")
    def visibility(payload: VisibilityPayload) -> Dict[str, Any]:
        if payload.visible:
            timer.tab_active()
        else:
            timer.tab_inactive()
        return {"state": timer.state.value, "elapsed_ms": timer.elapsed_ms()}

    @app.post("/api/reset")
    def reset() -> Dict[str, Any]:
        timer.reset()
        return {"state": timer.state.value, "elapsed_ms": timer.elapsed_ms()}

    @app.get("/api/marks")
    def list_marks() -> Dict[str, Any]:
        return {"marks": timer.mark_names(), "measures": timer.measure_names()}

    @app.post("/api/marks/{name}")
    def create_mark(name: str) -> Dict[str, Any]:
        mark = timer.mark(name)
        return {"name": name, "time": mark.time}

    @app.get("/api/marks/{name}")
    def get_marks(name: str) -> Dict[str, Any]:
        try:
            marks = timer.get_marks(name)
        except NotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return {"name": name, "marks": [asdict(mark) for mark in marks]}

    @app.post("/api/measures")
    def create_measure(payload: MeasurePayload) -> Dict[str, Any]:
        name = payload.name.strip()
        if not name:
            raise HTTPException(status_code=400, detail="name is required")
        try:
            measure = timer.measure(name, payload.start_mark, payload.end_mark)
        except NotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return asdict(measure)

    @app.get("/api/measures/{name}")
    def get_measures(name: str) -> Dict[str, Any]:
        try:
            measures = timer.get_measures(name)
        except NotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return {"name": name, "measures": [asdict(measure) for measure in measures]}

    return app
