"""Human-readable rendering of timer state."""

from __future__ import annotations

from .models import TimerSnapshot


def format_duration(milliseconds: float) -> str:
    total_seconds = int(round(milliseconds / 1000))
    hours, remainder = divmod(total_seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def describe_snapshot(snapshot: TimerSnapshot) -> str:
    label = snapshot.state.value
    if snapshot.destroyed:
        label += " (destroyed)"
    return f"{label}: {format_duration(snapshot.elapsed_ms)} engaged"
