"""Exception types raised by the engagement timer."""

from __future__ import annotations


class EngagementTimerError(Exception):
    """Base class for errors raised by this package."""


class ConfigurationError(EngagementTimerError, ValueError):
    """Raised at construction time for invalid settings or callback entries."""


class NotFoundError(EngagementTimerError, KeyError):
    """Raised when a mark or measure name has no recorded entries."""

    def __init__(self, kind: str, name: str) -> None:
        super().__init__(name)
        self.kind = kind
        self.name = name

    def __str__(self) -> str:
        return f"No {self.kind} recorded under {self.name!r}"
