"""Sources of the current time."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Anything that can tell the current time."""

    def now(self) -> datetime: ...


class RealClock:
    """Clock backed by the system time."""

    def now(self) -> datetime:
        """Return the current local time, timezone-aware."""
        return datetime.now().astimezone()


@dataclass(frozen=True)
class FixedClock:
    """Clock that always reports the same instant. Useful in tests."""

    t: datetime

    def now(self) -> datetime:
        """Return the fixed instant."""
        return self.t