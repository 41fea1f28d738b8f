"""Time source for the booking lifecycle.

Every time-driven rule is a function of ``now``. Request handlers resolve a
``Clock`` once through :func:`get_clock` and pass the instant down, so tests
can swap in a :class:`FixedClock` through ``app.dependency_overrides``.
"""

from datetime import UTC, datetime, timedelta
from typing import Protocol

from app.utils.datetime_utils import ensure_utc


class Clock(Protocol):
    """Anything that can tell the current UTC time."""

    def now(self) -> datetime: ...


class SystemClock:
    """Wall-clock time."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class FixedClock:
    """A clock that only moves when told to."""

    def __init__(self, current: datetime) -> None:
        self._current = ensure_utc(current)

    def now(self) -> datetime:
        return self._current

    def set(self, current: datetime) -> None:
        self._current = ensure_utc(current)

    def advance(self, delta: timedelta) -> datetime:
        self._current = self._current + delta
        return self._current


system_clock = SystemClock()


def get_clock() -> Clock:
    """FastAPI dependency returning the process clock."""
    return system_clock
