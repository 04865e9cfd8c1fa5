"""Clock abstraction for time-dependent analytics.

WallClock: real wall-clock time
FixedClock: frozen time for deterministic tests and replays

Engines never call datetime.now() directly; callers pass ``now`` or a clock.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol


class IClock(Protocol):
    """Clock interface used by all time-dependent code."""

    def now(self) -> datetime:
        """Current time as timezone-aware datetime."""
        ...


class WallClock:
    """Real wall-clock time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Clock frozen at a given instant.

    Naive datetimes are interpreted as UTC.
    """

    def __init__(self, at: datetime | None = None) -> None:
        at = at or datetime(2024, 1, 1, tzinfo=timezone.utc)
        self._time = ensure_aware(at)

    def now(self) -> datetime:
        return self._time

    def set_time(self, t: datetime) -> None:
        """Move the clock to *t*."""
        self._time = ensure_aware(t)


def ensure_aware(value: datetime) -> datetime:
    """Attach UTC to a naive datetime; aware values pass through unchanged."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def resolve_now(now: datetime | None, clock: IClock | None = None) -> datetime:
    """Pick the evaluation instant: explicit ``now``, else the clock, else wall time."""
    if now is not None:
        return ensure_aware(now)
    return ensure_aware((clock or WallClock()).now())
