"""Clock abstractions.

The lifecycle engine reads "now" through a clock so tests can pin or
fast-forward time. All values are timezone-aware UTC datetimes.
"""

import threading
from datetime import datetime, timedelta, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Normalise a datetime to aware UTC; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SystemClock:
    """Wall clock."""

    def now(self) -> datetime:
        return utc_now()


class FixedClock:
    """Manually controlled clock.

    Starts at a fixed instant and only moves when advanced.

    Args:
        start: Initial instant (defaults to the current wall-clock time)
    """

    def __init__(self, start: Optional[datetime] = None) -> None:
        self._lock = threading.RLock()
        self._now = ensure_utc(start) if start else utc_now()

    def now(self) -> datetime:
        with self._lock:
            return self._now

    def set(self, instant: datetime) -> None:
        """Jump to a specific instant."""
        with self._lock:
            self._now = ensure_utc(instant)

    def advance(self, days: int = 0, hours: int = 0, minutes: int = 0) -> datetime:
        """Move the clock forward.

        Raises:
            ValueError: if any value is negative
        """
        if days < 0 or hours < 0 or minutes < 0:
            raise ValueError("Cannot advance time backwards, negative values are not allowed.")
        with self._lock:
            self._now += timedelta(days=days, hours=hours, minutes=minutes)
            return self._now
