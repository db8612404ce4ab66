"""Timestamp source for cache staleness checks.

Staleness compares "computed at" against "modified at", so two events must
never share a timestamp even when the wall clock has coarse resolution.
``Clock.now()`` therefore never returns the same value twice.
"""

import threading
from collections.abc import Callable
from datetime import datetime, timedelta

_TICK = timedelta(microseconds=1)


class Clock:
    """Strictly increasing wall-clock timestamps."""

    def __init__(self, source: Callable[[], datetime] = datetime.now):
        self._source = source
        self._last: datetime | None = None
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            current = self._source()
            if self._last is not None and current <= self._last:
                current = self._last + _TICK
            self._last = current
            return current


# Shared by schedules and entries unless one is injected.
default_clock = Clock()
