"""
In-memory ride recordings.

A SampleSeries is what a loader produces: ordered samples taken every
``rec_int_secs`` seconds, plus the ride's start time.  Editing code calls
``mark_modified()``/``mark_saved()``/``mark_reverted()``; listeners (normally
the owning RideEntry) are told about each transition.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from ridebook.core.exceptions import RideLoadError


class SeriesState(StrEnum):
    MODIFIED = "modified"
    SAVED = "saved"
    REVERTED = "reverted"


@dataclass
class Sample:
    """One reading.  ``watts``/``hr`` are None (or negative) when not recorded."""

    secs: float
    watts: float | None = None
    hr: float | None = None


SeriesListener = Callable[["SampleSeries", SeriesState], None]


class SampleSeries:
    """Ordered samples recorded at a fixed interval."""

    def __init__(
        self,
        samples: Iterable[Sample],
        rec_int_secs: float,
        start_time: datetime,
        *,
        source: str | None = None,
    ):
        if not (math.isfinite(rec_int_secs) and rec_int_secs > 0):
            raise RideLoadError(f"Recording interval must be a positive number, got {rec_int_secs}", path=source)
        self.samples: list[Sample] = list(samples)
        self.rec_int_secs = float(rec_int_secs)
        self.start_time = start_time
        self.source = source
        self._listeners: list[SeriesListener] = []

    def __len__(self) -> int:
        return len(self.samples)

    @property
    def duration_secs(self) -> float:
        return len(self.samples) * self.rec_int_secs

    def set_start_time(self, start_time: datetime) -> None:
        self.start_time = start_time
        self.mark_modified()

    # ── state notifications ─────────────────────────────────────────

    def add_listener(self, listener: SeriesListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: SeriesListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def mark_modified(self) -> None:
        self._notify(SeriesState.MODIFIED)

    def mark_saved(self) -> None:
        self._notify(SeriesState.SAVED)

    def mark_reverted(self) -> None:
        self._notify(SeriesState.REVERTED)

    def _notify(self, state: SeriesState) -> None:
        for listener in list(self._listeners):
            listener(self, state)
