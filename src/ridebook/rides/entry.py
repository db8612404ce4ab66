"""
RideEntry: one recorded ride and its cached analytics.

An entry is cheap to create: it only knows where its file lives and when the
ride started.  The recording is parsed the first time something needs it and
can be dropped again with ``free_memory()``.  Time-in-zone totals and metric
values are computed together by ``compute_metrics()`` and reused until one of
the zone schedules changes after the last computation.

The zone schedules and registries are shared with every other entry in a
collection; an entry reads them but never modifies them.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any

from loguru import logger

from ridebook.core.clock import Clock, default_clock
from ridebook.core.events import (
    RIDE_CLEAN,
    RIDE_DIRTY,
    RIDE_LOADED,
    RIDE_METRICS_COMPUTED,
    RIDE_UPDATED,
    Event,
    EventBus,
)
from ridebook.core.exceptions import MetricError, RideLoadError, ZoneIndexError
from ridebook.metrics.registry import MetricRegistry
from ridebook.zones.models import NO_ZONE
from ridebook.zones.schedule import ZoneSchedule

from .registry import LoaderRegistry
from .series import SampleSeries, SeriesState


class RideEntry:
    """A listed ride with a lazily loaded recording and cached zone/metric results."""

    def __init__(
        self,
        path: str | Path,
        file_name: str,
        start_time: datetime,
        zones: ZoneSchedule,
        hr_zones: ZoneSchedule,
        *,
        loaders: LoaderRegistry | None = None,
        metrics: MetricRegistry | None = None,
        notes_file_name: str | None = None,
        bus: EventBus | None = None,
        clock: Clock | None = None,
    ):
        self.path = Path(path)
        self.file_name = file_name
        self.start_time = start_time
        self.notes_file_name = notes_file_name
        self.zones = zones
        self.hr_zones = hr_zones
        self.loaders = loaders or LoaderRegistry.with_builtins()
        self.metric_registry = metrics or MetricRegistry.with_builtins()
        self.bus = bus
        self.errors: list[str] = []
        self.computed_at: datetime | None = None

        self._clock = clock or default_clock
        self._ride: SampleSeries | None = None
        self._dirty = False
        self._time_in_zone: list[float] = []
        self._time_in_hr_zone: list[float] = []
        self._metrics: dict[str, float] = {}
        # Guards the check-then-recompute sequence. Events raised while it is
        # held are queued and emitted once the outermost holder releases it.
        self._lock = threading.RLock()
        self._lock_depth = 0
        self._pending_events: list[Event] = []

    def __repr__(self) -> str:
        return f"<RideEntry {self.file_name} {self.start_time:%Y-%m-%d %H:%M}>"

    @property
    def full_path(self) -> Path:
        return self.path / self.file_name

    @property
    def is_loaded(self) -> bool:
        return self._ride is not None

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    # ── recording access ─────────────────────────────────────────────

    def load(self) -> SampleSeries:
        """Return the recording, parsing the file if it is not in memory.

        Raises:
            RideLoadError: The file could not be read or parsed.  The reason is
                also kept in ``errors``.
        """
        with self._locked():
            if self._ride is not None:
                return self._ride

            try:
                ride = self.loaders.open_ride(self.full_path, self.start_time)
            except RideLoadError as e:
                self.errors = [str(e)]
                logger.warning(f"Failed to load ride {self.file_name}: {e}")
                raise

            self._ride = ride
            self.errors = []
            # Freshly read from disk, so clean.  Set only once parsing succeeded,
            # and before anyone gets the series back.
            self.set_dirty(False)
            ride.add_listener(self._on_series_state)
            logger.debug(f"Loaded {self.file_name}: {len(ride)} samples")
            self._emit(RIDE_LOADED)
            return ride

    def ride(self) -> SampleSeries | None:
        """Like ``load()`` but returns None on failure; see ``errors`` for why."""
        try:
            return self.load()
        except RideLoadError:
            return None

    def free_memory(self) -> None:
        """Drop the in-memory recording.  Cached results are kept."""
        with self._locked():
            if self._ride is None:
                return
            if self._dirty:
                logger.warning(f"Freeing {self.file_name} with unsaved changes")
            self._ride.remove_listener(self._on_series_state)
            self._ride = None
            logger.debug(f"Freed recording for {self.file_name}")

    # ── identity ─────────────────────────────────────────────────────

    def set_file_name(self, path: str | Path, file_name: str) -> None:
        """Point the entry at a renamed or converted file without reloading."""
        self.path = Path(path)
        self.file_name = file_name

    def set_start_time(self, start_time: datetime) -> None:
        """Correct the ride's start time, here and in the recording.

        Raises:
            RideLoadError: The recording could not be loaded; nothing is changed.
        """
        with self._locked():
            ride = self.load()
            self.start_time = start_time
            ride.set_start_time(start_time)
            # A new date may select a different zone range.
            self.invalidate()
            self._emit(RIDE_UPDATED, start_time=start_time)

    # ── clean / dirty state ──────────────────────────────────────────

    def set_dirty(self, dirty: bool) -> None:
        with self._locked():
            if self._dirty == dirty:
                return
            self._dirty = dirty
            self._emit(RIDE_DIRTY if dirty else RIDE_CLEAN)

    def _on_series_state(self, series: SampleSeries, state: SeriesState) -> None:
        with self._locked():
            if state == SeriesState.MODIFIED:
                self.set_dirty(True)
                self.invalidate()
            elif state == SeriesState.SAVED:
                self.set_dirty(False)
            elif state == SeriesState.REVERTED:
                self.set_dirty(False)
                self.invalidate()

    # ── zones ────────────────────────────────────────────────────────

    def zone_range(self) -> int:
        return self.zones.resolve_range(self.start_time)

    def hr_zone_range(self) -> int:
        return self.hr_zones.resolve_range(self.start_time)

    def num_zones(self) -> int:
        return self.zones.zone_count(self.zone_range())

    def num_hr_zones(self) -> int:
        return self.hr_zones.zone_count(self.hr_zone_range())

    def time_in_zone(self, zone: int) -> float:
        """Seconds spent in power *zone*; 0.0 when the ride cannot be loaded.

        Raises:
            ZoneIndexError: *zone* is not a zone of the effective range.
        """
        self.compute_metrics()
        if self.ride() is None:
            return 0.0
        return self._zone_value(self._time_in_zone, zone, "power")

    def time_in_hr_zone(self, zone: int) -> float:
        """Seconds spent in heart-rate *zone*; 0.0 when the ride cannot be loaded."""
        self.compute_metrics()
        if self.ride() is None:
            return 0.0
        return self._zone_value(self._time_in_hr_zone, zone, "heart-rate")

    @staticmethod
    def _zone_value(values: list[float], zone: int, label: str) -> float:
        if not 0 <= zone < len(values):
            raise ZoneIndexError(f"{label} zone {zone} out of range (ride has {len(values)} zones)")
        return values[zone]

    # ── metrics ──────────────────────────────────────────────────────

    def metrics(self) -> dict[str, float]:
        """All computed metric values (empty when the ride cannot be loaded)."""
        self.compute_metrics()
        return dict(self._metrics)

    def metric(self, name: str, default: float = 0.0) -> float:
        self.compute_metrics()
        return self._metrics.get(name, default)

    def invalidate(self) -> None:
        """Forget when results were computed so the next access recomputes."""
        self.computed_at = None

    def is_stale(self) -> bool:
        if self.computed_at is None:
            return True
        return self.computed_at < max(self.zones.modification_time, self.hr_zones.modification_time)

    def compute_metrics(self) -> None:
        """Recompute zone times and metrics if the cached ones are stale.

        Does nothing when the recording cannot be loaded; previous results
        are left as they were.
        """
        with self._locked():
            if not self.is_stale():
                return

            ride = self.ride()
            if ride is None:
                return

            # Stamp first: anything that checks staleness while we work sees
            # a fresh cache instead of starting another computation.
            self.computed_at = self._clock.now()

            zone_range = self.zone_range()
            hr_zone_range = self.hr_zone_range()
            time_in_zone = [0.0] * self.zones.zone_count(zone_range)
            time_in_hr_zone = [0.0] * self.hr_zones.zone_count(hr_zone_range)

            secs_delta = ride.rec_int_secs
            for point in ride.samples:
                zone = self.zones.classify(zone_range, point.watts)
                if zone != NO_ZONE:
                    time_in_zone[zone] += secs_delta
                hr_zone = self.hr_zones.classify(hr_zone_range, point.hr)
                if hr_zone != NO_ZONE:
                    time_in_hr_zone[hr_zone] += secs_delta

            try:
                metrics = self.metric_registry.compute(ride, self.zones, self.hr_zones, self.metric_registry.names())
            except (MetricError, KeyError):
                self.computed_at = None
                raise

            self._time_in_zone = time_in_zone
            self._time_in_hr_zone = time_in_hr_zone
            self._metrics = metrics

            logger.debug(
                f"Computed metrics for {self.file_name}: "
                f"{len(time_in_zone)} power zones, {len(time_in_hr_zone)} hr zones"
            )
            self._emit(RIDE_METRICS_COMPUTED)

    # ── locking and events ───────────────────────────────────────────

    @contextmanager
    def _locked(self) -> Iterator[None]:
        events: list[Event] = []
        try:
            with self._lock:
                self._lock_depth += 1
                try:
                    yield
                finally:
                    self._lock_depth -= 1
                    if self._lock_depth == 0:
                        events, self._pending_events = self._pending_events, []
        finally:
            if self.bus is not None:
                for event in events:
                    self.bus.emit(event)

    def _emit(self, name: str, **payload: Any) -> None:
        """Queue an event; it goes out once the entry lock is released."""
        self._pending_events.append(
            Event(name=name, payload={"entry": self, "file_name": self.file_name, **payload}, source="ride")
        )
