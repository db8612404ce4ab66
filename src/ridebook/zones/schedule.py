"""
Dated zone schedules.

A ZoneSchedule holds every zone range an athlete has used, ordered by the date
each became effective.  Rides look up the range in force on their start date,
then classify samples against it.  ``modification_time`` moves forward on
every change so cached ride analytics can tell when they are stale.
"""

from __future__ import annotations

import math
from bisect import bisect_right
from collections.abc import Iterable, Iterator, Mapping
from datetime import date, datetime
from typing import Any

from loguru import logger

from ridebook.core.clock import Clock, default_clock
from ridebook.core.exceptions import ZoneConfigError

from .defaults import hr_range, power_range
from .models import NO_RANGE, NO_ZONE, ZoneRange


def _as_date(value: date | datetime | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError as e:
        raise ZoneConfigError(f"Invalid range start date: {value!r}") from e


def _positive_number(value: Any, what: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ZoneConfigError(f"{what} must be a number, got {value!r}") from e
    if not math.isfinite(number) or number <= 0:
        raise ZoneConfigError(f"{what} must be a positive number, got {value!r}")
    return number


class ZoneSchedule:
    """Ordered, dated zone ranges for one metric (power or heart rate)."""

    def __init__(self, ranges: Iterable[ZoneRange] = (), *, clock: Clock | None = None, kind: str = "power"):
        self.kind = kind
        self._clock = clock or default_clock
        self._ranges: list[ZoneRange] = []
        for zone_range in ranges:
            self._insert(zone_range)
        self.modification_time: datetime = self._clock.now()

    # ── construction ─────────────────────────────────────────────────

    @classmethod
    def from_config(cls, data: Mapping[str, Any], *, clock: Clock | None = None) -> ZoneSchedule:
        """Build a schedule from a parsed YAML/JSON mapping.

        Expected shape::

            kind: power
            ranges:
              - start: 2024-01-01
                threshold: 250          # optional
                thresholds: [138, 188, 225, 263, 300, 375]
                names: [Z1, Z2, Z3, Z4, Z5, Z6, Z7]   # optional

        A range with a ``threshold`` but no ``thresholds`` gets the default
        fractions for the schedule kind.
        """
        kind = str(data.get("kind", "power")).lower()
        if kind not in ("power", "hr"):
            raise ZoneConfigError(f"Unknown zone schedule kind: {kind!r}")

        raw_ranges = data.get("ranges") or []
        if not isinstance(raw_ranges, list):
            raise ZoneConfigError("'ranges' must be a list")

        ranges: list[ZoneRange] = []
        for raw in raw_ranges:
            if not isinstance(raw, Mapping) or "start" not in raw:
                raise ZoneConfigError(f"Zone range needs a 'start' date: {raw!r}")
            start = _as_date(raw["start"])
            threshold = raw.get("threshold")
            if threshold is not None:
                threshold = _positive_number(threshold, f"Threshold of range starting {start}")
            if raw.get("thresholds") is not None:
                if not isinstance(raw["thresholds"], list):
                    raise ZoneConfigError(f"'thresholds' of range starting {start} must be a list")
                ranges.append(
                    ZoneRange(
                        start=start,
                        thresholds=tuple(raw["thresholds"]),
                        threshold=threshold,
                        names=tuple(raw.get("names") or ()),
                    )
                )
            elif threshold is not None:
                build = power_range if kind == "power" else hr_range
                ranges.append(build(start, threshold))
            else:
                raise ZoneConfigError(f"Zone range starting {start} needs 'thresholds' or 'threshold'")

        return cls(ranges, clock=clock, kind=kind)

    # ── queries ──────────────────────────────────────────────────────

    @property
    def ranges(self) -> tuple[ZoneRange, ...]:
        return tuple(self._ranges)

    def __len__(self) -> int:
        return len(self._ranges)

    def __iter__(self) -> Iterator[ZoneRange]:
        return iter(list(self._ranges))

    def resolve_range(self, day: date | datetime) -> int:
        """Index of the latest range starting on or before *day*, else NO_RANGE."""
        return bisect_right(self._ranges, _as_date(day), key=lambda r: r.start) - 1

    def zone_count(self, range_index: int) -> int:
        if range_index == NO_RANGE:
            return 0
        return self._ranges[range_index].zone_count

    def classify(self, range_index: int, value: float | None) -> int:
        """Zone containing *value* under the given range.

        Missing, NaN and negative readings are not classified.
        """
        if range_index == NO_RANGE or value is None:
            return NO_ZONE
        if value < 0 or math.isnan(value):
            return NO_ZONE
        return bisect_right(self._ranges[range_index].thresholds, value)

    def zone_name(self, range_index: int, zone: int) -> str:
        return self._ranges[range_index].names[zone]

    def zone_bounds(self, range_index: int, zone: int) -> tuple[float, float | None]:
        return self._ranges[range_index].bounds(zone)

    # ── mutation ─────────────────────────────────────────────────────

    def add_range(self, zone_range: ZoneRange) -> int:
        """Insert a range and return its index.

        Ranges sharing a start date keep insertion order, so the newest wins
        resolution for that date.
        """
        index = self._insert(zone_range)
        self.touch()
        logger.debug(f"Added {self.kind} zone range from {zone_range.start} ({zone_range.zone_count} zones)")
        return index

    def replace_range(self, range_index: int, zone_range: ZoneRange) -> int:
        del self._ranges[range_index]
        index = self._insert(zone_range)
        self.touch()
        return index

    def remove_range(self, range_index: int) -> ZoneRange:
        removed = self._ranges.pop(range_index)
        self.touch()
        return removed

    def touch(self) -> None:
        """Mark the schedule as changed, invalidating analytics computed before now."""
        self.modification_time = self._clock.now()

    def _insert(self, zone_range: ZoneRange) -> int:
        index = bisect_right(self._ranges, zone_range.start, key=lambda r: r.start)
        self._ranges.insert(index, zone_range)
        return index
