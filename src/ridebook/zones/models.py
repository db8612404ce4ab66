"""
Zone range models.

A range is one dated set of zone boundaries: ``thresholds`` splits the metric
axis into ``len(thresholds) + 1`` zones.  Zone ``i`` covers
``thresholds[i-1] <= value < thresholds[i]``; the first zone starts at 0 and
the last one is open-ended.
"""

import math
from dataclasses import dataclass, field
from datetime import date

from ridebook.core.exceptions import ZoneConfigError

NO_RANGE = -1
NO_ZONE = -1


@dataclass(frozen=True)
class ZoneRange:
    """Zone boundaries effective from ``start`` until a later range takes over."""

    start: date
    thresholds: tuple[float, ...]
    threshold: float | None = None  # CP for power, LTHR for heart rate
    names: tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        try:
            thresholds = tuple(float(t) for t in self.thresholds)
            threshold = float(self.threshold) if self.threshold is not None else None
        except (TypeError, ValueError) as e:
            raise ZoneConfigError(f"Zone thresholds must be numbers: {self.thresholds!r}") from e
        if not all(math.isfinite(t) for t in thresholds):
            raise ZoneConfigError(f"Zone thresholds must be finite: {thresholds}")
        if any(t < 0 for t in thresholds):
            raise ZoneConfigError(f"Zone thresholds must be non-negative: {thresholds}")
        if any(a >= b for a, b in zip(thresholds, thresholds[1:])):
            raise ZoneConfigError(f"Zone thresholds must be strictly increasing: {thresholds}")
        if threshold is not None and not (math.isfinite(threshold) and threshold > 0):
            raise ZoneConfigError(f"Range threshold must be a positive number, got {self.threshold!r}")

        names = tuple(self.names) or tuple(f"Z{i}" for i in range(1, len(thresholds) + 2))
        if len(names) != len(thresholds) + 1:
            raise ZoneConfigError(f"Expected {len(thresholds) + 1} zone names, got {len(names)}")

        object.__setattr__(self, "thresholds", thresholds)
        object.__setattr__(self, "threshold", threshold)
        object.__setattr__(self, "names", names)

    @property
    def zone_count(self) -> int:
        return len(self.thresholds) + 1

    def bounds(self, zone: int) -> tuple[float, float | None]:
        """Return ``(low, high)`` for *zone*; ``high`` is None for the top zone."""
        low = 0.0 if zone == 0 else self.thresholds[zone - 1]
        high = self.thresholds[zone] if zone < len(self.thresholds) else None
        return low, high
