"""
RideMetric protocol and base class.

A metric turns a whole ride (plus the zone schedules in force) into one
number.  Metrics may depend on other metrics by name; the registry computes
dependencies first and hands their values to ``compute``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ridebook.rides.series import SampleSeries
    from ridebook.zones.schedule import ZoneSchedule


@runtime_checkable
class RideMetric(Protocol):
    """Protocol that every ride metric must satisfy."""

    name: str
    units: str
    depends_on: tuple[str, ...]

    def compute(
        self,
        series: SampleSeries,
        zones: ZoneSchedule | None,
        hr_zones: ZoneSchedule | None,
        deps: Mapping[str, float],
    ) -> float:
        ...


class BaseMetric(ABC):
    """Optional ABC for metrics with no dependencies by default."""

    name: str = "base"
    units: str = ""
    depends_on: tuple[str, ...] = ()

    @abstractmethod
    def compute(
        self,
        series: SampleSeries,
        zones: ZoneSchedule | None,
        hr_zones: ZoneSchedule | None,
        deps: Mapping[str, float],
    ) -> float:
        """Return the metric value for *series*."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"
