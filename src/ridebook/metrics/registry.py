"""
Ride-metric plugin registry.

Holds the catalog of named metrics and computes any subset of them over a
ride.  Extra metrics are discovered via ``importlib.metadata`` entry points
(group: ``ridebook.metrics``):

    [project.entry-points."ridebook.metrics"]
    vam = "my_package.metrics:ClimbRate"
"""

from __future__ import annotations

from collections.abc import Iterable
from importlib.metadata import entry_points
from typing import TYPE_CHECKING

from loguru import logger

from ridebook.core.exceptions import MetricError

from .base import RideMetric

if TYPE_CHECKING:
    from ridebook.rides.series import SampleSeries
    from ridebook.zones.schedule import ZoneSchedule


class MetricRegistry:
    """Discover, manage and evaluate ride metrics."""

    def __init__(self):
        self._metrics: dict[str, RideMetric] = {}

    @classmethod
    def with_builtins(cls) -> MetricRegistry:
        """Registry pre-populated with the metrics shipped in ridebook."""
        from .builtin import BUILTIN_METRICS

        registry = cls()
        for metric_class in BUILTIN_METRICS:
            registry.register(metric_class())
        return registry

    def discover(self) -> dict[str, RideMetric]:
        """Scan entry points and register every valid metric found."""
        for ep in entry_points(group="ridebook.metrics"):
            try:
                obj = ep.load()
                metric = obj() if isinstance(obj, type) else obj
            except Exception as e:
                logger.warning(f"Failed to load metric '{ep.name}': {e}")
                continue
            if not isinstance(metric, RideMetric):
                logger.warning(f"Entry point '{ep.name}' is not a ride metric, skipping")
                continue
            self.register(metric)
            logger.debug(f"Discovered metric: {metric.name}")
        return dict(self._metrics)

    def register(self, metric: RideMetric) -> None:
        self._metrics[metric.name] = metric

    def get(self, name: str) -> RideMetric | None:
        return self._metrics.get(name)

    def names(self) -> list[str]:
        """Registered metric names, in registration order."""
        return list(self._metrics.keys())

    def __len__(self) -> int:
        return len(self._metrics)

    def __contains__(self, name: object) -> bool:
        return name in self._metrics

    def compute(
        self,
        series: SampleSeries,
        zones: ZoneSchedule | None,
        hr_zones: ZoneSchedule | None,
        names: Iterable[str],
    ) -> dict[str, float]:
        """Compute *names* (and whatever they depend on) over *series*.

        Returns only the requested names.

        Raises:
            KeyError: A requested or depended-on metric is not registered.
            MetricError: Dependencies form a cycle, or a metric failed.
        """
        requested = list(names)
        results: dict[str, float] = {}
        for name in requested:
            self._resolve(name, series, zones, hr_zones, results, visiting=[])
        return {name: results[name] for name in requested}

    def _resolve(
        self,
        name: str,
        series: SampleSeries,
        zones: ZoneSchedule | None,
        hr_zones: ZoneSchedule | None,
        results: dict[str, float],
        visiting: list[str],
    ) -> float:
        if name in results:
            return results[name]
        if name in visiting:
            cycle = " -> ".join([*visiting, name])
            raise MetricError(f"Metric dependency cycle: {cycle}")

        metric = self._metrics.get(name)
        if metric is None:
            raise KeyError(f"No metric registered as '{name}'. Available: {self.names()}")

        visiting.append(name)
        deps = {dep: self._resolve(dep, series, zones, hr_zones, results, visiting) for dep in metric.depends_on}
        visiting.pop()

        try:
            value = float(metric.compute(series, zones, hr_zones, deps))
        except MetricError:
            raise
        except Exception as e:
            raise MetricError(f"Metric '{name}' failed: {e}") from e
        results[name] = value
        return value
