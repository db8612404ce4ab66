"""Metrics shipped with ridebook.

Power-based training load follows the usual definitions: normalized power is
the fourth-power mean of a 30 s rolling average, intensity factor is NP over
the critical power of the zone range in force, and TSS scales IF² by duration.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

import numpy as np
import pandas as pd

from ridebook.zones.models import NO_RANGE

from .base import BaseMetric

if TYPE_CHECKING:
    from ridebook.rides.series import SampleSeries
    from ridebook.zones.schedule import ZoneSchedule

NP_WINDOW_SECS = 30.0


def _channel(series: SampleSeries, field: str) -> pd.Series:
    """Sample values for *field* with missing and negative readings as NaN."""
    values = pd.Series([getattr(s, field) for s in series.samples], dtype="float64")
    return values.where(values >= 0)


def _critical_power(series: SampleSeries, zones: ZoneSchedule | None) -> float | None:
    if zones is None:
        return None
    range_index = zones.resolve_range(series.start_time)
    if range_index == NO_RANGE:
        return None
    return zones.ranges[range_index].threshold


class WorkoutTime(BaseMetric):
    name = "workout_time"
    units = "s"

    def compute(self, series, zones, hr_zones, deps):
        return series.duration_secs


class TimeRiding(BaseMetric):
    name = "time_riding"
    units = "s"

    def compute(self, series, zones, hr_zones, deps):
        watts = _channel(series, "watts")
        return float((watts > 0).sum()) * series.rec_int_secs


class TotalWork(BaseMetric):
    name = "total_work"
    units = "kJ"

    def compute(self, series, zones, hr_zones, deps):
        watts = _channel(series, "watts")
        return float(watts.sum()) * series.rec_int_secs / 1000.0


class AveragePower(BaseMetric):
    name = "average_power"
    units = "W"

    def compute(self, series, zones, hr_zones, deps):
        watts = _channel(series, "watts").dropna()
        return float(watts.mean()) if not watts.empty else 0.0


class MaxPower(BaseMetric):
    name = "max_power"
    units = "W"

    def compute(self, series, zones, hr_zones, deps):
        watts = _channel(series, "watts").dropna()
        return float(watts.max()) if not watts.empty else 0.0


class AverageHeartRate(BaseMetric):
    name = "average_hr"
    units = "bpm"

    def compute(self, series, zones, hr_zones, deps):
        # zero readings are strap dropouts, not a resting heart
        hr = _channel(series, "hr")
        hr = hr[hr > 0]
        return float(hr.mean()) if not hr.empty else 0.0


class MaxHeartRate(BaseMetric):
    name = "max_hr"
    units = "bpm"

    def compute(self, series, zones, hr_zones, deps):
        hr = _channel(series, "hr").dropna()
        return float(hr.max()) if not hr.empty else 0.0


class NormalizedPower(BaseMetric):
    """Fourth-power mean of the 30 s rolling average power.

    Missing readings count as zero watts. Rides shorter than one window have
    no normalized power (0.0).
    """

    name = "normalized_power"
    units = "W"

    def compute(self, series, zones, hr_zones, deps):
        window = max(1, int(round(NP_WINDOW_SECS / series.rec_int_secs)))
        watts = _channel(series, "watts").fillna(0.0)
        if len(watts) < window:
            return 0.0
        rolling = watts.rolling(window).mean().dropna().to_numpy()
        return float(np.mean(rolling**4) ** 0.25)


class IntensityFactor(BaseMetric):
    name = "intensity_factor"
    units = ""
    depends_on = ("normalized_power",)

    def compute(self, series, zones, hr_zones, deps: Mapping[str, float]):
        cp = _critical_power(series, zones)
        if not cp:
            return 0.0
        return deps["normalized_power"] / cp


class TrainingStressScore(BaseMetric):
    name = "training_stress_score"
    units = ""
    depends_on = ("workout_time", "normalized_power", "intensity_factor")

    def compute(self, series, zones, hr_zones, deps: Mapping[str, float]):
        cp = _critical_power(series, zones)
        if not cp:
            return 0.0
        work = deps["workout_time"] * deps["normalized_power"] * deps["intensity_factor"]
        return work / (cp * 3600.0) * 100.0


BUILTIN_METRICS: list[type[BaseMetric]] = [
    WorkoutTime,
    TimeRiding,
    TotalWork,
    AveragePower,
    MaxPower,
    AverageHeartRate,
    MaxHeartRate,
    NormalizedPower,
    IntensityFactor,
    TrainingStressScore,
]
