"""
Named ride metrics and the registry that evaluates them.
"""

from .base import BaseMetric, RideMetric
from .builtin import BUILTIN_METRICS
from .registry import MetricRegistry

__all__ = [
    "BUILTIN_METRICS",
    "BaseMetric",
    "MetricRegistry",
    "RideMetric",
]
