"""
Ride recordings, their loaders, and the entries that cache per-ride analytics.
"""

from .collection import RideCollection, parse_ride_file_name
from .entry import RideEntry
from .loader import BaseLoader, RideLoader
from .registry import LoaderRegistry
from .series import Sample, SampleSeries, SeriesState

__all__ = [
    "BaseLoader",
    "LoaderRegistry",
    "RideCollection",
    "RideEntry",
    "RideLoader",
    "Sample",
    "SampleSeries",
    "SeriesState",
    "parse_ride_file_name",
]
