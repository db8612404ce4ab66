"""
RideLoader protocol and base class.

Any recording format (CSV export, FIT, TCX, ...) implements this interface so
ride entries can load files without knowing their format.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Protocol, runtime_checkable

from .series import SampleSeries


@runtime_checkable
class RideLoader(Protocol):
    """Protocol that every ride file loader must satisfy."""

    name: str
    suffixes: tuple[str, ...]

    def load(self, path: Path, start_time: datetime | None = None) -> SampleSeries:
        """Parse *path* into a SampleSeries.

        Malformed content raises ``RideLoadError``; it must never escape as an
        arbitrary exception.
        """
        ...


class BaseLoader(ABC):
    """Optional ABC with shared plumbing for loaders.

    Subclass this to get suffix matching and load statistics, or implement the
    ``RideLoader`` protocol directly.
    """

    name: str = "base"
    suffixes: tuple[str, ...] = ()

    def __init__(self) -> None:
        self.stats: dict[str, int] = {"loaded": 0, "failed": 0}

    @abstractmethod
    def load(self, path: Path, start_time: datetime | None = None) -> SampleSeries:
        """Parse a ride file."""

    def accepts(self, path: Path) -> bool:
        return path.suffix.lower() in self.suffixes
