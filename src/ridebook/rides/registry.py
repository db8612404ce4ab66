"""
Ride-loader plugin registry.

Maps file suffixes to loaders.  Loaders are discovered at runtime via
``importlib.metadata`` entry points (group: ``ridebook.ride_loaders``), so
third-party packages can add formats in their own ``pyproject.toml``:

    [project.entry-points."ridebook.ride_loaders"]
    fit = "my_package.fit:FitLoader"
"""

from __future__ import annotations

from datetime import datetime
from importlib.metadata import entry_points
from pathlib import Path

from loguru import logger

from ridebook.core.exceptions import RideLoadError

from .loader import RideLoader
from .series import SampleSeries


class LoaderRegistry:
    """Discover and manage ride file loaders."""

    def __init__(self):
        self._loaders: dict[str, RideLoader] = {}

    @classmethod
    def with_builtins(cls) -> LoaderRegistry:
        """Registry pre-populated with the loaders shipped in ridebook."""
        from .plugins.csv_file import CsvLoader

        registry = cls()
        registry.register(CsvLoader())
        return registry

    def discover(self) -> dict[str, RideLoader]:
        """Scan entry points and register every valid loader found."""
        for ep in entry_points(group="ridebook.ride_loaders"):
            try:
                obj = ep.load()
                loader = obj() if isinstance(obj, type) else obj
            except Exception as e:
                logger.warning(f"Failed to load ride loader '{ep.name}': {e}")
                continue
            if not isinstance(loader, RideLoader):
                logger.warning(f"Entry point '{ep.name}' is not a ride loader, skipping")
                continue
            self.register(loader)
            logger.debug(f"Discovered ride loader: {ep.name}")
        return dict(self._loaders)

    def register(self, loader: RideLoader) -> None:
        """Register *loader* for each of its suffixes (later registrations win)."""
        for suffix in loader.suffixes:
            self._loaders[suffix.lower()] = loader

    def get(self, suffix: str) -> RideLoader | None:
        return self._loaders.get(suffix.lower())

    def suffixes(self) -> list[str]:
        return sorted(self._loaders)

    def can_open(self, path: str | Path) -> bool:
        return Path(path).suffix.lower() in self._loaders

    def open_ride(self, path: str | Path, start_time: datetime | None = None) -> SampleSeries:
        """Load *path* with the loader registered for its suffix.

        Raises:
            RideLoadError: No loader for the suffix, the file is unreadable
                (``kind="io"``), or its content is malformed (``kind="format"``).
        """
        path = Path(path)
        loader = self.get(path.suffix)
        if loader is None:
            raise RideLoadError(f"No ride loader registered for '{path.suffix}' files", path=str(path))
        try:
            return loader.load(path, start_time)
        except RideLoadError:
            raise
        except OSError as e:
            raise RideLoadError(f"Cannot read {path}: {e}", path=str(path), kind="io") from e
        except Exception as e:
            raise RideLoadError(f"Malformed ride {path.name}: {e}", path=str(path)) from e
