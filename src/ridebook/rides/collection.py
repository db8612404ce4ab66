"""
RideCollection: the set of rides in one directory.

The collection owns the shared pieces every entry borrows (zone schedules,
loader and metric registries, event bus) and keeps track of which entries
have unsaved changes by listening to their clean/dirty events.

Ride files are named after their start time, ``YYYY_MM_DD_hh_mm_ss.<ext>``;
an optional ``<same stem>.notes`` file next to a ride is attached to it.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path

from loguru import logger

from ridebook.core.events import RIDE_CLEAN, RIDE_DIRTY, Event, EventBus
from ridebook.metrics.registry import MetricRegistry
from ridebook.zones.schedule import ZoneSchedule

from .entry import RideEntry
from .registry import LoaderRegistry

RIDE_FILE_RE = re.compile(r"^(\d{4})_(\d{2})_(\d{2})_(\d{2})_(\d{2})_(\d{2})\.[A-Za-z0-9]+$")
NOTES_SUFFIX = ".notes"


def parse_ride_file_name(file_name: str) -> datetime | None:
    """Start time encoded in a ride file name, or None if it doesn't follow the pattern."""
    match = RIDE_FILE_RE.match(file_name)
    if not match:
        return None
    try:
        return datetime(*(int(part) for part in match.groups()))
    except ValueError:
        return None


class RideCollection:
    """Rides found in a directory, sharing one set of zones and registries."""

    def __init__(
        self,
        rides_dir: str | Path,
        zones: ZoneSchedule,
        hr_zones: ZoneSchedule,
        *,
        loaders: LoaderRegistry | None = None,
        metrics: MetricRegistry | None = None,
        bus: EventBus | None = None,
    ):
        self.rides_dir = Path(rides_dir).expanduser()
        self.zones = zones
        self.hr_zones = hr_zones
        self.loaders = loaders or LoaderRegistry.with_builtins()
        self.metrics = metrics or MetricRegistry.with_builtins()
        self.bus = bus or EventBus()
        self._entries: dict[str, RideEntry] = {}
        self._dirty: set[str] = set()

        self.bus.on(RIDE_DIRTY, self._on_dirty)
        self.bus.on(RIDE_CLEAN, self._on_clean)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[RideEntry]:
        return iter(self.entries)

    @property
    def entries(self) -> list[RideEntry]:
        """Entries ordered by start time."""
        return sorted(self._entries.values(), key=lambda e: e.start_time)

    def scan(self) -> list[RideEntry]:
        """Add an entry for every ride file in ``rides_dir`` not already listed."""
        if not self.rides_dir.is_dir():
            logger.warning(f"Ride directory does not exist: {self.rides_dir}")
            return []

        added: list[RideEntry] = []
        for path in sorted(self.rides_dir.iterdir()):
            if not path.is_file() or path.name in self._entries:
                continue
            if not self.loaders.can_open(path):
                continue
            start_time = parse_ride_file_name(path.name)
            if start_time is None:
                logger.debug(f"Skipping {path.name}: name is not a ride timestamp")
                continue
            notes = path.with_suffix(NOTES_SUFFIX)
            entry = self.create_entry(path.name, start_time, notes.name if notes.is_file() else None)
            added.append(self.add(entry))

        logger.info(f"Found {len(added)} new ride(s) in {self.rides_dir}")
        return added

    def create_entry(self, file_name: str, start_time: datetime, notes_file_name: str | None = None) -> RideEntry:
        return RideEntry(
            self.rides_dir,
            file_name,
            start_time,
            self.zones,
            self.hr_zones,
            loaders=self.loaders,
            metrics=self.metrics,
            notes_file_name=notes_file_name,
            bus=self.bus,
        )

    def add(self, entry: RideEntry) -> RideEntry:
        self._entries[entry.file_name] = entry
        if entry.is_dirty:
            self._dirty.add(entry.file_name)
        return entry

    def get(self, file_name: str) -> RideEntry | None:
        return self._entries.get(file_name)

    def remove(self, file_name: str) -> RideEntry | None:
        """Stop managing a ride and release its recording."""
        entry = self._entries.pop(file_name, None)
        if entry is None:
            return None
        entry.free_memory()
        self._dirty.discard(file_name)
        return entry

    def rename(self, old_file_name: str, path: str | Path, new_file_name: str) -> RideEntry:
        """Follow a ride file that was renamed or converted on save."""
        entry = self._entries.pop(old_file_name)
        entry.set_file_name(path, new_file_name)
        self._entries[new_file_name] = entry
        if old_file_name in self._dirty:
            self._dirty.discard(old_file_name)
            self._dirty.add(new_file_name)
        return entry

    def free_memory(self) -> None:
        """Release every loaded recording that has no unsaved changes."""
        for entry in self._entries.values():
            if not entry.is_dirty:
                entry.free_memory()

    def dirty_entries(self) -> list[RideEntry]:
        return [e for e in self.entries if e.file_name in self._dirty]

    def _on_dirty(self, event: Event) -> None:
        entry = event.payload.get("entry")
        if entry is not None and self._entries.get(entry.file_name) is entry:
            self._dirty.add(entry.file_name)

    def _on_clean(self, event: Event) -> None:
        entry = event.payload.get("entry")
        if entry is not None and self._entries.get(entry.file_name) is entry:
            self._dirty.discard(entry.file_name)
