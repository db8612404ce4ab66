"""Event bus for ride state notifications.

Ride entries publish state transitions (dirty, clean, updated, ...) here
instead of calling back into whatever owns them. Owners subscribe to the
events they care about.

Usage::

    from ridebook.core.events import EventBus, Event, RIDE_DIRTY

    bus = EventBus()
    bus.on(RIDE_DIRTY, lambda event: print(event.payload["file_name"]))
    bus.emit(Event(name=RIDE_DIRTY, payload={"file_name": "2024_05_01_07_30_00.csv"}))
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from time import time
from typing import Any

from loguru import logger

# ---------------------------------------------------------------------------
# Well-known event names
# ---------------------------------------------------------------------------

RIDE_DIRTY = "ride.dirty"
RIDE_CLEAN = "ride.clean"
RIDE_LOADED = "ride.loaded"
RIDE_UPDATED = "ride.updated"
RIDE_METRICS_COMPUTED = "ride.metrics_computed"


# ---------------------------------------------------------------------------
# Event model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Event:
    """An immutable event that flows through the bus."""

    name: str
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time)
    source: str = ""


Hook = Callable[[Event], None]


# ---------------------------------------------------------------------------
# EventBus
# ---------------------------------------------------------------------------


class EventBus:
    """Synchronous pub/sub bus. Hooks run on the emitting thread, in order."""

    def __init__(self) -> None:
        self._hooks: dict[str, list[Hook]] = defaultdict(list)
        self._wildcard_hooks: list[Hook] = []

    def on(self, event_name: str, hook: Hook) -> None:
        """Register *hook* for a specific event name."""
        self._hooks[event_name].append(hook)

    def on_all(self, hook: Hook) -> None:
        """Register *hook* for all events (wildcard)."""
        self._wildcard_hooks.append(hook)

    def off(self, event_name: str, hook: Hook) -> None:
        """Unregister *hook* from a specific event name."""
        try:
            self._hooks[event_name].remove(hook)
        except ValueError:
            pass

    def emit(self, event: Event) -> None:
        """Run every hook registered for the event, then the wildcard hooks.

        A failing hook is logged and does not stop the remaining hooks.
        """
        hooks = list(self._hooks.get(event.name, []))
        hooks.extend(self._wildcard_hooks)
        for hook in hooks:
            try:
                hook(event)
            except Exception as exc:
                logger.warning(f"Event hook failed for {event.name}: {exc}")
