"""Load zone schedules from YAML or JSON files."""

from __future__ import annotations

import json
import os
from pathlib import Path

import yaml
from loguru import logger

from ridebook.core.clock import Clock
from ridebook.core.exceptions import ZoneConfigError

from .schedule import ZoneSchedule


def load_zone_schedule(path: str | Path, *, kind: str | None = None, clock: Clock | None = None) -> ZoneSchedule:
    """Read a zone schedule file.

    Args:
        path: ``.yaml``/``.yml`` or ``.json`` file (see ``ZoneSchedule.from_config``).
        kind: Override the file's ``kind`` ("power" or "hr").
        clock: Timestamp source for the schedule's modification time.

    Raises:
        ZoneConfigError: The file is missing, unparsable, or describes invalid ranges.
    """
    path = Path(os.path.expanduser(str(path)))
    if not path.is_file():
        raise ZoneConfigError(f"Zone file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f) or {}
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ZoneConfigError(f"Cannot parse zone file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ZoneConfigError(f"Zone file {path} must contain a mapping")
    if kind is not None:
        data = {**data, "kind": kind}

    schedule = ZoneSchedule.from_config(data, clock=clock)
    logger.debug(f"Loaded {len(schedule)} {schedule.kind} zone range(s) from {path}")
    return schedule
