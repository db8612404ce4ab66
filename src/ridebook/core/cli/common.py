"""Shared setup logic for CLI commands."""

from __future__ import annotations

from pathlib import Path

import click

from ridebook.core.config import Config
from ridebook.core.exceptions import ZoneConfigError
from ridebook.core.utils.logging import setup_logging
from ridebook.zones.loader import load_zone_schedule
from ridebook.zones.schedule import ZoneSchedule

DEFAULT_CONFIG_PATH = Path.home() / ".ridebook-data" / "config.yaml"


def load_config(config_file: str | None) -> Config:
    """Load config from *config_file*, falling back to ~/.ridebook-data/config.yaml."""
    path = config_file or str(DEFAULT_CONFIG_PATH)
    return Config(config_file=path)


def configure_logging(config: Config, level: str | None) -> None:
    setup_logging(level=level or config.get("logging.level", "WARNING"), log_file=config.get_path("logging.file"))


def load_schedule(path: str | None, kind: str) -> ZoneSchedule:
    """Load a zone file, or an empty schedule when none is configured."""
    if not path:
        return ZoneSchedule(kind=kind)
    try:
        return load_zone_schedule(path, kind=kind)
    except ZoneConfigError as e:
        raise click.ClickException(str(e)) from e


def format_duration(seconds: float) -> str:
    total = int(round(seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours}:{minutes:02d}:{secs:02d}"
