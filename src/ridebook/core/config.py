"""
Layered settings for the ridebook CLI.

Values come from three layers, later ones winning:
    1. Built-in defaults (see ``Config.defaults``)
    2. A YAML or JSON settings file
    3. Environment variables, ``RIDEBOOK_<SECTION>__<KEY>``

Usage:
    config = Config(config_file="~/.ridebook-data/config.yaml")

    config.get("logging.level")           # "WARNING" unless overridden
    config.get_path("zones.power_file")   # "~" expanded, None until configured
"""

import json
import os
from typing import Any

import yaml

from .exceptions import ConfigurationError

ENV_PREFIX = "RIDEBOOK_"
DATA_DIR_NAME = ".ridebook-data"


def _merge(target: dict, overrides: dict) -> None:
    for key, value in overrides.items():
        if isinstance(target.get(key), dict) and isinstance(value, dict):
            _merge(target[key], value)
        else:
            target[key] = value


def _read_settings_file(path: str) -> dict[str, Any]:
    ext = os.path.splitext(path)[1].lower()
    if ext not in (".yaml", ".yml", ".json"):
        return {}
    try:
        with open(path) as f:
            data = json.load(f) if ext == ".json" else yaml.safe_load(f) or {}
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot parse config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return data


def _env_settings(prefix: str) -> dict[str, Any]:
    """Nested settings from ``<prefix>SECTION__KEY=value`` variables."""
    settings: dict[str, Any] = {}
    if not prefix:
        return settings
    for name, value in os.environ.items():
        if not name.startswith(prefix):
            continue
        *sections, key = name[len(prefix) :].lower().split("__")
        node = settings
        for section in sections:
            if not isinstance(node.get(section), dict):
                node[section] = {}
            node = node[section]
        node[key] = value
    return settings


class Config:
    """
    Settings used by the CLI: where rides live, which zone files to load,
    and how to log. A missing settings file is not an error; a malformed one
    raises ``ConfigurationError``.
    """

    def __init__(self, config_file: str | None = None, env_prefix: str = ENV_PREFIX, data_dir: str | None = None):
        self.config_file = os.path.expanduser(config_file) if config_file else None
        self.env_prefix = env_prefix or ""
        self.data_dir = os.path.expanduser(data_dir or os.path.join("~", DATA_DIR_NAME))

        self.config_data = self.defaults()
        if self.config_file and os.path.exists(self.config_file):
            _merge(self.config_data, _read_settings_file(self.config_file))
        _merge(self.config_data, _env_settings(self.env_prefix))

    def defaults(self) -> dict[str, Any]:
        return {
            "paths": {"data_dir": self.data_dir, "rides_dir": os.path.join(self.data_dir, "rides")},
            "zones": {"power_file": None, "hr_file": None},
            "logging": {"level": "WARNING", "file": None},
        }

    def get(self, key_path: str, default: Any = None) -> Any:
        """Value at a dotted path such as ``"zones.hr_file"``; *default* when unset or null."""
        node: Any = self.config_data
        for part in key_path.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return default if node is None else node

    def get_path(self, key_path: str) -> str | None:
        value = self.get(key_path)
        return os.path.expanduser(str(value)) if value else None
