"""Configuration loading for Folio.

The config document is a flat key/value mapping read from the project root.
YAML and JSON are both accepted, since JSON parses as YAML.

Key functions:
- load_config: Load the config with defaults applied.
- read_int: Read an integer value with a fallback.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

CONFIG_FILENAMES = ("config.yaml", "config.yml", "config.json")

DEFAULT_CONFIG: dict[str, Any] = {
    "port": 3000,
    "host": "",
    "static_dir": "static",
    "templates_dir": "templates",
    "multi_valued": ["tags"],
    "default_template": "default",
}


def find_config(project_root: Path) -> Path | None:
    """Return the first config file present in ``project_root``, if any."""
    for name in CONFIG_FILENAMES:
        candidate = project_root / name
        if candidate.is_file():
            return candidate
    return None


def load_config(project_root: Path) -> dict[str, Any]:
    """Load site configuration.

    Args:
        project_root: Root directory of the project.

    Returns:
        Dictionary containing configuration values, with defaults applied.

    Raises:
        ConfigError: If the config file is not valid YAML or JSON.
    """
    config = dict(DEFAULT_CONFIG)
    config_path = find_config(project_root)
    if config_path is None:
        return config
    try:
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid config file {config_path}: {exc}") from exc
    if isinstance(loaded, dict):
        config.update(loaded)
    return config


def read_int(config: dict[str, Any] | None, name: str, default: int) -> int:
    """Read an integer config value.

    Args:
        config: Config mapping, may be None.
        name: Key to read.
        default: Value used when the key is missing or not a number.

    Returns:
        The integer value.
    """
    if not config or name not in config:
        return default
    value = config[name]
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return int(number)


def read_list(config: dict[str, Any], name: str, default: list[str]) -> list[str]:
    """Read a list of strings, accepting a comma separated string too."""
    value = config.get(name, default)
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    return list(default)
