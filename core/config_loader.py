"""YAML configuration loader utility."""

from pathlib import Path
from typing import Any, Mapping, Optional

import yaml


def load_config(path: str | Path) -> dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        path: Path to the YAML file.

    Returns:
        Dictionary containing the parsed configuration.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        yaml.YAMLError: If the file contains invalid YAML.
        ValueError: If the top-level YAML node is not a mapping.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f)

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(config).__name__}")
    return config


def merge_config(
    defaults: Mapping[str, Any],
    overrides: Optional[Mapping[str, Any]] = None,
) -> dict[str, Any]:
    """
    Recursively overlay ``overrides`` on top of ``defaults``.

    Nested mappings are merged key by key; any other value in
    ``overrides`` replaces the default outright.

    Args:
        defaults: Base configuration.
        overrides: Values that take precedence.

    Returns:
        New merged dictionary. Neither input is mutated.
    """
    merged: dict[str, Any] = dict(defaults)
    for key, value in (overrides or {}).items():
        base = merged.get(key)
        if isinstance(base, Mapping) and isinstance(value, Mapping):
            merged[key] = merge_config(base, value)
        else:
            merged[key] = value
    return merged
