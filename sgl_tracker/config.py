"""Configuration helpers for the sales tracker."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

LOGGER = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Raised when configuration files are missing or malformed."""


_SUPPORTED_EXTENSIONS = {".json", ".yaml", ".yml"}


@dataclass(frozen=True)
class TrackerSettings:
    """Tunable constants of the dashboard and the location of the data file."""

    weekly_target: int = 6
    follow_up_days: int = 3
    recent_weeks: int = 12
    data_path: str = "sgl_tracker.json"


def load_configuration(path: str | Path) -> Dict[str, Any]:
    """Load configuration data from a JSON or YAML file."""

    file_path = Path(path)
    if not file_path.exists():
        raise ConfigurationError(f"Configuration file '{file_path}' was not found")

    if file_path.suffix.lower() not in _SUPPORTED_EXTENSIONS:
        raise ConfigurationError(
            f"Unsupported configuration format '{file_path.suffix}'. Supported extensions: {sorted(_SUPPORTED_EXTENSIONS)}"
        )

    text = file_path.read_text(encoding="utf-8")
    try:
        if file_path.suffix.lower() == ".json":
            data = json.loads(text or "{}")
        else:
            data = yaml.safe_load(text) or {}
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Configuration file '{file_path}' could not be parsed: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file '{file_path}' must contain a mapping")
    return data


def settings_from_mapping(config: Dict[str, Any]) -> TrackerSettings:
    known = {item.name for item in fields(TrackerSettings)}
    values: Dict[str, Any] = {}
    for key, value in config.items():
        if key not in known:
            LOGGER.debug("Ignoring unknown configuration key %s", key)
            continue
        if key == "data_path":
            values[key] = str(value)
            continue
        try:
            number = int(value)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"'{key}' must be an integer, got {value!r}") from exc
        if number <= 0:
            raise ConfigurationError(f"'{key}' must be positive, got {number}")
        values[key] = number
    return replace(TrackerSettings(), **values)


def load_settings(path: Optional[str | Path] = None, **overrides: Any) -> TrackerSettings:
    """Return settings from ``path`` (defaults when omitted) with ``overrides`` applied."""

    settings = settings_from_mapping(load_configuration(path)) if path else TrackerSettings()
    overrides = {key: value for key, value in overrides.items() if value is not None}
    if overrides:
        settings = replace(settings, **overrides)
    return settings
