"""Tests for :mod:`sgl_tracker.config`."""
from __future__ import annotations

import json

import pytest

from sgl_tracker.config import ConfigurationError, TrackerSettings, load_configuration, load_settings


def test_load_settings_defaults_without_path() -> None:
    assert load_settings() == TrackerSettings(weekly_target=6, follow_up_days=3, recent_weeks=12, data_path="sgl_tracker.json")


def test_load_settings_from_yaml_with_override(tmp_path) -> None:
    config_path = tmp_path / "tracker.yaml"
    config_path.write_text("weekly_target: 8\nfollow_up_days: 5\ntheme: dark\n", encoding="utf-8")

    settings = load_settings(config_path, data_path=str(tmp_path / "data.json"))

    assert settings.weekly_target == 8
    assert settings.follow_up_days == 5
    assert settings.recent_weeks == 12
    assert settings.data_path == str(tmp_path / "data.json")


def test_load_settings_rejects_non_positive_numbers(tmp_path) -> None:
    config_path = tmp_path / "tracker.json"
    config_path.write_text(json.dumps({"weekly_target": 0}), encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_settings(config_path)


def test_load_configuration_errors(tmp_path) -> None:
    with pytest.raises(ConfigurationError):
        load_configuration(tmp_path / "missing.json")

    unsupported = tmp_path / "tracker.ini"
    unsupported.write_text("[tracker]", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_configuration(unsupported)

    broken = tmp_path / "tracker.json"
    broken.write_text("{", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_configuration(broken)
