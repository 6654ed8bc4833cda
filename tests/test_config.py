"""Tests for settings loading."""

import json

import pytest

from pdfoverlay.config import AppConfig, config_from_dict, load_config
from pdfoverlay.utils import get_config_dir


def test_missing_file_gives_defaults(tmp_path) -> None:
    assert load_config(tmp_path / "absent.json") == AppConfig()


def test_overrides_are_applied(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"max_zoom": 4.0, "exact_alignment": True,
                                "history_limit": 50, "default_text": ""}))

    config = load_config(path)

    assert config.max_zoom == 4.0
    assert config.exact_alignment is True
    assert config.history_limit == 50
    assert config.default_text == ""
    assert config.min_zoom == 0.5


def test_malformed_json_gives_defaults(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json")
    assert load_config(path) == AppConfig()


def test_non_object_gives_defaults(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("[1, 2, 3]")
    assert load_config(path) == AppConfig()


@pytest.mark.parametrize("key, value", [
    ("max_zoom", "big"),
    ("exact_alignment", 1),
    ("default_width", True),
    ("history_limit", 0),
    ("history_limit", "10"),
    ("log_level", 10),
])
def test_wrong_types_keep_default(key, value, caplog) -> None:
    config = config_from_dict({key: value})
    assert getattr(config, key) == getattr(AppConfig(), key)
    assert "wrong type" in caplog.text


def test_unknown_keys_are_reported(caplog) -> None:
    assert config_from_dict({"colour": "red"}) == AppConfig()
    assert "colour" in caplog.text


@pytest.mark.parametrize("overrides", [
    {"min_zoom": 0},
    {"min_zoom": 2.0, "max_zoom": 1.0},
])
def test_invalid_zoom_range_falls_back(overrides) -> None:
    config = config_from_dict(overrides)
    assert (config.min_zoom, config.max_zoom) == (0.5, 3.0)


def test_history_limit_none_is_allowed() -> None:
    assert config_from_dict({"history_limit": None}).history_limit is None


def test_default_location_uses_config_dir(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    settings = get_config_dir() / "settings.json"
    settings.write_text(json.dumps({"zoom_step": 0.5}))

    assert load_config().zoom_step == 0.5


def test_to_dict_round_trips() -> None:
    config = AppConfig(max_zoom=5.0)
    assert config_from_dict(config.to_dict()) == config


def test_reading_defaults_creates_no_directory(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    assert load_config() == AppConfig()
    assert not (tmp_path / "config").exists()
