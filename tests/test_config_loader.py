"""Tests for YAML configuration loading."""

import logging

import pytest
import yaml

from config_loader import TimezoneFormatter, get_sample_config, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("EO1_IP", "EO1_PORT", "HOST", "PORT"):
        monkeypatch.delenv(name, raising=False)


def _write_config(tmp_path, data) -> str:
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(data))
    return str(path)


def test_defaults_applied_to_minimal_config(tmp_path) -> None:
    config = load_config(_write_config(tmp_path, {"device": {"host": "10.0.0.44"}}))

    assert config["device"] == {
        "host": "10.0.0.44",
        "port": 12345,
        "timeout_seconds": 5,
        "grace_delay_seconds": 0.1,
    }
    assert config["discovery"]["probe_timeout_seconds"] == 0.5
    assert config["api"]["port"] == 3000
    assert config["logging"]["level"] == "INFO"


def test_empty_file_gets_all_defaults(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("")

    config = load_config(str(path))

    assert config["device"]["host"] == "192.168.1.43"
    assert config["settings"]["file"] == "config/settings.json"


def test_sample_config_is_valid(tmp_path) -> None:
    config = load_config(_write_config(tmp_path, get_sample_config()))

    assert config["device"]["port"] == 12345


def test_missing_file_raises(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.yaml"))


@pytest.mark.parametrize(
    "device",
    [
        {"port": 70000},
        {"host": "eo1.local"},
        {"grace_delay_seconds": -0.1},
        {"timeout_seconds": 0.05, "grace_delay_seconds": 0.1},
    ],
)
def test_invalid_device_section_raises(tmp_path, device) -> None:
    with pytest.raises(ValueError):
        load_config(_write_config(tmp_path, {"device": device}))


def test_non_mapping_section_raises(tmp_path) -> None:
    with pytest.raises(ValueError):
        load_config(_write_config(tmp_path, {"discovery": ["oops"]}))


def test_environment_overrides(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("EO1_IP", "10.1.1.9")
    monkeypatch.setenv("EO1_PORT", "2345")
    monkeypatch.setenv("PORT", "8080")

    config = load_config(_write_config(tmp_path, {}))

    assert config["device"]["host"] == "10.1.1.9"
    assert config["device"]["port"] == 2345
    assert config["api"]["port"] == 8080


def test_timezone_formatter_uses_configured_zone() -> None:
    formatter = TimezoneFormatter("%(asctime)s %(message)s", "UTC")
    record = logging.LogRecord("eo1", logging.INFO, __file__, 1, "hello", None, None)
    record.created = 0

    assert formatter.format(record) == "1970-01-01 00:00:00 UTC hello"


def test_presets_default_to_empty(tmp_path) -> None:
    config = load_config(_write_config(tmp_path, {}))

    assert config["presets"] == {}
    assert config["settings"]["presets_file"] == "config/presets.json"


@pytest.mark.parametrize(
    "presets",
    [
        ["sunset"],
        {"sunset": "tag"},
        {"sunset": {"type": "tag", "tag": "sunset"}},
        {"sunset": {"name": "Sunsets", "type": "photoset", "tag": "sunset"}},
        {"sunset": {"name": "Sunsets", "type": "tag"}},
    ],
)
def test_invalid_presets_rejected(tmp_path, presets) -> None:
    with pytest.raises(ValueError):
        load_config(_write_config(tmp_path, {"presets": presets}))
