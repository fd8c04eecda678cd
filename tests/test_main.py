"""Tests for the command-line entry point."""

import pytest

from main import DEFAULT_CONFIG_FILE, parse_args, run


def test_config_defaults(monkeypatch) -> None:
    monkeypatch.delenv("CONFIG_FILE", raising=False)

    assert parse_args([]).config == DEFAULT_CONFIG_FILE


def test_config_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("CONFIG_FILE", "/etc/eo1/config.yaml")

    assert parse_args([]).config == "/etc/eo1/config.yaml"
    assert parse_args(["--config", "local.yaml"]).config == "local.yaml"


@pytest.mark.asyncio
async def test_run_fails_cleanly_without_config(tmp_path) -> None:
    assert await run(str(tmp_path / "missing.yaml")) == 1
