"""Tests for AppConfig helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from dbregistry import config as config_module
from dbregistry.config import AppConfig, ConnectionProfileConfig, load_config, save_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config_module, "CONFIG_FILE", tmp_path / "config.toml")

    result = load_config()

    assert result == AppConfig()
    assert result.profiles == []


def test_load_config_reads_values(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        """
connect_timeout = 2
default_profile = "Orders"

[[profiles]]
name = "Orders"
host = "localhost"
port = 5433
database = "orders"
user = "app"
password = "secret"

[[profiles]]
host = "ignored-without-name"
"""
    )
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_path)

    result = load_config()

    assert result.connect_timeout == 2.0
    assert result.default_profile == "Orders"
    assert len(result.profiles) == 1
    profile = result.profile("Orders")
    assert profile is not None
    assert profile.port == 5433
    assert profile.password == "secret"


def test_load_config_handles_toml_errors(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text("connect_timeout = [unterminated")
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_path)

    result = load_config()

    assert result == AppConfig()


def test_save_config_skips_passwords(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "nested" / "config.toml"
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_path)

    save_config(
        AppConfig(
            connect_timeout=3.0,
            default_profile="Orders",
            profiles=[
                ConnectionProfileConfig(
                    name="Orders",
                    host="localhost",
                    database="orders",
                    user="app",
                    password="secret",
                )
            ],
        )
    )

    content = config_path.read_text()
    assert "connect_timeout = 3.0" in content
    assert 'default_profile = "Orders"' in content
    assert "[[profiles]]" in content
    assert 'database = "orders"' in content
    assert "secret" not in content
    assert load_config().profile("Orders") is not None


def test_with_default_profile_updates_field() -> None:
    config = AppConfig()

    updated = config.with_default_profile("Orders")

    assert updated.default_profile == "Orders"
    assert config.default_profile is None


def test_profile_lookup_returns_none_for_unknown_name() -> None:
    assert AppConfig().profile("missing") is None
