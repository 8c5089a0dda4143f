"""Pytest configuration and shared fixtures for mcpiper tests."""

import pytest

import mcpiper.io.logging_setup

_ISOLATED_ENV = (
    "NO_COLOR",
    "FORCE_COLOR",
    "TTY_COMPATIBLE",
    "MCPIPER_FIFO_ROOT",
    "MCPIPER_SEED_HUE",
    "MCPIPER_LOG_LEVEL",
    "MCPIPER_LOG_FILE",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep user environment and config files out of every test."""
    for name in _ISOLATED_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    yield
    mcpiper.io.logging_setup.reset()


@pytest.fixture
def settings_file(tmp_path):
    """Path of the settings file for the isolated XDG_CONFIG_HOME."""
    path = tmp_path / "config" / "mcpiper" / "settings.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    return path
