"""Startup configuration for mcpiper.

Defaults are layered, lowest priority first:
  1. built-in defaults
  2. JSON settings file at XDG_CONFIG_HOME/mcpiper/settings.json
  3. environment (MCPIPER_FIFO_ROOT, MCPIPER_SEED_HUE)
  4. command line

The resolved Settings object is immutable and built once, before the first
event is read.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_FIFO_ROOT = "/var/mcrouter/fifos"
DEFAULT_POLL_INTERVAL = 1.0


@dataclass(frozen=True)
class Settings:
    """Resolved startup settings."""

    match_expression: str = ""
    fifo_root: str = DEFAULT_FIFO_ROOT
    filename_pattern: str = ""
    quiet: bool = False
    extended_regexp: bool = False
    color: str = "auto"
    seed_hue: float | None = None
    replay: str | None = None
    poll_interval: float = DEFAULT_POLL_INTERVAL


def get_config_path() -> Path:
    """Return path to settings file.

    Uses XDG_CONFIG_HOME (default ~/.config) / mcpiper / settings.json.
    """
    config_home = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(config_home) / "mcpiper" / "settings.json"


def load_settings() -> dict:
    """Load settings from JSON file. Returns empty dict on missing/corrupt file."""
    path = get_config_path()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("ignoring unreadable settings file %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("ignoring settings file %s: top level is not an object", path)
        return {}
    return data


def _parse_hue(raw: object) -> float | None:
    if raw is None or raw == "":
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        logger.warning("ignoring invalid seed hue %r", raw)
        return None


def resolve_defaults() -> dict:
    """Defaults for CLI options from the settings file and environment."""
    stored = load_settings()
    fifo_root = os.environ.get("MCPIPER_FIFO_ROOT") or stored.get("fifo_root") or DEFAULT_FIFO_ROOT
    seed_hue = _parse_hue(os.environ.get("MCPIPER_SEED_HUE"))
    if seed_hue is None:
        seed_hue = _parse_hue(stored.get("seed_hue"))
    color = stored.get("color", "auto")
    if color not in ("auto", "always", "never"):
        logger.warning("ignoring invalid color setting %r", color)
        color = "auto"
    return {
        "fifo_root": str(fifo_root),
        "seed_hue": seed_hue,
        "color": color,
    }
