"""Logging bootstrap for the mcpiper command.

Diagnostics go to stderr so stdout carries nothing but the trace stream.
MCPIPER_LOG_LEVEL sets the level (default WARNING); MCPIPER_LOG_FILE, when
set, also appends to a rotating file.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOGGER_NAME = "mcpiper"
DEFAULT_LEVEL = logging.WARNING

_configured = False


def _parse_level(raw: str | None) -> int:
    level = logging.getLevelName(str(raw or "").strip().upper())
    return level if isinstance(level, int) else DEFAULT_LEVEL


def configure() -> logging.Logger:
    """Attach handlers to the "mcpiper" logger once; later calls are no-ops."""
    global _configured
    logger = logging.getLogger(LOGGER_NAME)
    if _configured:
        return logger

    level = _parse_level(os.environ.get("MCPIPER_LOG_LEVEL"))
    logger.setLevel(level)
    logger.propagate = False

    stream = logging.StreamHandler()
    stream.setFormatter(logging.Formatter("[%(name)s] %(levelname)s %(message)s"))
    logger.addHandler(stream)

    file_path = os.environ.get("MCPIPER_LOG_FILE")
    if file_path:
        Path(file_path).parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(file_path, maxBytes=5 * 1024 * 1024, backupCount=2, encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        logger.addHandler(handler)

    _configured = True
    return logger


def reset() -> None:
    """Undo configure(): detach handlers and restore propagation (tests)."""
    global _configured
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    _configured = False
