"""Centralized path constants for the sensor logger."""

from __future__ import annotations

import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[2]

# User-specific state (allows running from read-only install directories)
_USER_STATE_ENV = os.environ.get("SENSOR_LOGGER_STATE_DIR")
USER_STATE_DIR = Path(_USER_STATE_ENV).expanduser() if _USER_STATE_ENV else (Path.home() / ".sensor_logger")
USER_CONFIG_OVERRIDES_DIR = USER_STATE_DIR / "config_overrides"


__all__ = [
    'PROJECT_ROOT',
    'USER_STATE_DIR',
    'USER_CONFIG_OVERRIDES_DIR',
]
