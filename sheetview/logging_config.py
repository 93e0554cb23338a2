"""Logging setup for applications embedding sheetview.

Reads a dictConfig JSON file when one is available, otherwise falls back
to a console configuration. The library itself only creates module
loggers; calling log_init() is left to the host application.
"""

from __future__ import annotations

import json
import logging.config
import os
from typing import Any

_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_CONFIG_PATH = os.path.join(_PROJECT_ROOT, "logging.json")

DEFAULT_CONFIG: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {"format": "%(asctime)s [%(name)s] %(levelname)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "standard"},
    },
    "loggers": {
        "sheetview": {"level": "INFO"},
        "redis": {"level": "WARNING"},
    },
    "root": {"level": "WARNING", "handlers": ["console"]},
}


def resolve_config_path(log_config_path: str | None = None) -> str | None:
    """Pick the config file: argument, then $LOG_CONFIG, then logging.json.

    Returns None when no candidate exists on disk.
    """
    path = log_config_path or os.environ.get("LOG_CONFIG") or DEFAULT_CONFIG_PATH
    return path if os.path.exists(path) else None


def log_init(log_config_path: str | None = None) -> dict[str, Any]:
    """Configure logging and return the dictConfig that was applied.

    An explicitly passed path that does not exist is an error; a missing
    default file is not.
    """
    if log_config_path and not os.path.exists(log_config_path):
        raise FileNotFoundError(log_config_path)
    path = resolve_config_path(log_config_path)
    if path is None:
        config = DEFAULT_CONFIG
    else:
        with open(path) as f:
            config = json.load(f)
    logging.config.dictConfig(config)
    return config
