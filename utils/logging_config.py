"""Logging for channel tests: console output plus rotating files under the log dir."""

from __future__ import annotations

import logging
import logging.config
from pathlib import Path

from .config_helper import get_log_dir

CONSOLE_FORMAT = "{asctime} {levelname:<8} {name}: {message}"
FILE_FORMAT = "{asctime} [{process:05d}] {levelname:<8} {name}: {message}"


def _dict_config(log_dir: Path, debug: bool = False) -> dict:
    """Return a logging.config-compatible dict writing app.log and error.log into log_dir."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {"format": CONSOLE_FORMAT, "style": "{", "datefmt": "%H:%M:%S"},
            "file": {"format": FILE_FORMAT, "style": "{"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": "DEBUG" if debug else "INFO",
                "formatter": "console",
                "stream": "ext://sys.stderr",
            },
            # every probe and write-back, kept for two weeks
            "file.daily": {
                "class": "logging.handlers.TimedRotatingFileHandler",
                "level": "DEBUG",
                "formatter": "file",
                "filename": str(log_dir / "app.log"),
                "when": "midnight",
                "backupCount": 14,
                "encoding": "utf-8",
            },
            # raised probes and failed writes
            "file.error": {
                "class": "logging.handlers.RotatingFileHandler",
                "level": "ERROR",
                "formatter": "file",
                "filename": str(log_dir / "error.log"),
                "maxBytes": 10 * 1024 * 1024,
                "backupCount": 5,
                "encoding": "utf-8",
            },
        },
        "loggers": {
            "": {"level": "DEBUG", "handlers": ["console", "file.daily", "file.error"]},
            # one line per upstream connection otherwise
            "urllib3.connectionpool": {"level": "WARNING", "handlers": [], "propagate": False},
            "sqlalchemy.engine": {"level": "WARNING", "handlers": [], "propagate": True},
        },
    }


def setup_logging(*, debug: bool = False, log_dir: Path | None = None) -> None:
    """Configure logging once, before the first channel test runs."""
    log_dir = log_dir or get_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(_dict_config(log_dir, debug))

    logging.getLogger(__name__).debug(f"Logging configured (debug={debug}, log_dir={log_dir})")
