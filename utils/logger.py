from __future__ import annotations
import logging
import logging.config
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

LOGGER_NAME = "agestats"

FORMATS = {
    "simple": "%(levelname)s - %(message)s",
    "detailed": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    format_style: str = "detailed",
) -> None:
    """
    Configure console (and optional rotating file) logging.

    Args:
        level: 'DEBUG', 'INFO', 'WARNING', 'ERROR' or 'CRITICAL'
        log_file: optional path for a rotating log file
        format_style: 'simple' or 'detailed'
    """
    level = str(level).upper()
    config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": FORMATS.get(format_style, FORMATS["detailed"]),
                "datefmt": "%Y-%m-%d %H:%M:%S",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "standard",
                "stream": sys.stdout,
            }
        },
        "loggers": {
            LOGGER_NAME: {"level": level, "handlers": ["console"], "propagate": False},
        },
    }

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": level,
            "formatter": "standard",
            "filename": str(log_file),
            "maxBytes": 1048576,
            "backupCount": 3,
        }
        config["loggers"][LOGGER_NAME]["handlers"].append("file")

    logging.config.dictConfig(config)


def get_logger(name: str) -> logging.Logger:
    """Child logger under the project namespace, e.g. agestats.distribution."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


class UploadLogger:
    """
    Simple in-memory accumulator of upload attempts.
    Rows live for the session only; to_frame() hands them to a table view.
    """
    def __init__(self, enabled: bool = True, verbosity: int = 1):
        self.enabled = bool(enabled)
        self.verbosity = int(verbosity)
        self._rows: List[Dict[str, Any]] = []
        self._log = get_logger("uploads")

    def append_row(self, row: Dict[str, Any]) -> None:
        if not self.enabled:
            return
        self._rows.append(dict(row))
        if self.verbosity > 0:
            self._log.info("upload %s", row)

    @property
    def rows(self) -> List[Dict[str, Any]]:
        return [dict(r) for r in self._rows]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self._rows)

    def clear(self) -> None:
        self._rows.clear()
