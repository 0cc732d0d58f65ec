"""Structured JSON logging for flyway-mcp.

The MCP server talks over stdout, so log records go to a JSONL file
(``flyway-mcp.log``, rotated at 5MB with 3 backups) instead of the console.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

LOG_FILENAME = "flyway-mcp.log"
_setup_lock = threading.Lock()
_MAX_BYTES = 5 * 1024 * 1024  # 5MB
_BACKUP_COUNT = 3

_EXTRA_FIELDS = {
    "tool": "tool",
    "args_data": "args",
    "duration_ms": "duration_ms",
    "project": "project",
    "error": "error",
}


class _JsonFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for attr, key in _EXTRA_FIELDS.items():
            if hasattr(record, attr):
                entry[key] = getattr(record, attr)
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = f"{type(record.exc_info[1]).__name__}: {record.exc_info[1]}"
        return json.dumps(entry, default=str)


def default_log_dir() -> Path:
    """``$FLYWAY_MCP_LOG_DIR`` if set, else ``~/.flyway-mcp``."""
    env = os.environ.get("FLYWAY_MCP_LOG_DIR")
    if env:
        return Path(env)
    return Path.home() / ".flyway-mcp"


def setup_logging(log_dir: Path, level: int = logging.INFO) -> logging.Logger:
    """Attach the rotating JSONL handler to the ``flyway_mcp`` logger.

    Safe to call repeatedly; a second call with the same directory is a
    no-op and a call with a new directory replaces the old handler.
    """
    logger = logging.getLogger("flyway_mcp")
    log_dir.mkdir(parents=True, exist_ok=True)
    target_filename = os.path.abspath(str(log_dir / LOG_FILENAME))

    with _setup_lock:
        for h in logger.handlers[:]:
            if not isinstance(h, RotatingFileHandler):
                continue
            if h.baseFilename == target_filename:
                return logger
            logger.removeHandler(h)
            h.close()

        handler = RotatingFileHandler(
            target_filename,
            maxBytes=_MAX_BYTES,
            backupCount=_BACKUP_COUNT,
            encoding="utf-8",
        )
        handler.setFormatter(_JsonFormatter())
        logger.addHandler(handler)
        logger.setLevel(level)
    return logger
