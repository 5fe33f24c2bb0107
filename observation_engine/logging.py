"""
Structured Logging — JSON Output for Production

Configures Python logging to emit structured JSON logs under the
``observation_engine`` namespace. Each entry carries timestamp, level,
logger name and any whitelisted context fields.

Usage:
    from observation_engine.logging import get_logger
    logger = get_logger("classifier")
    logger.info("Submission scored", extra={"total_points": 35, "line_count": 4})
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone


LOG_LEVEL = os.getenv("OBSERVATION_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("OBSERVATION_LOG_FORMAT", "json")  # "json" or "text"

# Context fields copied from ``extra=`` into the JSON entry
EXTRA_FIELDS = (
    "rule_id", "outcome_type", "points", "total_points", "line_count",
    "valid_count", "penalty_count", "pack_id", "level_id", "decoy_verb",
    "registry_version", "error", "error_type", "duration_ms",
    "status_code", "method", "path",
)


class JSONFormatter(logging.Formatter):
    """Formats log records as JSON lines."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                entry[key] = val

        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable format for development."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)-8s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def setup_logging(level: str | None = None, fmt: str | None = None):
    """Configure the package root logger. Call once at app startup."""
    root = logging.getLogger("observation_engine")
    level_name = (level or LOG_LEVEL).upper()
    root.setLevel(getattr(logging, level_name, logging.INFO))

    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    if (fmt or LOG_FORMAT) == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(TextFormatter())

    root.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    return root


def get_logger(name: str) -> logging.Logger:
    """Get a named logger under the observation_engine namespace."""
    return logging.getLogger(f"observation_engine.{name}")
