"""Structured logging for compliance runs.

Records carry their run context as ``compliance_*`` extras (client id, regimen
kind, week start, overlap and unmatched counts). Both formats surface that
context: JSON nests it under ``"context"``, text appends ``key=value`` pairs.
"""

import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from typing import Any

CONTEXT_PREFIX = "compliance_"
LOG_FORMATS = ("json", "text")


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    """The record's ``compliance_*`` extras, keyed without the prefix."""
    return {
        key[len(CONTEXT_PREFIX):]: value
        for key, value in sorted(record.__dict__.items())
        if key.startswith(CONTEXT_PREFIX)
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = record_context(record)
        if context:
            log_entry["context"] = context
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = "".join(traceback.format_exception(*record.exc_info))
        return json.dumps(log_entry, default=str)


class ContextTextFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = record_context(record)
        if not context:
            return line
        pairs = " ".join(f"{key}={value}" for key, value in context.items())
        head, sep, tail = line.partition("\n")
        return f"{head} [{pairs}]{sep}{tail}"


def setup_logging(log_format: str, level: int = logging.INFO) -> None:
    """Install a single stderr handler on the root logger."""
    if log_format not in LOG_FORMATS:
        raise ValueError(f"log_format must be one of {LOG_FORMATS}, got {log_format!r}")

    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if log_format == "json" else ContextTextFormatter())
    root.addHandler(handler)
