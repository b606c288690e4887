"""
Log formatting for dim.

Records carry run context through ``extra=`` (run_id, prompt_index, attempt,
...) so every retry of every prompt can be traced to its run.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict


# Fields copied from ``extra=`` into formatted output when present
CONTEXT_FIELDS = ("run_id", "prompt_index", "attempt", "subject_type", "model")

# Subset shown in the human-readable suffix
SHORT_CONTEXT_FIELDS = ("run_id", "prompt_index", "attempt")


def record_context(record: logging.LogRecord, fields=CONTEXT_FIELDS) -> Dict[str, Any]:
    """Return the context fields set on a record, in field order."""
    context = {}
    for name in fields:
        value = getattr(record, name, None)
        if value is not None:
            context[name] = value
    return context


class StructuredFormatter(logging.Formatter):
    """One JSON object per line: level, logger, message, timestamp and run context."""

    def __init__(self, include_timestamp: bool = True):
        super().__init__()
        self.include_timestamp = include_timestamp

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.include_timestamp:
            entry["timestamp"] = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        entry.update(record_context(record))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Plain text lines with a ``[run_id=.. prompt_index=.. attempt=..]`` suffix.
    """

    def __init__(self, include_timestamp: bool = True):
        prefix = "%(asctime)s - " if include_timestamp else ""
        super().__init__(prefix + "%(name)s - %(levelname)s - %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = record_context(record, SHORT_CONTEXT_FIELDS)
        if not context:
            return line
        suffix = " ".join(f"{k}={v}" for k, v in context.items())
        return f"{line} [{suffix}]"


def configure_logging(level: int = logging.INFO, structured: bool = False) -> None:
    """
    Attach a stderr handler to the ``dim`` logger.

    Calling it again only changes the level; the first call's handler stays.
    """
    dim_logger = logging.getLogger("dim")
    dim_logger.setLevel(level)

    if dim_logger.handlers:
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(StructuredFormatter() if structured else HumanReadableFormatter())
    dim_logger.addHandler(handler)
