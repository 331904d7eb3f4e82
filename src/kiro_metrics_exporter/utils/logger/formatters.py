"""
Log formatters: one aligned text line per record, or one JSON object.
"""

import json
import logging
import time
from datetime import datetime, timezone
from typing import Any

# Record attribute -> label in the text log
CONTEXT_LABELS = {"export_id": "export", "day": "day"}


def context_fields(record: logging.LogRecord) -> dict[str, str]:
    """Export-run context set on the record by ContextFilter."""
    fields = {}
    for name in CONTEXT_LABELS:
        value = getattr(record, name, None)
        if value:
            fields[name] = value
    return fields


class HumanFormatter(logging.Formatter):
    """Text lines in UTC, with the run context appended:

        2024-06-03 09:12:45.123 | INFO  | exporter.py:192 | [Exporter] Uploaded s3://... [export=1f2e3d4c day=2024-06-02]
    """

    converter = time.gmtime

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s.%(msecs)03d | %(levelname)-5s | %(filename)s:%(lineno)d | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        context = context_fields(record)
        if context:
            tags = " ".join(f"{CONTEXT_LABELS[k]}={v}" for k, v in context.items())
            line = f"{line} [{tags}]"
        return line


class JsonFormatter(logging.Formatter):
    """JSON Lines formatter for machine consumption."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(
                timespec="milliseconds"
            ),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.filename}:{record.lineno}",
            "function": record.funcName,
            **context_fields(record),
        }

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": self.formatException(record.exc_info).splitlines(),
            }

        return json.dumps(entry, ensure_ascii=False, default=str)
