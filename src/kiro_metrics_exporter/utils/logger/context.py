"""
Per-run logging context.

Each export run gets a short id, and each upload the day it handles. Both
live in ContextVars, so worker threads started with a copied context log
under the same run.
"""

import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

export_id_var: ContextVar[Optional[str]] = ContextVar("export_id", default=None)
day_var: ContextVar[Optional[str]] = ContextVar("day", default=None)


def get_export_id() -> Optional[str]:
    return export_id_var.get()


def get_day() -> Optional[str]:
    return day_var.get()


def generate_export_id() -> str:
    """8 hex characters; short enough to grep for."""
    return uuid.uuid4().hex[:8]


@contextmanager
def log_context(
    export_id: Optional[str] = None,
    day: Optional[str] = None,
    auto_export_id: bool = False,
) -> Iterator[dict[str, Optional[str]]]:
    """Set the export id and/or day for the enclosed block.

    Values not given are inherited from the enclosing context; everything
    is restored on exit.

    Args:
        export_id: Run id to set
        day: Day key (YYYY-MM-DD) being processed
        auto_export_id: Generate a run id when export_id is not given

    Yields:
        {"export_id": ..., "day": ...} as active inside the block
    """
    if export_id is None and auto_export_id:
        export_id = generate_export_id()

    tokens = []
    if export_id is not None:
        tokens.append((export_id_var, export_id_var.set(export_id)))
    if day is not None:
        tokens.append((day_var, day_var.set(day)))

    try:
        yield {"export_id": export_id_var.get(), "day": day_var.get()}
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


class ContextFilter(logging.Filter):
    """Copies the run context onto every record it sees."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.export_id = export_id_var.get()
        record.day = day_var.get()
        return True
