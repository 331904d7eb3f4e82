"""
Handler set for the exporter's root logger.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .config import LogConfig, ensure_log_directory, get_config
from .context import ContextFilter
from .formatters import HumanFormatter, JsonFormatter


def _rotating(path: Path, config: LogConfig, formatter: logging.Formatter) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        path,
        maxBytes=config.rotate_bytes,
        backupCount=config.backup_count,
        encoding="utf-8",
    )
    # Files always get everything the logger lets through
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    return handler


def build_handlers(
    config: LogConfig, include_console: Optional[bool] = None
) -> list[logging.Handler]:
    """Text log, JSON log and (optionally) stderr, each with a ContextFilter."""
    ensure_log_directory(config)
    handlers: list[logging.Handler] = [
        _rotating(config.human_log_path, config, HumanFormatter()),
        _rotating(config.json_log_path, config, JsonFormatter()),
    ]

    console = config.console if include_console is None else include_console
    if console:
        stream = logging.StreamHandler(sys.stderr)
        stream.setLevel(logging.DEBUG if config.level <= logging.DEBUG else logging.WARNING)
        stream.setFormatter(HumanFormatter())
        handlers.append(stream)

    # On the handlers, not the logger, so child loggers' records get context too
    context_filter = ContextFilter()
    for handler in handlers:
        handler.addFilter(context_filter)
    return handlers


def setup_handlers(
    logger: logging.Logger,
    config: Optional[LogConfig] = None,
    include_console: Optional[bool] = None,
) -> None:
    """Replace (and close) the logger's handlers with a fresh set."""
    config = config or get_config()

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    for handler in build_handlers(config, include_console):
        logger.addHandler(handler)
    logger.setLevel(config.level)
