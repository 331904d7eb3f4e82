"""
Logging for the metrics exporter.

Everything logs through one root logger, ``kiro_metrics``, which writes a
rotating text log and a rotating JSON Lines log (plus stderr when enabled).
Lines logged inside ``log_context`` carry the export id and day.

    from kiro_metrics_exporter.utils.logger import info, log_context

    with log_context(auto_export_id=True):
        info("[Exporter] Export started")
"""

import logging
from typing import Any, Optional

from .config import LogConfig, get_config
from .context import (
    ContextFilter,
    generate_export_id,
    get_day,
    get_export_id,
    log_context,
)
from .crash import install_crash_handler, uninstall_crash_handler
from .handlers import setup_handlers

ROOT_LOGGER_NAME = "kiro_metrics"

_root: Optional[logging.Logger] = None


def setup_logging(
    config: Optional[LogConfig] = None, install_crash: bool = False
) -> logging.Logger:
    """(Re)configure the root logger and return it.

    The command line calls this at startup with ``install_crash=True``;
    library callers get a default setup on their first log call.
    """
    global _root

    config = config or get_config()
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    setup_handlers(logger, config)
    # Keep exporter output out of the host application's root handlers
    logger.propagate = False

    if install_crash:
        install_crash_handler(logger, config)

    _root = logger
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """The root logger, or its child ``kiro_metrics.<name>``."""
    root = _root or setup_logging()
    return root.getChild(name) if name else root


def debug(msg: str, *args: Any, **kwargs: Any) -> None:
    get_logger().debug(msg, *args, **kwargs)


def info(msg: str, *args: Any, **kwargs: Any) -> None:
    get_logger().info(msg, *args, **kwargs)


def warn(msg: str, *args: Any, **kwargs: Any) -> None:
    get_logger().warning(msg, *args, **kwargs)


def error(msg: str, *args: Any, **kwargs: Any) -> None:
    get_logger().error(msg, *args, **kwargs)


__all__ = [
    "ROOT_LOGGER_NAME",
    "setup_logging",
    "get_logger",
    "debug",
    "info",
    "warn",
    "error",
    "LogConfig",
    "get_config",
    "log_context",
    "get_export_id",
    "get_day",
    "generate_export_id",
    "ContextFilter",
    "install_crash_handler",
    "uninstall_crash_handler",
]
