"""
Logging settings, resolved from ``KIRO_METRICS_*`` environment variables.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

DEBUG_ENV = "KIRO_METRICS_DEBUG"
LOG_LEVEL_ENV = "KIRO_METRICS_LOG_LEVEL"
LOG_CONSOLE_ENV = "KIRO_METRICS_LOG_CONSOLE"
LOG_DIR_ENV = "KIRO_METRICS_LOG_DIR"

# XDG state location
DEFAULT_LOG_DIR = Path.home() / ".local" / "state" / "kiro-metrics-exporter" / "logs"

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


@dataclass
class LogConfig:
    """Where and how much the exporter logs.

    Both log files rotate at ``rotate_bytes`` and keep ``backup_count``
    old copies. The console handler writes to stderr.
    """

    log_dir: Path = field(default_factory=lambda: DEFAULT_LOG_DIR)
    level: int = logging.INFO
    console: bool = False
    rotate_bytes: int = 5 * 1024 * 1024
    backup_count: int = 3

    @property
    def human_log_path(self) -> Path:
        return self.log_dir / "export.log"

    @property
    def json_log_path(self) -> Path:
        return self.log_dir / "export.jsonl"

    @property
    def crash_log_path(self) -> Path:
        return self.log_dir / "crash.log"


def _flag(value: Optional[str]) -> Optional[bool]:
    value = (value or "").strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    return None


def get_config(environ: Optional[Mapping[str, str]] = None) -> LogConfig:
    """Build a LogConfig from the environment.

    ``KIRO_METRICS_DEBUG`` turns on debug level and console output;
    ``KIRO_METRICS_LOG_LEVEL`` and ``KIRO_METRICS_LOG_CONSOLE`` then refine
    that, and ``KIRO_METRICS_LOG_DIR`` moves the log files.
    """
    env = os.environ if environ is None else environ
    config = LogConfig()

    if _flag(env.get(DEBUG_ENV)):
        config.level = logging.DEBUG
        config.console = True

    level_name = env.get(LOG_LEVEL_ENV, "").strip().upper()
    if level_name in LEVELS:
        config.level = LEVELS[level_name]

    console = _flag(env.get(LOG_CONSOLE_ENV))
    if console is not None:
        config.console = console

    if env.get(LOG_DIR_ENV):
        config.log_dir = Path(env[LOG_DIR_ENV]).expanduser()

    return config


def ensure_log_directory(config: LogConfig) -> Path:
    config.log_dir.mkdir(parents=True, exist_ok=True)
    return config.log_dir
