"""
Crash hook: unhandled exceptions from the command line go to the crash log.
"""

import logging
import sys
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from .config import LogConfig


class CrashHook:
    """``sys.excepthook`` wrapper.

    Logs the exception at CRITICAL, appends the traceback to the crash log
    and then hands over to the hook it replaced. KeyboardInterrupt goes
    straight to the previous hook.
    """

    def __init__(self, logger: logging.Logger, crash_log: Path, previous: Callable):
        self.logger = logger
        self.crash_log = crash_log
        self.previous = previous

    def __call__(self, exc_type, exc_value, exc_traceback) -> None:
        if not issubclass(exc_type, KeyboardInterrupt):
            self.logger.critical(
                "Unhandled exception", exc_info=(exc_type, exc_value, exc_traceback)
            )
            self._append(traceback.format_exception(exc_type, exc_value, exc_traceback))
        self.previous(exc_type, exc_value, exc_traceback)

    def _append(self, tb_lines: list[str]) -> None:
        banner = "=" * 80
        stamp = datetime.now(tz=timezone.utc).isoformat(timespec="seconds")
        try:
            self.crash_log.parent.mkdir(parents=True, exist_ok=True)
            with open(self.crash_log, "a", encoding="utf-8") as f:
                f.write(f"\n{banner}\nCRASH at {stamp}\n{banner}\n")
                f.writelines(tb_lines)
        except OSError as e:
            print(f"Could not write crash log {self.crash_log}: {e}", file=sys.stderr)


def install_crash_handler(logger: logging.Logger, config: LogConfig) -> None:
    """Install a CrashHook, replacing any CrashHook already installed."""
    current = sys.excepthook
    previous = current.previous if isinstance(current, CrashHook) else current
    sys.excepthook = CrashHook(logger, config.crash_log_path, previous)


def uninstall_crash_handler() -> None:
    """Put back the hook that was active before install_crash_handler."""
    hook: Optional[CrashHook] = (
        sys.excepthook if isinstance(sys.excepthook, CrashHook) else None
    )
    if hook is not None:
        sys.excepthook = hook.previous
