"""
Export windows and the time-window filter.

A window is an inclusive range of calendar days. Standard windows end
yesterday relative to a ``today`` captured once per export run.
"""

import re
from datetime import date, timedelta
from typing import Optional

from .exceptions import UnknownWindowError
from .models import DailyStatsMap, ExportWindow
from .utils.datetime import parse_day_key, today_local, yesterday

# Start of the "all data" window
EPOCH_START = date(1970, 1, 1)

ALL_THROUGH_YESTERDAY = "all-through-yesterday"
TRAILING_7_DAYS = "trailing-7-days"
TRAILING_30_DAYS = "trailing-30-days"
DEFAULT_WINDOW = TRAILING_7_DAYS

WINDOW_NAMES = (TRAILING_7_DAYS, TRAILING_30_DAYS, ALL_THROUGH_YESTERDAY)

_TRAILING_RE = re.compile(r"^trailing-(\d+)-days?$")


def trailing_days_window(days: int, today: Optional[date] = None) -> ExportWindow:
    """The ``days`` days before today: today-days .. today-1."""
    if days < 1:
        raise ValueError(f"Trailing window needs at least 1 day, got {days}")
    today = today or today_local()
    return ExportWindow(
        name=f"trailing-{days}-days",
        start_date=today - timedelta(days=days),
        end_date=yesterday(today),
    )


def all_through_yesterday_window(today: Optional[date] = None) -> ExportWindow:
    """Everything from EPOCH_START through yesterday."""
    today = today or today_local()
    return ExportWindow(
        name=ALL_THROUGH_YESTERDAY,
        start_date=EPOCH_START,
        end_date=yesterday(today),
    )


def get_window(name: str, today: Optional[date] = None) -> ExportWindow:
    """Build a named window.

    Recognized names: ``all-through-yesterday`` and ``trailing-<N>-days``
    (``trailing-7-days`` and ``trailing-30-days`` among them).

    Raises:
        UnknownWindowError: For any other name.
    """
    if name == ALL_THROUGH_YESTERDAY:
        return all_through_yesterday_window(today)

    match = _TRAILING_RE.match(name)
    if match and int(match.group(1)) >= 1:
        return trailing_days_window(int(match.group(1)), today)

    raise UnknownWindowError(
        f"Unknown export window {name!r}; expected one of "
        f"{', '.join(WINDOW_NAMES)} or trailing-<N>-days"
    )


def filter_daily_stats(daily: DailyStatsMap, window: ExportWindow) -> DailyStatsMap:
    """Keep the days of ``daily`` that fall inside ``window``.

    Keys and values are carried over unchanged; keys that are not valid
    YYYY-MM-DD dates are dropped.
    """
    filtered: DailyStatsMap = {}
    for key, stats in daily.items():
        try:
            day = parse_day_key(key)
        except ValueError:
            continue
        if window.contains(day):
            filtered[key] = stats
    return filtered
