"""
Daily aggregation of interaction events.

Folds events into per-day counters keyed by local calendar date. The fold
is order-independent and starts from a fresh map (or a copy of the one
given), so running it never merges with earlier runs.
"""

from typing import Iterable, Optional

from .models import DailyStats, DailyStatsMap, EventKind, InteractionEvent
from .utils.datetime import day_key, local_date


def apply_event(stats: DailyStats, event: InteractionEvent) -> None:
    """Add one event's contribution to a day's counters."""
    if event.kind == EventKind.FILE_WRITE:
        stats.file_write_lines += event.lines_added
    elif event.kind == EventKind.STRING_REPLACE:
        stats.edit_lines_added += event.lines_added
        stats.edit_lines_removed += event.lines_removed
    elif event.kind == EventKind.COMMAND_EXECUTION:
        stats.execution_count += 1
    # Unknown kinds contribute nothing


def aggregate_daily(
    events: Iterable[InteractionEvent],
    initial: Optional[DailyStatsMap] = None,
) -> DailyStatsMap:
    """Aggregate events into a date-keyed map of DailyStats.

    Args:
        events: Parsed interaction events, in any order
        initial: Optional map to continue from; it is copied, never mutated

    Returns:
        Map of YYYY-MM-DD -> DailyStats
    """
    daily: DailyStatsMap = {}
    if initial:
        daily = {key: stats.copy() for key, stats in initial.items()}

    for event in events:
        key = day_key(local_date(event.timestamp))
        stats = daily.get(key)
        if stats is None:
            stats = daily[key] = DailyStats()
        apply_event(stats, event)

    return daily
