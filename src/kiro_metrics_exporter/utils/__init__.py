"""Utility modules for kiro-metrics-exporter."""

from .datetime import day_key, local_date, parse_day_key, parse_timestamp, today_local

__all__ = [
    "day_key",
    "local_date",
    "parse_day_key",
    "parse_timestamp",
    "today_local",
]
