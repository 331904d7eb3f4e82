"""
Tests for export windows and the window filter.
"""

from datetime import date

import pytest

from kiro_metrics_exporter.exceptions import UnknownWindowError
from kiro_metrics_exporter.models import DailyStats, ExportWindow
from kiro_metrics_exporter.windows import (
    ALL_THROUGH_YESTERDAY,
    EPOCH_START,
    filter_daily_stats,
    get_window,
    trailing_days_window,
)


class TestWindows:
    """Window construction"""

    def test_trailing_7_days(self, today):
        window = get_window("trailing-7-days", today)

        assert window.start_date == date(2024, 5, 27)
        assert window.end_date == date(2024, 6, 2)
        assert window.name == "trailing-7-days"

    def test_trailing_30_days(self, today):
        window = get_window("trailing-30-days", today)

        assert window.start_date == date(2024, 5, 4)
        assert window.end_date == date(2024, 6, 2)

    def test_arbitrary_trailing_window(self, today):
        window = get_window("trailing-1-day", today)

        assert window.start_date == window.end_date == date(2024, 6, 2)

    def test_all_through_yesterday(self, today):
        window = get_window(ALL_THROUGH_YESTERDAY, today)

        assert window.start_date == EPOCH_START
        assert window.end_date == date(2024, 6, 2)

    def test_window_never_includes_today(self, today):
        for name in ("trailing-7-days", "trailing-30-days", ALL_THROUGH_YESTERDAY):
            assert not get_window(name, today).contains(today)

    @pytest.mark.parametrize("name", ["", "weekly", "trailing-0-days", "trailing-x-days"])
    def test_unknown_window(self, name, today):
        with pytest.raises(UnknownWindowError):
            get_window(name, today)

    def test_trailing_window_needs_a_day(self, today):
        with pytest.raises(ValueError):
            trailing_days_window(0, today)

    def test_str(self):
        window = ExportWindow("w", date(2024, 6, 1), date(2024, 6, 2))

        assert str(window) == "w (2024-06-01..2024-06-02)"


class TestFilterDailyStats:
    """Tests for filter_daily_stats"""

    @pytest.fixture
    def daily(self):
        return {
            "2024-05-26": DailyStats(file_write_lines=1),
            "2024-05-27": DailyStats(file_write_lines=2),
            "2024-06-01": DailyStats(file_write_lines=3),
            "2024-06-02": DailyStats(execution_count=1),
            "2024-06-03": DailyStats(execution_count=5),
        }

    def test_keeps_days_inside_window(self, daily, today):
        filtered = filter_daily_stats(daily, get_window("trailing-7-days", today))

        assert sorted(filtered) == ["2024-05-27", "2024-06-01", "2024-06-02"]

    def test_result_is_subset_with_same_values(self, daily, today):
        window = get_window("trailing-30-days", today)

        filtered = filter_daily_stats(daily, window)

        for key, stats in filtered.items():
            assert daily[key] is stats
            assert window.start_date <= date.fromisoformat(key) <= window.end_date

    def test_single_day_window(self, daily):
        window = ExportWindow("one", date(2024, 6, 2), date(2024, 6, 2))

        assert list(filter_daily_stats(daily, window)) == ["2024-06-02"]

    def test_empty_input(self, today):
        assert filter_daily_stats({}, get_window("trailing-7-days", today)) == {}

    def test_invalid_keys_are_dropped(self, today):
        daily = {"not-a-date": DailyStats(), "2024-06-01": DailyStats()}

        assert list(filter_daily_stats(daily, get_window("trailing-7-days", today))) == [
            "2024-06-01"
        ]

    def test_unpadded_keys_are_dropped(self, today):
        daily = {"2024-6-2": DailyStats(), "2024-06-01": DailyStats()}

        assert list(filter_daily_stats(daily, get_window("trailing-7-days", today))) == [
            "2024-06-01"
        ]
