"""
Activity report over a full, unfiltered scan.

Independent of the CSV export path: it only reads the events it is given.
"""

import html as html_module
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Optional

from .aggregator import aggregate_daily
from .models import DailyStatsMap, EventKind, InteractionEvent
from .utils.datetime import local_date

KIND_LABELS = {
    EventKind.FILE_WRITE: "File writes",
    EventKind.STRING_REPLACE: "String-replace edits",
    EventKind.COMMAND_EXECUTION: "Command executions",
    EventKind.UNKNOWN: "Other/unknown",
}

# Chart colors (plotly default palette)
COLORS = {
    "primary": "#636EFA",
    "secondary": "#EF553B",
}


@dataclass
class ActivityReport:
    """Summary of a set of interaction events."""

    total_events: int = 0
    kind_counts: dict[EventKind, int] = field(default_factory=dict)
    unknown_kinds: dict[str, int] = field(default_factory=dict)
    file_write_lines: int = 0
    edit_lines_added: int = 0
    edit_lines_removed: int = 0
    first_date: Optional[date] = None
    last_date: Optional[date] = None
    daily: DailyStatsMap = field(default_factory=dict)

    @property
    def execution_count(self) -> int:
        return self.kind_counts.get(EventKind.COMMAND_EXECUTION, 0)

    @property
    def net_code_lines(self) -> int:
        return self.file_write_lines + self.edit_lines_added - self.edit_lines_removed

    @property
    def active_days(self) -> int:
        return len(self.daily)

    def to_text(self) -> str:
        """Render the report as plain text."""
        lines = [
            "=" * 50,
            "       ASSISTANT ACTIVITY REPORT",
            "=" * 50,
            "",
        ]

        if not self.total_events:
            lines.append("No events found.")
            return "\n".join(lines)

        lines.extend(
            [
                f"Date range: {self.first_date.isoformat()} to {self.last_date.isoformat()}",
                f"Active days: {self.active_days}",
                f"Total events: {self.total_events}",
                "",
                "Events by kind:",
            ]
        )
        for kind in EventKind:
            lines.append(f"  {KIND_LABELS[kind]}: {self.kind_counts.get(kind, 0)}")
        for raw_kind, count in sorted(self.unknown_kinds.items()):
            lines.append(f"    {raw_kind}: {count}")

        lines.extend(
            [
                "",
                "Lines:",
                f"  Written by file writes: {self.file_write_lines}",
                f"  Added by edits: {self.edit_lines_added}",
                f"  Removed by edits: {self.edit_lines_removed}",
                f"  Net code lines: {self.net_code_lines}",
                "",
                f"Commands executed: {self.execution_count}",
            ]
        )
        return "\n".join(lines)

    def to_html(self) -> str:
        """Render the report as an HTML page with a daily net-lines chart."""
        chart_html = create_daily_lines_chart(self.daily)
        body = html_module.escape(self.to_text())
        parts = [
            "<!DOCTYPE html>\n<html>\n<head>\n",
            '    <meta charset="utf-8">\n',
            "    <title>Assistant Activity Report</title>\n",
        ]
        if chart_html:
            parts.append('    <script src="https://cdn.plot.ly/plotly-2.27.0.min.js"></script>\n')
        parts.extend(
            [
                "</head>\n<body>\n",
                f"<pre>{body}</pre>\n",
                f'<div class="chart-container">{chart_html}</div>\n' if chart_html else "",
                f'<p class="footer">Generated: {datetime.now().strftime("%Y-%m-%d %H:%M:%S")}</p>\n',
                "</body>\n</html>\n",
            ]
        )
        return "".join(parts)


def create_daily_lines_chart(daily: DailyStatsMap) -> str:
    """Bar chart of net code lines and executions per day (empty without plotly)."""
    try:
        import plotly.graph_objects as go
    except ImportError:
        return ""

    if not daily:
        return ""

    days = sorted(daily)
    fig = go.Figure(
        data=[
            go.Bar(
                x=days,
                y=[daily[d].net_code_lines for d in days],
                name="Net code lines",
                marker_color=COLORS["primary"],
            ),
            go.Bar(
                x=days,
                y=[daily[d].execution_count for d in days],
                name="Commands executed",
                marker_color=COLORS["secondary"],
            ),
        ]
    )
    fig.update_layout(
        title_text="Daily Activity",
        barmode="group",
        height=350,
        margin=dict(t=50, b=40, l=40, r=20),
    )
    return fig.to_html(full_html=False, include_plotlyjs=False)


def generate_report(events: Iterable[InteractionEvent]) -> ActivityReport:
    """Summarize events: counts per kind, line totals and date span."""
    events = list(events)
    report = ActivityReport(total_events=len(events))
    if not events:
        return report

    kind_counts: Counter = Counter()
    unknown: Counter = Counter()
    days = set()

    for event in events:
        kind_counts[event.kind] += 1
        if event.kind == EventKind.UNKNOWN:
            unknown[event.raw_kind or "(blank)"] += 1
        elif event.kind == EventKind.FILE_WRITE:
            report.file_write_lines += event.lines_added
        elif event.kind == EventKind.STRING_REPLACE:
            report.edit_lines_added += event.lines_added
            report.edit_lines_removed += event.lines_removed
        days.add(local_date(event.timestamp))

    report.kind_counts = dict(kind_counts)
    report.unknown_kinds = dict(unknown)
    report.first_date = min(days)
    report.last_date = max(days)
    report.daily = aggregate_daily(events)
    return report
