"""
CSV serialization of one user's metrics for one day.

The document is a fixed header plus a single data row. Column order is
part of the schema: downstream consumers read every column after the
first two by position, so CSV_COLUMNS may only change together with
CSV_SCHEMA_VERSION.
"""

from .models import DailyStats
from .utils.datetime import parse_day_key

CSV_SCHEMA_VERSION = 1
CONTENT_TYPE = "text/csv"

CSV_COLUMNS = (
    "UserId",
    "Date",
    "Chat_AICodeLines",
    "Chat_MessagesInteracted",
    "Chat_MessagesSent",
    "Inline_AICodeLines",
    "Inline_AcceptanceCount",
    "Inline_SuggestionsCount",
    "Dev_AcceptedLines",
    "Dev_GeneratedLines",
    "Dev_GenerationEventCount",
    "Agent_FileWriteLines",
    "Agent_EditLinesAdded",
    "Agent_EditLinesRemoved",
    "Agent_ExecutionCount",
)

CSV_HEADER = ",".join(CSV_COLUMNS)

OUTPUT_DATE_FORMAT = "%m-%d-%Y"


def net_code_lines(stats: DailyStats) -> int:
    """Signed net lines for a day; negative values are kept as-is."""
    return stats.file_write_lines + stats.edit_lines_added - stats.edit_lines_removed


def quote(value: str) -> str:
    """Quote a CSV text field, doubling embedded quotes."""
    return '"' + value.replace('"', '""') + '"'


def format_date(day_key: str) -> str:
    """Convert a YYYY-MM-DD key to the MM-DD-YYYY form used in rows."""
    return parse_day_key(day_key).strftime(OUTPUT_DATE_FORMAT)


def build_row(day_key: str, stats: DailyStats, user_id: str) -> list[str]:
    """Field values for the data row, in CSV_COLUMNS order."""
    values = {
        "UserId": quote(user_id),
        "Date": format_date(day_key),
        "Chat_AICodeLines": net_code_lines(stats),
        "Agent_FileWriteLines": stats.file_write_lines,
        "Agent_EditLinesAdded": stats.edit_lines_added,
        "Agent_EditLinesRemoved": stats.edit_lines_removed,
        "Agent_ExecutionCount": stats.execution_count,
    }
    # Columns this exporter does not measure are reported as zero
    return [str(values.get(column, 0)) for column in CSV_COLUMNS]


def serialize_daily_stats(day_key: str, stats: DailyStats, user_id: str) -> str:
    """Render one day's statistics as a two-line CSV document.

    Args:
        day_key: Day in YYYY-MM-DD form
        stats: Aggregated statistics for that day
        user_id: Resolved user identifier

    Returns:
        Header line and data row, each terminated by a newline

    Raises:
        ValueError: If day_key is not a valid YYYY-MM-DD date
    """
    row = ",".join(build_row(day_key, stats, user_id))
    return f"{CSV_HEADER}\n{row}\n"
