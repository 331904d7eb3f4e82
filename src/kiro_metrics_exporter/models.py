"""
Export data models.

Dataclasses for parsed interaction events, per-day statistics, export
windows and the outcome values produced by scans and exports.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Optional


class EventKind(str, Enum):
    """Kind of assistant activity recorded in an interaction event."""

    FILE_WRITE = "fsWrite"
    STRING_REPLACE = "strReplace"
    COMMAND_EXECUTION = "executeBash"
    UNKNOWN = "unknown"


class ParseFailureReason(str, Enum):
    """Why a raw record was rejected."""

    MALFORMED = "malformed"
    MISSING_FIELD = "missing_field"
    WRONG_TYPE = "wrong_type"
    NEGATIVE_VALUE = "negative_value"
    UNPARSEABLE_TIMESTAMP = "unparseable_timestamp"


@dataclass(frozen=True)
class InteractionEvent:
    """One parsed record of assistant activity."""

    timestamp: datetime
    kind: EventKind
    lines_added: int = 0
    lines_removed: int = 0
    raw_kind: str = ""
    source: Optional[Path] = None


@dataclass(frozen=True)
class ParseFailure:
    """A rejected record. Falsy, so ``if not result`` reads naturally."""

    reason: ParseFailureReason
    detail: str
    field: Optional[str] = None

    def __bool__(self) -> bool:
        return False

    def __str__(self) -> str:
        return f"{self.reason.value}: {self.detail}"


@dataclass
class DailyStats:
    """Accumulated counters for one calendar date."""

    file_write_lines: int = 0
    edit_lines_added: int = 0
    edit_lines_removed: int = 0
    execution_count: int = 0

    @property
    def net_code_lines(self) -> int:
        """Lines written plus lines added by edits minus lines removed.

        Negative when deletions dominate.
        """
        return self.file_write_lines + self.edit_lines_added - self.edit_lines_removed

    def copy(self) -> "DailyStats":
        return DailyStats(
            file_write_lines=self.file_write_lines,
            edit_lines_added=self.edit_lines_added,
            edit_lines_removed=self.edit_lines_removed,
            execution_count=self.execution_count,
        )


# Date key (YYYY-MM-DD) -> stats for that date
DailyStatsMap = dict[str, DailyStats]


@dataclass(frozen=True)
class SkippedFile:
    """A file the scanner did not turn into events."""

    path: Path
    reason: str


@dataclass
class ScanResult:
    """Everything one directory scan produced."""

    events: list[InteractionEvent] = field(default_factory=list)
    skipped: list[SkippedFile] = field(default_factory=list)
    files_scanned: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.events


@dataclass(frozen=True)
class ExportWindow:
    """A named, inclusive range of calendar days."""

    name: str
    start_date: date
    end_date: date

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def __str__(self) -> str:
        return f"{self.name} ({self.start_date.isoformat()}..{self.end_date.isoformat()})"


@dataclass(frozen=True)
class StorageKey:
    """Bucket and object key for one exported artifact."""

    bucket: str
    key: str
    scheme: str = "s3"

    @property
    def uri(self) -> str:
        return f"{self.scheme}://{self.bucket}/{self.key}"


class ExportStatus(str, Enum):
    """Overall outcome of an export run."""

    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"
    NO_RECORDS = "no_records"
    NO_DATA_IN_WINDOW = "no_data_in_window"


@dataclass(frozen=True)
class DayExportResult:
    """Outcome of exporting one day's artifact."""

    day: str
    storage_key: StorageKey
    success: bool
    error: Optional[str] = None
    uploaded: bool = True


@dataclass
class ExportSummary:
    """Result of one export run."""

    status: ExportStatus
    window: ExportWindow
    scan: ScanResult
    days: list[str] = field(default_factory=list)
    results: list[DayExportResult] = field(default_factory=list)
    export_id: Optional[str] = None

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> list[DayExportResult]:
        return [r for r in self.results if not r.success]

    @property
    def expected(self) -> int:
        return len(self.days)

    def describe(self) -> str:
        """One-line operator summary."""
        if self.status == ExportStatus.NO_RECORDS:
            return "No valid records found; nothing exported"
        if self.status == ExportStatus.NO_DATA_IN_WINDOW:
            return f"No data in window {self.window}; nothing exported"
        return f"{self.succeeded}/{self.expected} days exported ({self.status.value})"
