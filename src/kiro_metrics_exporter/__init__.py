"""Kiro Metrics Exporter - daily assistant usage metrics as idempotent CSV artifacts.

Scans locally persisted interaction records, aggregates them per calendar
day and writes one CSV per user and day under a deterministic storage key,
so repeated exports overwrite rather than duplicate.

Basic usage:
    from kiro_metrics_exporter import ExporterConfig, LocalObjectStore, run_export

    config = ExporterConfig.load(overrides={"records_dir": "~/.kiro/records"})
    summary = run_export(config, store=LocalObjectStore("/tmp/export"))
    print(summary.describe())
"""

__version__ = "0.1.0"

from .models import (
    DailyStats,
    DayExportResult,
    EventKind,
    ExportStatus,
    ExportSummary,
    ExportWindow,
    InteractionEvent,
    ParseFailure,
    ScanResult,
    StorageKey,
)
from .parser import RecordParser
from .scanner import scan_directory
from .aggregator import aggregate_daily
from .windows import (
    all_through_yesterday_window,
    filter_daily_stats,
    get_window,
    trailing_days_window,
)
from .csv_export import CSV_HEADER, serialize_daily_stats
from .storage import LocalObjectStore, ObjectStore, UploadRequest, build_storage_key
from .report import ActivityReport, generate_report
from .config import ExporterConfig
from .exporter import MetricsExporter, run_export
from .exceptions import (
    ConfigError,
    DirectoryNotFoundError,
    ExporterError,
    StoragePathError,
    UnknownWindowError,
)

__all__ = [
    # Models
    "DailyStats",
    "DayExportResult",
    "EventKind",
    "ExportStatus",
    "ExportSummary",
    "ExportWindow",
    "InteractionEvent",
    "ParseFailure",
    "ScanResult",
    "StorageKey",
    # Pipeline stages
    "RecordParser",
    "scan_directory",
    "aggregate_daily",
    "all_through_yesterday_window",
    "filter_daily_stats",
    "get_window",
    "trailing_days_window",
    "CSV_HEADER",
    "serialize_daily_stats",
    "build_storage_key",
    "LocalObjectStore",
    "ObjectStore",
    "UploadRequest",
    "ActivityReport",
    "generate_report",
    # Entry points
    "ExporterConfig",
    "MetricsExporter",
    "run_export",
    # Errors
    "ConfigError",
    "DirectoryNotFoundError",
    "ExporterError",
    "StoragePathError",
    "UnknownWindowError",
]
