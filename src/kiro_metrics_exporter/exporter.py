"""
Export pipeline: scan -> aggregate -> filter -> serialize -> upload.

Each run rescans the records directory from scratch and derives every
storage key from (prefix, day, user) only, so repeating an export
overwrites the same objects. Days are uploaded independently: one failed
upload is reported in the summary without affecting the others.
"""

import contextvars
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Optional

from .aggregator import aggregate_daily
from .config import ExporterConfig
from .csv_export import CONTENT_TYPE, serialize_daily_stats
from .exceptions import ConfigError, DirectoryNotFoundError
from .models import (
    DailyStatsMap,
    DayExportResult,
    ExportStatus,
    ExportSummary,
    ExportWindow,
    ScanResult,
    StorageKey,
)
from .scanner import scan_directory
from .storage import ObjectStore, UploadRequest, build_storage_key, parse_path_prefix
from .utils.datetime import now_iso, today_local
from .utils.logger import error, info, log_context, warn
from .windows import filter_daily_stats, get_window


class MetricsExporter:
    """Runs exports for one resolved configuration.

    Usage:
        exporter = MetricsExporter(config, store=LocalObjectStore("/tmp/out"))
        summary = exporter.export()
        print(summary.describe())
    """

    def __init__(
        self,
        config: ExporterConfig,
        store: Optional[ObjectStore] = None,
    ):
        self.config = config.validate()
        self.store = store

    def export(
        self,
        window: Optional[ExportWindow] = None,
        today: Optional[date] = None,
        dry_run: bool = False,
    ) -> ExportSummary:
        """Run one export.

        Args:
            window: Window to export; defaults to the configured named window
            today: Reference date; captured once, defaults to the local date now
            dry_run: Serialize and key every day without uploading

        Returns:
            ExportSummary with one DayExportResult per day in the window

        Raises:
            DirectoryNotFoundError: The records directory does not exist
            StoragePathError: The configured path prefix is malformed
            UnknownWindowError: The configured window name is not recognized
            ConfigError: No object store was given for a non-dry run
        """
        if not dry_run and self.store is None:
            raise ConfigError("An object store is required unless dry_run is set")

        today = today or today_local()

        with log_context(auto_export_id=True) as ctx:
            records_path = self.config.records_path
            if not records_path.is_dir():
                error(f"[Exporter] Records directory not found: {records_path}")
                raise DirectoryNotFoundError(records_path)

            # Fail on a bad prefix before any scanning or uploading
            parse_path_prefix(self.config.path_prefix)

            window = window or get_window(self.config.window, today)
            info(f"[Exporter] Export started: window {window}, user {self.config.user_id}")

            scan = scan_directory(records_path, workers=self.config.scan_workers)
            summary = ExportSummary(
                status=ExportStatus.SUCCESS,
                window=window,
                scan=scan,
                export_id=ctx["export_id"],
            )

            if scan.is_empty:
                warn(
                    f"[Exporter] No valid records in {records_path} "
                    f"({scan.files_scanned} files, {len(scan.skipped)} skipped)"
                )
                summary.status = ExportStatus.NO_RECORDS
                return summary

            daily = filter_daily_stats(aggregate_daily(scan.events), window)
            if not daily:
                warn(f"[Exporter] No data in window {window}")
                summary.status = ExportStatus.NO_DATA_IN_WINDOW
                return summary

            summary.days = sorted(daily)
            requests = self.build_requests(daily, window)

            if dry_run:
                summary.results = [
                    DayExportResult(day, key, success=True, uploaded=False)
                    for day, (key, _) in requests.items()
                ]
            else:
                summary.results = self.upload_all(requests)

            summary.status = _overall_status(summary)
            info(f"[Exporter] Export finished: {summary.describe()}")
            return summary

    def build_requests(
        self, daily: DailyStatsMap, window: ExportWindow
    ) -> dict[str, tuple[StorageKey, UploadRequest]]:
        """Serialize and key every day before anything is uploaded.

        Returns:
            Day key -> (StorageKey, UploadRequest), in date order
        """
        exported_at = now_iso()
        requests = {}
        for day in sorted(daily):
            storage_key = build_storage_key(
                day,
                self.config.user_id,
                self.config.path_prefix,
                self.config.artifact_name,
            )
            body = serialize_daily_stats(day, daily[day], self.config.user_id)
            requests[day] = (
                storage_key,
                UploadRequest(
                    bucket=storage_key.bucket,
                    key=storage_key.key,
                    body=body.encode("utf-8"),
                    content_type=CONTENT_TYPE,
                    metadata={
                        "export-timestamp": exported_at,
                        "date": day,
                        "user-id": self.config.user_id,
                        "window": window.name,
                    },
                ),
            )
        return requests

    def upload_all(
        self, requests: dict[str, tuple[StorageKey, UploadRequest]]
    ) -> list[DayExportResult]:
        """Upload every day, sequentially or in a thread pool."""
        workers = self.config.upload_workers
        if workers <= 1 or len(requests) <= 1:
            return [self._upload_day(day, *requests[day]) for day in requests]

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                # Each task gets a copy of the context so log lines keep the export id
                executor.submit(
                    contextvars.copy_context().run, self._upload_day, day, *requests[day]
                )
                for day in requests
            ]
            results = [future.result() for future in futures]
        return sorted(results, key=lambda r: r.day)

    def _upload_day(
        self, day: str, storage_key: StorageKey, request: UploadRequest
    ) -> DayExportResult:
        with log_context(day=day):
            try:
                self.store.put_object(request)
            except Exception as e:  # Intentional catch-all: store implementations raise anything
                error(f"[Exporter] Upload failed for {storage_key.uri}: {e}")
                return DayExportResult(day, storage_key, success=False, error=str(e))

            info(f"[Exporter] Uploaded {storage_key.uri}")
            return DayExportResult(day, storage_key, success=True)


def _overall_status(summary: ExportSummary) -> ExportStatus:
    if summary.succeeded == summary.expected:
        return ExportStatus.SUCCESS
    if summary.succeeded == 0:
        return ExportStatus.FAILED
    return ExportStatus.PARTIAL


def run_export(
    config: ExporterConfig,
    store: Optional[ObjectStore] = None,
    window_name: Optional[str] = None,
    today: Optional[date] = None,
    dry_run: bool = False,
) -> ExportSummary:
    """Convenience wrapper: build an exporter and run one export."""
    today = today or today_local()
    window = get_window(window_name, today) if window_name else None
    return MetricsExporter(config, store).export(window=window, today=today, dry_run=dry_run)


def scan_only(config: ExporterConfig) -> ScanResult:
    """Scan the configured records directory without exporting."""
    if not config.records_dir:
        raise ConfigError("Missing required configuration: records_dir")
    records_path = config.records_path
    if not records_path.is_dir():
        raise DirectoryNotFoundError(records_path)
    return scan_directory(records_path, workers=config.scan_workers)
