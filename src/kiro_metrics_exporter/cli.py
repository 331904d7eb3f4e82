"""Command-line interface for kiro-metrics-exporter."""

import argparse
import sys
from pathlib import Path
from typing import Optional

from .config import ExporterConfig
from .exceptions import ExporterError
from .exporter import run_export, scan_only
from .models import ExportStatus
from .report import generate_report
from .storage import LocalObjectStore
from .utils.logger import setup_logging
from .windows import WINDOW_NAMES

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NO_DATA = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kiro-metrics",
        description="Export daily assistant usage metrics as CSV artifacts",
        epilog="""
Examples:
  kiro-metrics export --output-dir ./out            Export trailing 7 days to ./out
  kiro-metrics export --window all-through-yesterday --dry-run
  kiro-metrics report --html report.html            Summary of every record
  kiro-metrics scan -v                              Show skipped files

Configuration is read from ~/.config/kiro-metrics-exporter/config.json and
KIRO_METRICS_* environment variables; flags override both.
""",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", metavar="FILE", help="Config file path")
    parser.add_argument(
        "--records-dir", metavar="PATH", help="Root directory of interaction records"
    )

    # Same options after the subcommand; SUPPRESS keeps a value given before it
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config", metavar="FILE", default=argparse.SUPPRESS, help="Config file path"
    )
    common.add_argument(
        "--records-dir",
        metavar="PATH",
        default=argparse.SUPPRESS,
        help="Root directory of interaction records",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    export_parser = subparsers.add_parser(
        "export", parents=[common], help="Export daily CSV artifacts"
    )
    export_parser.add_argument(
        "--window",
        metavar="NAME",
        help=f"Export window ({', '.join(WINDOW_NAMES)} or trailing-<N>-days)",
    )
    export_parser.add_argument("--path-prefix", metavar="URI", help="scheme://bucket/basePath")
    export_parser.add_argument("--user-id", metavar="ID", help="Resolved user identifier")
    export_parser.add_argument(
        "--output-dir",
        metavar="DIR",
        help="Write artifacts under DIR/<bucket>/<key> instead of uploading",
    )
    export_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Build every artifact and key without writing anything",
    )
    export_parser.add_argument(
        "--workers", type=int, metavar="N", help="Parallel uploads (default: 1)"
    )

    report_parser = subparsers.add_parser(
        "report", parents=[common], help="Summarize all records"
    )
    report_parser.add_argument("--html", metavar="FILE", help="Also write an HTML report")

    scan_parser = subparsers.add_parser(
        "scan", parents=[common], help="Scan records and show diagnostics"
    )
    scan_parser.add_argument(
        "-v", "--verbose", action="store_true", help="List every skipped file"
    )

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_OK

    setup_logging(install_crash=True)

    config = ExporterConfig.load(
        path=args.config,
        overrides={
            "records_dir": args.records_dir,
            "path_prefix": getattr(args, "path_prefix", None),
            "user_id": getattr(args, "user_id", None),
            "window": getattr(args, "window", None),
            "upload_workers": getattr(args, "workers", None),
        },
    )

    try:
        if args.command == "export":
            return cmd_export(args, config)
        if args.command == "report":
            return cmd_report(args, config)
        return cmd_scan(args, config)
    except ExporterError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR


def cmd_export(args, config: ExporterConfig) -> int:
    """Run an export and print the per-day outcomes."""
    if not args.output_dir and not args.dry_run:
        print("Error: use --output-dir DIR or --dry-run", file=sys.stderr)
        return EXIT_ERROR

    store = LocalObjectStore(args.output_dir) if args.output_dir else None
    summary = run_export(config, store=store, dry_run=args.dry_run)

    print(f"Window: {summary.window}", file=sys.stderr)
    print(
        f"Scanned {summary.scan.files_scanned} files: "
        f"{len(summary.scan.events)} events, {len(summary.scan.skipped)} skipped",
        file=sys.stderr,
    )

    for result in summary.results:
        if result.success and not result.uploaded:
            print(f"  {result.day}  {result.storage_key.uri}  (dry run)")
        elif result.success:
            print(f"  {result.day}  {result.storage_key.uri}")
        else:
            print(f"  {result.day}  FAILED: {result.error}")

    print(summary.describe())

    if summary.status in (ExportStatus.NO_RECORDS, ExportStatus.NO_DATA_IN_WINDOW):
        return EXIT_NO_DATA
    if summary.status == ExportStatus.SUCCESS:
        return EXIT_OK
    return EXIT_ERROR


def cmd_report(args, config: ExporterConfig) -> int:
    """Print the activity report over every record."""
    scan = scan_only(config)
    report = generate_report(scan.events)
    print(report.to_text())

    if args.html:
        try:
            Path(args.html).write_text(report.to_html(), encoding="utf-8")
        except OSError as e:
            print(f"Error: cannot write {args.html}: {e}", file=sys.stderr)
            return EXIT_ERROR
        print(f"Written to {args.html}", file=sys.stderr)

    return EXIT_OK if scan.events else EXIT_NO_DATA


def cmd_scan(args, config: ExporterConfig) -> int:
    """Print scan diagnostics."""
    scan = scan_only(config)
    print(f"Files scanned: {scan.files_scanned}")
    print(f"Valid events: {len(scan.events)}")
    print(f"Skipped: {len(scan.skipped)}")

    if args.verbose:
        for skipped in scan.skipped:
            print(f"  {skipped.path}: {skipped.reason}")

    return EXIT_OK if scan.events else EXIT_NO_DATA


if __name__ == "__main__":
    sys.exit(main())
