"""
Directory scanner for interaction record files.

Walks the records root, parses every record file and collects the valid
events. Files that cannot be read, are not record files, or hold invalid
records are skipped with a reason; the walk itself never fails.
"""

import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Iterator, Union

from .models import InteractionEvent, ScanResult, SkippedFile
from .parser import RECORD_SUFFIXES, RecordParser
from .utils.logger import debug, info

# Default thread pool size for parallel scans
NUM_WORKERS = 8


def iter_candidate_files(root: Path) -> Iterator[Path]:
    """Yield every regular file under root, pruning dot-prefixed directories."""

    def _on_error(err: OSError) -> None:
        debug(f"[Scanner] Cannot list {err.filename}: {err}")

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
        for name in sorted(filenames):
            path = Path(dirpath) / name
            if path.is_file():
                yield path


def _process_file(path: Path) -> dict:
    """Parse one file. Runs in the thread pool for parallel scans."""
    if path.suffix.lower() not in RECORD_SUFFIXES:
        return {"status": "skip", "path": path, "reason": "not a record file"}

    try:
        outcomes = RecordParser.read_records(path)
    except OSError as e:
        return {"status": "skip", "path": path, "reason": f"unreadable: {e}"}

    events = [o for o in outcomes if isinstance(o, InteractionEvent)]
    failures = [str(o) for o in outcomes if not isinstance(o, InteractionEvent)]
    return {"status": "ok", "path": path, "events": events, "failures": failures}


def scan_directory(root: Union[str, Path], workers: int = 1) -> ScanResult:
    """Scan a records directory.

    Args:
        root: Records root directory
        workers: Thread pool size for reading files (1 reads sequentially)

    Returns:
        ScanResult; empty if root is missing or holds no valid records
    """
    root = Path(root)
    result = ScanResult()

    if not root.is_dir():
        debug(f"[Scanner] {root} is not a directory")
        return result

    files = list(iter_candidate_files(root))
    result.files_scanned = len(files)

    if workers > 1 and len(files) > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(_process_file, path) for path in files]
            processed = [future.result() for future in as_completed(futures)]
        # Completion order is arbitrary; keep results stable for diagnostics
        processed.sort(key=lambda r: str(r["path"]))
    else:
        processed = [_process_file(path) for path in files]

    for item in processed:
        path = item["path"]
        if item["status"] == "skip":
            result.skipped.append(SkippedFile(path, item["reason"]))
            continue

        result.events.extend(item["events"])
        for failure in item["failures"]:
            result.skipped.append(SkippedFile(path, failure))
        if not item["events"] and not item["failures"]:
            result.skipped.append(SkippedFile(path, "no records"))

    info(
        f"[Scanner] {root}: {result.files_scanned} files, "
        f"{len(result.events)} events, {len(result.skipped)} skipped"
    )
    return result
