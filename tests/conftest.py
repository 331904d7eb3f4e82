"""
Pytest configuration and shared fixtures for kiro_metrics_exporter tests.

This module provides:
- src/ on sys.path and log files redirected to a temporary directory
- Record directory fixtures and the record factory
- Event and config builders
"""

import os
import sys
import tempfile
from datetime import date, datetime
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add src directory to path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

# Keep test runs from writing into the real log directory
os.environ.setdefault("KIRO_METRICS_LOG_DIR", tempfile.mkdtemp(prefix="kiro-metrics-logs-"))

from factories import RecordFactory  # noqa: E402


# =============================================================================
# Record Storage
# =============================================================================


@pytest.fixture
def records_dir(tmp_path) -> Path:
    """An empty records root directory."""
    root = tmp_path / "records"
    root.mkdir()
    return root


@pytest.fixture
def record_factory(records_dir) -> RecordFactory:
    """Factory writing record files into records_dir."""
    return RecordFactory(records_dir)


@pytest.fixture
def scenario_records(record_factory) -> RecordFactory:
    """Three valid records on two days plus one malformed file."""
    record_factory.create_record("fsWrite", "2024-06-01T09:00:00", lines_added=120)
    record_factory.create_record(
        "strReplace", "2024-06-01T15:30:00", lines_added=40, lines_removed=15
    )
    record_factory.create_record("executeBash", "2024-06-02T11:00:00")
    record_factory.create_malformed()
    return record_factory


# =============================================================================
# Events and Config
# =============================================================================


def make_event(kind, when, lines_added=0, lines_removed=0, raw_kind=None):
    """Build an InteractionEvent from a kind and a naive local datetime."""
    from kiro_metrics_exporter.models import InteractionEvent

    if isinstance(when, str):
        when = datetime.fromisoformat(when)
    return InteractionEvent(
        timestamp=when.astimezone(),
        kind=kind,
        lines_added=lines_added,
        lines_removed=lines_removed,
        raw_kind=raw_kind or kind.value,
    )


@pytest.fixture
def event_factory():
    """Fixture providing the event builder."""
    return make_event


@pytest.fixture
def today() -> date:
    """Fixed reference date for window calculations."""
    return date(2024, 6, 3)


@pytest.fixture
def exporter_config(records_dir):
    """A complete config pointing at records_dir."""
    from kiro_metrics_exporter.config import ExporterConfig

    return ExporterConfig(
        records_dir=str(records_dir),
        path_prefix="s3://bucket/prefix/AWSLogs/acct/KiroLogs/by_user_analytic/us-east-1/",
        user_id="U123",
        window="trailing-7-days",
    )


@pytest.fixture
def mock_store():
    """Object store mock recording put_object calls."""
    store = MagicMock()
    store.put_object.return_value = None
    return store
