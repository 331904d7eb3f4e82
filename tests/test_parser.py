"""
Tests for the record parser.
"""

import json
from datetime import datetime, timezone

import pytest

from kiro_metrics_exporter.models import (
    EventKind,
    InteractionEvent,
    ParseFailure,
    ParseFailureReason,
)
from kiro_metrics_exporter.parser import RecordParser, count_lines, resolve_kind


def _raw(**fields) -> bytes:
    return json.dumps(fields).encode("utf-8")


class TestParseValidRecords:
    """Records that should become events"""

    def test_parses_file_write(self):
        """A file-write record keeps its explicit line count"""
        event = RecordParser.parse(
            _raw(timestamp="2024-06-01T10:00:00Z", kind="fsWrite", linesAdded=12)
        )

        assert isinstance(event, InteractionEvent)
        assert event.kind == EventKind.FILE_WRITE
        assert event.lines_added == 12
        assert event.lines_removed == 0
        assert event.timestamp == datetime(2024, 6, 1, 10, 0, tzinfo=timezone.utc)

    def test_parses_string_replace(self):
        """Edits carry both added and removed counts"""
        event = RecordParser.parse(
            _raw(
                timestamp="2024-06-01T10:00:00+02:00",
                kind="strReplace",
                linesAdded=4,
                linesRemoved=2,
            )
        )

        assert event.kind == EventKind.STRING_REPLACE
        assert (event.lines_added, event.lines_removed) == (4, 2)

    def test_parses_command_execution(self):
        """Command executions need no line counts"""
        event = RecordParser.parse(_raw(timestamp=1717236000, kind="executeBash"))

        assert event.kind == EventKind.COMMAND_EXECUTION
        assert event.timestamp == datetime.fromtimestamp(1717236000, tz=timezone.utc)

    def test_epoch_milliseconds(self):
        """Timestamps above 1e10 are milliseconds"""
        event = RecordParser.parse(_raw(timestamp=1717236000000, kind="executeBash"))

        assert event.timestamp == datetime.fromtimestamp(1717236000, tz=timezone.utc)

    def test_naive_timestamp_is_local_time(self):
        """Timestamps without an offset are read as local time"""
        event = RecordParser.parse(_raw(timestamp="2024-06-01T23:30:00", kind="fsWrite"))

        assert event.timestamp.tzinfo is not None
        assert event.timestamp.astimezone().replace(tzinfo=None) == datetime(
            2024, 6, 1, 23, 30
        )

    def test_type_is_accepted_as_kind(self):
        """'type' is an alias for 'kind'"""
        event = RecordParser.parse(_raw(timestamp="2024-06-01T10:00:00", type="fs_write"))

        assert event.kind == EventKind.FILE_WRITE

    def test_unknown_kind_is_accepted(self):
        """Unrecognized kinds parse as UNKNOWN instead of failing"""
        event = RecordParser.parse(
            _raw(timestamp="2024-06-01T10:00:00", kind="readFile", linesAdded=3)
        )

        assert isinstance(event, InteractionEvent)
        assert event.kind == EventKind.UNKNOWN
        assert event.raw_kind == "readFile"

    def test_accepts_str_and_dict_input(self):
        """Already decoded input parses the same as bytes"""
        data = {"timestamp": "2024-06-01T10:00:00", "kind": "fsWrite", "linesAdded": 1}

        assert RecordParser.parse(json.dumps(data)) == RecordParser.parse(data)

    def test_integral_float_counts_are_accepted(self):
        """3.0 is accepted as a line count"""
        event = RecordParser.parse(
            _raw(timestamp="2024-06-01T10:00:00", kind="fsWrite", linesAdded=3.0)
        )

        assert event.lines_added == 3


class TestPayloadLineCounts:
    """Line counts derived from kind-specific payloads"""

    def test_file_write_counts_content_lines(self):
        event = RecordParser.parse(
            _raw(
                timestamp="2024-06-01T10:00:00",
                kind="fsWrite",
                payload={"path": "a.py", "content": "a\nb\nc\n"},
            )
        )

        assert event.lines_added == 3

    def test_string_replace_counts_old_and_new(self):
        event = RecordParser.parse(
            _raw(
                timestamp="2024-06-01T10:00:00",
                kind="strReplace",
                payload={"oldStr": "x = 1", "newStr": "x = 1\ny = 2\nz = 3"},
            )
        )

        assert (event.lines_added, event.lines_removed) == (3, 1)

    def test_explicit_counts_win_over_payload(self):
        event = RecordParser.parse(
            _raw(
                timestamp="2024-06-01T10:00:00",
                kind="strReplace",
                linesAdded=10,
                linesRemoved=0,
                payload={"oldStr": "a\nb", "newStr": "c"},
            )
        )

        assert (event.lines_added, event.lines_removed) == (10, 0)

    def test_count_lines(self):
        assert count_lines(None) == 0
        assert count_lines("") == 0
        assert count_lines("one") == 1
        assert count_lines("one\ntwo\n") == 2


class TestParseFailures:
    """Records that should be rejected"""

    @pytest.mark.parametrize(
        "raw",
        [b"not json", b"[1, 2, 3]", b'"text"', b"\xff\xfe\x00"],
    )
    def test_malformed_input(self, raw):
        failure = RecordParser.parse(raw)

        assert isinstance(failure, ParseFailure)
        assert failure.reason == ParseFailureReason.MALFORMED

    def test_deeply_nested_input_is_malformed(self):
        raw = b"[" * 200000 + b"]" * 200000

        failure = RecordParser.parse(raw)

        assert failure.reason == ParseFailureReason.MALFORMED

    def test_missing_timestamp(self):
        failure = RecordParser.parse(_raw(kind="fsWrite"))

        assert failure.reason == ParseFailureReason.MISSING_FIELD
        assert failure.field == "timestamp"

    @pytest.mark.parametrize("timestamp", ["yesterday", "", "2024-13-45", [2024], True])
    def test_unparseable_timestamp(self, timestamp):
        failure = RecordParser.parse(_raw(timestamp=timestamp, kind="fsWrite"))

        assert failure.reason == ParseFailureReason.UNPARSEABLE_TIMESTAMP

    @pytest.mark.parametrize(
        "timestamp", ["9999-12-31T23:00:00-23:00", "0001-01-01T00:00:00+23:00"]
    )
    def test_timestamp_without_local_date(self, timestamp):
        """Timestamps that overflow when moved into the local zone"""
        failure = RecordParser.parse(_raw(timestamp=timestamp, kind="fsWrite"))

        assert failure.reason == ParseFailureReason.UNPARSEABLE_TIMESTAMP

    def test_missing_kind(self):
        failure = RecordParser.parse(_raw(timestamp="2024-06-01T10:00:00"))

        assert failure.reason == ParseFailureReason.MISSING_FIELD
        assert failure.field == "kind"

    def test_kind_wrong_type(self):
        failure = RecordParser.parse(_raw(timestamp="2024-06-01T10:00:00", kind=7))

        assert failure.reason == ParseFailureReason.WRONG_TYPE

    @pytest.mark.parametrize("value", ["12", 1.5, True, [1]])
    def test_line_count_wrong_type(self, value):
        failure = RecordParser.parse(
            _raw(timestamp="2024-06-01T10:00:00", kind="fsWrite", linesAdded=value)
        )

        assert failure.reason == ParseFailureReason.WRONG_TYPE
        assert failure.field == "linesAdded"

    def test_negative_line_count(self):
        failure = RecordParser.parse(
            _raw(timestamp="2024-06-01T10:00:00", kind="strReplace", linesRemoved=-1)
        )

        assert failure.reason == ParseFailureReason.NEGATIVE_VALUE

    @pytest.mark.parametrize("payload", ["content", [], "", 0, False])
    def test_payload_wrong_type(self, payload):
        failure = RecordParser.parse(
            _raw(timestamp="2024-06-01T10:00:00", kind="fsWrite", payload=payload)
        )

        assert failure.reason == ParseFailureReason.WRONG_TYPE
        assert failure.field == "payload"

    def test_null_payload_is_empty(self):
        event = RecordParser.parse(
            _raw(timestamp="2024-06-01T10:00:00", kind="fsWrite", payload=None)
        )

        assert event.lines_added == 0

    def test_failure_is_falsy(self):
        """Callers can test outcomes with a plain truth check"""
        assert not RecordParser.parse(b"{}")


class TestResolveKind:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("fsWrite", EventKind.FILE_WRITE),
            ("FILE_WRITE", EventKind.FILE_WRITE),
            ("strReplace", EventKind.STRING_REPLACE),
            ("edit", EventKind.STRING_REPLACE),
            ("executeBash", EventKind.COMMAND_EXECUTION),
            (" bash ", EventKind.COMMAND_EXECUTION),
            ("fsRead", EventKind.UNKNOWN),
        ],
    )
    def test_aliases(self, raw, expected):
        assert resolve_kind(raw) == expected


class TestReadRecords:
    """Reading record files from disk"""

    def test_json_file_has_one_record(self, record_factory):
        path = record_factory.create_record("fsWrite", "2024-06-01T10:00:00", lines_added=5)

        outcomes = RecordParser.read_records(path)

        assert len(outcomes) == 1
        assert outcomes[0].lines_added == 5
        assert outcomes[0].source == path

    def test_jsonl_file_has_one_record_per_line(self, record_factory):
        records = [
            record_factory.record_data("fsWrite", "2024-06-01T10:00:00", lines_added=1),
            record_factory.record_data("executeBash", "2024-06-01T11:00:00"),
            record_factory.record_data("fsWrite", None),
        ]
        path = record_factory.create_jsonl(records)

        outcomes = RecordParser.read_records(path)

        assert len(outcomes) == 3
        assert [bool(o) for o in outcomes] == [True, True, False]

    def test_jsonl_skips_blank_lines(self, record_factory):
        path = record_factory.create_file(
            "s/events.jsonl",
            '{"timestamp": "2024-06-01T10:00:00", "kind": "executeBash"}\n\n  \n',
        )

        assert len(RecordParser.read_records(path)) == 1

    def test_missing_file_raises_oserror(self, tmp_path):
        with pytest.raises(OSError):
            RecordParser.read_records(tmp_path / "gone.json")
