"""
Parsers for interaction record files.

Each record is a JSON object describing one assistant action. Parsing
validates the fields the aggregation relies on and returns either a typed
InteractionEvent or a ParseFailure; a bad record is never fatal.

Record shape:
    {
        "timestamp": "2024-06-01T10:15:00Z",
        "kind": "strReplace",
        "linesAdded": 4,
        "linesRemoved": 1,
        "payload": {"oldStr": "...", "newStr": "..."}
    }
"""

import json
from dataclasses import replace
from pathlib import Path
from typing import Optional, Union

from .models import EventKind, InteractionEvent, ParseFailure, ParseFailureReason
from .utils.datetime import parse_timestamp

ParseOutcome = Union[InteractionEvent, ParseFailure]

RECORD_SUFFIXES = (".json", ".jsonl")

# Kind spellings seen across record producers
KIND_ALIASES = {
    "fswrite": EventKind.FILE_WRITE,
    "fs_write": EventKind.FILE_WRITE,
    "file_write": EventKind.FILE_WRITE,
    "write": EventKind.FILE_WRITE,
    "strreplace": EventKind.STRING_REPLACE,
    "str_replace": EventKind.STRING_REPLACE,
    "edit": EventKind.STRING_REPLACE,
    "executebash": EventKind.COMMAND_EXECUTION,
    "execute_bash": EventKind.COMMAND_EXECUTION,
    "command_execution": EventKind.COMMAND_EXECUTION,
    "bash": EventKind.COMMAND_EXECUTION,
}


def resolve_kind(raw_kind: str) -> EventKind:
    """Map a record's kind string to an EventKind (UNKNOWN if unrecognized)."""
    return KIND_ALIASES.get(raw_kind.strip().lower(), EventKind.UNKNOWN)


def count_lines(text: Optional[str]) -> int:
    """Number of lines in a text payload (0 for empty or missing text)."""
    if not text:
        return 0
    return len(text.splitlines())


class RecordParser:
    """Parser for interaction records.

    Usage:
        outcome = RecordParser.parse(raw_bytes)
        if outcome:
            events.append(outcome)
    """

    @staticmethod
    def parse(raw: Union[bytes, str, dict]) -> ParseOutcome:
        """Parse one raw record.

        Args:
            raw: Record as bytes (UTF-8 JSON), text, or an already decoded object

        Returns:
            InteractionEvent, or ParseFailure describing why it was rejected
        """
        if isinstance(raw, (bytes, bytearray)):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                return ParseFailure(ParseFailureReason.MALFORMED, f"not UTF-8: {e}")

        if isinstance(raw, str):
            try:
                data = json.loads(raw)
            except (ValueError, RecursionError) as e:
                # Deeply nested input exhausts the decoder's recursion limit
                return ParseFailure(ParseFailureReason.MALFORMED, f"invalid JSON: {e}")
        else:
            data = raw

        if not isinstance(data, dict):
            return ParseFailure(
                ParseFailureReason.MALFORMED,
                f"expected a JSON object, got {type(data).__name__}",
            )

        return RecordParser.parse_record(data)

    @staticmethod
    def parse_record(data: dict) -> ParseOutcome:
        """Validate a decoded record object and build the event."""
        if "timestamp" not in data or data["timestamp"] is None:
            return ParseFailure(
                ParseFailureReason.MISSING_FIELD, "timestamp is required", "timestamp"
            )
        timestamp = parse_timestamp(data["timestamp"])
        if timestamp is None:
            return ParseFailure(
                ParseFailureReason.UNPARSEABLE_TIMESTAMP,
                f"cannot parse timestamp {data['timestamp']!r}",
                "timestamp",
            )

        raw_kind = data.get("kind", data.get("type"))
        if raw_kind is None:
            return ParseFailure(ParseFailureReason.MISSING_FIELD, "kind is required", "kind")
        if not isinstance(raw_kind, str):
            return ParseFailure(
                ParseFailureReason.WRONG_TYPE,
                f"kind must be a string, got {type(raw_kind).__name__}",
                "kind",
            )
        kind = resolve_kind(raw_kind)

        payload = data.get("payload")
        if payload is None:
            payload = {}
        elif not isinstance(payload, dict):
            return ParseFailure(
                ParseFailureReason.WRONG_TYPE, "payload must be an object", "payload"
            )

        lines_added = RecordParser._line_count(data, "linesAdded")
        if isinstance(lines_added, ParseFailure):
            return lines_added
        lines_removed = RecordParser._line_count(data, "linesRemoved")
        if isinstance(lines_removed, ParseFailure):
            return lines_removed

        # Counts missing from the record come from the kind-specific payload
        if kind == EventKind.FILE_WRITE and lines_added is None:
            lines_added = count_lines(_text(payload, "content", "text"))
        elif kind == EventKind.STRING_REPLACE:
            if lines_added is None:
                lines_added = count_lines(_text(payload, "newStr", "new_str"))
            if lines_removed is None:
                lines_removed = count_lines(_text(payload, "oldStr", "old_str"))

        return InteractionEvent(
            timestamp=timestamp,
            kind=kind,
            lines_added=lines_added or 0,
            lines_removed=lines_removed or 0,
            raw_kind=raw_kind,
        )

    @staticmethod
    def _line_count(data: dict, name: str) -> Union[int, None, ParseFailure]:
        value = data.get(name)
        if value is None:
            return None
        # bool is an int subclass; true/false is not a line count
        if isinstance(value, bool) or not isinstance(value, int):
            if isinstance(value, float) and value.is_integer():
                value = int(value)
            else:
                return ParseFailure(
                    ParseFailureReason.WRONG_TYPE,
                    f"{name} must be an integer, got {value!r}",
                    name,
                )
        if value < 0:
            return ParseFailure(
                ParseFailureReason.NEGATIVE_VALUE, f"{name} must be >= 0, got {value}", name
            )
        return value

    @staticmethod
    def read_records(path: Path) -> list[ParseOutcome]:
        """Read and parse every record in a record file.

        ``.json`` files hold one record; ``.jsonl`` files hold one record per
        non-empty line.

        Raises:
            OSError: If the file cannot be read.
        """
        raw = path.read_bytes()

        if path.suffix.lower() != ".jsonl":
            outcome = RecordParser.parse(raw)
            return [_with_source(outcome, path)]

        outcomes: list[ParseOutcome] = []
        for line in raw.splitlines():
            if not line.strip():
                continue
            outcomes.append(_with_source(RecordParser.parse(line), path))
        return outcomes


def _text(payload: dict, *names: str) -> Optional[str]:
    for name in names:
        value = payload.get(name)
        if isinstance(value, str):
            return value
    return None


def _with_source(outcome: ParseOutcome, path: Path) -> ParseOutcome:
    if isinstance(outcome, InteractionEvent):
        return replace(outcome, source=path)
    return outcome
