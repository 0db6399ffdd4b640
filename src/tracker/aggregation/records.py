"""Tracking record value object and input coercion.

A TrackingRecord is the aggregator's immutable view of one stored entry.
Records arrive either as TrackingRecord instances or as plain mappings
from the record source; mappings may use the camelCase wire keys
(``taskBatch``) or snake_case keys (``task_batch``).

Only the two count fields are coerced. Anything else that does not fit
the record shape raises RecordValidationError.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Any

from src.tracker.exceptions import RecordValidationError

# snake_case attribute -> camelCase wire key
_WIRE_KEYS = {
    "id": "id",
    "date": "date",
    "time_slot": "timeSlot",
    "task_batch": "taskBatch",
    "asset_name": "assetName",
    "task_type": "taskType",
    "total_pages": "totalPages",
    "errors_found": "errorsFound",
    "notes_challenges": "notesChallenges",
    "timestamp": "timestamp",
}

_TEXT_FIELDS = ("time_slot", "task_batch", "asset_name", "task_type", "notes_challenges")

# date.fromisoformat also takes basic (20240101) and week (2024-W01-1) forms
_ISO_DATE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


@dataclass(frozen=True)
class TrackingRecord:
    """One task-tracking entry as seen by the aggregator."""

    id: str
    date: str
    time_slot: str = ""
    task_batch: str = ""
    asset_name: str = ""
    task_type: str = ""
    total_pages: int = 0
    errors_found: int = 0
    notes_challenges: str = ""
    timestamp: float = 0

    @property
    def calendar_date(self) -> date:
        return parse_record_date(self.date)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> TrackingRecord:
        """Build a record from a wire or snake_case mapping.

        Raises:
            RecordValidationError: If ``id`` or ``date`` is missing or
                malformed, or a text field is not a string.
        """
        values = {name: _lookup(data, name) for name in _WIRE_KEYS}

        record_id = values["id"]
        if record_id is None or record_id == "":
            raise RecordValidationError("Tracking record is missing an id")

        raw_date = values["date"]
        if isinstance(raw_date, datetime):
            raw_date = raw_date.date().isoformat()
        elif isinstance(raw_date, date):
            raw_date = raw_date.isoformat()
        if not isinstance(raw_date, str):
            raise RecordValidationError(f"Tracking record {record_id} has no date")
        parse_record_date(raw_date)

        text: dict[str, str] = {}
        for name in _TEXT_FIELDS:
            value = values[name]
            if value is None:
                value = ""
            if not isinstance(value, str):
                raise RecordValidationError(
                    f"Tracking record {record_id}: {_WIRE_KEYS[name]} must be text, got {type(value).__name__}"
                )
            text[name] = value

        return cls(
            id=str(record_id),
            date=raw_date,
            total_pages=coerce_count(values["total_pages"]),
            errors_found=coerce_count(values["errors_found"]),
            timestamp=coerce_timestamp(values["timestamp"]),
            **text,
        )


def _lookup(data: Mapping[str, Any], name: str) -> Any:
    wire_key = _WIRE_KEYS[name]
    if wire_key in data:
        return data[wire_key]
    return data.get(name)


def parse_record_date(value: str) -> date:
    """Parse a record date, which must be exactly ``YYYY-MM-DD``."""
    if not isinstance(value, str) or not _ISO_DATE.fullmatch(value):
        raise RecordValidationError(f"Invalid record date: {value!r}")
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise RecordValidationError(f"Invalid record date: {value!r}") from exc


def coerce_count(value: Any) -> int:
    """Coerce a page or error count to a non-negative int.

    Missing, blank, non-numeric, non-finite and negative values all become 0.
    Fractional input is truncated.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float):
        if not math.isfinite(value):
            return 0
        return max(int(value), 0)
    if isinstance(value, str):
        text = value.strip()
        try:
            return max(int(text), 0)
        except ValueError:
            pass
        try:
            parsed = float(text)
        except ValueError:
            return 0
        return max(int(parsed), 0) if math.isfinite(parsed) else 0
    return 0


def coerce_timestamp(value: Any) -> float:
    """Return a sortable float marker; missing or unreadable values sort as 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, datetime):
        return value.timestamp() * 1000
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            try:
                return datetime.fromisoformat(value).timestamp() * 1000
            except ValueError:
                return 0
    if isinstance(value, (int, float)):
        try:
            marker = float(value)
        except OverflowError:
            return 0
        return marker if math.isfinite(marker) else 0
    return 0


def coerce_records(records: Any) -> list[TrackingRecord]:
    """Validate a snapshot and return it as a list of TrackingRecords.

    The input is never mutated. Strings, bytes and mappings are rejected
    as collections because iterating them does not yield records.
    TrackingRecord instances go through the same checks as mappings; a
    well-formed instance is kept as is, otherwise its normalised copy is
    used.
    """
    if records is None or isinstance(records, (str, bytes, Mapping)) or not isinstance(records, Sequence):
        raise RecordValidationError(
            f"Expected a sequence of tracking records, got {type(records).__name__}"
        )

    result: list[TrackingRecord] = []
    for index, record in enumerate(records):
        if isinstance(record, TrackingRecord):
            normalised = TrackingRecord.from_mapping(asdict(record))
            result.append(record if normalised == record else normalised)
        elif isinstance(record, Mapping):
            result.append(TrackingRecord.from_mapping(record))
        else:
            raise RecordValidationError(
                f"Record at position {index} is a {type(record).__name__}, not a tracking record"
            )
    return result
