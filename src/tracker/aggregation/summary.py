"""Daily and batch aggregation of tracking records.

Groups a full snapshot of records by date and, within each date, by task
batch. Each group carries integer page and error totals plus its entries
in timestamp order. The result is rebuilt from scratch on every call;
there is no incremental update path.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import asdict, dataclass, field
from typing import Any

from src.tracker.aggregation.records import (
    TrackingRecord,
    coerce_count,
    coerce_records,
    parse_record_date,
)

logger = logging.getLogger(__name__)

NO_BATCH_LABEL = "No Batch"


@dataclass
class BatchGroup:
    """Records sharing one task batch label on one date."""

    batch_name: str
    total_pages: int = 0
    errors_found: int = 0
    entries: list[TrackingRecord] = field(default_factory=list)


@dataclass
class DailyGroup:
    """All records logged for one date, with per-batch breakdown."""

    date: str
    daily_total_pages: int = 0
    daily_errors_found: int = 0
    entries: list[TrackingRecord] = field(default_factory=list)
    batches: list[BatchGroup] = field(default_factory=list)


@dataclass
class TrackerSummary:
    """Grouped view of a snapshot plus overall totals."""

    days: list[DailyGroup] = field(default_factory=list)
    total_pages: int = 0
    errors_found: int = 0

    @property
    def record_count(self) -> int:
        return sum(len(day.entries) for day in self.days)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form, including the record count."""
        data = asdict(self)
        data["record_count"] = self.record_count
        return data


def batch_label(task_batch: str | None) -> str:
    """Map an empty or missing batch to the "No Batch" label.

    Whitespace-only labels are kept as they are and form their own group.
    """
    if not task_batch:
        return NO_BATCH_LABEL
    return task_batch


def _timestamp_key(record: TrackingRecord) -> float:
    return record.timestamp or 0


def aggregate_records(records: Sequence[TrackingRecord | dict[str, Any]]) -> list[DailyGroup]:
    """Group records into chronologically ordered daily groups.

    Date totals are running sums over every record of the date, kept
    independently of the batch sums. Entry lists are stably sorted by
    timestamp, batches by name, and dates in calendar order.

    Raises:
        RecordValidationError: If ``records`` is not a sequence of records
            or any record is malformed.
    """
    tracking = coerce_records(records)

    days: dict[str, DailyGroup] = {}
    batches: dict[str, dict[str, BatchGroup]] = {}

    for record in tracking:
        pages = coerce_count(record.total_pages)
        errors = coerce_count(record.errors_found)

        day = days.get(record.date)
        if day is None:
            day = days[record.date] = DailyGroup(date=record.date)
            batches[record.date] = {}
        day.daily_total_pages += pages
        day.daily_errors_found += errors
        day.entries.append(record)

        name = batch_label(record.task_batch)
        batch = batches[record.date].get(name)
        if batch is None:
            batch = batches[record.date][name] = BatchGroup(batch_name=name)
        batch.total_pages += pages
        batch.errors_found += errors
        batch.entries.append(record)

    for date_key, day in days.items():
        day.entries.sort(key=_timestamp_key)
        for batch in batches[date_key].values():
            batch.entries.sort(key=_timestamp_key)
        day.batches = [batches[date_key][name] for name in sorted(batches[date_key])]

    ordered = sorted(days.values(), key=lambda d: parse_record_date(d.date))
    logger.debug("Aggregated %d records into %d daily groups", len(tracking), len(ordered))
    return ordered


def summarize(records: Sequence[TrackingRecord | dict[str, Any]]) -> TrackerSummary:
    """Aggregate a snapshot and compute overall page and error totals."""
    days = aggregate_records(records)
    return TrackerSummary(
        days=days,
        total_pages=sum(day.daily_total_pages for day in days),
        errors_found=sum(day.daily_errors_found for day in days),
    )
