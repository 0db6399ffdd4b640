"""CSV projection of a tracking snapshot.

Produces one row per record in snapshot order, followed by one total row
per date in chronological order. Only the notes column is quoted; every
other value is written raw, so a comma inside a batch or asset name
shifts the remaining columns of that row.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from typing import Any

from src.tracker.aggregation.records import TrackingRecord, coerce_records, parse_record_date
from src.tracker.aggregation.summary import DailyGroup, aggregate_records
from src.tracker.task_types import TaskTypeCatalog, get_task_type_catalog

CSV_HEADER = [
    "Date",
    "Time Slot",
    "Task Batch",
    "Asset Name",
    "Task Type",
    "Total Pages",
    "Errors Found",
    "Notes/Challenges",
]

EXPORT_FILENAME_PREFIX = "DailyTaskTracker"

_MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def format_display_date(value: str | date) -> str:
    """Render a date as ``Jan 05, 2024``, independent of locale."""
    day = value if isinstance(value, date) else parse_record_date(value)
    return f"{_MONTH_ABBR[day.month - 1]} {day.day:02d}, {day.year:04d}"


def quote_notes(notes: str | None) -> str:
    """Wrap notes in double quotes, doubling any embedded quote."""
    return '"' + (notes or "").replace('"', '""') + '"'


def export_filename(on: date | None = None) -> str:
    """Name of the export file for the given (default: current) date."""
    return f"{EXPORT_FILENAME_PREFIX}_{(on or date.today()).isoformat()}.csv"


def _record_row(record: TrackingRecord, catalog: TaskTypeCatalog) -> str:
    return ",".join(
        [
            record.date,
            record.time_slot,
            record.task_batch,
            record.asset_name,
            catalog.label_for(record.task_type),
            str(record.total_pages),
            str(record.errors_found),
            quote_notes(record.notes_challenges),
        ]
    )


def _total_row(day: DailyGroup) -> str:
    label = f"TOTAL FOR {format_display_date(day.date)}".upper()
    return ",".join(
        [label, "", "", "", "", str(day.daily_total_pages), str(day.daily_errors_found), quote_notes("")]
    )


def build_csv_rows(
    records: Sequence[TrackingRecord | dict[str, Any]],
    days: list[DailyGroup] | None = None,
    catalog: TaskTypeCatalog | None = None,
) -> list[str]:
    """Build the data rows of the export (no header).

    Args:
        records: The snapshot, in the order the record source delivered it.
        days: The aggregated view of the same snapshot. Computed when omitted.
        catalog: Task type labels. Defaults to the configured catalogue.

    Returns:
        One row per record followed by one total row per date.
    """
    tracking = coerce_records(records)
    if days is None:
        days = aggregate_records(tracking)
    if catalog is None:
        catalog = get_task_type_catalog()

    rows = [_record_row(record, catalog) for record in tracking]
    rows.extend(_total_row(day) for day in days)
    return rows


def render_csv(
    records: Sequence[TrackingRecord | dict[str, Any]],
    catalog: TaskTypeCatalog | None = None,
) -> str:
    """Render the complete export text, header included."""
    rows = build_csv_rows(records, catalog=catalog)
    return "\n".join([",".join(CSV_HEADER), *rows])
