"""Pure aggregation over snapshots of tracking records."""

from src.tracker.aggregation.csv_export import (
    CSV_HEADER,
    build_csv_rows,
    export_filename,
    format_display_date,
    quote_notes,
    render_csv,
)
from src.tracker.aggregation.records import TrackingRecord, coerce_count, coerce_records
from src.tracker.aggregation.summary import (
    NO_BATCH_LABEL,
    BatchGroup,
    DailyGroup,
    TrackerSummary,
    aggregate_records,
    summarize,
)

__all__ = [
    "CSV_HEADER",
    "NO_BATCH_LABEL",
    "BatchGroup",
    "DailyGroup",
    "TrackerSummary",
    "TrackingRecord",
    "aggregate_records",
    "build_csv_rows",
    "coerce_count",
    "coerce_records",
    "export_filename",
    "format_display_date",
    "quote_notes",
    "render_csv",
    "summarize",
]
