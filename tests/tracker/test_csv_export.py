"""Tests for the CSV projection of a tracking snapshot."""

from __future__ import annotations

from datetime import date

import pytest

from src.tracker.aggregation.csv_export import (
    CSV_HEADER,
    build_csv_rows,
    export_filename,
    format_display_date,
    quote_notes,
    render_csv,
)
from src.tracker.aggregation.records import TrackingRecord
from src.tracker.aggregation.summary import DailyGroup
from src.tracker.exceptions import RecordValidationError
from src.tracker.task_types import TaskTypeCatalog

CATALOG = TaskTypeCatalog()


def _example_records() -> list[dict]:
    return [
        {"id": "r1", "date": "2024-01-02", "taskBatch": "B1", "totalPages": 10, "errorsFound": 1},
        {"id": "r2", "date": "2024-01-01", "taskBatch": "", "totalPages": 5, "errorsFound": 0},
        {"id": "r3", "date": "2024-01-01", "taskBatch": "B2", "totalPages": 3, "errorsFound": 2},
    ]


class TestDateFormatting:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("2024-01-05", "Jan 05, 2024"),
            ("2023-12-31", "Dec 31, 2023"),
            ("2024-09-10", "Sep 10, 2024"),
            (date(2025, 2, 28), "Feb 28, 2025"),
        ],
    )
    def test_short_format(self, value, expected):
        assert format_display_date(value) == expected

    def test_invalid_date_rejected(self):
        with pytest.raises(RecordValidationError):
            format_display_date("yesterday")


class TestNotesQuoting:
    def test_embedded_quotes_doubled(self):
        assert quote_notes('He said "ok"') == '"He said ""ok"""'

    def test_commas_and_newlines_kept_inside_quotes(self):
        assert quote_notes("late, then\nfixed") == '"late, then\nfixed"'

    def test_empty_notes_still_quoted(self):
        assert quote_notes("") == '""'
        assert quote_notes(None) == '""'


class TestCsvRows:
    """Scenario: record rows in snapshot order, then one total row per date."""

    def test_record_rows_then_total_rows(self):
        rows = build_csv_rows(_example_records(), catalog=CATALOG)

        assert len(rows) == 5
        assert rows[:3] == [
            '2024-01-02,,B1,,,10,1,""',
            '2024-01-01,,,,,5,0,""',
            '2024-01-01,,B2,,,3,2,""',
        ]
        assert rows[3:] == [
            'TOTAL FOR JAN 01, 2024,,,,,8,2,""',
            'TOTAL FOR JAN 02, 2024,,,,,10,1,""',
        ]

    def test_precomputed_groups_are_used(self):
        records = _example_records()
        days = [DailyGroup(date="2023-07-04", daily_total_pages=99, daily_errors_found=7)]

        rows = build_csv_rows(records, days=days, catalog=CATALOG)

        assert len(rows) == 4
        assert rows[3] == 'TOTAL FOR JUL 04, 2023,,,,,99,7,""'

    def test_record_instances_normalised(self):
        records = [
            TrackingRecord(id="a", date="2024-01-01", task_batch=None, total_pages=-5, errors_found="x"),  # type: ignore[arg-type]
            TrackingRecord(id="b", date="2024-01-01", total_pages=2, errors_found=1, notes_challenges=None),  # type: ignore[arg-type]
        ]
        assert build_csv_rows(records, catalog=CATALOG) == [
            '2024-01-01,,,,,0,0,""',
            '2024-01-01,,,,,2,1,""',
            'TOTAL FOR JAN 01, 2024,,,,,2,1,""',
        ]

    def test_malformed_instance_rejected(self):
        with pytest.raises(RecordValidationError):
            build_csv_rows([TrackingRecord(id="a", date="2024-01-01", asset_name=7)], catalog=CATALOG)  # type: ignore[arg-type]

    def test_all_columns_rendered(self):
        record = {
            "id": "x",
            "date": "2024-06-03",
            "timeSlot": "09:30",
            "taskBatch": "Batch 7",
            "assetName": "MSN 1234",
            "taskType": "LLP",
            "totalPages": "42",
            "errorsFound": 3,
            "notesChallenges": 'Missing "back-to-birth" trace',
        }
        rows = build_csv_rows([record], catalog=CATALOG)
        assert rows[0] == (
            '2024-06-03,09:30,Batch 7,MSN 1234,Life Limited Parts Status,42,3,"Missing ""back-to-birth"" trace"'
        )

    def test_unknown_task_type_written_as_code(self):
        rows = build_csv_rows(
            [{"id": "x", "date": "2024-06-03", "taskType": "ZZZ"}],
            catalog=CATALOG,
        )
        assert rows[0].split(",")[4] == "ZZZ"

    def test_comma_in_unquoted_field_is_not_escaped(self):
        rows = build_csv_rows(
            [{"id": "x", "date": "2024-06-03", "assetName": "Engine 1, LH"}],
            catalog=CATALOG,
        )
        assert rows[0] == '2024-06-03,,,Engine 1, LH,,0,0,""'
        assert len(rows[0].split(",")) == len(CSV_HEADER) + 1

    def test_empty_snapshot_has_no_rows(self):
        assert build_csv_rows([], catalog=CATALOG) == []


class TestRenderCsv:
    def test_header_first(self):
        text = render_csv(_example_records(), catalog=CATALOG)
        lines = text.split("\n")
        assert lines[0] == "Date,Time Slot,Task Batch,Asset Name,Task Type,Total Pages,Errors Found,Notes/Challenges"
        assert len(lines) == 6

    def test_empty_snapshot_is_header_only(self):
        assert render_csv([], catalog=CATALOG) == ",".join(CSV_HEADER)


class TestExportFilename:
    def test_named_after_date(self):
        assert export_filename(date(2024, 3, 9)) == "DailyTaskTracker_2024-03-09.csv"

    def test_defaults_to_today(self):
        assert export_filename() == f"DailyTaskTracker_{date.today().isoformat()}.csv"
