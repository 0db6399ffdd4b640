"""CLI entry point for exporting a user's tracking records to CSV.

Usage::

    python -m src.tracker.export_cli --user-id <ID> [--output-dir DIR]

Loads the user's full record collection, renders the daily tracker CSV
(record rows followed by per-date totals) and writes it to
``DailyTaskTracker_<today>.csv`` in the output directory.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from src.tracker.aggregation.csv_export import export_filename, render_csv
from src.tracker.store import load_snapshot

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="export_cli",
        description="Export daily task tracking records as CSV.",
    )
    parser.add_argument(
        "--user-id",
        required=True,
        help="Identity whose records are exported.",
    )
    parser.add_argument(
        "--output-dir",
        default=".",
        help="Directory to write the CSV file into (default: current directory).",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level.",
    )
    return parser.parse_args(argv)


def write_export(csv_text: str, output_dir: str | Path) -> Path:
    """Write export text to ``DailyTaskTracker_<today>.csv`` and return the path."""
    directory = Path(output_dir)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / export_filename()
    path.write_text(csv_text + "\n", encoding="utf-8")
    return path


async def _run(args: argparse.Namespace) -> int:
    """Create a database session and export the user's records."""
    from src.core.config import get_settings
    from src.core.database import create_engine

    engine, session_factory = create_engine(get_settings())
    try:
        async with session_factory() as session:
            records = await load_snapshot(session, args.user_id)
    finally:
        await engine.dispose()

    path = write_export(render_csv(records), args.output_dir)
    logger.info("Exported %d records for user %s to %s", len(records), args.user_id, path)
    print(f"Wrote {len(records)} records to {path}")
    return 0


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    args = _parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    exit_code = asyncio.run(_run(args))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
