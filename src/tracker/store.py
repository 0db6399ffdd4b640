"""Record mutation API over the tracking_records table.

Every operation is scoped to a single user's namespace. A record id that
exists under another user is reported as not found.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.models import TrackingRecordRow
from src.tracker.aggregation.records import TrackingRecord, coerce_timestamp
from src.tracker.exceptions import RecordNotFoundError

logger = logging.getLogger(__name__)

# Columns a client may write
EDITABLE_FIELDS = (
    "date",
    "time_slot",
    "task_batch",
    "asset_name",
    "task_type",
    "total_pages",
    "errors_found",
    "notes_challenges",
)


def to_tracking_record(row: TrackingRecordRow) -> TrackingRecord:
    """Convert a stored row into the aggregator's value object."""
    return TrackingRecord(
        id=str(row.id),
        date=row.date,
        time_slot=row.time_slot or "",
        task_batch=row.task_batch or "",
        asset_name=row.asset_name or "",
        task_type=row.task_type or "",
        total_pages=row.total_pages or 0,
        errors_found=row.errors_found or 0,
        notes_challenges=row.notes_challenges or "",
        timestamp=coerce_timestamp(row.updated_at or row.created_at),
    )


async def list_records(session: AsyncSession, user_id: str) -> list[TrackingRecordRow]:
    """Return the user's records in creation order."""
    result = await session.execute(
        select(TrackingRecordRow)
        .where(TrackingRecordRow.user_id == user_id)
        .order_by(TrackingRecordRow.created_at, TrackingRecordRow.id)
    )
    return list(result.scalars().all())


async def load_snapshot(session: AsyncSession, user_id: str) -> list[TrackingRecord]:
    """Return an immutable snapshot of the user's records for aggregation."""
    return [to_tracking_record(row) for row in await list_records(session, user_id)]


async def get_record(session: AsyncSession, user_id: str, record_id: uuid.UUID) -> TrackingRecordRow:
    """Fetch one record from the user's namespace.

    Raises:
        RecordNotFoundError: If no such record exists for this user.
    """
    result = await session.execute(
        select(TrackingRecordRow).where(
            TrackingRecordRow.id == record_id,
            TrackingRecordRow.user_id == user_id,
        )
    )
    row = result.scalar_one_or_none()
    if row is None:
        raise RecordNotFoundError(str(record_id))
    return row


async def create_record(session: AsyncSession, user_id: str, data: Mapping[str, Any]) -> TrackingRecordRow:
    """Insert a new record for the user."""
    row = TrackingRecordRow(
        user_id=user_id,
        **{name: data[name] for name in EDITABLE_FIELDS if name in data},
    )
    session.add(row)
    await session.commit()
    await session.refresh(row)
    logger.info("Created tracking record %s for user %s (date=%s)", row.id, user_id, row.date)
    return row


async def update_record(
    session: AsyncSession,
    user_id: str,
    record_id: uuid.UUID,
    data: Mapping[str, Any],
) -> TrackingRecordRow:
    """Overwrite the editable fields of an existing record.

    Raises:
        RecordNotFoundError: If no such record exists for this user.
    """
    row = await get_record(session, user_id, record_id)
    for name in EDITABLE_FIELDS:
        if name in data:
            setattr(row, name, data[name])
    await session.commit()
    await session.refresh(row)
    logger.info("Updated tracking record %s for user %s", record_id, user_id)
    return row


async def delete_record(session: AsyncSession, user_id: str, record_id: uuid.UUID) -> None:
    """Remove a record.

    Raises:
        RecordNotFoundError: If no such record exists for this user.
    """
    row = await get_record(session, user_id, record_id)
    await session.delete(row)
    await session.commit()
    logger.info("Deleted tracking record %s for user %s", record_id, user_id)
