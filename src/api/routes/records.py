"""Tracking record API endpoints.

Provides:
- GET    /api/v1/records          Records in creation order
- POST   /api/v1/records          Log a new record
- PUT    /api/v1/records/{id}     Edit a record
- DELETE /api/v1/records/{id}     Delete a record
- GET    /api/v1/records/summary  Daily/batch grouped totals
- GET    /api/v1/records/export   CSV download

Every mutation republishes the caller's snapshot to live subscribers.
"""

from __future__ import annotations

import logging
from uuid import UUID

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.deps import get_redis, get_session
from src.api.schemas.tracking import RecordInput, RecordResponse, SummaryResponse
from src.core.auth import Identity, get_current_identity
from src.core.models import TrackingRecordRow
from src.tracker import store
from src.tracker.aggregation.csv_export import export_filename, render_csv
from src.tracker.aggregation.summary import summarize
from src.tracker.exceptions import RecordNotFoundError
from src.tracker.snapshot import publish_snapshot

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/records", tags=["records"])


def _not_found(exc: RecordNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


@router.get("", response_model=list[RecordResponse])
async def list_records(
    session: AsyncSession = Depends(get_session),
    identity: Identity = Depends(get_current_identity),
) -> list[TrackingRecordRow]:
    """Return the caller's records, oldest first."""
    return await store.list_records(session, identity.user_id)


@router.get("/summary", response_model=SummaryResponse)
async def get_summary(
    session: AsyncSession = Depends(get_session),
    identity: Identity = Depends(get_current_identity),
) -> SummaryResponse:
    """Group the caller's records by date and batch with page and error totals."""
    records = await store.load_snapshot(session, identity.user_id)
    return SummaryResponse.model_validate(summarize(records))


@router.get("/export")
async def export_records_csv(
    session: AsyncSession = Depends(get_session),
    identity: Identity = Depends(get_current_identity),
) -> StreamingResponse:
    """Export the caller's records as a CSV file.

    Rows follow creation order; one total row per date is appended.
    """
    records = await store.load_snapshot(session, identity.user_id)
    csv_text = render_csv(records)
    filename = export_filename()
    logger.info("Exporting %d records for user %s as %s", len(records), identity.user_id, filename)

    return StreamingResponse(
        iter([csv_text]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.post("", response_model=RecordResponse, status_code=status.HTTP_201_CREATED)
async def create_record(
    payload: RecordInput,
    session: AsyncSession = Depends(get_session),
    redis_client: aioredis.Redis = Depends(get_redis),
    identity: Identity = Depends(get_current_identity),
) -> TrackingRecordRow:
    """Log a new record in the caller's namespace."""
    row = await store.create_record(session, identity.user_id, payload.to_fields())
    await publish_snapshot(session, redis_client, identity.user_id)
    return row


@router.put("/{record_id}", response_model=RecordResponse)
async def update_record(
    record_id: UUID,
    payload: RecordInput,
    session: AsyncSession = Depends(get_session),
    redis_client: aioredis.Redis = Depends(get_redis),
    identity: Identity = Depends(get_current_identity),
) -> TrackingRecordRow:
    """Replace the fields of one of the caller's records."""
    try:
        row = await store.update_record(session, identity.user_id, record_id, payload.to_fields())
    except RecordNotFoundError as exc:
        raise _not_found(exc) from exc
    await publish_snapshot(session, redis_client, identity.user_id)
    return row


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_record(
    record_id: UUID,
    session: AsyncSession = Depends(get_session),
    redis_client: aioredis.Redis = Depends(get_redis),
    identity: Identity = Depends(get_current_identity),
) -> Response:
    """Delete one of the caller's records."""
    try:
        await store.delete_record(session, identity.user_id, record_id)
    except RecordNotFoundError as exc:
        raise _not_found(exc) from exc
    await publish_snapshot(session, redis_client, identity.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
