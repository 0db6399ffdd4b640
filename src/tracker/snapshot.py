"""Snapshot fan-out: re-aggregate a user's records and push the result.

After every mutation the full collection is reloaded and summarized from
scratch, then published on the user's records channel. Messages carry a
``generated_at`` marker; subscribers keep the latest one they receive.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

import redis.asyncio as aioredis
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.redis import publish_event, records_channel
from src.tracker.aggregation.summary import TrackerSummary, summarize
from src.tracker.exceptions import RecordValidationError
from src.tracker.store import load_snapshot

logger = logging.getLogger(__name__)

SNAPSHOT_MESSAGE_TYPE = "snapshot"


def build_snapshot_message(user_id: str, summary: TrackerSummary) -> dict[str, Any]:
    """JSON-ready snapshot message for one user."""
    return {
        "type": SNAPSHOT_MESSAGE_TYPE,
        "user_id": user_id,
        "generated_at": datetime.now(UTC).isoformat(),
        "summary": summary.to_dict(),
    }


async def current_snapshot_message(session: AsyncSession, user_id: str) -> dict[str, Any]:
    """Load, aggregate and wrap the user's current records."""
    records = await load_snapshot(session, user_id)
    return build_snapshot_message(user_id, summarize(records))


async def publish_snapshot(
    session: AsyncSession,
    redis_client: aioredis.Redis,
    user_id: str,
) -> bool:
    """Publish the user's current snapshot to live subscribers.

    Returns:
        True if the message was handed to Redis, False if the snapshot
        could not be loaded or Redis failed. A failed publish never undoes
        the mutation that triggered it.
    """
    try:
        message = await current_snapshot_message(session, user_id)
    except (SQLAlchemyError, RecordValidationError) as exc:
        logger.warning("Failed to load snapshot for user %s: %s", user_id, exc)
        return False

    try:
        receivers = await publish_event(redis_client, records_channel(user_id), message)
    except (aioredis.RedisError, ConnectionError, OSError) as exc:
        logger.warning("Failed to publish snapshot for user %s: %s", user_id, exc)
        return False

    logger.debug(
        "Published snapshot for user %s to %d subscriber(s) (%d records)",
        user_id,
        receivers,
        message["summary"]["record_count"],
    )
    return True
