"""Redis connection management and Pub/Sub fan-out of record snapshots."""

from __future__ import annotations

import json
import logging
from typing import Any

import redis.asyncio as aioredis

from src.core.config import Settings

logger = logging.getLogger(__name__)

# -- Pub/Sub channels ----------------------------------------------------------

CHANNEL_RECORDS_PREFIX = "tracker:realtime:records"


def records_channel(user_id: str) -> str:
    """Channel carrying snapshot updates for one user's records."""
    return f"{CHANNEL_RECORDS_PREFIX}:{user_id}"


def create_redis_client(settings: Settings) -> aioredis.Redis:
    """Create an async Redis client.

    Args:
        settings: Application settings with Redis connection details.

    Returns:
        An async Redis client instance.
    """
    client: aioredis.Redis = aioredis.from_url(
        settings.redis_url or f"redis://{settings.redis_host}:{settings.redis_port}/0",
        decode_responses=True,
    )
    return client


async def verify_redis_connectivity(client: aioredis.Redis) -> bool:
    """Check if Redis is reachable.

    Returns:
        True if Redis responds to PING, False otherwise.
    """
    try:
        return bool(await client.ping())
    except Exception:
        logger.exception("Failed to connect to Redis")
        return False


async def publish_event(
    client: aioredis.Redis,
    channel: str,
    data: dict[str, Any],
) -> int:
    """Publish an event to a Redis Pub/Sub channel.

    Args:
        client: Redis client.
        channel: Channel name.
        data: Event data (will be JSON-encoded).

    Returns:
        Number of subscribers that received the message.
    """
    count: int = await client.publish(channel, json.dumps(data))
    return count
