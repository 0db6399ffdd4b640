"""Health check endpoint.

Returns overall system health and individual service statuses
for PostgreSQL and Redis.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

import redis.asyncio as aioredis
from fastapi import APIRouter, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from src.api.version import API_VERSION

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


@router.get("/api/v1/health")
async def health_check(request: Request) -> dict[str, Any]:
    """Check the record store and the realtime channel.

    Returns:
        JSON object with overall status and per-service health:
        {
            "status": "healthy" | "degraded" | "unhealthy",
            "services": {"postgres": "up" | "down", "redis": "up" | "down"},
            "version": "1.0.0"
        }
    """
    services: dict[str, str] = {}

    try:
        db_session_factory = request.app.state.db_session_factory
        async with db_session_factory() as session:
            result = await session.execute(text("SELECT 1"))
            result.scalar()
            services["postgres"] = "up"
    except (SQLAlchemyError, ConnectionError, OSError):
        logger.warning("PostgreSQL health check failed")
        services["postgres"] = "down"

    try:
        redis_client = request.app.state.redis_client
        await redis_client.ping()
        services["redis"] = "up"
    except (aioredis.RedisError, ConnectionError, OSError):
        logger.warning("Redis health check failed")
        services["redis"] = "down"

    down_count = sum(1 for s in services.values() if s == "down")
    if down_count == 0:
        status = "healthy"
    elif down_count < len(services):
        status = "degraded"
    else:
        status = "unhealthy"

    return {
        "status": status,
        "services": services,
        "version": API_VERSION,
        "timestamp": datetime.now(UTC).isoformat(),
    }
