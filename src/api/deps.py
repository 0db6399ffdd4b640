"""Shared FastAPI dependencies: database session and Redis client."""

from __future__ import annotations

from collections.abc import AsyncGenerator

import redis.asyncio as aioredis
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield a request-scoped session from the factory stored in app.state."""
    session_factory = request.app.state.db_session_factory
    async with session_factory() as session:
        yield session


def get_redis(request: Request) -> aioredis.Redis:
    """Return the shared Redis client used for snapshot fan-out."""
    return request.app.state.redis_client
