"""WebSocket handler for live record snapshots.

On connect the client receives the current grouped snapshot, then every
snapshot published on its records channel after a mutation. Includes
heartbeat, ping/pong and a per-user connection limit.
"""

from __future__ import annotations

import asyncio
import json
import logging

from fastapi import APIRouter, HTTPException, Query, WebSocket, WebSocketDisconnect

from src.core.auth import identity_from_token
from src.core.config import get_settings
from src.core.redis import records_channel
from src.tracker.snapshot import current_snapshot_message

logger = logging.getLogger(__name__)

router = APIRouter(tags=["websocket"])


class ConnectionManager:
    """Manages WebSocket connections per user."""

    def __init__(self) -> None:
        self._connections: dict[str, list[WebSocket]] = {}

    async def connect(self, websocket: WebSocket, user_id: str) -> None:
        await websocket.accept()
        self._connections.setdefault(user_id, []).append(websocket)
        logger.info("WebSocket connected for user %s", user_id)

    def disconnect(self, websocket: WebSocket, user_id: str) -> None:
        if user_id in self._connections:
            self._connections[user_id] = [ws for ws in self._connections[user_id] if ws != websocket]
            if not self._connections[user_id]:
                del self._connections[user_id]
        logger.info("WebSocket disconnected for user %s", user_id)

    @property
    def active_connections(self) -> int:
        return sum(len(v) for v in self._connections.values())

    def get_connection_count(self, user_id: str) -> int:
        return len(self._connections.get(user_id, []))


manager = ConnectionManager()


async def _redis_subscriber(websocket: WebSocket, user_id: str, shutdown: asyncio.Event) -> None:
    """Forward snapshots from the user's Pub/Sub channel to this connection.

    Each connection runs its own reader, so a message is sent only to the
    socket that owns the reader.
    """
    redis_client = websocket.app.state.redis_client
    pubsub = redis_client.pubsub()
    channel = records_channel(user_id)
    await pubsub.subscribe(channel)

    try:
        while not shutdown.is_set():
            message = await pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
            if message and message["type"] == "message":
                try:
                    data = json.loads(message["data"])
                except (json.JSONDecodeError, TypeError):
                    logger.warning("Dropping malformed snapshot message on %s", channel)
                else:
                    try:
                        await websocket.send_json(data)
                    except (WebSocketDisconnect, RuntimeError):
                        break
            await asyncio.sleep(0.1)
    finally:
        await pubsub.unsubscribe(channel)
        await pubsub.close()


@router.websocket("/ws/records")
async def records_websocket(
    websocket: WebSocket,
    token: str | None = Query(default=None),
) -> None:
    """Stream the caller's grouped record snapshots.

    Authentication:
        Requires JWT token as query parameter: ?token=<jwt>

    Connection Limits:
        Max connections per user is configurable (default: 5).
        Exceeding the limit results in close code 1008 (Policy Violation).
    """
    if not token:
        await websocket.close(code=1008, reason="Missing authentication token")
        return

    settings = get_settings()
    try:
        identity = identity_from_token(token, settings)
    except HTTPException as e:
        logger.warning("WebSocket authentication failed: %s", e.detail)
        await websocket.close(code=1008, reason="Invalid or expired token")
        return

    user_id = identity.user_id
    current_count = manager.get_connection_count(user_id)
    if current_count >= settings.ws_max_connections_per_user:
        logger.warning(
            "Connection limit reached for user %s (%d/%d)",
            user_id,
            current_count,
            settings.ws_max_connections_per_user,
        )
        await websocket.close(
            code=1008,
            reason=f"Connection limit reached ({settings.ws_max_connections_per_user} max)",
        )
        return

    await manager.connect(websocket, user_id)
    shutdown = asyncio.Event()
    subscriber_task: asyncio.Task[None] | None = None

    try:
        async with websocket.app.state.db_session_factory() as session:
            await websocket.send_json(await current_snapshot_message(session, user_id))

        subscriber_task = asyncio.create_task(_redis_subscriber(websocket, user_id, shutdown))

        while True:
            try:
                data = await asyncio.wait_for(websocket.receive_text(), timeout=settings.ws_heartbeat_interval)
                if data == "ping":
                    await websocket.send_text("pong")
            except TimeoutError:
                await websocket.send_json({"type": "heartbeat"})
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WebSocket error for user %s", user_id)
    finally:
        shutdown.set()
        if subscriber_task is not None:
            subscriber_task.cancel()
        manager.disconnect(websocket, user_id)
