"""HTTP middleware for the tracker API.

Provides:
- Request ID middleware (X-Request-ID header) with access logging
- Rate limiting middleware (in-memory, per-IP)
- Security headers middleware
"""

from __future__ import annotations

import logging
import time
import uuid
from collections import defaultdict
from dataclasses import dataclass

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from src.api.version import API_VERSION
from src.core.config import get_settings

logger = logging.getLogger(__name__)

# Paths that are not access-logged
_QUIET_PATHS = frozenset({"/api/v1/health", "/docs", "/openapi.json", "/redoc"})


# ---------------------------------------------------------------------------
# Request ID Middleware
# ---------------------------------------------------------------------------


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tag every request with an X-Request-ID and log its outcome.

    A client-supplied X-Request-ID is preserved; otherwise a UUID4 is
    generated and stored on ``request.state.request_id`` for error handlers.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        start = time.monotonic()
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        if request.url.path not in _QUIET_PATHS:
            logger.info(
                "%s %s -> %d in %.1fms [%s]",
                request.method,
                request.url.path,
                response.status_code,
                (time.monotonic() - start) * 1000,
                request_id,
            )
        return response


# ---------------------------------------------------------------------------
# Security Headers Middleware
# ---------------------------------------------------------------------------


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add standard security headers and the API version to every response."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        settings = get_settings()
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["X-API-Version"] = API_VERSION
        if "cache-control" not in response.headers:
            response.headers["Cache-Control"] = "no-store"
        if not settings.debug:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


# ---------------------------------------------------------------------------
# Rate Limiting Middleware
# ---------------------------------------------------------------------------


@dataclass
class _RateLimitEntry:
    """Request count within the current window for one client."""

    count: int = 0
    window_start: float = 0.0


# Tracked clients above which stale entries are pruned on every request
_MAX_TRACKED_CLIENTS = 10_000


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Fixed-window per-IP limiter.

    Allows ``max_requests`` per client IP within ``window_seconds`` and
    answers 429 with Retry-After beyond that. State is per process.
    """

    def __init__(
        self,
        app: ASGIApp,
        max_requests: int = 100,
        window_seconds: int = 60,
    ) -> None:
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clients: dict[str, _RateLimitEntry] = defaultdict(_RateLimitEntry)

    def _prune_stale(self, now: float) -> None:
        stale = [ip for ip, entry in self._clients.items() if now - entry.window_start >= self.window_seconds]
        for ip in stale:
            del self._clients[ip]

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        client_ip = request.client.host if request.client else "unknown"
        now = time.monotonic()

        if len(self._clients) > _MAX_TRACKED_CLIENTS:
            self._prune_stale(now)

        entry = self._clients[client_ip]
        if now - entry.window_start >= self.window_seconds:
            entry.count = 0
            entry.window_start = now
        entry.count += 1

        if entry.count > self.max_requests:
            retry_after = int(self.window_seconds - (now - entry.window_start))
            logger.warning("Rate limit exceeded for %s", client_ip)
            return Response(
                content='{"detail":"Rate limit exceeded"}',
                status_code=429,
                media_type="application/json",
                headers={"Retry-After": str(max(retry_after, 1))},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(max(0, self.max_requests - entry.count))
        return response
