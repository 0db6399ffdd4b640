"""Daily Task Tracker FastAPI application entry point.

Configures the FastAPI app with:
- CORS and security middleware
- Lifespan events for the database pool and Redis client
- Route registration (health, auth, task types, records, websocket)
- OpenAPI documentation at /docs (debug mode only)
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from src.api.middleware.security import (
    RateLimitMiddleware,
    RequestIDMiddleware,
    SecurityHeadersMiddleware,
)
from src.api.routes import health, records, task_types, websocket
from src.api.routes import auth as auth_routes
from src.api.routes.auth import limiter
from src.api.version import API_VERSION
from src.core.config import get_settings
from src.core.database import create_engine
from src.core.redis import create_redis_client, verify_redis_connectivity

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the database pool and Redis client; close them on shutdown."""
    settings = get_settings()

    # -- PostgreSQL ---
    engine, session_factory = create_engine(settings)
    app.state.db_engine = engine
    app.state.db_session_factory = session_factory
    logger.info("PostgreSQL connection pool initialized")

    # -- Redis ---
    redis_client = create_redis_client(settings)
    app.state.redis_client = redis_client
    if await verify_redis_connectivity(redis_client):
        logger.info("Redis connection verified")
    else:
        logger.warning("Redis is not reachable; live updates are unavailable")

    yield

    # -- Shutdown ---
    await redis_client.aclose()
    await engine.dispose()
    logger.info("All connections closed")


def register_error_handlers(app: FastAPI) -> None:
    """Map domain validation errors to 422 and anything unhandled to 500."""

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        request_id = getattr(request.state, "request_id", "unknown")
        logger.warning("Validation error [%s]: %s", request_id, exc)
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc), "request_id": request_id},
        )

    @app.exception_handler(Exception)  # Intentionally broad: top-level global error handler
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        request_id = getattr(request.state, "request_id", "unknown")
        logger.exception("Unhandled error [%s]: %s", request_id, exc)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "request_id": request_id},
        )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Daily task tracking records with grouped summaries and CSV export",
        version=API_VERSION,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # -- Rate Limiter (slowapi) ---
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Middleware is applied in reverse order (last added = first executed).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID", "Accept"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.add_middleware(SlowAPIMiddleware)

    app.include_router(health.router)
    app.include_router(auth_routes.router)
    app.include_router(task_types.router)
    app.include_router(records.router)
    app.include_router(websocket.router)

    register_error_handlers(app)
    return app


def run() -> None:
    """Serve the application with uvicorn."""
    import uvicorn

    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host=settings.backend_host, port=settings.backend_port)


# Application instance used by uvicorn
app = create_app()


if __name__ == "__main__":
    run()
