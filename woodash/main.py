# main.py
from __future__ import annotations

import asyncio
import contextlib
import json
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import ORJSONResponse

# Import logging utilities early so that the logger configuration is
# applied before any other modules emit log messages.
from woodash.logging_config import logger

from woodash.clients.http_client import HTTPClient
from woodash.core.config import Settings, get_settings
from woodash.core.context import SessionStore
from woodash.core.errors import ErrorCodes, register_error_handlers
from woodash.core.responses import error_response
from woodash.routes.auth import router as auth_router
from woodash.routes.cache import router as cache_router
from woodash.routes.health import router as health_router
from woodash.routes.woocommerce import router as woocommerce_router
from woodash.utils.cache import CacheStore


async def _sweep_cache(cache: CacheStore, interval: float) -> None:
    """Periodically drop expired entries nobody reads any more."""
    while True:
        await asyncio.sleep(interval)
        removed = cache.sweep()
        if removed:
            logger.debug(json.dumps({"event": "cache_sweep", "removed": removed, "size": len(cache)}))


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    cache: Optional[CacheStore] = None,
) -> FastAPI:
    """Build the FastAPI application.

    :param settings: overrides :func:`get_settings`, mainly for tests
    :param transport: httpx transport for the shared HTTP client; tests
        pass an ``httpx.MockTransport`` standing in for the store
    :param cache: cache store to use instead of a fresh one, e.g. one
        driven by a fake clock
    """
    settings = settings or get_settings()
    logger.setLevel(settings.log_level.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # process-wide services shared by every request
        app.state.settings = settings
        app.state.http_client = HTTPClient(settings, transport=transport)
        app.state.cache = cache if cache is not None else CacheStore(single_flight=settings.cache_single_flight)
        app.state.sessions = SessionStore(max_age=settings.session_max_age)
        sweeper = None
        if settings.cache_sweep_interval > 0:
            sweeper = asyncio.create_task(_sweep_cache(app.state.cache, settings.cache_sweep_interval))
        try:
            yield
        finally:
            if sweeper is not None:
                sweeper.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await sweeper
            await app.state.http_client.close()
            app.state.cache.clear()

    app = FastAPI(
        title="WooCommerce Dashboard API",
        version="1.0.0",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    register_error_handlers(app)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(woocommerce_router)
    app.include_router(cache_router)

    # -----------------------------------------------------------------
    # Request logging middleware
    # -----------------------------------------------------------------
    # Logs path, method, status and processing time of every request and
    # tags the response with a request id for correlation.
    @app.middleware("http")  # type: ignore[misc]
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        start_time = time.monotonic()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(json.dumps({"event": "unhandled_error", "request_id": request_id, "path": request.url.path}))
            response = error_response(ErrorCodes.INTERNAL_ERROR, "An unexpected error occurred", 500)
        duration_ms = (time.monotonic() - start_time) * 1000
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "SAMEORIGIN"
        logger.info(json.dumps({
            "event": "http_request",
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "status": response.status_code,
            "duration_ms": round(duration_ms, 2),
        }))
        return response

    return app


app = create_app()
