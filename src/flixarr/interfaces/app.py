"""FastAPI application factory (create_app)."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import Response

from flixarr import __version__
from flixarr.infrastructure.config import AppConfig
from flixarr.interfaces.api.middleware import RateLimitMiddleware
from flixarr.interfaces.app_state import AppState
from flixarr.interfaces.composition import lifespan

log = structlog.get_logger(__name__)


def create_app(config: AppConfig) -> FastAPI:
    """Create FastAPI app: configuration ONLY, NO resource initialization.

    Resources (HTTP client, decoder, use cases) are created in lifespan().
    """
    app = FastAPI(
        title=config.app_name,
        description="Resolves catalog ids to playable stream sources",
        version=__version__,
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config

    # API rate limiting (per-IP sliding window)
    if config.api.rate_limit_requests > 0:
        app.add_middleware(
            RateLimitMiddleware,
            max_requests=config.api.rate_limit_requests,
            window_seconds=config.api.rate_limit_window_seconds,
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from flixarr.interfaces.api.sources import router as sources_router

    app.include_router(sources_router, prefix="/api/v1")

    @app.get("/api/v1/healthz")
    async def healthz() -> dict[str, Any]:
        """Liveness probe; also reports whether the decoder script is present."""
        decoder = getattr(app.state, "decoder", None)
        return {
            "status": "ok",
            "decoder_available": decoder.is_available() if decoder else False,
        }

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ):
        start = time.perf_counter()
        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000.0
            status_code = getattr(locals().get("response", None), "status_code", 500)

            log.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                query=str(request.url.query),
                status_code=status_code,
                duration_ms=round(duration_ms, 2),
                client_host=(request.client.host if request.client else None),
            )

    return app
