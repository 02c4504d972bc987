"""FastAPI middleware for API rate limiting."""

from __future__ import annotations

import math
import time
from collections import deque

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

log = structlog.get_logger(__name__)

# How many dispatch cycles between full sweeps of stale client entries.
_GC_INTERVAL = 256


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding-window rate limiter per client IP.

    Uses a deque per IP for O(1) append and efficient left-pruning.
    Periodically evicts IPs with no recent requests to prevent unbounded
    memory growth.

    Args:
        app: ASGI application.
        max_requests: Max requests per IP within the window. 0 = unlimited.
        window_seconds: Window length in seconds.
    """

    def __init__(
        self,
        app: object,
        max_requests: int = 100,
        window_seconds: float = 900.0,
    ) -> None:
        super().__init__(app)  # type: ignore[arg-type]
        self._max = max_requests
        self._window_seconds = window_seconds
        self._window: dict[str, deque[float]] = {}
        self._dispatch_count = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if self._max <= 0:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.monotonic()
        cutoff = now - self._window_seconds

        timestamps = self._window.get(client_ip)
        if timestamps is None:
            timestamps = deque()
            self._window[client_ip] = timestamps

        while timestamps and timestamps[0] <= cutoff:
            timestamps.popleft()

        if len(timestamps) >= self._max:
            retry_after = max(1, math.ceil(timestamps[0] + self._window_seconds - now))
            log.warning(
                "rate_limit_exceeded",
                client_ip=client_ip,
                limit=self._max,
                window_seconds=self._window_seconds,
                current=len(timestamps),
            )
            return JSONResponse(
                status_code=429,
                content={
                    "error": "Too many requests, please try again later.",
                    "retry_after_seconds": retry_after,
                },
                headers={"Retry-After": str(retry_after)},
            )

        timestamps.append(now)

        # Periodic GC: evict IPs with no request inside the window
        self._dispatch_count += 1
        if self._dispatch_count >= _GC_INTERVAL:
            self._dispatch_count = 0
            stale = [
                ip for ip, dq in self._window.items() if not dq or dq[-1] <= cutoff
            ]
            for ip in stale:
                del self._window[ip]

        response = await call_next(request)
        remaining = max(0, self._max - len(timestamps))
        response.headers["X-RateLimit-Limit"] = str(self._max)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response
