"""
Tourify Backend — Rate Limiting Middleware
===========================================

What:  Per-client-IP sliding window limiter.
How:   Each IP keeps a deque of request timestamps inside the last
       RATE_LIMIT_WINDOW seconds. A request arriving when the deque already
       holds RATE_LIMIT_REQUESTS entries is answered with 429 and a
       Retry-After equal to the time until the oldest entry leaves the window.

State is in process memory: with several workers each one enforces its own
budget.
"""

import logging
import time
from collections import deque
from typing import Callable, Deque, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from tourify.config import settings
from tourify.exceptions import RateLimitExceededError
from tourify.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

# Full sweep of idle clients every N admitted requests
SWEEP_INTERVAL = 1000


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Sliding window limiter keyed by client IP.

    Health and documentation endpoints are never limited.
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    def __init__(
        self,
        app,
        max_requests: Optional[int] = None,
        window_seconds: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(app)
        self.max_requests = max_requests or settings.rate_limit_requests
        self.window_seconds = window_seconds or settings.rate_limit_window
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._admitted = 0

    def check(self, client_ip: str) -> None:
        """Record one request for `client_ip` or raise RateLimitExceededError."""
        now = self._clock()
        window_start = now - self.window_seconds
        hits = self._hits.setdefault(client_ip, deque())
        while hits and hits[0] <= window_start:
            hits.popleft()

        if len(hits) >= self.max_requests:
            retry_after = max(1, int(hits[0] + self.window_seconds - now) + 1)
            raise RateLimitExceededError(retry_after=retry_after)

        hits.append(now)
        self._admitted += 1
        if self._admitted % SWEEP_INTERVAL == 0:
            self._sweep(window_start)

    def _sweep(self, window_start: float) -> None:
        idle = [ip for ip, hits in self._hits.items() if not hits or hits[-1] <= window_start]
        for ip in idle:
            del self._hits[ip]
        if idle:
            logger.debug("Dropped rate limit state for %d idle clients", len(idle))

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        try:
            self.check(client_ip)
        except RateLimitExceededError as exc:
            logger.warning(
                "Rate limit exceeded for %s: %d requests in %ds",
                client_ip,
                self.max_requests,
                self.window_seconds,
            )
            # Raised outside the router, so the app's exception handlers never see it
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": exc.message,
                    "details": exc.context,
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(exc.retry_after)},
            )

        return await call_next(request)
