"""General per-IP request rate limiting, backed by the key-value store."""

import math
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from apaddicto.auth.rate_limiter import GENERAL_NAMESPACE, RateLimiter
from apaddicto.store import get_store

# Paths exempt from rate limiting
_EXEMPT_PATHS = frozenset({"/api/health", "/api/ready"})


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Fixed-window limit of ``requests_per_window`` requests per client IP."""

    def __init__(self, app: Any, requests_per_window: int = 100, window_seconds: int = 60) -> None:  # noqa: ANN401
        super().__init__(app)
        self.requests_per_window = requests_per_window
        self.window_seconds = window_seconds

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Check rate limit, return 429 if exceeded."""
        if request.url.path in _EXEMPT_PATHS or request.method == "OPTIONS":
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        identifier = f"request:{client_ip}"

        try:
            limiter = RateLimiter(
                get_store(),
                max_attempts=self.requests_per_window,
                window_seconds=self.window_seconds,
                namespace=GENERAL_NAMESPACE,
            )
        except RuntimeError:
            # Store not initialized: let the request through without rate limiting
            return await call_next(request)

        if await limiter.is_rate_limited(identifier):
            retry_after = max(1, math.ceil(await limiter.get_remaining_time(identifier)))
            return JSONResponse(
                status_code=429,
                content={"message": "Trop de requêtes. Veuillez réessayer plus tard.", "retryAfter": retry_after},
                headers={
                    "Retry-After": str(retry_after),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Limit": str(self.requests_per_window),
                },
            )

        count = await limiter.record_attempt(identifier)
        response = await call_next(request)
        response.headers["X-RateLimit-Remaining"] = str(max(0, self.requests_per_window - count))
        response.headers["X-RateLimit-Limit"] = str(self.requests_per_window)
        return response
