"""HTTP middleware stack for the Apaddicto API."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from apaddicto.config import Settings
from apaddicto.middleware.error_handler import setup_error_handlers
from apaddicto.middleware.logging import setup_logging
from apaddicto.middleware.rate_limit import RateLimitMiddleware
from apaddicto.middleware.request_id import RequestIdMiddleware

# Headers the web client reads from responses.
EXPOSED_HEADERS = ["X-Request-Id", "X-RateLimit-Remaining", "X-RateLimit-Limit", "Retry-After"]


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Install logging, error handlers and middleware.

    Starlette runs the last added middleware first. From the outside in:
    CORS (so 429 and 500 responses still carry CORS headers and the browser
    can read them), request id (so rate-limit warnings are tagged), then the
    general rate limit.
    """
    setup_logging(settings)
    setup_error_handlers(app)

    app.add_middleware(
        RateLimitMiddleware,
        requests_per_window=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.add_middleware(RequestIdMiddleware)
    # The session cookie is sent cross-origin from the Vite dev server, so
    # origins must be explicit and credentials allowed.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-Id"],
        expose_headers=EXPOSED_HEADERS,
    )
