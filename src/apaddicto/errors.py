"""Domain error taxonomy.

Services raise these; the HTTP boundary maps ``status_code`` to the response
and merges ``details`` into the JSON body. Messages are user-facing (French).
"""

from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base class for every error the domain services raise on purpose."""

    kind = "server_error"
    status_code = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, **self.details}


class ValidationError(AppError):
    """Malformed input, missing batch fields, out-of-range values."""

    kind = "validation"
    status_code = 400


class AuthenticationError(AppError):
    """Bad credentials, missing or expired session."""

    kind = "authentication"
    status_code = 401


class AuthorizationError(AppError):
    """Unauthorized role elevation, inactive account, admin-only access."""

    kind = "authorization"
    status_code = 403


class NotFoundError(AppError):
    kind = "not_found"
    status_code = 404


class ConflictError(AppError):
    """Duplicate email."""

    kind = "conflict"
    status_code = 409


class RateLimitError(AppError):
    """Too many attempts. ``retry_after`` is in whole seconds."""

    kind = "rate_limited"
    status_code = 429

    def __init__(self, message: str, retry_after: int) -> None:
        super().__init__(message, {"retryAfter": retry_after})
        self.retry_after = retry_after


class ServerError(AppError):
    kind = "server_error"
    status_code = 500
