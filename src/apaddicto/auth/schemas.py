"""Request/response schemas for authentication and profile endpoints.

Wire format is camelCase; Python attributes stay snake_case.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class RegisterRequest(CamelModel):
    """Registration request. Field rules are enforced by the service."""

    email: str | None = None
    password: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    role: str | None = None


class LoginRequest(CamelModel):
    email: str | None = None
    password: str | None = None


class ProfileUpdateRequest(CamelModel):
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None


class ChangePasswordRequest(CamelModel):
    old_password: str | None = None
    new_password: str | None = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class PublicUser(CamelModel):
    """User record without the password hash."""

    id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    role: str
    points: int = 0
    level: int = 1
    is_active: bool = True
    created_at: datetime | None = None
    last_login_at: datetime | None = None


class UserEnvelope(CamelModel):
    user: PublicUser


class MessageResponse(CamelModel):
    message: str
