"""
Credential business logic.

Handles registration, login, profile and password updates, and the
admin role-elevation policy. Functions flush but never commit; the caller
owns the transaction.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from apaddicto.auth.password import (
    check_needs_rehash,
    hash_password,
    validate_new_password,
    validate_registration_password,
    verify_password,
)
from apaddicto.config import get_settings
from apaddicto.db.models import User, UserStats
from apaddicto.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

ROLES = frozenset({"patient", "admin"})

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

DUPLICATE_EMAIL = "Un utilisateur avec cet email existe déjà"
INVALID_CREDENTIALS = "Email ou mot de passe incorrect"


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def validate_email(email: str) -> None:
    if not email or not _EMAIL_RE.match(email):
        msg = "Format d'email invalide"
        raise ValidationError(msg)


def _validate_names(first_name: str | None, last_name: str | None) -> None:
    max_length = get_settings().name_max_length
    if first_name and len(first_name) > max_length:
        msg = f"Le prénom ne peut pas dépasser {max_length} caractères"
        raise ValidationError(msg)
    if last_name and len(last_name) > max_length:
        msg = f"Le nom ne peut pas dépasser {max_length} caractères"
        raise ValidationError(msg)


def _clean_name(name: str | None) -> str | None:
    if name is None:
        return None
    return name.strip() or None


def can_elevate_to_admin(email: str) -> bool:
    """Admin role is granted at registration only to allow-listed emails."""
    allowed = {normalize_email(e) for e in get_settings().admin_emails}
    return email in allowed


# ---------------------------------------------------------------------------
# User queries
# ---------------------------------------------------------------------------


async def get_user_by_id(db: AsyncSession, user_id: str) -> User | None:
    """Fetch a user by ID."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Fetch a user by email. Emails are stored normalized."""
    result = await db.execute(select(User).where(User.email == normalize_email(email)))
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


async def register_user(
    db: AsyncSession,
    email: str | None,
    password: str | None,
    first_name: str | None = None,
    last_name: str | None = None,
    role: str | None = None,
) -> User:
    """
    Register a new user and create their stats row in the same transaction.

    The duplicate pre-check is a fast path only; the unique constraint on
    ``users.email`` decides, and a violation is reported exactly like the
    pre-check would have.

    Raises:
        ValidationError: Malformed email, password length, oversized names, unknown role.
        AuthorizationError: Admin role requested by a non allow-listed email.
        ConflictError: Email already registered.
    """
    normalized = normalize_email(email)
    validate_email(normalized)
    validate_registration_password(password)
    _validate_names(first_name, last_name)

    requested_role = role or "patient"
    if requested_role not in ROLES:
        msg = "Rôle invalide"
        raise ValidationError(msg)
    if requested_role == "admin" and not can_elevate_to_admin(normalized):
        logger.warning("admin_elevation_refused", email=normalized)
        msg = "Accès administrateur non autorisé pour cet email"
        raise AuthorizationError(msg)

    if await get_user_by_email(db, normalized) is not None:
        raise ConflictError(DUPLICATE_EMAIL)

    password_hash = hash_password(password or "")
    now = datetime.now(timezone.utc)

    user = User(
        email=normalized,
        password=password_hash,
        first_name=_clean_name(first_name),
        last_name=_clean_name(last_name),
        role=requested_role,
        is_active=True,
        points=0,
        level=1,
        created_at=now,
        updated_at=now,
    )
    db.add(user)
    try:
        await db.flush()
        db.add(UserStats(user_id=user.id, updated_at=now))
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        logger.info("registration_conflict", email=normalized)
        raise ConflictError(DUPLICATE_EMAIL) from e

    logger.info("user_registered", user_id=user.id, role=requested_role)
    return user


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


async def authenticate_user(db: AsyncSession, email: str | None, password: str | None) -> User:
    """
    Authenticate with email + password.

    Unknown email and wrong password produce the same error so that the
    response does not reveal which accounts exist.

    Raises:
        ValidationError: Missing email or password.
        AuthenticationError: Invalid credentials.
        AuthorizationError: Account deactivated.
    """
    normalized = normalize_email(email)
    if not normalized or not password:
        msg = "Email et mot de passe requis"
        raise ValidationError(msg)

    user = await get_user_by_email(db, normalized)
    if user is None:
        raise AuthenticationError(INVALID_CREDENTIALS)

    if not verify_password(password, user.password):
        raise AuthenticationError(INVALID_CREDENTIALS)

    if not user.is_active:
        msg = "Compte désactivé"
        raise AuthorizationError(msg)

    user.last_login_at = datetime.now(timezone.utc)

    if check_needs_rehash(user.password):
        user.password = hash_password(password)
        logger.info("password_rehashed", user_id=user.id)

    await db.flush()
    return user


# ---------------------------------------------------------------------------
# Profile and password
# ---------------------------------------------------------------------------


async def update_user(
    db: AsyncSession,
    user_id: str,
    first_name: str | None = None,
    last_name: str | None = None,
    email: str | None = None,
) -> User:
    """
    Update profile fields. A changed email must be well-formed and unused.

    Raises:
        NotFoundError, ValidationError, ConflictError
    """
    user = await get_user_by_id(db, user_id)
    if user is None:
        msg = "Utilisateur non trouvé"
        raise NotFoundError(msg)

    _validate_names(first_name, last_name)

    if email is not None:
        normalized = normalize_email(email)
        if normalized != user.email:
            validate_email(normalized)
            existing = await get_user_by_email(db, normalized)
            if existing is not None and existing.id != user.id:
                msg = "Cet email est déjà utilisé par un autre compte."
                raise ConflictError(msg)
            user.email = normalized

    if first_name is not None:
        user.first_name = _clean_name(first_name)
    if last_name is not None:
        user.last_name = _clean_name(last_name)
    user.updated_at = datetime.now(timezone.utc)

    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        msg = "Cet email est déjà utilisé par un autre compte."
        raise ConflictError(msg) from e
    return user


async def update_password(db: AsyncSession, user_id: str, old_password: str | None, new_password: str | None) -> None:
    """
    Replace the password after checking the current one.

    Raises:
        ValidationError: Missing values, new password too short, wrong old password.
        NotFoundError: User does not exist.
    """
    validate_new_password(old_password, new_password)

    user = await get_user_by_id(db, user_id)
    if user is None:
        msg = "Utilisateur non trouvé."
        raise NotFoundError(msg)

    if not verify_password(old_password or "", user.password):
        msg = "L'ancien mot de passe est incorrect."
        raise ValidationError(msg)

    user.password = hash_password(new_password or "")
    user.updated_at = datetime.now(timezone.utc)
    await db.flush()
    logger.info("password_changed", user_id=user.id)
