"""
Password hashing and validation using argon2id.

Cost parameters are tuned for roughly 100 ms per hash on commodity hardware;
this is the dominant per-request cost of the auth endpoints.
"""

from __future__ import annotations

import argon2

from apaddicto.config import get_settings
from apaddicto.errors import ValidationError

_hasher = argon2.PasswordHasher(
    time_cost=2,
    memory_cost=65536,  # 64 MB
    parallelism=1,
    hash_len=32,
    salt_len=16,
    type=argon2.Type.ID,  # argon2id
)


def hash_password(password: str) -> str:
    """Hash a password using argon2id. Returns the full hash string."""
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against its argon2id hash.

    Returns True if the password matches. Never raises: a mismatch or a
    malformed hash is reported as False.
    """
    try:
        return _hasher.verify(password_hash, password)
    except argon2.exceptions.VerificationError:
        return False
    except argon2.exceptions.InvalidHashError:
        return False


def check_needs_rehash(password_hash: str) -> bool:
    """Check if the hash needs to be updated (parameters changed)."""
    try:
        return _hasher.check_needs_rehash(password_hash)
    except argon2.exceptions.InvalidHashError:
        return True


def validate_registration_password(password: str | None) -> None:
    """
    Enforce the registration length bounds.

    Raises ValidationError if the password is shorter than the minimum
    or longer than the maximum (large inputs make hashing a DoS vector).
    """
    settings = get_settings()
    if not password or len(password) < settings.password_min_length:
        msg = f"Le mot de passe doit contenir au moins {settings.password_min_length} caractères"
        raise ValidationError(msg)
    if len(password) > settings.password_max_length:
        msg = f"Le mot de passe est trop long (maximum {settings.password_max_length} caractères)"
        raise ValidationError(msg)


def validate_new_password(old_password: str | None, new_password: str | None) -> None:
    """Rules for a password change: both values present, new one long enough."""
    settings = get_settings()
    if not old_password or not new_password:
        msg = "L'ancien et le nouveau mot de passe sont requis."
        raise ValidationError(msg)
    if len(new_password) < settings.password_change_min_length:
        msg = f"Le nouveau mot de passe doit contenir au moins {settings.password_change_min_length} caractères."
        raise ValidationError(msg)
    if len(new_password) > settings.password_max_length:
        msg = f"Le mot de passe est trop long (maximum {settings.password_max_length} caractères)"
        raise ValidationError(msg)
