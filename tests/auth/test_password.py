"""Tests for password hashing and validation."""

import pytest

from apaddicto.auth.password import (
    check_needs_rehash,
    hash_password,
    validate_new_password,
    validate_registration_password,
    verify_password,
)
from apaddicto.errors import ValidationError


class TestPasswordHashing:
    def test_hash_and_verify(self):
        hashed = hash_password("pass1")
        assert verify_password("pass1", hashed) is True

    def test_wrong_password_rejected(self):
        hashed = hash_password("pass1")
        assert verify_password("wrong", hashed) is False

    def test_hash_never_equals_plaintext(self):
        hashed = hash_password("pass1")
        assert hashed != "pass1"
        assert "pass1" not in hashed

    def test_hash_is_argon2id(self):
        assert hash_password("pass1").startswith("$argon2id$")

    def test_same_password_hashes_differ(self):
        assert hash_password("pass1") != hash_password("pass1")

    def test_malformed_hash_is_a_failed_verification(self):
        assert verify_password("pass1", "not-a-hash") is False
        assert verify_password("pass1", "") is False

    def test_check_needs_rehash(self):
        assert check_needs_rehash(hash_password("pass1")) is False
        assert check_needs_rehash("not-a-hash") is True


class TestRegistrationPassword:
    def test_minimum_length_accepted(self):
        validate_registration_password("abcd")

    def test_short_password_rejected(self):
        with pytest.raises(ValidationError, match="au moins 4"):
            validate_registration_password("abc")

    def test_missing_password_rejected(self):
        with pytest.raises(ValidationError):
            validate_registration_password(None)

    def test_maximum_length_accepted(self):
        validate_registration_password("a" * 100)

    def test_too_long_password_rejected(self):
        with pytest.raises(ValidationError, match="trop long"):
            validate_registration_password("a" * 101)


class TestNewPassword:
    def test_valid_change(self):
        validate_new_password("pass1", "newpass")

    def test_both_values_required(self):
        with pytest.raises(ValidationError, match="requis"):
            validate_new_password("", "newpass")
        with pytest.raises(ValidationError, match="requis"):
            validate_new_password("pass1", None)

    def test_new_password_needs_six_characters(self):
        with pytest.raises(ValidationError, match="au moins 6"):
            validate_new_password("pass1", "short")
