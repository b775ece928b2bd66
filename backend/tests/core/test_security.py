"""Credentials — bcrypt hashing and typed JWTs."""

import pytest

from portal.core.errors import AuthenticationError
from portal.infrastructure.security import (
    REFRESH, create_access_token, create_refresh_token, decode_token, extract_user_id,
    hash_password, verify_password,
)

SECRET = "unit-test-secret"
PAYLOAD = {"sub": "7", "username": "guru1", "role": "teacher"}


def test_hash_and_verify():
    hashed = hash_password("secret123", rounds=4)
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("secret124", hashed)


def test_verify_against_malformed_hash_is_false():
    assert verify_password("secret123", "not-a-bcrypt-hash") is False


def test_access_token_round_trip():
    claims = decode_token(create_access_token(PAYLOAD, SECRET, 15), SECRET)
    assert claims["username"] == "guru1"
    assert claims["type"] == "access"
    assert extract_user_id(claims) == 7


def test_refresh_token_rejected_as_access():
    token = create_refresh_token(PAYLOAD, SECRET, 7)
    with pytest.raises(AuthenticationError):
        decode_token(token, SECRET)
    assert decode_token(token, SECRET, REFRESH)["type"] == "refresh"


def test_wrong_secret_rejected():
    with pytest.raises(AuthenticationError):
        decode_token(create_access_token(PAYLOAD, SECRET, 15), "other-secret")


def test_expired_token_rejected():
    with pytest.raises(AuthenticationError, match="Token expired"):
        decode_token(create_access_token(PAYLOAD, SECRET, -1), SECRET)


def test_non_numeric_subject_rejected():
    with pytest.raises(AuthenticationError):
        extract_user_id({"sub": "abc"})
