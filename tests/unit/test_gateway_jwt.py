"""Unit tests for JWT handler."""

from datetime import timedelta

import pytest
from jose import jwt

from config.settings import settings
from src.pm_common.errors import InvalidCredentialsError
from src.pm_gateway.auth.jwt_handler import create_access_token, decode_token


def test_access_token_contains_correct_claims() -> None:
    token = create_access_token("trader-123")
    payload = jwt.get_unverified_claims(token)
    assert payload["sub"] == "trader-123"
    assert payload["type"] == "access"


def test_decode_valid_access_token() -> None:
    token = create_access_token("trader-abc")
    assert decode_token(token)["sub"] == "trader-abc"


def test_expired_token_raises() -> None:
    token = create_access_token("trader-abc", expires_in=timedelta(seconds=-1))
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


def test_wrong_secret_raises() -> None:
    token = jwt.encode({"sub": "x", "type": "access"}, "other-secret", algorithm="HS256")
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


def test_non_access_type_raises() -> None:
    token = jwt.encode(
        {"sub": "x", "type": "refresh"}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM
    )
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


def test_garbage_raises() -> None:
    with pytest.raises(InvalidCredentialsError):
        decode_token("not-a-token")
