# File: tests/test_security.py

from datetime import timedelta

import pytest
from jose import jwt

from portfolio_api.core.config import settings
from portfolio_api.core.exceptions import InvalidTokenError, MalformedTokenError
from portfolio_api.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    decode_token,
    hash_password,
    parse_duration,
    verify_password,
)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("24h", timedelta(hours=24)),
        ("30m", timedelta(minutes=30)),
        ("7d", timedelta(days=7)),
        ("3600", timedelta(seconds=3600)),
    ],
)
def test_parse_duration(value, expected):
    assert parse_duration(value) == expected


def test_parse_duration_rejects_garbage():
    with pytest.raises(ValueError):
        parse_duration("soon")


def test_password_hash_verifies():
    hashed = hash_password("s3cret!")
    assert hashed != "s3cret!"
    assert verify_password("s3cret!", hashed)
    assert not verify_password("wrong", hashed)


def test_verify_password_with_unknown_hash_format():
    assert verify_password("anything", "plaintext-not-a-hash") is False


def test_access_token_claims():
    token = create_access_token({"id": 3, "username": "ana", "role": "admin"})
    claims = decode_token(token)
    assert claims["id"] == 3
    assert claims["username"] == "ana"
    assert claims["iss"] == "portfolio-api"
    assert claims["aud"] == "portfolio-frontend"


def test_wrong_audience_is_rejected():
    token = jwt.encode(
        {"id": 1, "iss": "portfolio-api", "aud": "someone-else"},
        settings.jwt_secret,
        algorithm=settings.algorithm,
    )
    with pytest.raises(InvalidTokenError):
        decode_token(token)


def test_wrong_signature_is_malformed():
    token = jwt.encode(
        {"id": 1, "iss": "portfolio-api", "aud": "portfolio-frontend"},
        "another-secret",
        algorithm=settings.algorithm,
    )
    with pytest.raises(MalformedTokenError):
        decode_token(token)


def test_access_token_is_not_a_refresh_token():
    token = create_access_token({"id": 1, "username": "ana", "role": "admin"})
    with pytest.raises(InvalidTokenError):
        decode_refresh_token(token)


def test_tokens_follow_the_given_config(config):
    config.jwt_secret = "per-app-secret"
    config.jwt_expiration = "30m"
    user = {"id": 5, "username": "ana", "role": "admin"}

    claims = decode_token(create_access_token(user, config), config)
    assert claims["exp"] - claims["iat"] == 30 * 60

    # signed with the app's own secret, not the process default
    with pytest.raises(MalformedTokenError):
        decode_token(create_access_token(user, config))

    refresh = decode_refresh_token(create_refresh_token(user, config), config)
    assert refresh["id"] == 5
