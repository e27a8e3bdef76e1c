# File: portfolio_api/core/security.py

"""
Security helpers for the portfolio API: password hashing and JWT handling.

Access tokens carry ``{id, username, role}``; refresh tokens carry only
``{id, type="refresh"}`` and are good for minting new access tokens, nothing
else. Both are signed with the configured ``jwt_secret`` and scoped by a fixed
issuer/audience pair.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import ExpiredSignatureError, JWTError, jwt
from jose.exceptions import JWTClaimsError
from passlib.context import CryptContext

from portfolio_api.core.config import Settings, settings as default_settings
from portfolio_api.core.exceptions import (
    InvalidTokenError,
    MalformedTokenError,
    TokenExpiredError,
)


ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

# pbkdf2_sha256 avoids the native bcrypt dependency
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$")
_DURATION_UNITS = {
    "": "seconds",
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
    "w": "weeks",
}


def parse_duration(value: str) -> timedelta:
    """
    Parse an expiry string such as ``"24h"``, ``"30m"``, ``"7d"`` or ``"3600"``.
    """
    match = _DURATION_RE.match(value or "")
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit]: int(amount)})


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # unknown or corrupt hash format
        return False


def _encode(claims: Dict[str, Any], expires_delta: timedelta, config: Settings) -> str:
    now = datetime.now(timezone.utc)
    to_encode = dict(claims)
    to_encode.update(
        {
            "iat": now,
            "exp": now + expires_delta,
            "iss": config.jwt_issuer,
            "aud": config.jwt_audience,
        }
    )
    return jwt.encode(to_encode, config.jwt_secret, algorithm=config.algorithm)


def create_access_token(
    user: Dict[str, Any],
    config: Optional[Settings] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    config = config or default_settings
    claims = {
        "id": user["id"],
        "username": user["username"],
        "role": user.get("role"),
        "type": ACCESS_TOKEN_TYPE,
    }
    return _encode(claims, expires_delta or parse_duration(config.jwt_expiration), config)


def create_refresh_token(
    user: Dict[str, Any],
    config: Optional[Settings] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    config = config or default_settings
    claims = {"id": user["id"], "type": REFRESH_TOKEN_TYPE}
    return _encode(
        claims, expires_delta or timedelta(days=config.refresh_token_expire_days), config
    )


def decode_token(token: str, config: Optional[Settings] = None) -> Dict[str, Any]:
    """
    Validate signature, expiry, issuer and audience.

    Raises:
        TokenExpiredError: the token was valid but has expired
        InvalidTokenError: issuer/audience or other claim checks failed
        MalformedTokenError: the token cannot be parsed or the signature is bad
    """
    config = config or default_settings
    try:
        return jwt.decode(
            token,
            config.jwt_secret,
            algorithms=[config.algorithm],
            audience=config.jwt_audience,
            issuer=config.jwt_issuer,
        )
    except ExpiredSignatureError:
        raise TokenExpiredError()
    except JWTClaimsError:
        raise InvalidTokenError()
    except JWTError:
        raise MalformedTokenError()


def decode_refresh_token(token: str, config: Optional[Settings] = None) -> Dict[str, Any]:
    claims = decode_token(token, config)
    if claims.get("type") != REFRESH_TOKEN_TYPE:
        raise InvalidTokenError("Invalid token type")
    return claims
