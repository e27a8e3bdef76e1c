# File: portfolio_api/api/deps.py

from typing import Any, Dict, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from portfolio_api.core.config import Settings
from portfolio_api.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    InvalidTokenError,
    PortfolioError,
)
from portfolio_api.core.security import REFRESH_TOKEN_TYPE, decode_token
from portfolio_api.db.store import JsonRecordStore
from portfolio_api.services.storage_service import ObjectStorage

bearer_scheme = HTTPBearer(auto_error=False)


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> JsonRecordStore:
    """
    FastAPI dependency that provides the record store created at startup.

    Usage in route functions:
        store: JsonRecordStore = Depends(get_store)
    """
    return request.app.state.store


def get_storage(request: Request) -> ObjectStorage:
    return request.app.state.storage


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    config: Settings = Depends(get_settings_dep),
) -> Dict[str, Any]:
    """Decoded access-token claims; 401 when the token is missing or bad."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("No token provided")
    claims = decode_token(credentials.credentials, config)
    if claims.get("type") == REFRESH_TOKEN_TYPE:
        raise InvalidTokenError("Refresh tokens cannot be used for API access")
    return claims


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    config: Settings = Depends(get_settings_dep),
) -> Optional[Dict[str, Any]]:
    if credentials is None or not credentials.credentials:
        return None
    try:
        claims = decode_token(credentials.credentials, config)
    except PortfolioError:
        return None
    if claims.get("type") == REFRESH_TOKEN_TYPE:
        return None
    return claims


def require_admin(
    claims: Dict[str, Any] = Depends(get_current_user),
    store: JsonRecordStore = Depends(get_store),
) -> Dict[str, Any]:
    """
    Re-read the user row so a revoked role takes effect before the token
    expires. Returns the stored user.
    """
    user = store.get_user_by_id(claims.get("id"))
    if not user or user.get("role") != "admin":
        raise AuthorizationError("Admin privileges required")
    return user


def is_admin(claims: Optional[Dict[str, Any]], store: JsonRecordStore) -> bool:
    if not claims:
        return False
    user = store.get_user_by_id(claims.get("id"))
    return bool(user and user.get("role") == "admin")
