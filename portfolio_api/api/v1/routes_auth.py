# File: portfolio_api/api/v1/routes_auth.py

"""
Auth API routes: login, refresh, logout, me, verify.

Logout is an acknowledgement only; the client drops its tokens.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends

from portfolio_api.api.deps import get_current_user, get_settings_dep, get_store
from portfolio_api.core.config import Settings
from portfolio_api.core.exceptions import AuthenticationError, NotFoundError, PortfolioError
from portfolio_api.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    verify_password,
)
from portfolio_api.db.store import JsonRecordStore
from portfolio_api.schemas.user import (
    LoginRequest,
    LoginResponse,
    MeResponse,
    RefreshRequest,
    RefreshResponse,
    VerifyResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

INVALID_CREDENTIALS = "Invalid username or password"


@router.post("/login", response_model=LoginResponse, summary="Login and receive JWT tokens")
def login(
    payload: LoginRequest,
    store: JsonRecordStore = Depends(get_store),
    config: Settings = Depends(get_settings_dep),
):
    user = store.get_user_by_username(payload.username)
    # same message for unknown user and wrong password
    if not user or not verify_password(payload.password, user.get("password", "")):
        logger.warning("Failed login attempt for %r", payload.username)
        raise AuthenticationError(INVALID_CREDENTIALS, error="Authentication failed")

    logger.info("User %s logged in", user["username"])
    return {
        "message": "Login successful",
        "user": user,
        "accessToken": create_access_token(user, config),
        "refreshToken": create_refresh_token(user, config),
        "expiresIn": config.jwt_expiration,
    }


@router.post("/refresh", response_model=RefreshResponse, summary="Mint a new access token")
def refresh(
    payload: RefreshRequest,
    store: JsonRecordStore = Depends(get_store),
    config: Settings = Depends(get_settings_dep),
):
    try:
        claims = decode_refresh_token(payload.refreshToken, config)
    except PortfolioError as exc:
        logger.info("Refresh rejected: %s", exc.message)
        raise AuthenticationError("Invalid or expired refresh token", error="Authentication failed")

    user = store.get_user_by_id(claims.get("id"))
    if not user:
        raise AuthenticationError("User not found", error="Authentication failed")

    return {
        "message": "Token refreshed successfully",
        "accessToken": create_access_token(user, config),
        "expiresIn": config.jwt_expiration,
    }


@router.post("/logout", summary="Logout (client-side token removal)")
def logout(claims: Dict[str, Any] = Depends(get_current_user)):
    logger.info("User %s logged out", claims.get("username"))
    return {"message": "Logout successful"}


@router.get("/me", response_model=MeResponse, summary="Current user from the store")
def me(
    claims: Dict[str, Any] = Depends(get_current_user),
    store: JsonRecordStore = Depends(get_store),
):
    user = store.get_user_by_id(claims.get("id"))
    if not user:
        raise NotFoundError("User account no longer exists", error="User not found")
    return {"user": user}


@router.get("/verify", response_model=VerifyResponse, summary="Check that a token is valid")
def verify(claims: Dict[str, Any] = Depends(get_current_user)):
    return {
        "valid": True,
        "user": {
            "id": claims.get("id"),
            "username": claims.get("username"),
            "role": claims.get("role"),
        },
    }
