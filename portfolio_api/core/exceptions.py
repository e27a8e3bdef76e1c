# File: portfolio_api/core/exceptions.py

"""
Error taxonomy for the portfolio API.

Every error carries an HTTP status, a short ``error`` label and a human
``message``. The handlers registered by ``register_exception_handlers`` turn
them into the JSON envelope the frontend expects:

    {"error": "Project not found", "message": "Project with ID 7 does not exist"}
"""

import logging
import traceback
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class PortfolioError(Exception):
    """Base exception for all API errors"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "Internal server error"

    def __init__(
        self,
        message: str = "Something went wrong",
        *,
        error: Optional[str] = None,
        details: Any = None,
    ):
        self.message = message
        if error is not None:
            self.error = error
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict:
        body = {"error": self.error, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


# ============================================
# Validation Errors (400)
# ============================================

class ValidationFailedError(PortfolioError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "Validation error"

    def __init__(self, message: str = "Invalid input data", details: Any = None):
        super().__init__(message, details=details)


class InvalidFileTypeError(PortfolioError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "Invalid file type"

    def __init__(self, content_type: Optional[str], allowed: Optional[list] = None):
        super().__init__(
            f"Invalid file type: {content_type or 'unknown'} is not allowed",
            details={"allowed": allowed} if allowed else None,
        )


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(PortfolioError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "Access denied"

    def __init__(self, message: str = "Authentication required", error: Optional[str] = None):
        super().__init__(message, error=error)


class TokenExpiredError(AuthenticationError):
    error = "Token expired"

    def __init__(self, message: str = "Please login again"):
        super().__init__(message)


class MalformedTokenError(AuthenticationError):
    error = "Invalid token"

    def __init__(self, message: str = "Token is malformed"):
        super().__init__(message)


class InvalidTokenError(AuthenticationError):
    error = "Token verification failed"

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)


class AuthorizationError(PortfolioError):
    status_code = status.HTTP_403_FORBIDDEN
    error = "Access denied"

    def __init__(self, message: str = "Admin privileges required"):
        super().__init__(message)


# ============================================
# Resource Errors (404)
# ============================================

class NotFoundError(PortfolioError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "Not found"


class ProjectNotFoundError(NotFoundError):
    error = "Project not found"

    def __init__(self, project_id: int, message: Optional[str] = None):
        self.project_id = project_id
        super().__init__(message or f"Project with ID {project_id} does not exist")


class FileNotFoundInStorageError(NotFoundError):
    error = "File not found"

    def __init__(self, file_name: str):
        self.file_name = file_name
        super().__init__("The specified file does not exist")


# ============================================
# Upload / Storage Errors
# ============================================

class PayloadTooLargeError(PortfolioError):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    error = "File too large"

    def __init__(self, max_size: int):
        self.max_size = max_size
        if max_size >= 1024 * 1024:
            limit = f"{max_size // (1024 * 1024)}MB"
        else:
            limit = f"{max_size} bytes"
        super().__init__(f"File must be smaller than {limit}")


class RateLimitedError(PortfolioError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    error = "Too many requests"

    def __init__(self, retry_after: int):
        self.retry_after = retry_after
        super().__init__("Too many requests from this IP, please try again later.")


class StorageError(PortfolioError):
    error = "Storage error"


class StorageUnavailableError(StorageError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error = "Storage unavailable"

    def __init__(self, message: str = "Object storage is not initialized"):
        super().__init__(message)


# ============================================
# Handlers
# ============================================

def register_exception_handlers(app: FastAPI, *, debug: bool = False) -> None:
    """Attach the JSON error envelope to ``app``."""

    @app.exception_handler(PortfolioError)
    async def portfolio_error_handler(request: Request, exc: PortfolioError):
        headers = None
        if isinstance(exc, AuthenticationError):
            headers = {"WWW-Authenticate": "Bearer"}
        elif isinstance(exc, RateLimitedError):
            headers = {"Retry-After": str(exc.retry_after)}
        return JSONResponse(
            status_code=exc.status_code,
            content=jsonable_encoder(exc.to_dict()),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        details = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ())[1:]),
                "message": err.get("msg"),
                "type": err.get("type"),
            }
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=jsonable_encoder(
                ValidationFailedError(details=details).to_dict()
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
            body = {
                "error": "API endpoint not found",
                "message": f"The endpoint {request.url.path} does not exist.",
            }
        else:
            body = {"error": str(exc.detail), "message": str(exc.detail)}
        return JSONResponse(
            status_code=exc.status_code,
            content=body,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
        )
        body = {
            "error": "Internal server error",
            "message": str(exc) if debug else "Something went wrong!",
        }
        if debug:
            body["stack"] = traceback.format_exception(type(exc), exc, exc.__traceback__)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body)
