"""Application error taxonomy.

Every failure the service reports carries a stable ``ErrorCode`` so callers can
tell, for example, an expired token (refresh and retry) from an invalid one
(re-authenticate).
"""

import logging

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

logger = logging.getLogger(__name__)


class ErrorCode:
    """Stable machine-readable error codes."""

    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    TOKEN_INVALID = "TOKEN_INVALID"
    TOKEN_MISSING = "TOKEN_MISSING"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    INTERNAL = "INTERNAL_ERROR"


class AppException(HTTPException):
    """Base application exception with an error code and optional details."""

    def __init__(
        self,
        status_code: int,
        code: str,
        detail: str,
        details: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.code = code
        self.details = details or {}

    def to_dict(self) -> dict:
        body: dict = {"detail": self.detail, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body


class InternalServerException(AppException):
    """Raised when a store, hashing or signing operation fails."""

    def __init__(self, detail: str = "Internal server error"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, code=ErrorCode.INTERNAL, detail=detail)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render an AppException as ``{"detail", "code", "details"}``."""
    if exc.status_code >= 500:
        logger.error(f"{exc.code}: {exc.detail} ({request.method} {request.url.path})")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return field-level detail for malformed requests."""
    errors = [
        {
            "field": ".".join(str(part) for part in error["loc"] if part != "body"),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
        content={"detail": errors, "code": ErrorCode.VALIDATION_FAILED},
    )


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handle rate limit exceeded errors."""
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"detail": "Rate limit exceeded", "code": ErrorCode.RATE_LIMIT_EXCEEDED},
    )
