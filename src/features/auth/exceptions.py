"""Authentication exceptions."""

from fastapi import status

from src.shared.errors import AppException, ErrorCode


class AuthenticationException(AppException):
    """Base authentication exception."""

    def __init__(
        self,
        detail: str = "Authentication failed",
        code: str = ErrorCode.UNAUTHORIZED,
        details: dict[str, str] | None = None,
    ):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            code=code,
            detail=detail,
            details=details,
            headers={"WWW-Authenticate": "Bearer"},
        )


class InvalidCredentialsException(AuthenticationException):
    """Raised when username or password is incorrect.

    Unknown usernames and wrong passwords are indistinguishable.
    """

    def __init__(self):
        super().__init__(detail="Invalid username or password", code=ErrorCode.INVALID_CREDENTIALS)


class InvalidTokenException(AuthenticationException):
    """Raised when a token is malformed, badly signed, of the wrong class, or not backed by a live session."""

    def __init__(self, reason: str | None = None, **extra: str):
        details = {"reason": reason, **extra} if reason else None
        super().__init__(detail="Token is invalid", code=ErrorCode.TOKEN_INVALID, details=details)


class TokenExpiredException(AuthenticationException):
    """Raised when a token is past its expiry. Clients should refresh."""

    def __init__(self):
        super().__init__(detail="Token has expired", code=ErrorCode.TOKEN_EXPIRED)
        self.headers = {"WWW-Authenticate": 'Bearer error="invalid_token", error_description="token expired"'}


class TokenMissingException(AuthenticationException):
    """Raised when no bearer token was supplied."""

    def __init__(self):
        super().__init__(detail="Authorization token is missing", code=ErrorCode.TOKEN_MISSING)


class UserInactiveException(AppException):
    """Raised when user account is inactive."""

    def __init__(self):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            code=ErrorCode.UNAUTHORIZED,
            detail="User account is inactive",
        )
