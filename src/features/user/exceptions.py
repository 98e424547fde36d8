"""User-related exceptions."""

from fastapi import status

from src.shared.errors import AppException, ErrorCode


class UserException(AppException):
    """Base user exception."""

    def __init__(
        self,
        detail: str = "User operation failed",
        status_code: int = status.HTTP_400_BAD_REQUEST,
        code: str = ErrorCode.VALIDATION_FAILED,
    ):
        super().__init__(status_code=status_code, code=code, detail=detail)


class UserNotFound(UserException):
    """Raised when user is not found."""

    def __init__(self):
        super().__init__(detail="User not found", status_code=status.HTTP_404_NOT_FOUND, code=ErrorCode.NOT_FOUND)


class UserAlreadyExists(UserException):
    """Raised when trying to create a user that already exists."""

    def __init__(self, field: str = "user"):
        super().__init__(
            detail=f"{field.capitalize()} already exists",
            status_code=status.HTTP_409_CONFLICT,
            code=ErrorCode.ALREADY_EXISTS,
        )


class UsernameAlreadyExists(UserAlreadyExists):
    """Raised when username already exists."""

    def __init__(self):
        super().__init__(field="username")


class EmailAlreadyExists(UserAlreadyExists):
    """Raised when email already exists."""

    def __init__(self):
        super().__init__(field="email")
