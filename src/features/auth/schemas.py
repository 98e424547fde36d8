"""Authentication schemas (DTOs)."""

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from src.features.user.schemas import UserResponse
from src.shared.validators.password import validate_password_strength
from src.shared.validators.username import validate_username

TokenType = Literal["access", "refresh"]


# Request schemas
class RegisterRequest(BaseModel):
    """User registration request.

    Note: Uses email-validator library via Pydantic's EmailStr for RFC 5322 compliant email validation.
    """

    username: str = Field(..., description="Username (3-30 letters, digits, underscores or hyphens)")
    email: EmailStr
    password: str = Field(..., description="At least 8 characters with upper, lower, digit and special character")
    full_name: str = Field(..., min_length=2, max_length=100)

    @field_validator("username")
    @classmethod
    def check_username(cls, value: str) -> str:
        return validate_username(value)

    @field_validator("password")
    @classmethod
    def check_password_strength(cls, value: str) -> str:
        """Validate password strength using shared validator."""
        return validate_password_strength(value)


class LoginRequest(BaseModel):
    """Login request."""

    username: str = Field(..., min_length=1, max_length=30)
    password: str = Field(..., min_length=1)


class RefreshTokenRequest(BaseModel):
    """Refresh token request."""

    refresh_token: str = Field(..., min_length=1)


class ValidateTokenRequest(BaseModel):
    """Access token validation request (service-to-service)."""

    token: str = Field(..., min_length=1)


# Token payload
class TokenClaims(BaseModel):
    """Decoded identity claims carried inside a token."""

    user_id: UUID
    username: str
    email: str
    type: TokenType
    iss: str
    sub: str
    exp: int
    iat: int
    nbf: int
    jti: str


# Response schemas
class TokenPair(BaseModel):
    """JWT token pair response."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds until the access token expires


class AuthResponse(BaseModel):
    """Returned by register and login."""

    user: UserResponse
    tokens: TokenPair


class ValidateTokenResponse(BaseModel):
    """Result of validating an access token."""

    valid: bool
    claims: TokenClaims | None = None
    code: str | None = None  # failure kind when valid is False


class MessageResponse(BaseModel):
    message: str
