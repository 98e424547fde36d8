"""JWT utilities for authentication.

Access and refresh tokens share one claim layout and differ only in the
``type`` claim and the secret that signs them, so ``decode_token`` always checks
the class explicitly.
"""

import logging
import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt.exceptions import ExpiredSignatureError, ImmatureSignatureError, InvalidTokenError
from pydantic import ValidationError

from src.config.settings import settings
from src.features.user.models import User
from src.shared.errors import InternalServerException

from .exceptions import InvalidTokenException, TokenExpiredException, TokenMissingException
from .schemas import TokenClaims, TokenPair, TokenType

logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"
REQUIRED_CLAIMS = ["exp", "iat", "nbf", "iss", "sub", "jti"]


def _secret_for(token_type: TokenType) -> str:
    if token_type == ACCESS:
        return settings.jwt_access_secret
    return settings.jwt_refresh_secret


def _lifetime_for(token_type: TokenType) -> timedelta:
    if token_type == ACCESS:
        return timedelta(minutes=settings.access_token_expire_minutes)
    return timedelta(minutes=settings.refresh_token_expire_minutes)


def generate_jti() -> str:
    """Random token identifier, for tracing only."""
    return secrets.token_urlsafe(32)


def create_token(user: User, token_type: TokenType, now: datetime | None = None) -> tuple[str, datetime]:
    """Create a signed JWT of the given class for a user.

    Args:
        user: Token subject
        token_type: ``access`` or ``refresh``
        now: Issue time, defaults to the current time

    Returns:
        Tuple of (encoded token, expiry time)

    Raises:
        InternalServerException: If signing fails

    """
    issued_at = now or datetime.now(UTC)
    expires_at = issued_at + _lifetime_for(token_type)

    payload: dict[str, Any] = {
        "sub": str(user.id),
        "user_id": str(user.id),
        "username": user.username,
        "email": user.email,
        "type": token_type,
        "iss": settings.jwt_issuer,
        "jti": generate_jti(),
        "iat": issued_at,
        "nbf": issued_at,
        "exp": expires_at,
    }

    try:
        encoded_jwt = jwt.encode(payload, _secret_for(token_type), algorithm=settings.jwt_algorithm)
    except (jwt.PyJWTError, TypeError, ValueError) as err:
        logger.error(f"Failed to sign {token_type} token: {type(err).__name__}")
        raise InternalServerException("Failed to generate tokens") from err

    return encoded_jwt, expires_at


def create_token_pair(user: User) -> tuple[TokenPair, datetime]:
    """Mint an access/refresh pair for a user.

    Returns:
        Tuple of (TokenPair, refresh token expiry)

    """
    now = datetime.now(UTC)
    access_token, _ = create_token(user, ACCESS, now)
    refresh_token, refresh_expires_at = create_token(user, REFRESH, now)

    pair = TokenPair(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=settings.access_token_expire_minutes * 60,
    )
    return pair, refresh_expires_at


def decode_token(token: str, expected_type: TokenType) -> TokenClaims:
    """Decode and verify a JWT of the expected class.

    Checks run in this order: signature (only the configured algorithm, with
    the secret of ``expected_type``), expiry and not-before, token class,
    issuer.

    Args:
        token: JWT token string
        expected_type: ``access`` or ``refresh``

    Returns:
        Decoded claims

    Raises:
        TokenExpiredException: If the token is past ``exp``
        InvalidTokenException: For every other failure, with a ``reason`` detail

    """
    try:
        payload = jwt.decode(
            token,
            _secret_for(expected_type),
            algorithms=[settings.jwt_algorithm],
            options={"require": REQUIRED_CLAIMS},
        )
    except ExpiredSignatureError as err:
        raise TokenExpiredException() from err
    except ImmatureSignatureError as err:
        raise InvalidTokenException(reason="token not valid yet") from err
    except InvalidTokenError as err:
        logger.debug(f"Token rejected: {type(err).__name__}")
        raise InvalidTokenException(reason="malformed or invalid signature") from err

    token_type = payload.get("type")
    if token_type != expected_type:
        raise InvalidTokenException(reason="wrong token type", expected=expected_type, got=str(token_type))

    if payload.get("iss") != settings.jwt_issuer:
        raise InvalidTokenException(reason="invalid issuer")

    try:
        return TokenClaims.model_validate(payload)
    except ValidationError as err:
        raise InvalidTokenException(reason="invalid token claims") from err



def extract_bearer_token(authorization: str | None) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header value.

    Raises:
        TokenMissingException: If the header is absent or blank
        InvalidTokenException: If the scheme is not Bearer or the token is empty

    """
    if authorization is None or not authorization.strip():
        raise TokenMissingException()

    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise InvalidTokenException(reason="invalid authorization scheme")
    return token
