"""Authentication router (JWT token and session management endpoints)."""

import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.settings import settings
from src.database.dependencies import get_db_session
from src.features.session.metadata import get_session_metadata
from src.features.session.schemas import SessionMetadata, SessionResponse
from src.features.user.schemas import UserResponse
from src.shared.errors import AppException
from src.shared.rate_limit import limiter

from .dependencies import get_current_claims
from .schemas import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    RefreshTokenRequest,
    RegisterRequest,
    TokenClaims,
    TokenPair,
    ValidateTokenRequest,
    ValidateTokenResponse,
)
from .service import AuthService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.auth_rate_limit)
async def register(
    request: Request,
    data: RegisterRequest,
    metadata: SessionMetadata = Depends(get_session_metadata),
    session: AsyncSession = Depends(get_db_session),
):
    """Register a new user and start a session.

    - **username**: 3-30 letters, digits, underscores or hyphens
    - **email**: Email address
    - **password**: Minimum 8 characters with upper, lower, digit and special character
    - **full_name**: 2-100 characters

    Returns the user and a token pair.
    """
    response = await AuthService.register(session, data, metadata)
    await session.commit()
    return response


@router.post("/login", response_model=AuthResponse)
@limiter.limit(settings.auth_rate_limit)
async def login(
    request: Request,
    data: LoginRequest,
    metadata: SessionMetadata = Depends(get_session_metadata),
    session: AsyncSession = Depends(get_db_session),
):
    """Login and get JWT tokens.

    Any session the user had on another device is ended.
    """
    response = await AuthService.login(session, data, metadata)
    await session.commit()
    return response


@router.post("/refresh", response_model=TokenPair)
@limiter.limit(settings.auth_rate_limit)
async def refresh_token(
    request: Request,
    data: RefreshTokenRequest,
    metadata: SessionMetadata = Depends(get_session_metadata),
    session: AsyncSession = Depends(get_db_session),
):
    """Exchange a refresh token for a new token pair.

    The refresh token sent is revoked; only the returned one can be used next.
    """
    tokens = await AuthService.refresh_tokens(session, data.refresh_token, metadata)
    await session.commit()
    return tokens


@router.post("/validate", response_model=ValidateTokenResponse)
async def validate_token(data: ValidateTokenRequest, session: AsyncSession = Depends(get_db_session)):
    """Validate an access token on behalf of another service.

    Always answers 200; ``code`` tells why an invalid token was rejected.
    """
    try:
        claims = await AuthService.validate_token(session, data.token)
    except AppException as exc:
        return ValidateTokenResponse(valid=False, code=exc.code)
    return ValidateTokenResponse(valid=True, claims=claims)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    claims: TokenClaims = Depends(get_current_claims),
    session: AsyncSession = Depends(get_db_session),
):
    """Logout and revoke every session of the current user."""
    await AuthService.logout(session, claims.user_id)
    await session.commit()
    logger.info(f"User logged out: {claims.username}")
    return MessageResponse(message="Successfully logged out")


@router.get("/me", response_model=UserResponse)
async def me(
    claims: TokenClaims = Depends(get_current_claims),
    session: AsyncSession = Depends(get_db_session),
):
    """Get current user information."""
    user = await AuthService.get_profile(session, claims.user_id)
    await session.commit()
    return UserResponse.model_validate(user)


@router.get("/sessions", response_model=list[SessionResponse])
async def list_sessions(
    claims: TokenClaims = Depends(get_current_claims),
    session: AsyncSession = Depends(get_db_session),
):
    """List the current user's sessions, newest first, including revoked ones."""
    sessions = await AuthService.list_sessions(session, claims.user_id)
    return [SessionResponse.model_validate(s) for s in sessions]
