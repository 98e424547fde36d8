"""Authentication service layer.

Owns the session lifecycle: register, login, refresh (with rotation), validate,
logout. A user holds at most one active session; every login, registration and
refresh replaces the previous one.
"""

import logging
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.base import utcnow
from src.features.session.models import UserSession
from src.features.session.repository import SessionRepository
from src.features.session.schemas import SessionMetadata
from src.features.user.exceptions import UserNotFound
from src.features.user.models import User
from src.features.user.schemas import UserResponse
from src.features.user.service import UserService
from src.shared.errors import InternalServerException

from .exceptions import InvalidCredentialsException, InvalidTokenException, UserInactiveException
from .jwt_utils import ACCESS, REFRESH, create_token_pair, decode_token
from .passwords import hash_password_async, verify_password_async
from .schemas import AuthResponse, LoginRequest, RegisterRequest, TokenClaims, TokenPair

logger = logging.getLogger(__name__)


class AuthService:
    """Service for JWT authentication and session management."""

    @staticmethod
    async def register(
        session: AsyncSession, data: RegisterRequest, metadata: SessionMetadata | None = None
    ) -> AuthResponse:
        """Register a user and open their first session.

        Args:
            session: Database session
            data: Validated registration data
            metadata: Client metadata stored with the session

        Returns:
            AuthResponse with the user view and a fresh token pair

        Raises:
            UsernameAlreadyExists: If username already exists
            EmailAlreadyExists: If email already exists
            UserAlreadyExists: If a concurrent registration won the race
            InternalServerException: If hashing or session creation fails

        """
        await UserService.ensure_available(session, data.username, data.email)

        try:
            hashed_password = await hash_password_async(data.password)
        except Exception as err:
            logger.error(f"Failed to hash password: {type(err).__name__}")
            raise InternalServerException("Failed to process password") from err

        user = await UserService.create_user(
            session,
            username=data.username,
            email=data.email,
            full_name=data.full_name,
            hashed_password=hashed_password,
        )

        tokens = await AuthService._start_session(session, user, metadata)
        return AuthResponse(user=UserResponse.model_validate(user), tokens=tokens)

    @staticmethod
    async def login(
        session: AsyncSession, data: LoginRequest, metadata: SessionMetadata | None = None
    ) -> AuthResponse:
        """Authenticate with username and password.

        Unknown usernames and wrong passwords fail identically, including in
        timing. A successful login ends the session the user had on any other
        device.

        Raises:
            InvalidCredentialsException: If the username or password is wrong
            UserInactiveException: If the account is disabled
            InternalServerException: If the session cannot be stored

        """
        user = await UserService.get_by_username(session, data.username)

        password_ok = await verify_password_async(user.hashed_password if user else None, data.password)
        if user is None or not password_ok:
            logger.warning("Login failed: invalid credentials")
            raise InvalidCredentialsException()

        if not user.is_active:
            logger.warning(f"Login failed: user {user.id} is inactive")
            raise UserInactiveException()

        tokens = await AuthService._start_session(session, user, metadata)
        logger.info(f"User logged in: {user.username}")
        return AuthResponse(user=UserResponse.model_validate(user), tokens=tokens)

    @staticmethod
    async def refresh_tokens(
        session: AsyncSession, refresh_token: str, metadata: SessionMetadata | None = None
    ) -> TokenPair:
        """Exchange a refresh token for a new pair, revoking the one presented.

        A refresh token is accepted at most once. Missing and revoked sessions
        are reported the same way so the response reveals nothing about
        session history.

        Raises:
            TokenExpiredException: If the refresh token is past its expiry
            InvalidTokenException: If the token is invalid or its session is gone or revoked
            UserInactiveException: If the account was disabled
            InternalServerException: If the session cannot be rotated

        """
        claims = decode_token(refresh_token, REFRESH)

        try:
            # Concurrent refreshes with the same token queue here; the loser sees a revoked row
            await SessionRepository.lock_user(session, claims.user_id)
            stored = await SessionRepository.get_by_refresh_token(session, refresh_token)
        except SQLAlchemyError as err:
            logger.error(f"Failed to load session for refresh: {type(err).__name__}")
            raise InternalServerException("Token refresh failed") from err

        if stored is None or not stored.is_valid():
            logger.warning(f"Refresh rejected for user {claims.user_id}: session not found or revoked")
            raise InvalidTokenException(reason="token not found or revoked")

        user = await UserService.get_user(session, claims.user_id)
        if user is None:
            logger.warning(f"Refresh rejected: user {claims.user_id} not found")
            raise InvalidTokenException(reason="user not found")

        if not user.is_active:
            logger.warning(f"Refresh rejected: user {user.id} is inactive")
            raise UserInactiveException()

        try:
            await SessionRepository.revoke(session, stored)
        except SQLAlchemyError as err:
            logger.error(f"Failed to revoke session {stored.session_id}: {type(err).__name__}")
            raise InternalServerException("Token refresh failed") from err

        tokens = await AuthService._start_session(session, user, metadata)
        logger.info(f"Tokens refreshed for user {user.id}")
        return tokens

    @staticmethod
    async def validate_token(session: AsyncSession, access_token: str) -> TokenClaims:
        """Validate an access token and confirm its user is still active.

        Access tokens are not tracked in the session store, so this never reads
        or writes sessions.

        Raises:
            TokenExpiredException: If the token is past its expiry
            InvalidTokenException: If the token is invalid or its user no longer exists
            UserInactiveException: If the account was disabled after issue

        """
        claims = decode_token(access_token, ACCESS)

        user = await UserService.get_user(session, claims.user_id)
        if user is None:
            logger.warning(f"Valid token for missing user {claims.user_id}")
            raise InvalidTokenException(reason="user not found")

        if not user.is_active:
            logger.warning(f"Token rejected: user {user.id} is inactive")
            raise UserInactiveException()

        return claims

    @staticmethod
    async def logout(session: AsyncSession, user_id: UUID) -> int:
        """Revoke every session of the user. Idempotent.

        Returns:
            Number of sessions revoked by this call (0 when already logged out)

        """
        try:
            revoked = await SessionRepository.revoke_all(session, user_id)
        except SQLAlchemyError as err:
            logger.error(f"Failed to revoke sessions for user {user_id}: {type(err).__name__}")
            raise InternalServerException("Failed to logout") from err

        logger.info(f"User {user_id} logged out, {revoked} session(s) revoked")
        return revoked

    @staticmethod
    async def get_profile(session: AsyncSession, user_id: UUID) -> User:
        """Load the authenticated user and record activity on their session.

        Raises:
            UserNotFound: If the user no longer exists
            UserInactiveException: If the account is disabled

        """
        user = await UserService.get_user(session, user_id)
        if user is None:
            raise UserNotFound()
        if not user.is_active:
            raise UserInactiveException()

        active = await SessionRepository.get_active_for_user(session, user_id)
        if active is not None:
            await SessionRepository.touch_last_activity(session, active.session_id)

        return user

    @staticmethod
    async def list_sessions(session: AsyncSession, user_id: UUID) -> list[UserSession]:
        """Session history of a user, newest first."""
        return await SessionRepository.list_for_user(session, user_id)

    @staticmethod
    async def cleanup_expired_sessions(session: AsyncSession) -> int:
        """Delete expired sessions. Called by the background reaper."""
        return await SessionRepository.delete_expired(session)

    @staticmethod
    async def _start_session(session: AsyncSession, user: User, metadata: SessionMetadata | None) -> TokenPair:
        """Mint a pair and make its refresh token the user's only live session."""
        tokens, refresh_expires_at = create_token_pair(user)
        metadata = metadata or SessionMetadata()

        new_session = UserSession(
            user_id=user.id,
            refresh_token=tokens.refresh_token,
            device_info=metadata.device_info,
            ip_address=metadata.ip_address,
            user_agent=metadata.user_agent,
            last_activity_at=utcnow(),
            expires_at=refresh_expires_at,
        )

        try:
            await SessionRepository.replace_for_user(session, user.id, new_session)
        except SQLAlchemyError as err:
            logger.error(f"Failed to store session for user {user.id}: {type(err).__name__}")
            raise InternalServerException("Failed to create session") from err

        return tokens
