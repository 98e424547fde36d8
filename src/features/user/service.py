"""User service layer."""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .exceptions import EmailAlreadyExists, UserAlreadyExists, UsernameAlreadyExists, UserNotFound
from .models import User

logger = logging.getLogger(__name__)


class UserService:
    """Service for user persistence."""

    @staticmethod
    async def get_user(session: AsyncSession, user_id: UUID) -> User | None:
        """Get user by ID."""
        stmt = select(User).where(User.id == user_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_username(session: AsyncSession, username: str) -> User | None:
        """Get user by username."""
        stmt = select(User).where(User.username == username)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_email(session: AsyncSession, email: str) -> User | None:
        """Get user by email."""
        stmt = select(User).where(User.email == email)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def ensure_available(session: AsyncSession, username: str, email: str) -> None:
        """Advisory uniqueness check run before the (slow) password hash.

        Raises:
            UsernameAlreadyExists: If username already exists
            EmailAlreadyExists: If email already exists

        """
        if await UserService.get_by_username(session, username):
            raise UsernameAlreadyExists()

        if await UserService.get_by_email(session, email):
            raise EmailAlreadyExists()

    @staticmethod
    async def create_user(
        session: AsyncSession, username: str, email: str, full_name: str, hashed_password: str
    ) -> User:
        """Insert a new active user.

        The unique constraints are authoritative: an insert that loses a race
        against a concurrent registration surfaces as ``UserAlreadyExists``.

        Args:
            session: Database session
            username: Unique username
            email: Unique email address
            full_name: Display name
            hashed_password: Output of the credential store, never plaintext

        Returns:
            Created User object (flushed, with its id assigned)

        Raises:
            UserAlreadyExists: If a unique constraint rejects the insert

        """
        user = User(
            username=username,
            email=email,
            full_name=full_name,
            hashed_password=hashed_password,
            is_active=True,
        )
        session.add(user)

        try:
            await session.flush()
        except IntegrityError as err:
            logger.warning(f"User insert rejected by unique constraint: {username}")
            raise UserAlreadyExists() from err

        logger.info(f"New user registered: {user.username} ({user.id})")
        return user

    @staticmethod
    async def set_active(session: AsyncSession, user_id: UUID, is_active: bool) -> User:
        """Activate or deactivate a user account.

        Deactivation takes effect on the next token validation; outstanding
        access tokens stop being accepted immediately.

        Raises:
            UserNotFound: If no user has the given id

        """
        user = await UserService.get_user(session, user_id)
        if user is None:
            raise UserNotFound()

        user.is_active = is_active
        await session.flush()
        logger.info(f"User {user.username} active flag set to {is_active}")
        return user
