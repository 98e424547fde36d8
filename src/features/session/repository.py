"""Session persistence.

All writes happen inside the caller's transaction; the request-scoped session
commits them together (see ``src.database.client.get_session``).
"""

import logging
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.database.base import utcnow
from src.features.user.models import User

from .models import UserSession

logger = logging.getLogger(__name__)


class SessionRepository:
    """Durable record of the single live session per user."""

    @staticmethod
    async def lock_user(session: AsyncSession, user_id: UUID) -> None:
        """Row-lock the owning user until the transaction ends.

        Serializes session changes per user. A no-op lock on SQLite, where
        ``BEGIN IMMEDIATE`` already serializes writers.
        """
        await session.execute(select(User.id).where(User.id == user_id).with_for_update())

    @staticmethod
    async def replace_for_user(session: AsyncSession, user_id: UUID, new_session: UserSession) -> UserSession:
        """Atomically swap the user's live session for ``new_session``.

        The owning user row is locked first, so two concurrent replacements for
        the same user run one after the other: the later one revokes what the
        earlier one inserted. Revocation and insert share the caller's
        transaction, so no reader ever sees two valid sessions for the user.

        Args:
            session: Database session (transaction owned by the caller)
            user_id: Owner of the session
            new_session: Unsaved session row for ``user_id``

        Returns:
            The inserted session

        Raises:
            SQLAlchemyError: If the lock, revoke or insert fails

        """
        await SessionRepository.lock_user(session, user_id)

        now = utcnow()
        revoke_stmt = (
            update(UserSession)
            .where(UserSession.user_id == user_id, ~UserSession.is_revoked)
            .values(is_revoked=True, revoked_at=now, updated_at=now)
        )
        result = await session.execute(revoke_stmt)
        if result.rowcount:
            logger.info(f"Replaced {result.rowcount} active session(s) for user {user_id}")

        new_session.user_id = user_id
        session.add(new_session)
        await session.flush()
        return new_session

    @staticmethod
    async def get_by_refresh_token(session: AsyncSession, refresh_token: str) -> UserSession | None:
        """Find the session holding ``refresh_token``.

        Rows past ``expires_at`` are invisible even before the reaper deletes
        them. Revoked rows are returned so the caller can reject them.
        """
        stmt = select(UserSession).where(
            UserSession.refresh_token == refresh_token,
            UserSession.expires_at > utcnow(),
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_active_for_user(session: AsyncSession, user_id: UUID) -> UserSession | None:
        """Get the user's non-revoked, unexpired session, if any."""
        stmt = select(UserSession).where(
            UserSession.user_id == user_id,
            ~UserSession.is_revoked,
            UserSession.expires_at > utcnow(),
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_for_user(session: AsyncSession, user_id: UUID) -> list[UserSession]:
        """All session rows of a user, newest first (revoked ones included)."""
        stmt = select(UserSession).where(UserSession.user_id == user_id).order_by(UserSession.created_at.desc())
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def revoke(session: AsyncSession, user_session: UserSession) -> None:
        """Soft-revoke one session."""
        if not user_session.is_revoked:
            user_session.revoke()
            await session.flush()

    @staticmethod
    async def revoke_all(session: AsyncSession, user_id: UUID) -> int:
        """Mark every session of the user revoked. Rows are kept for auditing.

        Returns:
            Number of sessions that were revoked by this call

        """
        now = utcnow()
        stmt = (
            update(UserSession)
            .where(UserSession.user_id == user_id, ~UserSession.is_revoked)
            .values(is_revoked=True, revoked_at=now, updated_at=now)
        )
        result = await session.execute(stmt)
        return result.rowcount or 0

    @staticmethod
    async def delete_expired(session: AsyncSession) -> int:
        """Hard-delete sessions past ``expires_at``, revoked or not.

        Returns:
            Number of deleted rows

        """
        stmt = delete(UserSession).where(UserSession.expires_at < utcnow())
        result = await session.execute(stmt)
        return result.rowcount or 0

    @staticmethod
    async def touch_last_activity(session: AsyncSession, session_id: UUID) -> bool:
        """Bump ``last_activity_at``. Best effort: failures are logged and swallowed.

        Runs in a SAVEPOINT so a failure leaves the caller's transaction usable.

        Returns:
            True if the row was updated

        """
        now = utcnow()
        stmt = (
            update(UserSession)
            .where(UserSession.session_id == session_id)
            .values(last_activity_at=now, updated_at=now)
        )
        try:
            async with session.begin_nested():
                result = await session.execute(stmt)
        except SQLAlchemyError as err:
            logger.warning(f"Failed to update last activity for session {session_id}: {type(err).__name__}")
            return False
        return bool(result.rowcount)
