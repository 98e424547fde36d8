"""Tests for session persistence."""

import uuid
from datetime import timedelta

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from src.database.base import utcnow
from src.features.session.models import UserSession
from src.features.session.repository import SessionRepository


def _new_session(user_id, token=None, expires_in=timedelta(days=7)):
    return UserSession(
        user_id=user_id,
        refresh_token=token or f"refresh-{uuid.uuid4()}",
        device_info="Linux PC",
        ip_address="127.0.0.1",
        user_agent="pytest",
        last_activity_at=utcnow(),
        expires_at=utcnow() + expires_in,
    )


async def _count_active(session, user_id):
    stmt = select(func.count()).select_from(UserSession).where(UserSession.user_id == user_id, ~UserSession.is_revoked)
    return await session.scalar(stmt)


# Model helpers


class TestUserSessionModel:
    def test_is_valid(self):
        row = _new_session(uuid.uuid4())
        row.is_revoked = False
        assert row.is_valid() is True

    def test_expired_row_is_invalid(self):
        row = _new_session(uuid.uuid4(), expires_in=timedelta(seconds=-1))
        row.is_revoked = False
        assert row.is_expired() is True
        assert row.is_valid() is False

    def test_expiry_boundary_is_inclusive(self):
        row = _new_session(uuid.uuid4())
        row.is_revoked = False
        assert row.is_expired(now=row.expires_at) is True

    def test_revoke(self):
        row = _new_session(uuid.uuid4())
        row.is_revoked = False
        row.revoke()
        assert row.is_revoked is True
        assert row.revoked_at is not None
        assert row.is_valid() is False


# SessionRepository.replace_for_user


class TestReplaceForUser:
    async def test_first_session(self, session, make_user):
        user = await make_user()
        created = await SessionRepository.replace_for_user(session, user.id, _new_session(user.id))
        await session.commit()

        assert created.session_id is not None
        assert created.is_revoked is False
        assert await _count_active(session, user.id) == 1

    async def test_replacement_revokes_previous(self, session, make_user):
        user = await make_user()
        first = await SessionRepository.replace_for_user(session, user.id, _new_session(user.id, "token-1"))
        await session.commit()
        second = await SessionRepository.replace_for_user(session, user.id, _new_session(user.id, "token-2"))
        await session.commit()

        await session.refresh(first)
        assert first.is_revoked is True
        assert first.revoked_at is not None
        assert second.is_revoked is False
        assert await _count_active(session, user.id) == 1

    async def test_other_users_untouched(self, session, make_user):
        alice = await make_user(username="alice")
        bob = await make_user(username="bob")
        await SessionRepository.replace_for_user(session, alice.id, _new_session(alice.id))
        await SessionRepository.replace_for_user(session, bob.id, _new_session(bob.id))
        await SessionRepository.replace_for_user(session, alice.id, _new_session(alice.id))
        await session.commit()

        assert await _count_active(session, alice.id) == 1
        assert await _count_active(session, bob.id) == 1

    async def test_store_rejects_second_active_row(self, session, make_user):
        """The partial unique index backs the one-live-session rule."""
        user = await make_user()
        session.add(_new_session(user.id))
        await session.flush()

        session.add(_new_session(user.id))
        with pytest.raises(IntegrityError):
            await session.flush()
        await session.rollback()

    async def test_refresh_token_is_unique(self, session, make_user):
        alice = await make_user(username="alice")
        bob = await make_user(username="bob")
        session.add(_new_session(alice.id, "same-token"))
        await session.flush()

        session.add(_new_session(bob.id, "same-token"))
        with pytest.raises(IntegrityError):
            await session.flush()
        await session.rollback()


# Lookups


class TestLookups:
    async def test_get_by_refresh_token(self, session, make_user):
        user = await make_user()
        await SessionRepository.replace_for_user(session, user.id, _new_session(user.id, "lookup-token"))
        await session.commit()

        found = await SessionRepository.get_by_refresh_token(session, "lookup-token")
        assert found is not None
        assert found.user_id == user.id

    async def test_get_by_refresh_token_unknown(self, session):
        assert await SessionRepository.get_by_refresh_token(session, "nope") is None

    async def test_expired_rows_are_invisible(self, session, make_user):
        user = await make_user()
        row = _new_session(user.id, "old-token", expires_in=timedelta(minutes=-1))
        await SessionRepository.replace_for_user(session, user.id, row)
        await session.commit()

        assert await SessionRepository.get_by_refresh_token(session, "old-token") is None
        assert await SessionRepository.get_active_for_user(session, user.id) is None

    async def test_revoked_rows_are_returned(self, session, make_user):
        user = await make_user()
        row = await SessionRepository.replace_for_user(session, user.id, _new_session(user.id, "revoked-token"))
        await SessionRepository.revoke(session, row)
        await session.commit()

        found = await SessionRepository.get_by_refresh_token(session, "revoked-token")
        assert found is not None
        assert found.is_valid() is False
        assert await SessionRepository.get_active_for_user(session, user.id) is None

    async def test_list_for_user_includes_revoked(self, session, make_user):
        user = await make_user()
        await SessionRepository.replace_for_user(session, user.id, _new_session(user.id))
        await SessionRepository.replace_for_user(session, user.id, _new_session(user.id))
        await session.commit()

        rows = await SessionRepository.list_for_user(session, user.id)
        assert len(rows) == 2
        assert sum(1 for row in rows if not row.is_revoked) == 1


# Revocation and cleanup


class TestRevokeAndCleanup:
    async def test_revoke_all(self, session, make_user):
        user = await make_user()
        await SessionRepository.replace_for_user(session, user.id, _new_session(user.id))
        await session.commit()

        assert await SessionRepository.revoke_all(session, user.id) == 1
        assert await SessionRepository.revoke_all(session, user.id) == 0
        await session.commit()
        assert await _count_active(session, user.id) == 0

    async def test_delete_expired(self, session, make_user):
        user = await make_user()
        other = await make_user()
        await SessionRepository.replace_for_user(
            session, user.id, _new_session(user.id, expires_in=timedelta(minutes=-5))
        )
        await SessionRepository.replace_for_user(session, other.id, _new_session(other.id))
        await session.commit()

        deleted = await SessionRepository.delete_expired(session)
        await session.commit()

        assert deleted == 1
        remaining = await session.scalar(select(func.count()).select_from(UserSession))
        assert remaining == 1

    async def test_delete_expired_removes_revoked_rows_too(self, session, make_user):
        user = await make_user()
        row = await SessionRepository.replace_for_user(
            session, user.id, _new_session(user.id, expires_in=timedelta(minutes=-5))
        )
        await SessionRepository.revoke(session, row)
        await session.commit()

        assert await SessionRepository.delete_expired(session) == 1

    async def test_delete_expired_nothing_to_do(self, session, make_user):
        user = await make_user()
        await SessionRepository.replace_for_user(session, user.id, _new_session(user.id))
        await session.commit()

        assert await SessionRepository.delete_expired(session) == 0

    async def test_touch_last_activity(self, session, make_user):
        user = await make_user()
        row = _new_session(user.id)
        row.last_activity_at = utcnow() - timedelta(hours=1)
        await SessionRepository.replace_for_user(session, user.id, row)
        await session.commit()
        before = row.last_activity_at

        assert await SessionRepository.touch_last_activity(session, row.session_id) is True
        await session.commit()

        await session.refresh(row)
        assert row.last_activity_at > before

    async def test_touch_unknown_session(self, session):
        assert await SessionRepository.touch_last_activity(session, uuid.uuid4()) is False
