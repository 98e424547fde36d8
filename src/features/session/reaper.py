"""Background removal of expired sessions."""

import asyncio
import logging
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from sqlalchemy.ext.asyncio import AsyncSession

from src.features.auth.service import AuthService

logger = logging.getLogger(__name__)

SessionProvider = Callable[[], AbstractAsyncContextManager[AsyncSession]]


class SessionReaper:
    """Periodically deletes expired session rows.

    One asyncio task per process: an initial sweep at start, then one sweep per
    interval. A failed sweep is logged and the loop keeps going; it never blocks
    request handling.

    Usage:
        reaper = SessionReaper(get_session, interval_seconds=3600)
        reaper.start()
        ...
        await reaper.stop()
    """

    def __init__(self, session_provider: SessionProvider, interval_seconds: float):
        self._session_provider = session_provider
        self._interval = interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        logger.info(f"Starting session cleanup every {self._interval}s")
        self._task = asyncio.create_task(self._run(), name="session-reaper")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Session cleanup stopped")

    async def sweep(self) -> int | None:
        """Run one cleanup pass.

        Returns:
            Number of deleted sessions, or None if the pass failed

        """
        try:
            async with self._session_provider() as session:
                deleted = await AuthService.cleanup_expired_sessions(session)
        except Exception as err:
            logger.error(f"Session cleanup failed: {err}")
            return None
        logger.info(f"Session cleanup completed, {deleted} expired session(s) removed")
        return deleted

    async def _run(self) -> None:
        while True:
            await self.sweep()
            await asyncio.sleep(self._interval)
