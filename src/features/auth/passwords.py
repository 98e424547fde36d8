"""Password hashing and verification (Argon2 via pwdlib)."""

import asyncio
import logging

from pwdlib import PasswordHash
from pwdlib.exceptions import PwdlibError

logger = logging.getLogger(__name__)

pwd_hasher = PasswordHash.recommended()

# Verified against when the username is unknown, so a miss costs as much as a wrong password
_DUMMY_HASH = pwd_hasher.hash("dummy-password-for-timing")


def hash_password(password: str) -> str:
    """Hash a password using Argon2.

    Salt is automatically generated and embedded in the returned hash.
    """
    return pwd_hasher.hash(password)


def verify_password(hashed_password: str, plain_password: str) -> bool:
    """Verify a password against the hash.

    Never raises: a mismatch, an empty hash or a hash pwdlib cannot parse all
    return False. The comparison itself is constant-time inside argon2.
    """
    if not hashed_password:
        return False
    try:
        return pwd_hasher.verify(plain_password, hashed_password)
    except (PwdlibError, ValueError) as err:
        logger.warning(f"Password verification failed on malformed hash: {type(err).__name__}")
        return False


async def hash_password_async(password: str) -> str:
    """Hash in a worker thread so the event loop keeps serving requests.

    Cancelling the caller stops the wait; the bounded hash finishes in the
    background.
    """
    return await asyncio.to_thread(hash_password, password)


async def verify_password_async(hashed_password: str | None, plain_password: str) -> bool:
    """Threaded ``verify_password``; a None hash burns a dummy verification and fails."""
    if hashed_password is None:
        await asyncio.to_thread(verify_password, _DUMMY_HASH, plain_password)
        return False
    return await asyncio.to_thread(verify_password, hashed_password, plain_password)
