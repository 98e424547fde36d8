"""Test configuration and fixtures.

Each test gets its own database:
1. A fresh SQLite file under the test's tmp_path (or TEST_DATABASE_URL, e.g. PostgreSQL)
2. Schema created from the ORM models and dropped afterwards
3. HTTP requests share the test's session, so tests can inspect what endpoints wrote
4. Concurrency tests open independent sessions from ``session_factory``
"""

import os
from collections.abc import AsyncGenerator
from pathlib import Path

# Settings are read at import time, so the environment must be ready first
from dotenv import load_dotenv

test_env_path = Path(__file__).parent.parent / ".env.test"
load_dotenv(test_env_path, override=False)

os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./auth_dev.db")
os.environ.setdefault("JWT_ACCESS_SECRET", "test-access-secret-0123456789abcdefghijklmnop")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret-0123456789abcdefghijklmno")
os.environ.setdefault("JWT_ISSUER", "auth-service-test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker  # noqa: E402

from src.database.base import Base  # noqa: E402
from src.database.client import create_engine_from_url  # noqa: E402
from src.database.dependencies import get_db_session  # noqa: E402
from src.features.auth.passwords import hash_password  # noqa: E402
from src.features.session import models as _session_models  # noqa: E402, F401
from src.features.user.models import User  # noqa: E402
from src.main import app  # noqa: E402

DEFAULT_PASSWORD = "Str0ng!Pass"


# Database Setup - Function Scope (Fresh Database Per Test)


@pytest_asyncio.fixture
async def db_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine]:
    """Create a database engine with a fresh schema for one test."""
    test_db_url = os.getenv("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"

    engine = create_engine_from_url(test_db_url)

    # Drop all tables and recreate (ensures schema matches current models)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory for tests that need independent, concurrent sessions."""
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession]:
    """Create a database session per test."""
    async with session_factory() as async_session:
        yield async_session


# FastAPI Client & Dependency Overrides


@pytest_asyncio.fixture(autouse=True)
async def override_get_db_session(session: AsyncSession):
    """Override the database session dependency with test session.

    Endpoints commit through the same session the test uses, so state written
    by a request is visible to the test and vice versa.
    """

    async def _get_test_session():
        yield session

    app.dependency_overrides[get_db_session] = _get_test_session
    yield
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient]:
    """Create an async HTTP test client (unauthenticated)."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"User-Agent": "pytest-client/1.0 (X11; Linux x86_64)"},
    ) as ac:
        yield ac


# Test User Factories


@pytest_asyncio.fixture
async def make_user(session: AsyncSession):
    """Factory fixture to create committed test users.

    Usage:
        user = await make_user()                          # defaults
        alice = await make_user(username="alice")         # custom username
        disabled = await make_user(is_active=False)       # inactive user
    """
    counter = 0  # Counter for unique email/username generation

    async def _factory(
        username=None,
        email=None,
        full_name="Test User",
        password=DEFAULT_PASSWORD,
        is_active=True,
    ) -> User:
        nonlocal counter
        counter += 1

        # Generate unique email and username if not provided
        if username is None:
            username = f"testuser{counter}"
        if email is None:
            email = f"{username}@example.com"

        user = User(
            username=username,
            email=email,
            full_name=full_name,
            hashed_password=hash_password(password),
            is_active=is_active,
        )

        session.add(user)
        await session.commit()
        return user

    yield _factory
