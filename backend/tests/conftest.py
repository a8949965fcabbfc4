"""
NoteDeck Backend — Test Configuration (conftest.py)
====================================================

Shared pytest fixtures for the whole suite.

Fixture Hierarchy:
    Autouse:
    └── clear_view_cache: every test starts with an empty view cache

    Function-scoped:
    ├── mock_db_session: AsyncMock session for pure unit tests
    ├── db_engine / db_session_factory / db_session: real SQLite store (aiosqlite)
    ├── sample_user: identity provider user record
    └── test_client: HTTPX AsyncClient bound to the app, using the SQLite store
"""

import os

# Settings are read at import time, so the environment is fixed before any
# notedeck import below. The app-wide engine only answers the health check
# (notes tests get their own store), so an in-memory database is enough.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SUPABASE_URL"] = "https://project.supabase.test"
os.environ["SUPABASE_ANON_KEY"] = "test-anon-key"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["VIEW_CACHE_TTL"] = "30"

from typing import AsyncGenerator  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from notedeck.database import Base, dispose_engine, get_db_session  # noqa: E402
from notedeck.models.note import Note  # noqa: E402,F401  (registers the table)
from notedeck.services.view_cache import view_cache  # noqa: E402


@pytest.fixture(autouse=True)
def clear_view_cache():
    view_cache.clear()
    yield
    view_cache.clear()


@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession for tests that should not touch a database.

    Usage:
        mock_db_session.execute.return_value = MagicMock(rowcount=1)
        await note_service.delete_note(mock_db_session, note_id)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """A throwaway SQLite store with the notes table created from the ORM model."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'notes.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def db_session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(db_session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with db_session_factory() as session:
        yield session


@pytest.fixture
def sample_user():
    """A user record shaped like the identity provider's /auth/v1/user answer."""
    return {
        "id": "8d0fd2b3-9ca7-4e5b-a5d0-5e1c2f3a4b5c",
        "email": "ada@example.com",
        "user_metadata": {
            "full_name": "Ada Lovelace",
            "user_name": "ada",
            "preferred_username": "countess",
            "avatar_url": "https://avatars.example.com/ada.png",
        },
        "app_metadata": {"provider": "github", "providers": ["github", "email"]},
    }


@pytest_asyncio.fixture
async def test_client(db_session_factory):
    """
    HTTPX AsyncClient talking to the app in-process.

    The per-request session dependency is swapped for one bound to the
    SQLite store, with the same commit/rollback behaviour.
    """
    from notedeck.main import app

    async def override_get_db_session():
        async with db_session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
    # Each test runs on its own event loop; don't carry pooled connections over
    await dispose_engine()
