"""Pytest configuration and fixtures."""

import os

# Set DEBUG=true and an in-memory database for all tests BEFORE any subway imports
# This must be done before subway.core.config loads settings
os.environ["DEBUG"] = "true"
os.environ["SECRET_DATABASE_URL"] = "sqlite+aiosqlite://"

from collections.abc import AsyncGenerator, Generator
from dataclasses import dataclass
from typing import Any

import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from subway.core.database import get_db
from subway.main import app
from subway.models import Base, Line, Station, TimeTable


@dataclass
class TestDatabaseContext:
    """
    Structured container for test database resources.

    Contains the async engine and session factory for use across test fixtures.
    """

    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:  # noqa: ANN401
    """SQLite ignores foreign keys (and their ON DELETE rules) unless asked per connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
async def db_engine() -> AsyncGenerator[TestDatabaseContext]:
    """
    Create a fresh in-memory SQLite database with the full schema.

    StaticPool keeps the single in-memory connection alive for the whole test,
    so every session sees the same database.

    Yields:
        TestDatabaseContext: Engine and session factory bound to the test database
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    yield TestDatabaseContext(engine=engine, session_factory=session_factory)

    await engine.dispose()


@pytest.fixture
async def db_session(db_engine: TestDatabaseContext) -> AsyncGenerator[AsyncSession]:
    """
    Database session bound to the per-test database.

    Args:
        db_engine: Test database context

    Yields:
        Async SQLAlchemy session
    """
    async with db_engine.session_factory() as session:
        yield session


@pytest.fixture
async def async_client(db_engine: TestDatabaseContext) -> AsyncGenerator[AsyncClient]:
    """
    Async HTTP client whose requests each get their own session on the test database.

    A fresh session per request mirrors production, where get_db opens one
    session per request.

    Args:
        db_engine: Test database context

    Yields:
        Async HTTP client configured for testing
    """

    async def override_get_db() -> AsyncGenerator[AsyncSession]:
        async with db_engine.session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def client() -> Generator[TestClient]:
    """
    FastAPI synchronous test client for endpoints that do not touch the database.

    Yields:
        Synchronous test client with app context
    """
    with TestClient(app) as test_client:
        yield test_client


# Domain fixtures


@pytest.fixture
def line() -> Line:
    """A transient line with no stations, running all day every 6 minutes."""
    return Line.create("2호선", TimeTable.all_day(), 6)


@pytest.fixture
def stations() -> dict[str, Station]:
    """Transient stations A to E, keyed by name."""
    return {name: Station.create(name) for name in "ABCDE"}
