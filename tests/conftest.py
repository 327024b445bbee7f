"""
Stargazer Backend — Test Configuration (conftest.py)
=====================================================

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: Mock AsyncSession (service unit tests, no database)
    ├── sample_star_data: Field values for a Star
    ├── database_path: Fresh SQLite file path under tmp_path
    ├── initialized_database: init_database() on that file, disposed afterwards
    └── test_client: HTTPX AsyncClient bound to a fresh app over ASGITransport
"""

import os
import tempfile
from unittest.mock import AsyncMock, MagicMock

# Override settings for testing BEFORE any stargazer imports, so the
# settings singleton never points at a developer's ./stars.db
os.environ["DATABASE_DRIVER"] = "sqlite+aiosqlite"
os.environ["DATABASE_URI"] = os.path.join(
    tempfile.mkdtemp(prefix="stargazer_test_"), "stars.db"
)
os.environ["DB_CONNECT_ATTEMPTS"] = "1"
os.environ["DB_CONNECT_WAIT"] = "0"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from stargazer.config import settings
from stargazer.database import dispose_engine, init_database


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.return_value.scalars.return_value.first.return_value = star
        result = await star_service.get_star(mock_db_session, "octocat/hello-world")
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_star_data():
    return {
        "id": 1,
        "name": "octocat/hello-world",
        "description": "My first repository on GitHub!",
        "url": "https://github.com/octocat/Hello-World",
    }


@pytest.fixture
def database_path(tmp_path):
    return str(tmp_path / "stars.db")


@pytest_asyncio.fixture
async def initialized_database(database_path):
    """Opens (and auto-migrates) a fresh SQLite file; closes it after the test."""
    engine = await init_database(settings.database_driver, database_path)
    yield engine
    await dispose_engine()


@pytest_asyncio.fixture
async def test_client(initialized_database):
    """
    Provides an async HTTP test client for endpoint testing.

    ASGITransport does not run the lifespan, so the database is opened by
    the initialized_database fixture instead.
    """
    from stargazer.main import create_app

    transport = ASGITransport(app=create_app())
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
