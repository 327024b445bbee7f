"""
Stargazer Backend — Database Layer Tests
=========================================

What:  Tests for URL building, init_database(), auto-migrate and lifespan.
How:   Real SQLite files under tmp_path through aiosqlite.

What we test:
    ✅ Bare paths and full URLs both produce the configured driver
    ✅ A fresh file gets the stars table and its unique name index
    ✅ Auto-migrate adds missing columns and keeps extraneous ones
    ✅ An unopenable database raises DatabaseError and leaves no engine
    ✅ A transient OperationalError on startup is retried
    ✅ The lifespan opens the engine on startup and disposes it on shutdown
"""

import sqlite3

import pytest
from sqlalchemy import inspect
from sqlalchemy.exc import OperationalError

from stargazer import database
from stargazer.config import settings
from stargazer.database import (
    build_database_url,
    dispose_engine,
    get_db_session,
    init_database,
)
from stargazer.exceptions import DatabaseError


def _columns(sync_conn, table):
    return {col["name"] for col in inspect(sync_conn).get_columns(table)}


def _index_names(sync_conn, table):
    return {ix["name"] for ix in inspect(sync_conn).get_indexes(table)}


class TestBuildDatabaseUrl:

    def test_bare_path(self):
        url = build_database_url("sqlite+aiosqlite", "./stars.db")
        assert url.drivername == "sqlite+aiosqlite"
        assert url.database == "./stars.db"
        assert url.render_as_string() == "sqlite+aiosqlite:///./stars.db"

    def test_full_url_takes_driver(self):
        url = build_database_url("postgresql+asyncpg", "postgresql://user:secret@db:5432/stars")
        assert url.drivername == "postgresql+asyncpg"
        assert url.host == "db"
        assert url.port == 5432
        assert url.database == "stars"


class TestInitDatabase:

    @pytest.mark.asyncio
    async def test_creates_schema(self, initialized_database):
        async with initialized_database.connect() as conn:
            columns = await conn.run_sync(_columns, "stars")
            indexes = await conn.run_sync(_index_names, "stars")

        assert {"id", "name", "description", "url"} <= columns
        assert "ix_stars_name" in indexes

    @pytest.mark.asyncio
    async def test_auto_migrate_adds_missing_columns(self, database_path):
        """Older tables gain new columns; unknown columns are left alone."""
        with sqlite3.connect(database_path) as conn:
            conn.execute(
                "CREATE TABLE stars ("
                "id INTEGER PRIMARY KEY, name VARCHAR(255) NOT NULL, "
                "description TEXT, legacy_rating INTEGER)"
            )
            conn.execute(
                "INSERT INTO stars (name, description, legacy_rating) "
                "VALUES ('octocat/hello-world', 'old row', 5)"
            )

        engine = await init_database(settings.database_driver, database_path)
        try:
            async with engine.connect() as conn:
                columns = await conn.run_sync(_columns, "stars")
                indexes = await conn.run_sync(_index_names, "stars")
        finally:
            await dispose_engine()

        assert "url" in columns
        assert "legacy_rating" in columns
        assert "ix_stars_name" in indexes

        with sqlite3.connect(database_path) as conn:
            row = conn.execute(
                "SELECT name, description, url, legacy_rating FROM stars"
            ).fetchone()
        assert row == ("octocat/hello-world", "old row", "", 5)

    @pytest.mark.asyncio
    async def test_auto_migrate_is_idempotent(self, database_path):
        await init_database(settings.database_driver, database_path)
        await dispose_engine()

        engine = await init_database(settings.database_driver, database_path)
        try:
            async with engine.connect() as conn:
                columns = await conn.run_sync(_columns, "stars")
        finally:
            await dispose_engine()

        assert columns == {"id", "name", "description", "url"}

    @pytest.mark.asyncio
    async def test_unreachable_database_raises(self, tmp_path):
        missing = str(tmp_path / "no" / "such" / "dir" / "stars.db")

        with pytest.raises(DatabaseError):
            await init_database(settings.database_driver, missing)

        assert database.engine is None
        assert database.async_session_factory is None

    @pytest.mark.asyncio
    async def test_transient_failure_is_retried(self, database_path, monkeypatch):
        real_auto_migrate = database.auto_migrate
        calls = []

        def flaky_auto_migrate(connection):
            calls.append(connection)
            if len(calls) == 1:
                raise OperationalError("PRAGMA", {}, Exception("database is locked"))
            return real_auto_migrate(connection)

        monkeypatch.setattr(settings, "db_connect_attempts", 3)
        monkeypatch.setattr(settings, "db_connect_wait", 0)
        monkeypatch.setattr(database, "auto_migrate", flaky_auto_migrate)

        try:
            engine = await init_database(settings.database_driver, database_path)
            assert len(calls) == 2
            assert database.engine is engine
            async with engine.connect() as conn:
                columns = await conn.run_sync(_columns, "stars")
            assert columns == {"id", "name", "description", "url"}
        finally:
            await dispose_engine()

    @pytest.mark.asyncio
    async def test_session_requires_initialization(self):
        await dispose_engine()

        with pytest.raises(DatabaseError):
            await get_db_session().__anext__()


class TestLifespan:

    @pytest.mark.asyncio
    async def test_lifespan_opens_and_disposes(self, database_path, monkeypatch):
        from stargazer.main import create_app, lifespan

        monkeypatch.setattr(settings, "database_uri", database_path)

        async with lifespan(create_app()):
            assert database.engine is not None

        assert database.engine is None

    @pytest.mark.asyncio
    async def test_lifespan_fails_without_database(self, tmp_path, monkeypatch):
        from stargazer.main import create_app, lifespan

        monkeypatch.setattr(settings, "database_uri", str(tmp_path / "no" / "dir" / "x.db"))

        with pytest.raises(DatabaseError):
            async with lifespan(create_app()):
                pass
