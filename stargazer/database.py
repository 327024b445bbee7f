"""
Stargazer Backend — Database Session Management
================================================

What:  Async SQLAlchemy engine, schema auto-migration, session dependency.
How:   `init_database()` builds the engine, opens a first connection (retried
       with tenacity), and synchronizes the schema with the ORM models.
       `get_db_session()` hands each request its own session that commits on
       success and rolls back on error.
Who:   The lifespan handler calls init/dispose; routes depend on get_db_session.
When:  Engine is created once at startup; sessions are created per-request.

Auto-migrate:
    Missing tables and indexes are created, and columns present on a model
    but missing from an existing table are added with ALTER TABLE. Nothing is
    ever dropped or altered: extraneous columns stay where they are.
"""

import logging
from typing import Any, AsyncGenerator, Dict, List, Optional

from sqlalchemy import inspect, text
from sqlalchemy.engine import URL, Connection, Dialect, make_url
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.schema import Column, Table
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from stargazer.config import settings
from stargazer.exceptions import DatabaseError

logger = logging.getLogger(__name__)


# ── Engine State ──────────────────────────────────────────────────────────
# Populated by init_database() during startup, cleared by dispose_engine().
# Read through the module (database.engine), never imported by value.
engine: Optional[AsyncEngine] = None
async_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Its metadata is the source of truth for auto_migrate().
    """
    pass


# ── URL / Engine Helpers ──────────────────────────────────────────────────
def build_database_url(driver: str, uri: str) -> URL:
    """
    Combine a driver name and a connection target into a SQLAlchemy URL.

    A bare path ("./stars.db") becomes "<driver>:///./stars.db"; a full URL
    keeps everything but its drivername, which is replaced by `driver`.
    """
    if "://" in uri:
        return make_url(uri).set(drivername=driver)
    return URL.create(drivername=driver, database=uri)


def _engine_options(url: URL) -> Dict[str, Any]:
    options: Dict[str, Any] = {
        "pool_pre_ping": settings.db_pool_pre_ping,
        "echo": settings.log_level == "DEBUG",
    }
    # SQLite file databases use a small adapted pool; sizing knobs are for
    # server databases only.
    if url.get_backend_name() != "sqlite":
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_recycle=3600,
        )
    return options


# ── Auto-migrate ──────────────────────────────────────────────────────────
def _default_sql(dialect: Dialect, column: Column) -> Optional[str]:
    default = column.server_default
    if default is None:
        return None
    arg = getattr(default, "arg", None)
    if arg is None:
        return None
    if isinstance(arg, str):
        return "'" + arg.replace("'", "''") + "'"
    return str(arg.compile(dialect=dialect))


def _add_column_ddl(dialect: Dialect, table: Table, column: Column) -> str:
    preparer = dialect.identifier_preparer
    ddl = (
        f"ALTER TABLE {preparer.format_table(table)} "
        f"ADD COLUMN {preparer.format_column(column)} "
        f"{column.type.compile(dialect=dialect)}"
    )
    default_sql = _default_sql(dialect, column)
    if default_sql is not None:
        ddl += f" DEFAULT {default_sql}"
        # NOT NULL without a default would fail on tables that already hold rows
        if not column.nullable:
            ddl += " NOT NULL"
    return ddl


def auto_migrate(connection: Connection) -> List[str]:
    """
    Bring the database schema up to the ORM models without removing anything.

    Runs on a sync connection (via AsyncConnection.run_sync).

    Returns:
        "table.column" names of the columns that were added.
    """
    Base.metadata.create_all(connection)

    inspector = inspect(connection)
    added: List[str] = []

    for table in Base.metadata.sorted_tables:
        existing_columns = {col["name"] for col in inspector.get_columns(table.name)}
        for column in table.columns:
            if column.name in existing_columns:
                continue
            connection.execute(text(_add_column_ddl(connection.dialect, table, column)))
            added.append(f"{table.name}.{column.name}")
            logger.info("Auto-migrate: added column %s.%s", table.name, column.name)

        existing_indexes = {ix["name"] for ix in inspector.get_indexes(table.name)}
        for index in table.indexes:
            if index.name not in existing_indexes:
                index.create(connection)
                logger.info("Auto-migrate: created index %s", index.name)

    return added


# ── Lifecycle ─────────────────────────────────────────────────────────────
async def init_database(driver: str, uri: str) -> AsyncEngine:
    """
    Open the database and synchronize its schema.

    What:    Creates the engine, verifies connectivity, runs auto_migrate().
    When:    Once, from the application lifespan, before serving requests.
    How:     The first connection is retried with exponential backoff
             (db_connect_attempts / db_connect_wait) on OperationalError and
             OSError, since a database server may still be starting.

    Raises:
        DatabaseError: the connection could not be established or the schema
        could not be synchronized. Raised out of the lifespan, this aborts
        startup and the process exits.
    """
    global engine, async_session_factory

    if engine is not None:
        await dispose_engine()

    url = build_database_url(driver, uri)
    safe_url = url.render_as_string(hide_password=True)
    new_engine = create_async_engine(url, **_engine_options(url))

    try:
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type((OperationalError, OSError)),
            stop=stop_after_attempt(settings.db_connect_attempts),
            wait=wait_exponential(multiplier=settings.db_connect_wait, max=30),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                async with new_engine.begin() as conn:
                    added = await conn.run_sync(auto_migrate)
    except Exception as e:
        await new_engine.dispose()
        logger.error("Could not initialize database %s: %s", safe_url, str(e))
        raise DatabaseError(
            message="Could not connect to the database.",
            context={"url": safe_url, "error_type": type(e).__name__},
        ) from e

    engine = new_engine
    async_session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    logger.info(
        "Database ready at %s (%d column(s) added by auto-migrate)",
        safe_url,
        len(added),
    )
    return engine


async def dispose_engine() -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    global engine, async_session_factory

    if engine is None:
        return
    await engine.dispose()
    engine = None
    async_session_factory = None
    logger.info("Database connections closed")


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global handlers
        5. Always: closes the session (returns connection to pool)

    Routes declare it with Depends(get_db_session, scope="function") so the
    commit finishes before the response is built; a failed commit becomes a
    500 instead of a 201/204 for data that was never saved.

    Raises:
        DatabaseError: init_database() has not been called, or the commit
        failed.
    """
    if async_session_factory is None:
        raise DatabaseError(context={"reason": "database not initialized"})

    async with async_session_factory() as session:
        try:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

            try:
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error("Commit failed: %s", str(e), exc_info=True)
                raise DatabaseError(
                    message="Could not save changes. Please try again.",
                    context={"error_type": type(e).__name__},
                ) from e
        finally:
            await session.close()
