"""Pytest fixtures for database-backed tests.

Database tests run against SQLite through aiosqlite by default. Set
``CONTENTNODES_TEST_DB=pglite`` to run them against py-pglite Postgres.

Examples
--------
Run database-backed tests with py-pglite:

>>> CONTENTNODES_TEST_DB=pglite pytest tests/entity_storage
"""

from __future__ import annotations

import asyncio
import contextlib
import os
import typing as typ

import pytest
import pytest_asyncio
import sqlalchemy as sa
import sqlalchemy.exc as sa_exc

from contentnodes.entities.storage.models import Base

if typ.TYPE_CHECKING:
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

_TEST_DB_ENV = "CONTENTNODES_TEST_DB"


def _test_db_target() -> str:
    """Return the requested test database backend."""
    return os.getenv(_TEST_DB_ENV, "sqlite").strip().lower() or "sqlite"


@contextlib.asynccontextmanager
async def _sqlite_engine(tmp_path: Path) -> typ.AsyncIterator[AsyncEngine]:
    """Yield an async engine bound to a throwaway SQLite file."""
    from sqlalchemy.ext.asyncio import create_async_engine

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'nodes.db'}")
    try:
        yield engine
    finally:
        await engine.dispose()


@contextlib.asynccontextmanager
async def _pglite_engine(tmp_path: Path) -> typ.AsyncIterator[AsyncEngine]:
    """Start a py-pglite Postgres and yield an async engine bound to it."""
    try:
        from py_pglite import PGliteConfig, PGliteManager
    except ModuleNotFoundError as exc:
        msg = (
            f"{_TEST_DB_ENV}=pglite requested, but py-pglite is not installed. "
            "Install the 'pglite' extra or unset the variable."
        )
        raise RuntimeError(msg) from exc

    config = PGliteConfig(work_dir=tmp_path / "pglite")
    with PGliteManager(config):
        from sqlalchemy.ext.asyncio import create_async_engine

        engine = create_async_engine(
            config.get_connection_string(),
            pool_pre_ping=True,
        )
        try:
            await _wait_for_engine_ready(engine)
            yield engine
        finally:
            await engine.dispose()


async def _wait_for_engine_ready(engine: AsyncEngine) -> None:
    """Wait for the database to accept SQLAlchemy connections."""
    max_attempts = 30
    delay_seconds = 0.1
    for attempt in range(1, max_attempts + 1):
        try:
            async with engine.connect() as connection:
                await connection.execute(sa.text("SELECT 1"))
        except sa_exc.OperationalError:
            if attempt == max_attempts:
                raise
            await asyncio.sleep(delay_seconds)
        else:
            return


@pytest_asyncio.fixture
async def schema_engine(tmp_path: Path) -> typ.AsyncIterator[AsyncEngine]:
    """Yield an async engine with the content node tables created."""
    target = _test_db_target()
    if target == "sqlite":
        factory = _sqlite_engine
    elif target == "pglite":
        factory = _pglite_engine
    else:
        pytest.fail(f"Unsupported {_TEST_DB_ENV}={target!r}.")

    async with factory(tmp_path) as engine:
        async with engine.begin() as connection:
            await connection.run_sync(Base.metadata.create_all)
        yield engine


@pytest.fixture
def session_factory(
    schema_engine: AsyncEngine,
) -> async_sessionmaker[AsyncSession]:
    """Return an async session factory bound to the schema engine."""
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    return async_sessionmaker(
        schema_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

