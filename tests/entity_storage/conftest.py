"""Shared fixtures for content node storage tests."""

from __future__ import annotations

import typing as typ

import pytest_asyncio
from _seed_data import seed_tree

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


@pytest_asyncio.fixture
async def seeded_session_factory(
    session_factory: async_sessionmaker[AsyncSession],
) -> async_sessionmaker[AsyncSession]:
    """Return a session factory over the seeded content node tree."""
    async with session_factory() as session:
        await seed_tree(session)
    return session_factory
