"""Unit-of-work scope for content node queries.

The unit of work owns the session, and so the database cursor, behind the
entity repository. Leaving the scope always closes the session, rolling back
first when the scope exits with an error. Nothing is committed: the layer is
read-only.

Examples
--------
>>> async with SqlAlchemyUnitOfWork(session_factory) as uow:
...     entity = await uow.entities.get(1061, NodeObjectType.MEDIA)
"""

from __future__ import annotations

import typing as typ

from contentnodes.entities.ports import EntityUnitOfWork
from contentnodes.logging import get_logger, log_debug, log_warning
from contentnodes.settings import DEFAULT_STREAM_BATCH_SIZE

from .repositories import SqlAlchemyEntityRepository

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from types import TracebackType

    from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


class SqlAlchemyUnitOfWork(EntityUnitOfWork):
    """Async unit-of-work backed by SQLAlchemy sessions.

    Parameters
    ----------
    session_factory : collections.abc.Callable[[], AsyncSession]
        Factory that produces new async sessions for the unit-of-work scope.
    stream_batch_size : int, optional
        Rows fetched per round trip by the repository.

    Attributes
    ----------
    entities : SqlAlchemyEntityRepository
        Repository for content node entities.
    """

    def __init__(
        self,
        session_factory: cabc.Callable[[], AsyncSession],
        *,
        stream_batch_size: int = DEFAULT_STREAM_BATCH_SIZE,
    ) -> None:
        self._session_factory = session_factory
        self._stream_batch_size = stream_batch_size
        self._session: AsyncSession | None = None

    async def __aenter__(self) -> SqlAlchemyUnitOfWork:
        """Open a unit-of-work session.

        Returns
        -------
        SqlAlchemyUnitOfWork
            The active unit-of-work instance.
        """
        self._session = self._session_factory()
        self.entities = SqlAlchemyEntityRepository(
            self._session,
            stream_batch_size=self._stream_batch_size,
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        """Close the unit-of-work session.

        Parameters
        ----------
        exc_type : type[BaseException] | None
            Exception type raised within the context, if any.
        exc : BaseException | None
            Exception instance raised within the context, if any.
        traceback : TracebackType | None
            Traceback for the raised exception, if any.
        """
        session = self._session
        if session is None:
            return
        try:
            if exc is not None:
                log_warning(
                    logger,
                    "Rolling back content node session after %s.",
                    exc_type.__name__ if exc_type else "error",
                )
                await session.rollback()
        finally:
            await session.close()
            self._session = None
            log_debug(logger, "Released content node session.")

    def _require_session(self) -> AsyncSession:
        """Return the active session or raise when missing."""
        if self._session is None:
            msg = "Session not initialized for unit of work."
            raise RuntimeError(msg)
        return self._session

    async def rollback(self) -> None:
        """Roll back the current unit-of-work session.

        Raises
        ------
        RuntimeError
            If called outside the unit-of-work scope.
        """
        await self._require_session().rollback()


__all__ = ("SqlAlchemyUnitOfWork",)
