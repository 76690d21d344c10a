"""Ports for content node entity queries.

These protocols describe the read side of the content node data-access layer
so services can depend on them instead of the SQLAlchemy adapters.

Examples
--------
Load every media item through a unit of work:

>>> async with uow:
...     media = await uow.entities.get_all(NodeObjectType.MEDIA)
"""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import uuid
    from types import TracebackType

    from .domain import ContentEntity


class EntityRepository(typ.Protocol):
    """Query interface for content node entities.

    Methods
    -------
    get(node_id, object_type)
        Fetch an entity by node id.
    get_by_key(key, object_type)
        Fetch an entity by unique key.
    get_all(object_type, ids)
        List entities of one object type.
    get_all_by_keys(object_type, keys)
        List entities of one object type by unique key.
    get_by_query(where_clause, object_type)
        List entities matching a filter.
    stream(object_type, where_clause)
        Iterate entities of one object type as they are assembled.
    """

    async def get(
        self,
        node_id: int,
        object_type: uuid.UUID | None = None,
    ) -> ContentEntity | None:
        """Fetch an entity by node id.

        Parameters
        ----------
        node_id : int
            Identifier of the node.
        object_type : uuid.UUID | None, optional
            Node object type. When given, the entity is loaded with the
            columns for that type (and property data for media).

        Returns
        -------
        ContentEntity | None
            The matching entity, or ``None`` if no match exists.
        """
        ...

    async def get_by_key(
        self,
        key: uuid.UUID,
        object_type: uuid.UUID | None = None,
    ) -> ContentEntity | None:
        """Fetch an entity by unique key."""
        ...

    async def get_all(
        self,
        object_type: uuid.UUID,
        ids: cabc.Collection[int] = (),
    ) -> list[ContentEntity]:
        """List entities of ``object_type``, optionally restricted to ``ids``."""
        ...

    async def get_all_by_keys(
        self,
        object_type: uuid.UUID,
        keys: cabc.Collection[uuid.UUID] = (),
    ) -> list[ContentEntity]:
        """List entities of ``object_type``, optionally restricted to ``keys``."""
        ...

    async def get_by_query(
        self,
        where_clause: typ.Any,  # noqa: ANN401 - SQLAlchemy clause typing.
        object_type: uuid.UUID | None = None,
    ) -> list[ContentEntity]:
        """List entities matching ``where_clause``."""
        ...

    def stream(
        self,
        object_type: uuid.UUID,
        where_clause: typ.Any = None,  # noqa: ANN401 - SQLAlchemy clause typing.
    ) -> cabc.AsyncIterator[ContentEntity]:
        """Iterate entities of ``object_type`` in sort order."""
        ...


class EntityUnitOfWork(typ.Protocol):
    """Scope that owns the session behind an ``EntityRepository``.

    Attributes
    ----------
    entities : EntityRepository
        Repository bound to the scope's session.
    """

    entities: EntityRepository

    async def __aenter__(self) -> EntityUnitOfWork:
        """Open the scope and bind repositories."""
        ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        """Release the scope's session on every exit path."""
        ...

    async def rollback(self) -> None:
        """Discard the scope's open transaction."""
        ...


__all__ = ("EntityRepository", "EntityUnitOfWork")
