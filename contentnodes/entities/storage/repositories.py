"""SQLAlchemy repository for content node entities.

The repository streams entity selects through a forward-only cursor and picks
an assembly strategy from the node object type:

- media rows fan out across property rows and are folded by
  ``RowFoldingReducer`` as they arrive,
- document rows may repeat per content version and are deduplicated by
  ``VersionedEntitySet``, keeping the newest version,
- other node types produce one row per node and go through the same set with
  the node id as version.

Examples
--------
>>> async with SqlAlchemyUnitOfWork(session_factory) as uow:
...     media = await uow.entities.get_all(NodeObjectType.MEDIA)
"""

from __future__ import annotations

import contextlib
import typing as typ

from contentnodes.entities.domain import QueryKind
from contentnodes.entities.factory import build_entity
from contentnodes.entities.ports import EntityRepository
from contentnodes.entities.relator import afold_rows
from contentnodes.entities.rows import MappingRow, split_joined_row
from contentnodes.entities.versioned import EntityDefinition, VersionedEntitySet
from contentnodes.logging import get_logger, log_debug
from contentnodes.settings import DEFAULT_STREAM_BATCH_SIZE

from .models import NodeRecord
from .queries import entity_select, select_for

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import uuid

    import sqlalchemy as sa
    from sqlalchemy.ext.asyncio import AsyncSession

    from contentnodes.entities.domain import ContentEntity
    from contentnodes.entities.relator import RowPair

    from .queries import WhereClause

logger = get_logger(__name__)


class SqlAlchemyEntityRepository(EntityRepository):
    """Load content node entities using SQLAlchemy.

    Parameters
    ----------
    session : AsyncSession
        Session owned by the enclosing unit of work.
    stream_batch_size : int, optional
        Rows fetched per round trip while streaming.
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        stream_batch_size: int = DEFAULT_STREAM_BATCH_SIZE,
    ) -> None:
        self._session = session
        self._stream_batch_size = stream_batch_size

    async def _stream_rows(
        self,
        statement: sa.Select[typ.Any],
    ) -> cabc.AsyncIterator[MappingRow]:
        """Yield rows from a server-side cursor, closing it on every exit."""
        result = await self._session.stream(
            statement.execution_options(yield_per=self._stream_batch_size)
        )
        try:
            async for mapping in result.mappings():
                yield MappingRow(mapping)
        finally:
            await result.close()

    async def _joined_pairs(
        self,
        rows: cabc.AsyncIterator[MappingRow],
    ) -> cabc.AsyncIterator[RowPair]:
        async for row in rows:
            yield split_joined_row(row)

    async def _assemble(
        self,
        kind: QueryKind,
        object_type: uuid.UUID | None,
        where: cabc.Sequence[WhereClause],
    ) -> cabc.AsyncIterator[ContentEntity]:
        statement = select_for(kind, object_type=object_type, where=where)
        count = 0
        async with contextlib.aclosing(self._stream_rows(statement)) as rows:
            if kind is QueryKind.MEDIA:
                async for entity in afold_rows(self._joined_pairs(rows)):
                    count += 1
                    yield entity
            else:
                definitions: VersionedEntitySet[EntityDefinition] = (
                    VersionedEntitySet()
                )
                async for row in rows:
                    definitions.upsert(EntityDefinition(row))
                for definition in definitions:
                    count += 1
                    yield definition.build()
        log_debug(logger, "Assembled %d %s entities.", count, kind)

    async def _first(
        self,
        object_type: uuid.UUID,
        where: cabc.Sequence[WhereClause],
    ) -> ContentEntity | None:
        kind = QueryKind.classify(object_type)
        async with contextlib.aclosing(
            self._assemble(kind, object_type, where)
        ) as entities:
            async for entity in entities:
                return entity
        return None

    async def _get_untyped(self, where_clause: WhereClause) -> ContentEntity | None:
        result = await self._session.execute(
            entity_select(QueryKind.GENERIC, where=(where_clause,))
        )
        mapping = result.mappings().first()
        if mapping is None:
            return None
        return build_entity(MappingRow(mapping))

    async def get(
        self,
        node_id: int,
        object_type: uuid.UUID | None = None,
    ) -> ContentEntity | None:
        """Fetch an entity by node id."""
        if object_type is None:
            return await self._get_untyped(NodeRecord.id == node_id)
        return await self._first(object_type, (NodeRecord.id == node_id,))

    async def get_by_key(
        self,
        key: uuid.UUID,
        object_type: uuid.UUID | None = None,
    ) -> ContentEntity | None:
        """Fetch an entity by unique key."""
        if object_type is None:
            return await self._get_untyped(NodeRecord.unique_id == key)
        return await self._first(object_type, (NodeRecord.unique_id == key,))

    async def get_all(
        self,
        object_type: uuid.UUID,
        ids: cabc.Collection[int] = (),
    ) -> list[ContentEntity]:
        """List entities of ``object_type``, optionally restricted to ``ids``.

        Parameters
        ----------
        object_type : uuid.UUID
            Node object type to list.
        ids : collections.abc.Collection[int], optional
            Node ids to restrict the listing to; empty lists every node.

        Returns
        -------
        list[ContentEntity]
            Entities in sort order.
        """
        where = (NodeRecord.id.in_(list(ids)),) if ids else ()
        return await self._collect(object_type, where)

    async def get_all_by_keys(
        self,
        object_type: uuid.UUID,
        keys: cabc.Collection[uuid.UUID] = (),
    ) -> list[ContentEntity]:
        """List entities of ``object_type``, optionally restricted to ``keys``."""
        where = (NodeRecord.unique_id.in_(list(keys)),) if keys else ()
        return await self._collect(object_type, where)

    async def get_by_query(
        self,
        where_clause: typ.Any,  # noqa: ANN401 - SQLAlchemy clause typing.
        object_type: uuid.UUID | None = None,
    ) -> list[ContentEntity]:
        """List entities matching a filter over ``NodeRecord``.

        Without an object type every matching node is mapped from its own
        row; no version or property assembly takes place.
        """
        if object_type is not None:
            return await self._collect(object_type, (where_clause,))
        result = await self._session.execute(
            entity_select(QueryKind.GENERIC, where=(where_clause,))
        )
        return [build_entity(MappingRow(mapping)) for mapping in result.mappings()]

    async def stream(
        self,
        object_type: uuid.UUID,
        where_clause: typ.Any = None,  # noqa: ANN401 - SQLAlchemy clause typing.
    ) -> cabc.AsyncIterator[ContentEntity]:
        """Iterate entities of ``object_type`` in sort order.

        Media entities are yielded as soon as their last property row has
        been read; other types are yielded after the newest version of every
        node is known.
        """
        where = () if where_clause is None else (where_clause,)
        kind = QueryKind.classify(object_type)
        async with contextlib.aclosing(
            self._assemble(kind, object_type, where)
        ) as entities:
            async for entity in entities:
                yield entity

    async def _collect(
        self,
        object_type: uuid.UUID,
        where: cabc.Sequence[WhereClause],
    ) -> list[ContentEntity]:
        kind = QueryKind.classify(object_type)
        return [entity async for entity in self._assemble(kind, object_type, where)]


__all__ = ("SqlAlchemyEntityRepository",)
