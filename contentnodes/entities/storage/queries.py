"""Select builders for content node entity queries.

Entity selects return one grouped row per node (per content version for
documents) with a count of child nodes. Media selects wrap that grouped select
and left-join property data, because long-text columns cannot take part in a
``GROUP BY`` next to the child count.

Filters passed through ``where`` must reference ``NodeRecord`` only: media
selects apply them to both the entity select and the property join.
"""

from __future__ import annotations

import typing as typ

import sqlalchemy as sa
from sqlalchemy import orm

from contentnodes.entities.domain import NodeObjectType, QueryKind
from contentnodes.entities.rows import (
    PROPERTY_ALIAS_FIELD,
    PROPERTY_EDITOR_ALIAS_FIELD,
    PROPERTY_NODE_ID_FIELD,
    PROPERTY_NTEXT_FIELD,
    PROPERTY_NVARCHAR_FIELD,
    PROPERTY_VERSION_ID_FIELD,
)

from .models import (
    ContentRecord,
    ContentTypeRecord,
    ContentVersionRecord,
    DataTypeRecord,
    DocumentRecord,
    NodeRecord,
    PropertyDataRecord,
    PropertyTypeRecord,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import uuid

type WhereClause = sa.ColumnElement[bool]


def _node_columns() -> list[typ.Any]:
    return [
        NodeRecord.id,
        NodeRecord.trashed,
        NodeRecord.parent_id,
        NodeRecord.creator_id,
        NodeRecord.level,
        NodeRecord.path,
        NodeRecord.sort_order,
        NodeRecord.unique_id,
        NodeRecord.text,
        NodeRecord.node_object_type,
        NodeRecord.create_date,
    ]


def _content_type_columns() -> list[typ.Any]:
    return [
        ContentTypeRecord.alias,
        ContentTypeRecord.icon,
        ContentTypeRecord.thumbnail,
        ContentTypeRecord.is_container,
    ]


def entity_select(
    kind: QueryKind,
    *,
    object_type: uuid.UUID | None = None,
    where: cabc.Sequence[WhereClause] = (),
    ordered: bool = True,
) -> sa.Select[typ.Any]:
    """Build the grouped entity select for ``kind``.

    Parameters
    ----------
    kind : QueryKind
        Row shape to select. Documents add publish and version columns;
        documents and media add content type columns.
    object_type : uuid.UUID | None, optional
        Restrict rows to one node object type.
    where : collections.abc.Sequence[WhereClause], optional
        Extra filters over ``NodeRecord``.
    ordered : bool, optional
        Order by sort order; disabled when the select is wrapped.

    Returns
    -------
    sqlalchemy.Select
        The grouped select.
    """
    child = orm.aliased(NodeRecord, name="child_node")
    grouped = _node_columns()

    if kind is QueryKind.DOCUMENT:
        published = (
            sa
            .select(DocumentRecord.node_id, DocumentRecord.version_id)
            .where(DocumentRecord.published.is_(True))
            .subquery("published")
        )
        grouped.extend([
            published.c.version_id.label("published_version"),
            DocumentRecord.version_id.label("newest_version"),
            ContentVersionRecord.id.label("version_id"),
        ])
    if kind is not QueryKind.GENERIC:
        grouped.extend(_content_type_columns())

    statement = sa.select(
        *grouped,
        sa.func.count(child.id).label("children"),
    ).select_from(NodeRecord)

    if kind is not QueryKind.GENERIC:
        statement = statement.join(
            ContentRecord,
            ContentRecord.node_id == NodeRecord.id,
        )
    if kind is QueryKind.DOCUMENT:
        statement = (
            statement
            .join(DocumentRecord, DocumentRecord.node_id == NodeRecord.id)
            .join(
                ContentVersionRecord,
                ContentVersionRecord.version_id == DocumentRecord.version_id,
            )
            .outerjoin(published, published.c.node_id == NodeRecord.id)
            .where(DocumentRecord.newest.is_(True))
        )
    if kind is not QueryKind.GENERIC:
        statement = statement.outerjoin(
            ContentTypeRecord,
            ContentTypeRecord.node_id == ContentRecord.content_type_id,
        )

    statement = statement.outerjoin(child, child.parent_id == NodeRecord.id)
    if object_type is not None:
        statement = statement.where(NodeRecord.node_object_type == object_type)
    for clause in where:
        statement = statement.where(clause)

    statement = statement.group_by(*grouped)
    if ordered:
        statement = statement.order_by(NodeRecord.sort_order)
    return statement


def _property_select(where: cabc.Sequence[WhereClause]) -> sa.Select[typ.Any]:
    statement = (
        sa
        .select(
            PropertyDataRecord.node_id.label(PROPERTY_NODE_ID_FIELD),
            PropertyDataRecord.version_id.label(PROPERTY_VERSION_ID_FIELD),
            PropertyDataRecord.data_nvarchar.label(PROPERTY_NVARCHAR_FIELD),
            PropertyDataRecord.data_ntext.label(PROPERTY_NTEXT_FIELD),
            DataTypeRecord.property_editor_alias.label(PROPERTY_EDITOR_ALIAS_FIELD),
            PropertyTypeRecord.alias.label(PROPERTY_ALIAS_FIELD),
        )
        .select_from(PropertyDataRecord)
        .join(NodeRecord, NodeRecord.id == PropertyDataRecord.node_id)
        .join(
            PropertyTypeRecord,
            PropertyTypeRecord.id == PropertyDataRecord.property_type_id,
        )
        .join(
            DataTypeRecord,
            DataTypeRecord.node_id == PropertyTypeRecord.data_type_id,
        )
        .where(NodeRecord.node_object_type == NodeObjectType.MEDIA)
    )
    for clause in where:
        statement = statement.where(clause)
    return statement


def media_select(where: cabc.Sequence[WhereClause] = ()) -> sa.Select[typ.Any]:
    """Build the media select with property data joined per row.

    Rows for the same media node are adjacent, ordered by sort order and node
    id, which is the ordering the row-folding reducer relies on.
    """
    entity = entity_select(
        QueryKind.MEDIA,
        object_type=NodeObjectType.MEDIA,
        where=where,
        ordered=False,
    ).subquery("entity")
    prop = _property_select(where).subquery("property")
    return (
        sa
        .select(entity, prop)
        .select_from(
            entity.outerjoin(prop, prop.c[PROPERTY_NODE_ID_FIELD] == entity.c.id)
        )
        .order_by(entity.c.sort_order, entity.c.id)
    )


def select_for(
    kind: QueryKind,
    *,
    object_type: uuid.UUID | None,
    where: cabc.Sequence[WhereClause] = (),
) -> sa.Select[typ.Any]:
    """Return the select that feeds entities of ``kind``."""
    if kind is QueryKind.MEDIA:
        return media_select(where)
    return entity_select(kind, object_type=object_type, where=where)


__all__ = ("WhereClause", "entity_select", "media_select", "select_for")
