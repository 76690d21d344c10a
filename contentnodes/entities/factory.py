"""Build ``ContentEntity`` values from flat entity rows.

Entity selects return a fixed set of node columns, optional document version
columns, and optional content type columns. Columns the factory does not know
about are preserved in ``additional_data`` so callers can select extra columns
without changing the entity type.

Examples
--------
>>> entity = build_entity(MappingRow({"id": 1, "unique_id": key}))
"""

from __future__ import annotations

import types
import typing as typ

from .domain import ContentEntity
from .rows import PROPERTY_FIELDS, optional_field, require_field

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt
    import uuid

    from .domain import EntityProperty
    from .rows import FlatRow

_MAPPED_FIELDS = frozenset({
    "id",
    "unique_id",
    "version_id",
    "text",
    "parent_id",
    "level",
    "path",
    "sort_order",
    "trashed",
    "creator_id",
    "create_date",
    "node_object_type",
    "children",
    "published_version",
    "newest_version",
    "alias",
    "icon",
    "thumbnail",
    "is_container",
})


def entity_version(row: FlatRow) -> int:
    """Return the version marker for a row.

    Rows carrying a content version id use it; other rows fall back to the
    node id so each node has exactly one version.
    """
    version = optional_field(row, "version_id")
    if version is None:
        return int(typ.cast("int", require_field(row, "id")))
    return int(typ.cast("int", version))


def _additional_data(row: FlatRow) -> cabc.Mapping[str, object]:
    extras: dict[str, object] = {}
    for name in row.field_names():
        if name in _MAPPED_FIELDS or name in PROPERTY_FIELDS:
            continue
        value, _ = row.field(name)
        extras[name] = value
    return types.MappingProxyType(extras)


def build_entity(
    row: FlatRow,
    *,
    properties: cabc.Mapping[str, EntityProperty] | None = None,
) -> ContentEntity:
    """Map a flat entity row onto a ``ContentEntity``.

    Parameters
    ----------
    row : FlatRow
        Row produced by an entity select.
    properties : collections.abc.Mapping[str, EntityProperty] | None, optional
        Properties folded from the media property join.

    Returns
    -------
    ContentEntity
        The reconstructed entity.

    Raises
    ------
    RowShapeError
        If the row has no ``id`` or ``unique_id``.
    """
    node_id = int(typ.cast("int", require_field(row, "id")))
    key = typ.cast("uuid.UUID", require_field(row, "unique_id"))
    published_version = optional_field(row, "published_version")
    newest_version = optional_field(row, "newest_version")
    is_published = published_version is not None
    children = int(typ.cast("int", optional_field(row, "children", 0)))
    creator_id = optional_field(row, "creator_id")

    return ContentEntity(
        id=node_id,
        key=key,
        version=entity_version(row),
        name=typ.cast("str | None", optional_field(row, "text")),
        parent_id=int(typ.cast("int", optional_field(row, "parent_id", -1))),
        level=int(typ.cast("int", optional_field(row, "level", 0))),
        path=str(optional_field(row, "path", "")),
        sort_order=int(typ.cast("int", optional_field(row, "sort_order", 0))),
        trashed=bool(optional_field(row, "trashed", False)),
        creator_id=None if creator_id is None else int(typ.cast("int", creator_id)),
        create_date=typ.cast("dt.datetime | None", optional_field(row, "create_date")),
        node_object_type=typ.cast(
            "uuid.UUID | None", optional_field(row, "node_object_type")
        ),
        has_children=children > 0,
        is_published=is_published,
        has_pending_changes=is_published and published_version != newest_version,
        content_type_alias=typ.cast("str | None", optional_field(row, "alias")),
        content_type_icon=typ.cast("str | None", optional_field(row, "icon")),
        content_type_thumbnail=typ.cast("str | None", optional_field(row, "thumbnail")),
        is_container=bool(optional_field(row, "is_container", False)),
        additional_data=_additional_data(row),
        properties=types.MappingProxyType(dict(properties or {})),
    )


__all__ = ("build_entity", "entity_version")
