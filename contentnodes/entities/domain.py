"""Domain models for reconstructed content node entities."""

from __future__ import annotations

import dataclasses as dc
import enum
import types
import typing as typ
import uuid

if typ.TYPE_CHECKING:
    import datetime as dt

_EMPTY_MAPPING: typ.Mapping[str, typ.Any] = types.MappingProxyType({})


class NodeObjectType:
    """Well-known node object type identifiers."""

    DOCUMENT = uuid.UUID("c66ba18e-eaf3-4cff-8a22-41b16d66a972")
    MEDIA = uuid.UUID("b796f64c-1f99-4ffb-b886-4bf4bc011a9c")


class QueryKind(enum.StrEnum):
    """Row shapes produced by entity selects.

    Documents carry version columns and may produce several rows per node,
    media fan out across property rows, and generic nodes produce one row each.
    """

    DOCUMENT = "document"
    MEDIA = "media"
    GENERIC = "generic"

    @classmethod
    def classify(cls, object_type: uuid.UUID | None) -> QueryKind:
        """Return the query kind for a node object type."""
        if object_type == NodeObjectType.DOCUMENT:
            return cls.DOCUMENT
        if object_type == NodeObjectType.MEDIA:
            return cls.MEDIA
        return cls.GENERIC


@dc.dataclass(frozen=True, slots=True)
class RawText:
    """Property text kept verbatim."""

    text: str


@dc.dataclass(frozen=True, slots=True)
class JsonValue:
    """Property text that parsed as JSON."""

    value: object


type PropertyValue = RawText | JsonValue


@dc.dataclass(frozen=True, slots=True)
class EntityProperty:
    """A property value attached to an entity from the property join."""

    editor_alias: str | None
    value: PropertyValue | None


@dc.dataclass(frozen=True)
class ContentEntity:
    """Content node reconstructed from one or more flat rows.

    ``version`` is the content version id for documents. Media and other rows
    carry no version column, so it falls back to the node id. ``properties``
    only holds values for media queries, which are the queries that join
    property data.
    """

    id: int
    key: uuid.UUID
    version: int
    name: str | None
    parent_id: int
    level: int
    path: str
    sort_order: int
    trashed: bool
    creator_id: int | None
    create_date: dt.datetime | None
    node_object_type: uuid.UUID | None
    has_children: bool = False
    is_published: bool = False
    has_pending_changes: bool = False
    content_type_alias: str | None = None
    content_type_icon: str | None = None
    content_type_thumbnail: str | None = None
    is_container: bool = False
    additional_data: typ.Mapping[str, object] = _EMPTY_MAPPING
    properties: typ.Mapping[str, EntityProperty] = _EMPTY_MAPPING


__all__ = (
    "ContentEntity",
    "EntityProperty",
    "JsonValue",
    "NodeObjectType",
    "PropertyValue",
    "QueryKind",
    "RawText",
)
