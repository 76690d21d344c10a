"""Shared row builders for fold and versioning tests."""

from __future__ import annotations

import datetime as dt
import uuid

from contentnodes.entities import MappingRow, PropertyRow

_KEY_NAMESPACE = uuid.UUID("6f1f2a8e-4c0e-4b43-9c1a-2d6f2b9a7c11")


def node_key(node_id: int) -> uuid.UUID:
    """Return a deterministic unique key for a node id."""
    return uuid.uuid5(_KEY_NAMESPACE, str(node_id))


def node_row(node_id: int, **fields: object) -> MappingRow:
    """Build a flat entity row for ``node_id`` with optional overrides."""
    values: dict[str, object] = {
        "id": node_id,
        "unique_id": node_key(node_id),
        "trashed": False,
        "parent_id": -1,
        "creator_id": 0,
        "level": 1,
        "path": f"-1,{node_id}",
        "sort_order": 0,
        "text": f"Node {node_id}",
        "node_object_type": None,
        "create_date": dt.datetime(2026, 1, 5, 9, 30, tzinfo=dt.UTC),
        "children": 0,
    }
    values.update(fields)
    return MappingRow(values)


def property_row(
    alias: str | None,
    ntext: str | None = None,
    nvarchar: str | None = None,
    editor: str | None = "Umbraco.TextBox",
) -> PropertyRow:
    """Build a property row as produced by the media property join."""
    return PropertyRow(
        property_editor_alias=editor,
        property_alias=alias,
        nvarchar_value=nvarchar,
        ntext_value=ntext,
    )
