"""Typed access to flat rows returned by entity selects.

Fold and mapping code reads rows only through ``FlatRow.field``, which reports
whether a field exists separately from its value. A null column and an absent
column are therefore distinguishable without reflection on the row object.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from .domain import EntityProperty
from .errors import RowShapeError
from .values import property_value_from_columns

if typ.TYPE_CHECKING:
    import collections.abc as cabc

PROPERTY_NODE_ID_FIELD = "property_node_id"
PROPERTY_VERSION_ID_FIELD = "property_version_id"
PROPERTY_EDITOR_ALIAS_FIELD = "property_editor_alias"
PROPERTY_ALIAS_FIELD = "property_alias"
PROPERTY_NVARCHAR_FIELD = "data_nvarchar"
PROPERTY_NTEXT_FIELD = "data_ntext"

PROPERTY_FIELDS = frozenset({
    PROPERTY_NODE_ID_FIELD,
    PROPERTY_VERSION_ID_FIELD,
    PROPERTY_EDITOR_ALIAS_FIELD,
    PROPERTY_ALIAS_FIELD,
    PROPERTY_NVARCHAR_FIELD,
    PROPERTY_NTEXT_FIELD,
})


class FlatRow(typ.Protocol):
    """Read-only record with named fields."""

    def field(self, name: str) -> tuple[object, bool]:
        """Return ``(value, found)`` for the field called ``name``."""
        ...

    def field_names(self) -> cabc.Collection[str]:
        """Return the names of every field on the row."""
        ...


@dc.dataclass(frozen=True, slots=True)
class MappingRow:
    """``FlatRow`` adapter over a mapping such as SQLAlchemy's ``RowMapping``."""

    values: cabc.Mapping[str, object]

    def field(self, name: str) -> tuple[object, bool]:
        """Return ``(value, found)`` for the field called ``name``."""
        if name in self.values:
            return (self.values[name], True)
        return (None, False)

    def field_names(self) -> cabc.Collection[str]:
        """Return the names of every field on the row."""
        return tuple(self.values.keys())


def require_field(row: FlatRow, name: str) -> object:
    """Return a field value, raising when the field is absent or null."""
    value, found = row.field(name)
    if not found or value is None:
        raise RowShapeError(name)
    return value


def optional_field(row: FlatRow, name: str, default: object = None) -> object:
    """Return a field value, or ``default`` when absent or null."""
    value, found = row.field(name)
    if not found or value is None:
        return default
    return value


def _optional_text(row: FlatRow, name: str) -> str | None:
    value = optional_field(row, name)
    return None if value is None else str(value)


@dc.dataclass(frozen=True, slots=True)
class PropertyRow:
    """Child side of the media property join.

    Attributes
    ----------
    property_editor_alias : str | None
        Alias of the property editor that owns the value.
    property_alias : str | None
        Alias of the property type; blank aliases attach nothing.
    nvarchar_value : str | None
        Short-text column, used when the long-text column is blank.
    ntext_value : str | None
        Long-text column.
    """

    property_editor_alias: str | None
    property_alias: str | None
    nvarchar_value: str | None = None
    ntext_value: str | None = None

    @classmethod
    def from_flat_row(cls, row: FlatRow) -> PropertyRow | None:
        """Split the property columns off a joined row.

        Returns ``None`` when the left join matched no property data.
        """
        node_id, found = row.field(PROPERTY_NODE_ID_FIELD)
        if found and node_id is None:
            return None
        alias = _optional_text(row, PROPERTY_ALIAS_FIELD)
        if not found and alias is None:
            return None
        return cls(
            property_editor_alias=_optional_text(row, PROPERTY_EDITOR_ALIAS_FIELD),
            property_alias=alias,
            nvarchar_value=_optional_text(row, PROPERTY_NVARCHAR_FIELD),
            ntext_value=_optional_text(row, PROPERTY_NTEXT_FIELD),
        )

    @property
    def has_alias(self) -> bool:
        """Return True when the row names a property to attach."""
        return self.property_alias is not None and bool(self.property_alias.strip())

    def to_entity_property(self) -> EntityProperty:
        """Build the entity property carried by this row."""
        return EntityProperty(
            editor_alias=self.property_editor_alias,
            value=property_value_from_columns(self.ntext_value, self.nvarchar_value),
        )


def split_joined_row(row: FlatRow) -> tuple[FlatRow, PropertyRow | None]:
    """Return the ``(parent, child)`` pair carried by one joined row."""
    return (row, PropertyRow.from_flat_row(row))


__all__ = (
    "PROPERTY_FIELDS",
    "FlatRow",
    "MappingRow",
    "PropertyRow",
    "optional_field",
    "require_field",
    "split_joined_row",
)
