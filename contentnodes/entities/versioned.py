"""Keep the newest version of each entity from a multi-version result set.

Document selects join every content version of a node, so one logical entity
can arrive as several rows. ``VersionedEntitySet`` keeps, per key, the item
with the highest version seen so far while preserving the position at which
the key first appeared.

Examples
--------
>>> definitions = VersionedEntitySet()
>>> definitions.upsert(EntityDefinition(row_v1))
<UpsertOutcome.INSERTED: 'inserted'>
>>> definitions.upsert(EntityDefinition(row_v2))
<UpsertOutcome.REPLACED: 'replaced'>
"""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ

from contentnodes.logging import get_logger, log_error

from .errors import InternalConsistencyError
from .factory import build_entity, entity_version
from .rows import require_field

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .domain import ContentEntity
    from .rows import FlatRow

logger = get_logger(__name__)


class VersionedItem(typ.Protocol):
    """Item identified by an integer key and ordered by an integer version."""

    @property
    def key(self) -> int:
        """Identity shared by every version of the item."""
        ...

    @property
    def version(self) -> int:
        """Version marker; higher is newer."""
        ...


class UpsertOutcome(enum.StrEnum):
    """Result of ``VersionedEntitySet.upsert``."""

    INSERTED = "inserted"
    REPLACED = "replaced"
    REJECTED = "rejected"


class VersionedEntitySet[ItemT: VersionedItem]:
    """Insertion-ordered collection holding the newest item per key.

    The key index and the ordered item list are always maintained together.
    Equal versions keep the item inserted first.
    """

    __slots__ = ("_items", "_positions")

    def __init__(self, items: cabc.Iterable[ItemT] = ()) -> None:
        self._items: list[ItemT] = []
        self._positions: dict[int, int] = {}
        for item in items:
            self.upsert(item)

    def upsert(self, item: ItemT) -> UpsertOutcome:
        """Insert ``item`` or replace an older item with the same key.

        Parameters
        ----------
        item : ItemT
            Candidate item.

        Returns
        -------
        UpsertOutcome
            ``INSERTED`` for a new key, ``REPLACED`` when ``item`` is newer
            than the retained item, ``REJECTED`` otherwise.

        Raises
        ------
        InternalConsistencyError
            If the key index points at a position that does not hold the key.
        """
        key = item.key
        position = self._positions.get(key)
        if position is None:
            self._positions[key] = len(self._items)
            self._items.append(item)
            return UpsertOutcome.INSERTED

        existing = self._item_at(key, position)
        if item.version > existing.version:
            self._items[position] = item
            return UpsertOutcome.REPLACED
        return UpsertOutcome.REJECTED

    def _item_at(self, key: int, position: int) -> ItemT:
        if 0 <= position < len(self._items) and self._items[position].key == key:
            return self._items[position]
        log_error(logger, "Versioned set index lost track of key %s.", key)
        msg = f"Could not find the item in the list: {key}"
        raise InternalConsistencyError(msg)

    def get(self, key: int) -> ItemT | None:
        """Return the retained item for ``key``, if any."""
        position = self._positions.get(key)
        if position is None:
            return None
        return self._item_at(key, position)

    def first(self) -> ItemT | None:
        """Return the item whose key was inserted first, if any."""
        return self._items[0] if self._items else None

    def values(self) -> list[ItemT]:
        """Return retained items in first-insertion order."""
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> cabc.Iterator[ItemT]:
        return iter(self._items)

    def __contains__(self, key: object) -> bool:
        return key in self._positions


@dc.dataclass(frozen=True, slots=True)
class EntityDefinition:
    """Unbuilt entity row tracked by key and version.

    Building is deferred until the newest row for the key is known, so rows
    that lose the version comparison are never mapped.
    """

    row: FlatRow

    @property
    def key(self) -> int:
        """Node id of the row."""
        return int(typ.cast("int", require_field(self.row, "id")))

    @property
    def version(self) -> int:
        """Content version id, or the node id for unversioned rows."""
        return entity_version(self.row)

    def build(self) -> ContentEntity:
        """Map the row onto an entity."""
        return build_entity(self.row)


__all__ = (
    "EntityDefinition",
    "UpsertOutcome",
    "VersionedEntitySet",
    "VersionedItem",
)
