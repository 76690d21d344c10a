"""Fold a one-to-many join into a stream of reconstructed entities.

The media select left-joins property data onto the grouped node rows, so a
node with N properties arrives as N consecutive rows. ``RowFoldingReducer``
folds each run of rows sharing a node key into one ``ContentEntity`` and
emits it when the key changes or the stream ends. At most one entity is in
flight at any time, so a result set never has to be held in memory.

The accumulator is an explicit ``FoldState`` value: every step takes the
previous state and returns the next one alongside whatever entity the step
completed. Passing ``None`` as the parent row is the flush step.

Examples
--------
Fold a complete row stream:

>>> entities = list(fold_rows(pairs))

Drive the steps by hand:

>>> reducer = RowFoldingReducer()
>>> state = reducer.initial()
>>> state, entity = reducer.fold(state, parent_row, property_row)
>>> state, last = reducer.fold(state, None)
"""

from __future__ import annotations

import dataclasses as dc
import types
import typing as typ

from .factory import build_entity
from .rows import require_field

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .domain import ContentEntity, EntityProperty
    from .rows import FlatRow, PropertyRow

type EntityFactory = cabc.Callable[[FlatRow], ContentEntity]
type RowKey = cabc.Callable[[FlatRow], object]
type RowPair = tuple[FlatRow, PropertyRow | None]

_EMPTY_PROPERTIES: typ.Mapping[str, EntityProperty] = types.MappingProxyType({})


def unique_id_key(row: FlatRow) -> object:
    """Return the ``unique_id`` column that groups rows of one node."""
    return require_field(row, "unique_id")


@dc.dataclass(frozen=True, slots=True)
class _PendingEntity:
    """Entity under assembly and the key its rows share."""

    key: object
    entity: ContentEntity
    properties: typ.Mapping[str, EntityProperty] = _EMPTY_PROPERTIES

    def attach(self, child_row: PropertyRow | None) -> _PendingEntity:
        """Return a copy carrying the child's property when it names one."""
        if child_row is None or not child_row.has_alias:
            return self
        alias = typ.cast("str", child_row.property_alias)
        properties = {**self.properties, alias: child_row.to_entity_property()}
        return dc.replace(self, properties=types.MappingProxyType(properties))

    def complete(self) -> ContentEntity:
        """Return the finished, read-only entity."""
        return dc.replace(self.entity, properties=self.properties)


@dc.dataclass(frozen=True, slots=True)
class FoldState:
    """Accumulator threaded through fold steps.

    States are values: a step never changes the state it was given, so an
    earlier state can be flushed or folded again independently.
    """

    pending: _PendingEntity | None = None

    @property
    def pending_key(self) -> object | None:
        """Key of the entity under assembly, if any."""
        return None if self.pending is None else self.pending.key


class FoldResult(typ.NamedTuple):
    """Next accumulator and the entity completed by a step, if any."""

    state: FoldState
    entity: ContentEntity | None


@dc.dataclass(frozen=True, slots=True)
class RowFoldingReducer:
    """Step function folding ``(parent, child)`` row pairs into entities.

    Parameters
    ----------
    entity_factory : EntityFactory, optional
        Builds an entity from a parent row. Defaults to ``build_entity``.
    row_key : RowKey, optional
        Extracts the grouping key from a parent row. Adjacent rows with equal
        keys fold into one entity. Defaults to the ``unique_id`` column.
    """

    entity_factory: EntityFactory = build_entity
    row_key: RowKey = unique_id_key

    @staticmethod
    def initial() -> FoldState:
        """Return the empty accumulator."""
        return FoldState()

    def fold(
        self,
        state: FoldState,
        parent_row: FlatRow | None,
        child_row: PropertyRow | None = None,
    ) -> FoldResult:
        """Apply one fold step.

        Parameters
        ----------
        state : FoldState
            Accumulator returned by the previous step. It is not modified.
        parent_row : FlatRow | None
            Node side of the joined row, or ``None`` to flush.
        child_row : PropertyRow | None, optional
            Property side of the joined row, or ``None`` when the join matched
            no property.

        Returns
        -------
        FoldResult
            The next accumulator and the entity completed by this step.

        Raises
        ------
        RowShapeError
            If a parent row lacks the fields needed to build an entity.
        """
        if parent_row is None:
            if state.pending is None:
                return FoldResult(state, None)
            return FoldResult(FoldState(), state.pending.complete())

        key = self.row_key(parent_row)
        pending = state.pending
        if pending is not None and key == pending.key:
            return FoldResult(FoldState(pending.attach(child_row)), None)

        current = _PendingEntity(key, self.entity_factory(parent_row))
        previous = None if pending is None else pending.complete()
        return FoldResult(FoldState(current.attach(child_row)), previous)


def fold_rows(
    pairs: cabc.Iterable[RowPair],
    *,
    reducer: RowFoldingReducer | None = None,
) -> cabc.Iterator[ContentEntity]:
    """Lazily fold ``(parent, child)`` pairs into entities.

    The final flush step runs once the input is exhausted. Abandoning the
    iterator early simply stops the fold; nothing needs releasing.
    """
    active = reducer or RowFoldingReducer()
    state = active.initial()
    for parent_row, child_row in pairs:
        state, entity = active.fold(state, parent_row, child_row)
        if entity is not None:
            yield entity
    _, last = active.fold(state, None)
    if last is not None:
        yield last


async def afold_rows(
    pairs: cabc.AsyncIterable[RowPair],
    *,
    reducer: RowFoldingReducer | None = None,
) -> cabc.AsyncIterator[ContentEntity]:
    """Async counterpart of ``fold_rows`` for streamed result sets."""
    active = reducer or RowFoldingReducer()
    state = active.initial()
    async for parent_row, child_row in pairs:
        state, entity = active.fold(state, parent_row, child_row)
        if entity is not None:
            yield entity
    _, last = active.fold(state, None)
    if last is not None:
        yield last


__all__ = (
    "FoldResult",
    "FoldState",
    "RowFoldingReducer",
    "afold_rows",
    "fold_rows",
    "unique_id_key",
)
