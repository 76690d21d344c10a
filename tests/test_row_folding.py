"""Unit tests for the row-folding reducer."""

from __future__ import annotations

import dataclasses as dc
import itertools
import typing as typ
import uuid

import pytest
from _row_helpers import node_key, node_row, property_row

from contentnodes.entities import (
    JsonValue,
    MappingRow,
    PropertyRow,
    RawText,
    RowFoldingReducer,
    RowShapeError,
    build_entity,
    fold_rows,
)
from contentnodes.entities.relator import afold_rows

if typ.TYPE_CHECKING:
    from contentnodes.entities import ContentEntity, FlatRow


def test_fold_scenario_groups_adjacent_property_rows() -> None:
    """Two parents with two and zero properties fold into two entities."""
    pairs = [
        (node_row(1), property_row("a", nvarchar="1")),
        (node_row(1), property_row("b", nvarchar="2")),
        (node_row(2), None),
    ]

    entities = list(fold_rows(pairs))

    assert [entity.id for entity in entities] == [1, 2], (
        "Expected one entity per parent key in first-appearance order."
    )
    first, second = entities
    assert {alias: prop.value for alias, prop in first.properties.items()} == {
        "a": RawText("1"),
        "b": RawText("2"),
    }, "Expected both property rows to attach to the first entity."
    assert dict(second.properties) == {}, "Expected no properties on entity 2."


def test_emitted_count_matches_distinct_parent_keys() -> None:
    """Entity count equals distinct parent keys whatever the fan-out."""
    fan_out = {10: 3, 11: 1, 12: 0, 13: 5}
    pairs = []
    for node_id, count in fan_out.items():
        if count == 0:
            pairs.append((node_row(node_id), None))
        pairs.extend(
            (node_row(node_id), property_row(f"p{index}", nvarchar=str(index)))
            for index in range(count)
        )

    entities = list(fold_rows(pairs))

    assert [entity.id for entity in entities] == list(fan_out), (
        "Expected each parent key to be emitted exactly once."
    )
    assert [len(entity.properties) for entity in entities] == list(fan_out.values())


def test_repeated_property_alias_keeps_last_value() -> None:
    """A later property row with the same alias overwrites the earlier one."""
    pairs = [
        (node_row(5), property_row("caption", nvarchar="first")),
        (node_row(5), property_row("caption", nvarchar="second")),
    ]

    (entity,) = fold_rows(pairs)

    assert entity.properties["caption"].value == RawText("second"), (
        "Expected the last value for a repeated alias to win."
    )


@pytest.mark.parametrize("alias", [None, "", "   "])
def test_blank_alias_attaches_nothing(alias: str | None) -> None:
    """Property rows without a usable alias leave the property map untouched."""
    pairs = [
        (node_row(3), property_row(alias, nvarchar="ignored")),
        (node_row(3), property_row("kept", nvarchar="value")),
    ]

    (entity,) = fold_rows(pairs)

    assert list(entity.properties) == ["kept"], (
        "Expected blank aliases not to create property entries."
    )


def test_json_property_text_is_structured() -> None:
    """Long-text JSON is exposed as a JSON value; short text as raw text."""
    pairs = [
        (node_row(4), property_row("crop", ntext='{"x": 1, "y": 2}')),
        (node_row(4), property_row("alt", ntext=" ", nvarchar="A cat")),
    ]

    (entity,) = fold_rows(pairs)

    assert entity.properties["crop"].value == JsonValue({"x": 1, "y": 2})
    assert entity.properties["alt"].value == RawText("A cat"), (
        "Expected blank long text to fall back to the short-text column."
    )
    assert entity.properties["crop"].editor_alias == "Umbraco.TextBox"


def test_flush_without_rows_returns_nothing() -> None:
    """Flushing an empty accumulator emits no entity."""
    reducer = RowFoldingReducer()

    state, entity = reducer.fold(reducer.initial(), None)

    assert entity is None, "Expected no entity from an empty flush."
    assert state.pending is None


def test_second_flush_returns_nothing() -> None:
    """Flushing twice after a fold emits the pending entity only once."""
    reducer = RowFoldingReducer()
    state, emitted = reducer.fold(reducer.initial(), node_row(8), None)
    assert emitted is None, "Expected the first row to start assembly only."

    state, flushed = reducer.fold(state, None)
    _, flushed_again = reducer.fold(state, None)

    assert flushed is not None, "Expected the first flush to emit the entity."
    assert flushed.key == node_key(8)
    assert flushed_again is None, "Expected the second flush to emit nothing."


def test_step_emits_previous_entity_on_key_change() -> None:
    """A new parent key completes and returns the previous entity."""
    reducer = RowFoldingReducer()
    state = reducer.initial()

    state, first = reducer.fold(state, node_row(1), property_row("a", nvarchar="x"))
    state, second = reducer.fold(state, node_row(1), property_row("b", nvarchar="y"))
    state, third = reducer.fold(state, node_row(2), None)

    assert first is None
    assert second is None
    assert third is not None, "Expected the key change to emit entity 1."
    assert third.id == 1
    assert state.pending_key == node_key(2)


def test_emitted_entities_are_not_revisited() -> None:
    """An emitted entity's properties are read-only and detached from the fold."""
    reducer = RowFoldingReducer()
    state, _ = reducer.fold(reducer.initial(), node_row(1), property_row("a", "1"))
    state, emitted = reducer.fold(state, node_row(2), None)
    assert emitted is not None

    with pytest.raises(TypeError):
        emitted.properties["b"] = emitted.properties["a"]  # type: ignore[index]
    with pytest.raises(dc.FrozenInstanceError):
        emitted.name = "changed"  # type: ignore[misc]


def test_parent_row_without_key_is_rejected() -> None:
    """A parent row missing required fields raises a row shape error."""
    row = node_row(9, unique_id=None)

    with pytest.raises(RowShapeError, match="unique_id"):
        list(fold_rows([(row, None)]))


def test_fold_rows_is_lazy() -> None:
    """Entities are produced while the input is still being consumed."""
    pairs = (
        (node_row(node_id), property_row("p", nvarchar="v"))
        for node_id in itertools.count(1)
    )

    entities = list(itertools.islice(fold_rows(pairs), 3))

    assert [entity.id for entity in entities] == [1, 2, 3], (
        "Expected entities to stream from an unbounded input."
    )


@pytest.mark.asyncio
async def test_async_fold_matches_sync_fold() -> None:
    """The async driver emits the same entities as the sync driver."""
    pairs = [
        (node_row(1), property_row("a", nvarchar="1")),
        (node_row(1), property_row("b", nvarchar="2")),
        (node_row(2), None),
    ]

    async def _source() -> typ.AsyncIterator[tuple[MappingRow, PropertyRow | None]]:
        for pair in pairs:
            yield pair

    folded = [entity async for entity in afold_rows(_source())]

    assert folded == list(fold_rows(pairs)), (
        "Expected async and sync folding to agree."
    )


def test_earlier_states_are_unchanged_by_later_steps() -> None:
    """Folding from a state leaves that state free to be flushed on its own."""
    reducer = RowFoldingReducer()
    first, _ = reducer.fold(reducer.initial(), node_row(1), property_row("a", "1"))
    second, _ = reducer.fold(first, node_row(1), property_row("b", "2"))

    _, from_first = reducer.fold(first, None)
    _, from_second = reducer.fold(second, None)

    assert second is not first, "Expected every step to return a new state."
    assert from_first is not None
    assert set(from_first.properties) == {"a"}, (
        "Expected the earlier state to keep only the property folded into it."
    )
    assert from_second is not None
    assert set(from_second.properties) == {"a", "b"}


def test_custom_row_key_groups_rows_for_custom_factory() -> None:
    """Rows group by the configured key rather than the ``unique_id`` column."""

    def keyed_by_path(row: FlatRow) -> ContentEntity:
        entity = build_entity(row)
        return dc.replace(entity, key=uuid.uuid5(uuid.NAMESPACE_URL, entity.path))

    reducer = RowFoldingReducer(
        entity_factory=keyed_by_path,
        row_key=lambda row: row.field("path")[0],
    )
    pairs = [
        (node_row(1, path="-1,7"), property_row("a", "1")),
        (node_row(2, path="-1,7"), property_row("b", "2")),
        (node_row(3, path="-1,8"), None),
    ]

    entities = list(fold_rows(pairs, reducer=reducer))

    assert [entity.path for entity in entities] == ["-1,7", "-1,8"], (
        "Expected rows sharing the configured key to fold together."
    )
    assert set(entities[0].properties) == {"a", "b"}
