"""Content node entities and the components that reconstruct them from rows.

Examples
--------
Fold joined media rows into entities:

>>> from contentnodes.entities import fold_rows
>>> entities = list(fold_rows(pairs))
"""

from .domain import (
    ContentEntity,
    EntityProperty,
    JsonValue,
    NodeObjectType,
    PropertyValue,
    QueryKind,
    RawText,
)
from .errors import ContentNodesError, InternalConsistencyError, RowShapeError
from .factory import build_entity
from .ports import EntityRepository, EntityUnitOfWork
from .relator import FoldResult, FoldState, RowFoldingReducer, afold_rows, fold_rows
from .rows import FlatRow, MappingRow, PropertyRow
from .values import convert_to_json_if_possible
from .versioned import (
    EntityDefinition,
    UpsertOutcome,
    VersionedEntitySet,
    VersionedItem,
)

__all__ = (
    "ContentEntity",
    "ContentNodesError",
    "EntityDefinition",
    "EntityProperty",
    "EntityRepository",
    "EntityUnitOfWork",
    "FlatRow",
    "FoldResult",
    "FoldState",
    "InternalConsistencyError",
    "JsonValue",
    "MappingRow",
    "NodeObjectType",
    "PropertyRow",
    "PropertyValue",
    "QueryKind",
    "RawText",
    "RowFoldingReducer",
    "RowShapeError",
    "UpsertOutcome",
    "VersionedEntitySet",
    "VersionedItem",
    "afold_rows",
    "build_entity",
    "convert_to_json_if_possible",
    "fold_rows",
)
