"""Exception types raised by the content node entity layer."""

from __future__ import annotations


class ContentNodesError(Exception):
    """Base class for content node data-access errors."""


class InternalConsistencyError(ContentNodesError, RuntimeError):
    """Raised when a collection's own bookkeeping contradicts itself.

    This signals a broken invariant inside the layer rather than bad data, so
    it is never absorbed.
    """


class RowShapeError(ContentNodesError, LookupError):
    """Raised when a flat row lacks a field required to build an entity."""

    def __init__(self, field_name: str) -> None:
        super().__init__(f"Row is missing required field {field_name!r}.")
        self.field_name = field_name


__all__ = ("ContentNodesError", "InternalConsistencyError", "RowShapeError")
