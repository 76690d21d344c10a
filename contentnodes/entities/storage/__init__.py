"""SQLAlchemy persistence adapters for content node entities.

This package provides the SQLAlchemy models, select builders, repository, and
unit-of-work used to load content node entities. It keeps SQL concerns out of
the fold and versioning components.

Examples
--------
Fetch a media item with its properties:

>>> async with SqlAlchemyUnitOfWork(session_factory) as uow:
...     media = await uow.entities.get(1061, NodeObjectType.MEDIA)
"""

from .models import (
    Base,
    ContentRecord,
    ContentTypeRecord,
    ContentVersionRecord,
    DataTypeRecord,
    DocumentRecord,
    NodeRecord,
    PropertyDataRecord,
    PropertyTypeRecord,
)
from .queries import entity_select, media_select
from .repositories import SqlAlchemyEntityRepository
from .uow import SqlAlchemyUnitOfWork

__all__ = (
    "Base",
    "ContentRecord",
    "ContentTypeRecord",
    "ContentVersionRecord",
    "DataTypeRecord",
    "DocumentRecord",
    "NodeRecord",
    "PropertyDataRecord",
    "PropertyTypeRecord",
    "SqlAlchemyEntityRepository",
    "SqlAlchemyUnitOfWork",
    "entity_select",
    "media_select",
)
