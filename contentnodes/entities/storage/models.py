"""SQLAlchemy ORM models for the content node schema.

Every content item, media item, and structural node lives in ``nodes``. The
remaining tables hang content types, document versions, and property data off
a node id. Entity selects read these tables; nothing in this package writes
them outside of tests.

Examples
--------
Create the tables on a throwaway engine:

>>> async with engine.begin() as connection:
...     await connection.run_sync(Base.metadata.create_all)
"""

from __future__ import annotations

# SQLAlchemy evaluates annotations at runtime; keep stdlib types imported.
import datetime as dt  # noqa: TC003
import uuid  # noqa: TC003

import sqlalchemy as sa
from sqlalchemy import orm


class Base(orm.DeclarativeBase):
    """Base class for content node SQLAlchemy models."""


class NodeRecord(Base):
    """SQLAlchemy model for nodes.

    Attributes
    ----------
    id : int
        Primary key for the node.
    unique_id : uuid.UUID
        Stable key shared with other systems.
    parent_id : int
        Id of the parent node; ``-1`` for root nodes.
    level : int
        Depth of the node in the tree.
    path : str
        Comma-separated ids from the root to the node.
    sort_order : int
        Position among siblings.
    trashed : bool
        Whether the node sits in the recycle bin.
    creator_id : int | None
        Id of the user who created the node.
    text : str | None
        Node name.
    node_object_type : uuid.UUID | None
        Kind of node (document, media, member, ...).
    create_date : datetime.datetime
        Timestamp when the node was created.
    """

    __tablename__ = "nodes"

    id: orm.Mapped[int] = orm.mapped_column(sa.Integer, primary_key=True)
    unique_id: orm.Mapped[uuid.UUID] = orm.mapped_column(sa.Uuid, unique=True)
    parent_id: orm.Mapped[int] = orm.mapped_column(sa.Integer, default=-1)
    level: orm.Mapped[int] = orm.mapped_column(sa.Integer, default=0)
    path: orm.Mapped[str] = orm.mapped_column(sa.String(150), default="")
    sort_order: orm.Mapped[int] = orm.mapped_column(sa.Integer, default=0)
    trashed: orm.Mapped[bool] = orm.mapped_column(sa.Boolean, default=False)
    creator_id: orm.Mapped[int | None] = orm.mapped_column(sa.Integer, nullable=True)
    text: orm.Mapped[str | None] = orm.mapped_column(sa.String(255), nullable=True)
    node_object_type: orm.Mapped[uuid.UUID | None] = orm.mapped_column(
        sa.Uuid,
        nullable=True,
        index=True,
    )
    create_date: orm.Mapped[dt.datetime] = orm.mapped_column(
        sa.DateTime(timezone=True),
        server_default=sa.func.now(),
    )


class ContentTypeRecord(Base):
    """SQLAlchemy model for content types (document and media types)."""

    __tablename__ = "content_types"

    id: orm.Mapped[int] = orm.mapped_column(sa.Integer, primary_key=True)
    node_id: orm.Mapped[int] = orm.mapped_column(
        sa.ForeignKey("nodes.id"),
        unique=True,
    )
    alias: orm.Mapped[str] = orm.mapped_column(sa.String(255))
    icon: orm.Mapped[str | None] = orm.mapped_column(sa.String(255), nullable=True)
    thumbnail: orm.Mapped[str | None] = orm.mapped_column(
        sa.String(255),
        nullable=True,
    )
    is_container: orm.Mapped[bool] = orm.mapped_column(sa.Boolean, default=False)


class ContentRecord(Base):
    """SQLAlchemy model linking a node to its content type."""

    __tablename__ = "content"

    id: orm.Mapped[int] = orm.mapped_column(sa.Integer, primary_key=True)
    node_id: orm.Mapped[int] = orm.mapped_column(
        sa.ForeignKey("nodes.id"),
        unique=True,
    )
    content_type_id: orm.Mapped[int] = orm.mapped_column(
        sa.ForeignKey("content_types.node_id"),
    )


class ContentVersionRecord(Base):
    """SQLAlchemy model for content versions.

    ``id`` increases with every saved version and serves as the version
    marker when choosing the newest row for a document.
    """

    __tablename__ = "content_versions"

    id: orm.Mapped[int] = orm.mapped_column(sa.Integer, primary_key=True)
    content_id: orm.Mapped[int] = orm.mapped_column(sa.ForeignKey("nodes.id"))
    version_id: orm.Mapped[uuid.UUID] = orm.mapped_column(sa.Uuid, unique=True)
    version_date: orm.Mapped[dt.datetime] = orm.mapped_column(
        sa.DateTime(timezone=True),
        server_default=sa.func.now(),
    )


class DocumentRecord(Base):
    """SQLAlchemy model for document versions and their publish state."""

    __tablename__ = "documents"

    version_id: orm.Mapped[uuid.UUID] = orm.mapped_column(
        sa.ForeignKey("content_versions.version_id"),
        primary_key=True,
    )
    node_id: orm.Mapped[int] = orm.mapped_column(sa.ForeignKey("nodes.id"), index=True)
    published: orm.Mapped[bool] = orm.mapped_column(sa.Boolean, default=False)
    newest: orm.Mapped[bool] = orm.mapped_column(sa.Boolean, default=True)
    text: orm.Mapped[str | None] = orm.mapped_column(sa.String(255), nullable=True)


class DataTypeRecord(Base):
    """SQLAlchemy model for data types and their property editor."""

    __tablename__ = "data_types"

    id: orm.Mapped[int] = orm.mapped_column(sa.Integer, primary_key=True)
    node_id: orm.Mapped[int] = orm.mapped_column(
        sa.ForeignKey("nodes.id"),
        unique=True,
    )
    property_editor_alias: orm.Mapped[str] = orm.mapped_column(sa.String(255))


class PropertyTypeRecord(Base):
    """SQLAlchemy model for property types declared on a content type."""

    __tablename__ = "property_types"

    id: orm.Mapped[int] = orm.mapped_column(sa.Integer, primary_key=True)
    data_type_id: orm.Mapped[int] = orm.mapped_column(
        sa.ForeignKey("data_types.node_id"),
    )
    content_type_id: orm.Mapped[int] = orm.mapped_column(
        sa.ForeignKey("content_types.node_id"),
    )
    alias: orm.Mapped[str] = orm.mapped_column(sa.String(255))


class PropertyDataRecord(Base):
    """SQLAlchemy model for stored property values.

    ``data_ntext`` holds long text and JSON documents; ``data_nvarchar`` holds
    short text and is read when ``data_ntext`` is blank.
    """

    __tablename__ = "property_data"

    id: orm.Mapped[int] = orm.mapped_column(sa.Integer, primary_key=True)
    node_id: orm.Mapped[int] = orm.mapped_column(sa.ForeignKey("nodes.id"), index=True)
    version_id: orm.Mapped[uuid.UUID | None] = orm.mapped_column(
        sa.Uuid,
        nullable=True,
    )
    property_type_id: orm.Mapped[int] = orm.mapped_column(
        sa.ForeignKey("property_types.id"),
    )
    data_nvarchar: orm.Mapped[str | None] = orm.mapped_column(
        sa.String(500),
        nullable=True,
    )
    data_ntext: orm.Mapped[str | None] = orm.mapped_column(sa.Text, nullable=True)


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
)
