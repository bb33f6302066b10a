"""
Storage Models
==============

SQLAlchemy models for documents and their extracted graphs.

- Document: source document (stored content and OCR text)
- DocumentNode: one extracted entity, keyed by a generated UUID
- DocumentEdge: one relationship; endpoints are (document_id, node id) foreign
  keys into document_nodes, so an edge can only join nodes of its own document

Node and edge rows are owned by GraphStore: they are deleted and re-created
as a whole on every reanalysis, never updated in place.
"""

import datetime
import uuid

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    ForeignKeyConstraint,
    Index,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB

from .database import Base

# JSONB on PostgreSQL, JSON text elsewhere
JSONDocument = JSON().with_variant(JSONB(), "postgresql")


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class Document(Base):
    __tablename__ = "documents"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    filename = Column(String(512), nullable=False)
    content = Column(Text, nullable=True)
    ocr_text = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)


class DocumentNode(Base):
    __tablename__ = "document_nodes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    document_id = Column(
        Uuid,
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    label = Column(String(255), nullable=False)
    name = Column(Text, nullable=False)
    properties = Column(JSONDocument, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    __table_args__ = (
        UniqueConstraint("document_id", "id", name="uq_document_nodes_document_node"),
    )


class DocumentEdge(Base):
    __tablename__ = "document_edges"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    document_id = Column(
        Uuid,
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    source_node_id = Column(Uuid, nullable=False)
    target_node_id = Column(Uuid, nullable=False)
    relationship = Column(String(255), nullable=False)
    properties = Column(JSONDocument, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    # Endpoints must be nodes of the same document
    __table_args__ = (
        ForeignKeyConstraint(
            ["document_id", "source_node_id"],
            ["document_nodes.document_id", "document_nodes.id"],
            ondelete="CASCADE",
            name="fk_document_edges_source_node",
        ),
        ForeignKeyConstraint(
            ["document_id", "target_node_id"],
            ["document_nodes.document_id", "document_nodes.id"],
            ondelete="CASCADE",
            name="fk_document_edges_target_node",
        ),
        Index("ix_document_edges_source_target", "source_node_id", "target_node_id"),
    )
