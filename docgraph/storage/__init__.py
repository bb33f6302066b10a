"""
DocGraph Storage
================

Relational storage (SQLAlchemy async) for documents and their graphs.

Components:
- GraphStore: atomic replace of a document graph
- DocumentRepository: document text source
- create_engine / create_session_factory / init_db: database setup

Example:
    from docgraph.config import DatabaseConfig
    from docgraph.storage import GraphStore, create_engine, create_session_factory, init_db

    engine = create_engine(DatabaseConfig())
    await init_db(engine)
    store = GraphStore(create_session_factory(engine))
"""

from docgraph.storage.database import (
    Base,
    create_engine,
    create_session_factory,
    init_db,
    drop_all_tables,
)
from docgraph.storage.documents import DocumentRepository, DocumentText
from docgraph.storage.graph_store import GraphStore
from docgraph.storage.models import Document, DocumentNode, DocumentEdge

__all__ = [
    "Base",
    "create_engine",
    "create_session_factory",
    "init_db",
    "drop_all_tables",
    "DocumentRepository",
    "DocumentText",
    "GraphStore",
    "Document",
    "DocumentNode",
    "DocumentEdge",
]
