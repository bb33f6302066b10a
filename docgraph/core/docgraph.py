"""
DocGraph
========

Entry point wiring configuration, database, completion client, extractor,
store and analyzer together.

Architecture:
    DocGraph
    ├── AsyncEngine / session factory (documents, document_nodes, document_edges)
    ├── DocumentRepository (document text)
    ├── CompletionClient (only when a credential is configured)
    ├── GraphExtractor (LLM or fallback)
    ├── GraphStore (atomic replace)
    └── GraphAnalyzer (analyze pipeline)

Example:
    async with DocGraph(DocGraphConfig()) as dg:
        document_id = await dg.add_document("memo.txt", content="Jane works at Acme.")
        graph = await dg.analyze(document_id)
        print(graph.to_dict())
"""

from typing import Optional
from uuid import UUID

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from docgraph.config import DocGraphConfig
from docgraph.core.analyzer import GraphAnalyzer
from docgraph.exceptions import StoreError
from docgraph.extraction.client import CompletionClient
from docgraph.extraction.extractors import create_extractor
from docgraph.graph.schema import Graph
from docgraph.storage.database import create_engine, create_session_factory, init_db
from docgraph.storage.documents import DocumentRepository
from docgraph.storage.graph_store import GraphStore

log = structlog.get_logger(__name__)


class DocGraph:
    """
    Document graph extraction service.

    Components are created in connect() and released in close().
    """

    def __init__(self, config: Optional[DocGraphConfig] = None):
        self.config = config or DocGraphConfig()

        self._engine: Optional[AsyncEngine] = None
        self._client: Optional[CompletionClient] = None
        self._documents: Optional[DocumentRepository] = None
        self._store: Optional[GraphStore] = None
        self._analyzer: Optional[GraphAnalyzer] = None

        self._connected = False

    async def connect(self) -> None:
        """
        Create the engine and all components.

        Must be called before any operation.

        Raises:
            StoreError: If the engine cannot be created or the tables cannot be created
        """
        if self._connected:
            log.warning("Already connected")
            return

        try:
            self._engine = create_engine(self.config.database)
            if self.config.create_tables:
                await init_db(self._engine)
        except SQLAlchemyError as e:
            if self._engine is not None:
                await self._engine.dispose()
                self._engine = None
            log.error("Database setup failed", url=self.config.database.sanitized_url(), error=str(e))
            raise StoreError(f"Failed to initialize database: {e}") from e

        session_factory = create_session_factory(self._engine)
        self._documents = DocumentRepository(session_factory)
        self._store = GraphStore(session_factory)

        if self.config.llm.enabled:
            self._client = CompletionClient(self.config.llm)
        extractor = create_extractor(self.config.llm, self._client)

        self._analyzer = GraphAnalyzer(
            documents=self._documents,
            extractor=extractor,
            store=self._store,
            serialize_per_document=self.config.serialize_per_document,
        )

        self._connected = True
        log.info(
            "DocGraph connected",
            extractor=type(extractor).__name__,
            model=self.config.llm.model if self.config.llm.enabled else None,
        )

    async def close(self) -> None:
        """Close the HTTP session and dispose of the engine."""
        if self._client:
            await self._client.close()
            self._client = None
        if self._engine:
            await self._engine.dispose()
            self._engine = None

        self._connected = False
        log.info("DocGraph closed")

    async def __aenter__(self) -> "DocGraph":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _require_connected(self) -> None:
        if not self._connected:
            raise RuntimeError("DocGraph is not connected. Call connect() first.")

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def analyzer(self) -> GraphAnalyzer:
        self._require_connected()
        return self._analyzer

    @property
    def store(self) -> GraphStore:
        self._require_connected()
        return self._store

    @property
    def documents(self) -> DocumentRepository:
        self._require_connected()
        return self._documents

    async def analyze(self, document_id: UUID) -> Graph:
        """Extract and store the graph of a document (see GraphAnalyzer.analyze)."""
        return await self.analyzer.analyze(document_id)

    async def load_graph(self, document_id: UUID) -> Graph:
        """Stored graph of a document."""
        return await self.store.load(document_id)

    async def add_document(
        self,
        filename: str,
        content: Optional[str] = None,
        ocr_text: Optional[str] = None,
    ) -> UUID:
        """Register a document and return its id."""
        return await self.documents.add(filename, content=content, ocr_text=ocr_text)
