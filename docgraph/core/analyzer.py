"""
Graph Analyzer
==============

``analyze(document_id)``: load text -> extract -> validate -> replace -> Graph.

Either the fully extracted and stored Graph is returned, or an AnalysisError
subclass is raised with the underlying error chained as ``__cause__``:

- DocumentNotFoundError: no document with that id
- NoContentError: neither OCR text nor content
- ExtractionFailedError: ExtractionError or GraphValidationError
- StorageFailedError: StoreError
- AnalysisError: the document lookup itself failed

Concurrent calls for the same document are last-commit-wins unless
``serialize_per_document`` is set, in which case they run one at a time.
"""

import asyncio
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator
from uuid import UUID

import structlog

from docgraph.exceptions import (
    AnalysisError,
    DocumentNotFoundError,
    ExtractionError,
    ExtractionFailedError,
    GraphValidationError,
    NoContentError,
    StorageFailedError,
    StoreError,
)
from docgraph.extraction.extractors import GraphExtractor
from docgraph.graph.schema import Graph
from docgraph.graph.validation import validate_graph
from docgraph.storage.documents import DocumentRepository
from docgraph.storage.graph_store import GraphStore

log = structlog.get_logger(__name__)


class GraphAnalyzer:
    """
    Extraction-and-ingestion pipeline for one document at a time.

    Args:
        documents: Document source
        extractor: Extraction strategy
        store: Graph persistence
        serialize_per_document: Hold a per-document lock around analyze()
    """

    def __init__(
        self,
        documents: DocumentRepository,
        extractor: GraphExtractor,
        store: GraphStore,
        serialize_per_document: bool = False,
    ):
        self.documents = documents
        self.extractor = extractor
        self.store = store
        self.serialize_per_document = serialize_per_document
        self._locks: "weakref.WeakValueDictionary[UUID, asyncio.Lock]" = weakref.WeakValueDictionary()

    @asynccontextmanager
    async def _document_lock(self, document_id: UUID) -> AsyncIterator[None]:
        if not self.serialize_per_document:
            yield
            return

        lock = self._locks.get(document_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[document_id] = lock
        async with lock:
            yield

    async def analyze(self, document_id: UUID) -> Graph:
        """
        Extract and store the graph of a document.

        Args:
            document_id: Document to analyze

        Returns:
            The Graph that was stored

        Raises:
            AnalysisError: see module docstring for subclasses
        """
        async with self._document_lock(document_id):
            return await self._analyze(document_id)

    async def _analyze(self, document_id: UUID) -> Graph:
        doc_log = log.bind(document_id=str(document_id))

        # STEP 1 - document text
        try:
            document = await self.documents.get(document_id)
        except StoreError as e:
            doc_log.error("Document lookup failed", error=str(e))
            raise AnalysisError(f"Document lookup failed: {e.message}", document_id) from e

        if document is None:
            doc_log.warning("Document not found")
            raise DocumentNotFoundError("Document not found", document_id)

        text = document.analyzable_text()
        if text is None:
            doc_log.warning("Document has no content to analyze")
            raise NoContentError("No content to analyze", document_id)

        # STEP 2 - extraction
        doc_log.info("Extracting graph", chars=len(text), source="ocr" if text is document.ocr_text else "content")
        try:
            graph = await self.extractor.extract(text)
        except ExtractionError as e:
            doc_log.error("Graph extraction failed", error=str(e), error_type=type(e).__name__)
            raise ExtractionFailedError(f"Graph extraction failed: {e.message}", document_id) from e

        # STEP 3 - validation
        try:
            validate_graph(graph)
        except GraphValidationError as e:
            doc_log.error("Extracted graph is invalid", dangling=e.dangling)
            raise ExtractionFailedError(f"Extracted graph is invalid: {e.message}", document_id) from e

        duplicates = graph.duplicate_names()
        if duplicates:
            doc_log.warning("Duplicate node names, last one wins for edges", names=duplicates)

        # STEP 4 - storage
        try:
            await self.store.replace(document_id, graph)
        except StoreError as e:
            doc_log.error("Graph storage failed", error=str(e), error_type=type(e).__name__)
            raise StorageFailedError(f"Graph storage failed: {e.message}", document_id) from e

        doc_log.info("Document analyzed", nodes=len(graph.nodes), edges=len(graph.edges))
        return graph
