"""
DocGraph Exceptions
===================

Typed error hierarchy for the extraction and ingestion pipeline.

Every error carries a human readable message plus a ``details`` dict with the
offending identifier (document id, node name, HTTP status, ...). Underlying
causes are chained with ``raise ... from``.

Hierarchy:
    DocGraphError
    ├── ExtractionError
    │   ├── TransportError
    │   ├── UpstreamError
    │   └── ParseError
    ├── GraphValidationError
    ├── StoreError
    │   ├── TransactionError
    │   └── DanglingReferenceError
    └── AnalysisError
        ├── DocumentNotFoundError
        ├── NoContentError
        ├── ExtractionFailedError
        └── StorageFailedError
"""

from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID


class DocGraphError(Exception):
    """Base class for all DocGraph errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} :: {self.details}"
        return self.message


# =============================================================================
# Extraction
# =============================================================================

class ExtractionError(DocGraphError):
    """The text could not be turned into a Graph."""


class TransportError(ExtractionError):
    """The request to the completion service could not be sent or completed."""


class UpstreamError(ExtractionError):
    """The completion service answered, but not with a usable success payload."""

    def __init__(self, message: str, status: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message, {"status": status, "body": body})
        self.status = status
        self.body = body


class ParseError(ExtractionError):
    """The model output is not valid JSON in the Graph shape."""

    def __init__(self, message: str, preview: str = ""):
        super().__init__(message, {"preview": preview})
        self.preview = preview


# =============================================================================
# Validation
# =============================================================================

class GraphValidationError(DocGraphError):
    """
    A Graph has edges naming nodes that are not in the same Graph.

    Attributes:
        dangling: list of ``(edge_index, role, name)`` tuples, role being
            ``"source"`` or ``"target"``
    """

    def __init__(self, dangling: List[Tuple[int, str, str]]):
        names = sorted({name for _, _, name in dangling})
        super().__init__(
            f"Graph references unknown nodes: {', '.join(names)}",
            {"dangling": dangling},
        )
        self.dangling = dangling


# =============================================================================
# Storage
# =============================================================================

class StoreError(DocGraphError):
    """Persisting or reading a document graph failed."""

    def __init__(self, message: str, document_id: Optional[UUID] = None, **details: Any):
        payload = {"document_id": str(document_id) if document_id else None}
        payload.update(details)
        super().__init__(message, payload)
        self.document_id = document_id


class TransactionError(StoreError):
    """Commit or rollback of the graph transaction failed."""


class DanglingReferenceError(StoreError):
    """An edge names a node that was not inserted in the same transaction."""

    def __init__(self, document_id: UUID, name: str, role: str, edge_index: int):
        super().__init__(
            f"{role.capitalize()} node {name!r} not found",
            document_id=document_id,
            name=name,
            role=role,
            edge_index=edge_index,
        )
        self.name = name
        self.role = role
        self.edge_index = edge_index


# =============================================================================
# Analysis
# =============================================================================

class AnalysisError(DocGraphError):
    """``analyze(document_id)`` failed; the cause is chained."""

    def __init__(self, message: str, document_id: UUID):
        super().__init__(message, {"document_id": str(document_id)})
        self.document_id = document_id


class DocumentNotFoundError(AnalysisError):
    """No document matches the id."""


class NoContentError(AnalysisError):
    """The document has neither OCR text nor stored content."""


class ExtractionFailedError(AnalysisError):
    """Extraction or validation of the extracted graph failed."""


class StorageFailedError(AnalysisError):
    """The extracted graph could not be persisted."""
