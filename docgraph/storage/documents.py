"""
Document Repository
===================

Read access to stored documents for the analysis pipeline, plus a small
``add()`` used by the CLI and tests to register a document.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from docgraph.exceptions import StoreError
from docgraph.storage.models import Document

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class DocumentText:
    """Analyzable text sources of a document."""
    document_id: UUID
    ocr_text: Optional[str] = None
    content: Optional[str] = None

    def analyzable_text(self) -> Optional[str]:
        """
        Text to analyze: OCR text first, stored content otherwise.

        Blank strings count as absent.
        """
        for candidate in (self.ocr_text, self.content):
            if candidate is not None and candidate.strip():
                return candidate
        return None


class DocumentRepository:
    """SQL-backed document source."""

    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    async def get(self, document_id: UUID) -> Optional[DocumentText]:
        """
        Return the text sources of a document, or None if it does not exist.

        Raises:
            StoreError: If the lookup fails
        """
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(Document.id, Document.ocr_text, Document.content).where(Document.id == document_id)
                )
                row = result.first()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to load document: {e}", document_id=document_id) from e

        if row is None:
            return None
        return DocumentText(document_id=row.id, ocr_text=row.ocr_text, content=row.content)

    async def add(
        self,
        filename: str,
        content: Optional[str] = None,
        ocr_text: Optional[str] = None,
    ) -> UUID:
        """
        Store a new document.

        Returns:
            The generated document id
        """
        document = Document(filename=filename, content=content, ocr_text=ocr_text)
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(document)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to store document {filename!r}: {e}") from e

        log.info("Document stored", document_id=str(document.id), filename=filename)
        return document.id
