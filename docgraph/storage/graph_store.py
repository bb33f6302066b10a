"""
Graph Store
===========

Transactional persistence of a document graph.

replace() runs as one transaction:

1. delete the document's edge rows, then its node rows
2. insert every node, flushing to capture its generated id, and record
   ``name -> id`` in a map local to the call
3. resolve each edge's source/target through the map
   (DanglingReferenceError if a name is missing)
4. insert the edge rows
5. commit

Any failure rolls back: the tables hold either the complete previous graph
or the complete new one. Rows of other documents are never touched.

Duplicate node names: both rows are inserted, the later id wins in the name
map, so edges attach to the last node with that name.

Example:
    store = GraphStore(session_factory)
    await store.replace(document_id, graph)
    stored = await store.load(document_id)
"""

from typing import Dict, List, Tuple
from uuid import UUID

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from docgraph.exceptions import DanglingReferenceError, StoreError, TransactionError
from docgraph.graph.schema import Edge, Graph, Node
from docgraph.storage.models import DocumentEdge, DocumentNode

log = structlog.get_logger(__name__)


class GraphStore:
    """Owner of the write transaction for document_nodes / document_edges."""

    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    # =========================================================================
    # Replace
    # =========================================================================

    async def replace(self, document_id: UUID, graph: Graph) -> None:
        """
        Replace the stored graph of ``document_id`` with ``graph``.

        Raises:
            DanglingReferenceError: An edge names a node not inserted in this call
            TransactionError: Commit or rollback failed
            StoreError: Any other database failure
        """
        async with self._session_factory() as session:
            try:
                removed = await self._clear(session, document_id)
                node_ids = await self._insert_nodes(session, document_id, graph.nodes)
                await self._insert_edges(session, document_id, graph.edges, node_ids)
            except DanglingReferenceError as e:
                log.warning(
                    "Edge references unknown node, rolling back",
                    document_id=str(document_id),
                    name=e.name,
                    role=e.role,
                )
                await self._rollback(session, document_id)
                raise
            except SQLAlchemyError as e:
                await self._rollback(session, document_id)
                raise StoreError(
                    f"Failed to store graph: {e}",
                    document_id=document_id,
                ) from e

            try:
                await session.commit()
            except SQLAlchemyError as e:
                await self._rollback(session, document_id)
                raise TransactionError(
                    f"Failed to commit graph: {e}",
                    document_id=document_id,
                ) from e

        log.info(
            "Graph replaced",
            document_id=str(document_id),
            previous_nodes=removed,
            nodes=len(graph.nodes),
            edges=len(graph.edges),
        )

    async def _clear(self, session: AsyncSession, document_id: UUID) -> int:
        await session.execute(
            delete(DocumentEdge).where(DocumentEdge.document_id == document_id)
        )
        result = await session.execute(
            delete(DocumentNode).where(DocumentNode.document_id == document_id)
        )
        return result.rowcount or 0

    async def _insert_nodes(
        self,
        session: AsyncSession,
        document_id: UUID,
        nodes: List[Node],
    ) -> Dict[str, UUID]:
        node_ids: Dict[str, UUID] = {}
        for node in nodes:
            row = DocumentNode(
                document_id=document_id,
                label=node.label,
                name=node.name,
                properties=node.properties,
            )
            session.add(row)
            await session.flush()
            # Last write wins for duplicate names
            node_ids[node.name] = row.id
        return node_ids

    async def _insert_edges(
        self,
        session: AsyncSession,
        document_id: UUID,
        edges: List[Edge],
        node_ids: Dict[str, UUID],
    ) -> None:
        for index, edge in enumerate(edges):
            source_id = node_ids.get(edge.source)
            if source_id is None:
                raise DanglingReferenceError(document_id, edge.source, "source", index)
            target_id = node_ids.get(edge.target)
            if target_id is None:
                raise DanglingReferenceError(document_id, edge.target, "target", index)

            session.add(DocumentEdge(
                document_id=document_id,
                source_node_id=source_id,
                target_node_id=target_id,
                relationship=edge.relationship,
                properties=edge.properties,
            ))
        await session.flush()

    async def _rollback(self, session: AsyncSession, document_id: UUID) -> None:
        try:
            await session.rollback()
        except SQLAlchemyError as e:
            raise TransactionError(
                f"Failed to roll back graph transaction: {e}",
                document_id=document_id,
            ) from e

    # =========================================================================
    # Read / maintenance
    # =========================================================================

    async def load(self, document_id: UUID) -> Graph:
        """
        Read the stored graph of a document back into a Graph.

        Nodes are ordered by name, edges by (source, relationship, target).
        An unknown document yields an empty graph.
        """
        try:
            async with self._session_factory() as session:
                node_rows = (await session.execute(
                    select(DocumentNode).where(DocumentNode.document_id == document_id)
                )).scalars().all()
                edge_rows = (await session.execute(
                    select(DocumentEdge).where(DocumentEdge.document_id == document_id)
                )).scalars().all()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to load graph: {e}", document_id=document_id) from e

        names_by_id = {row.id: row.name for row in node_rows}
        nodes = [
            Node(label=row.label, name=row.name, properties=row.properties or {})
            for row in sorted(node_rows, key=lambda r: (r.name, r.label))
        ]
        edges = [
            Edge(
                source=names_by_id[row.source_node_id],
                target=names_by_id[row.target_node_id],
                relationship=row.relationship,
                properties=row.properties or {},
            )
            for row in edge_rows
        ]
        edges.sort(key=lambda e: (e.source, e.relationship, e.target))
        return Graph(nodes=nodes, edges=edges)

    async def delete(self, document_id: UUID) -> int:
        """
        Remove the stored graph of a document.

        Returns:
            Number of node rows removed
        """
        async with self._session_factory() as session:
            try:
                removed = await self._clear(session, document_id)
                await session.commit()
            except SQLAlchemyError as e:
                await self._rollback(session, document_id)
                raise StoreError(f"Failed to delete graph: {e}", document_id=document_id) from e

        log.info("Graph deleted", document_id=str(document_id), nodes=removed)
        return removed

    async def count(self, document_id: UUID) -> Tuple[int, int]:
        """Return ``(nodes, edges)`` stored for a document."""
        try:
            async with self._session_factory() as session:
                nodes = await session.scalar(
                    select(func.count()).select_from(DocumentNode).where(DocumentNode.document_id == document_id)
                )
                edges = await session.scalar(
                    select(func.count()).select_from(DocumentEdge).where(DocumentEdge.document_id == document_id)
                )
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to count graph rows: {e}", document_id=document_id) from e
        return nodes or 0, edges or 0
