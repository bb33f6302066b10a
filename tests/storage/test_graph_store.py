"""
Test Graph Store
================

Integration tests for GraphStore against an in-memory SQLite database.
"""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from docgraph.exceptions import DanglingReferenceError, StoreError, TransactionError
from docgraph.graph import Edge, Graph, Node
from docgraph.storage import DocumentEdge, DocumentNode


def _sorted(graph: Graph) -> dict:
    """Graph as a dict with nodes and edges in load() order."""
    data = graph.to_dict()
    data["nodes"].sort(key=lambda n: (n["name"], n["label"]))
    data["edges"].sort(key=lambda e: (e["source"], e["relationship"], e["target"]))
    return data


class TestReplace:
    """Test GraphStore.replace()."""

    @pytest.mark.asyncio
    async def test_replace_then_load(self, store, document_id, bob_graph):
        await store.replace(document_id, bob_graph)

        loaded = await store.load(document_id)

        assert loaded.to_dict() == _sorted(bob_graph)

    @pytest.mark.asyncio
    async def test_edges_reference_node_ids(self, store, session_factory, document_id, jane_graph):
        await store.replace(document_id, jane_graph)

        async with session_factory() as session:
            nodes = (await session.execute(
                select(DocumentNode).where(DocumentNode.document_id == document_id)
            )).scalars().all()
            edges = (await session.execute(
                select(DocumentEdge).where(DocumentEdge.document_id == document_id)
            )).scalars().all()

        ids = {node.name: node.id for node in nodes}
        assert len(nodes) == 2
        assert len(edges) == 1
        assert edges[0].source_node_id == ids["Jane"]
        assert edges[0].target_node_id == ids["Acme"]
        assert edges[0].relationship == "WORKS_AT"

    @pytest.mark.asyncio
    async def test_replace_removes_previous_graph(self, store, document_id, jane_graph, bob_graph):
        await store.replace(document_id, jane_graph)
        await store.replace(document_id, bob_graph)

        assert await store.count(document_id) == (3, 2)
        assert (await store.load(document_id)).to_dict() == _sorted(bob_graph)

    @pytest.mark.asyncio
    async def test_replace_is_idempotent(self, store, document_id, bob_graph):
        await store.replace(document_id, bob_graph)
        first = await store.load(document_id)
        await store.replace(document_id, bob_graph)

        assert await store.load(document_id) == first
        assert await store.count(document_id) == (3, 2)

    @pytest.mark.asyncio
    async def test_empty_graph_clears(self, store, document_id, jane_graph):
        await store.replace(document_id, jane_graph)
        await store.replace(document_id, Graph(nodes=[], edges=[]))

        assert await store.count(document_id) == (0, 0)

    @pytest.mark.asyncio
    async def test_other_documents_untouched(self, store, documents, document_id, jane_graph, bob_graph):
        other_id = await documents.add("other.txt", content="Bob lives in Turin.")
        await store.replace(other_id, bob_graph)

        await store.replace(document_id, jane_graph)
        await store.replace(document_id, Graph(nodes=[], edges=[]))

        assert await store.count(other_id) == (3, 2)
        assert (await store.load(other_id)).to_dict() == _sorted(bob_graph)

    @pytest.mark.asyncio
    async def test_properties_round_trip(self, store, document_id):
        graph = Graph(
            nodes=[Node(label="Org", name="Acme", properties={"tags": ["a", "b"], "meta": {"size": 3}, "public": True})],
            edges=[],
        )

        await store.replace(document_id, graph)

        loaded = await store.load(document_id)
        assert loaded.nodes[0].properties == {"tags": ["a", "b"], "meta": {"size": 3}, "public": True}


class TestReplaceFailures:
    """Test that a failed replace leaves the previous graph in place."""

    @pytest.mark.asyncio
    async def test_dangling_edge_rejected(self, store, document_id):
        graph = Graph(
            nodes=[Node(label="Person", name="Jane")],
            edges=[Edge(source="Jane", target="Globex", relationship="WORKS_AT")],
        )

        with pytest.raises(DanglingReferenceError) as exc_info:
            await store.replace(document_id, graph)

        assert exc_info.value.name == "Globex"
        assert exc_info.value.role == "target"
        assert exc_info.value.edge_index == 0
        assert await store.count(document_id) == (0, 0)

    @pytest.mark.asyncio
    async def test_dangling_source_message(self, store, document_id):
        graph = Graph(
            nodes=[Node(label="Org", name="Acme")],
            edges=[Edge(source="Ghost", target="Acme", relationship="OWNS")],
        )

        with pytest.raises(DanglingReferenceError, match="Source node 'Ghost' not found"):
            await store.replace(document_id, graph)

    @pytest.mark.asyncio
    async def test_failed_replace_keeps_previous_graph(self, store, document_id, bob_graph, jane_graph):
        await store.replace(document_id, bob_graph)
        before = await store.load(document_id)

        jane_graph.edges.append(Edge(source="Jane", target="Ghost", relationship="KNOWS"))
        with pytest.raises(DanglingReferenceError):
            await store.replace(document_id, jane_graph)

        assert await store.load(document_id) == before
        assert await store.count(document_id) == (3, 2)

    @pytest.mark.asyncio
    async def test_unknown_document_is_store_error(self, store, jane_graph):
        # document_nodes.document_id references documents.id
        with pytest.raises(StoreError) as exc_info:
            await store.replace(uuid4(), jane_graph)

        assert exc_info.value.__cause__ is not None

    @pytest.mark.asyncio
    async def test_failed_node_insert_keeps_previous_graph(self, store, document_id, bob_graph):
        await store.replace(document_id, bob_graph)
        before = await store.load(document_id)
        graph = Graph(
            nodes=[
                Node(label="Person", name="Jane"),
                Node(label="Org", name="Acme", properties={"founded": object()}),
            ],
            edges=[Edge(source="Jane", target="Acme", relationship="WORKS_AT")],
        )

        with pytest.raises(StoreError) as exc_info:
            await store.replace(document_id, graph)

        assert isinstance(exc_info.value.__cause__, SQLAlchemyError)
        assert await store.load(document_id) == before
        assert await store.count(document_id) == (3, 2)

    @pytest.mark.asyncio
    async def test_commit_failure_keeps_previous_graph(self, store, document_id, bob_graph, jane_graph):
        await store.replace(document_id, bob_graph)
        before = await store.load(document_id)

        failing_commit = AsyncMock(side_effect=OperationalError("COMMIT", {}, Exception("disk I/O error")))
        with patch.object(AsyncSession, "commit", failing_commit):
            with pytest.raises(TransactionError) as exc_info:
                await store.replace(document_id, jane_graph)

        failing_commit.assert_awaited_once()
        assert isinstance(exc_info.value.__cause__, OperationalError)
        assert await store.load(document_id) == before

    @pytest.mark.asyncio
    async def test_rollback_failure_is_transaction_error(self, store, document_id, bob_graph, jane_graph):
        await store.replace(document_id, bob_graph)
        before = await store.load(document_id)
        jane_graph.edges.append(Edge(source="Jane", target="Ghost", relationship="KNOWS"))

        failing_rollback = AsyncMock(side_effect=OperationalError("ROLLBACK", {}, Exception("connection lost")))
        with patch.object(AsyncSession, "rollback", failing_rollback):
            with pytest.raises(TransactionError) as exc_info:
                await store.replace(document_id, jane_graph)

        assert isinstance(exc_info.value.__cause__, OperationalError)
        # closing the session discards the uncommitted work
        assert await store.load(document_id) == before


class TestDuplicateNames:
    """Duplicate node names: every row is stored, edges use the last one."""

    @pytest.mark.asyncio
    async def test_last_node_wins(self, store, session_factory, document_id):
        graph = Graph(
            nodes=[
                Node(label="Person", name="Jane", properties={"n": 1}),
                Node(label="Org", name="Acme"),
                Node(label="Person", name="Jane", properties={"n": 2}),
            ],
            edges=[Edge(source="Jane", target="Acme", relationship="WORKS_AT")],
        )

        await store.replace(document_id, graph)

        async with session_factory() as session:
            nodes = (await session.execute(
                select(DocumentNode).where(DocumentNode.document_id == document_id)
            )).scalars().all()
            edge = (await session.execute(
                select(DocumentEdge).where(DocumentEdge.document_id == document_id)
            )).scalar_one()

        janes = {node.properties["n"]: node.id for node in nodes if node.name == "Jane"}
        assert len(nodes) == 3
        assert edge.source_node_id == janes[2]


class TestMaintenance:
    """Test load(), count() and delete()."""

    @pytest.mark.asyncio
    async def test_load_unknown_document_is_empty(self, store):
        graph = await store.load(uuid4())

        assert graph.nodes == []
        assert graph.edges == []

    @pytest.mark.asyncio
    async def test_delete(self, store, document_id, bob_graph):
        await store.replace(document_id, bob_graph)

        removed = await store.delete(document_id)

        assert removed == 3
        assert await store.count(document_id) == (0, 0)

    @pytest.mark.asyncio
    async def test_delete_without_graph(self, store, document_id):
        assert await store.delete(document_id) == 0


class TestEdgeScope:
    """Edge endpoints are constrained to nodes of the edge's own document."""

    @pytest.mark.asyncio
    async def test_cross_document_edge_rejected(self, store, session_factory, documents, document_id, jane_graph, bob_graph):
        other_id = await documents.add("other.txt", content="Bob lives in Turin.")
        await store.replace(document_id, jane_graph)
        await store.replace(other_id, bob_graph)

        async with session_factory() as session:
            jane_id = (await session.execute(
                select(DocumentNode.id).where(DocumentNode.document_id == document_id, DocumentNode.name == "Jane")
            )).scalar_one()
            bob_id = (await session.execute(
                select(DocumentNode.id).where(DocumentNode.document_id == other_id, DocumentNode.name == "Bob")
            )).scalar_one()

            session.add(DocumentEdge(
                document_id=other_id,
                source_node_id=bob_id,
                target_node_id=jane_id,
                relationship="KNOWS",
                properties={},
            ))
            with pytest.raises(IntegrityError):
                await session.commit()
            await session.rollback()

        assert await store.count(other_id) == (3, 2)

    @pytest.mark.asyncio
    async def test_delete_removes_edges(self, store, session_factory, document_id, jane_graph):
        await store.replace(document_id, jane_graph)
        await store.delete(document_id)

        async with session_factory() as session:
            edges = (await session.execute(select(DocumentEdge))).scalars().all()

        assert edges == []
