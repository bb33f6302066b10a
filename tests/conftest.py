"""
DocGraph Test Configuration
===========================

Shared fixtures for all tests.

Database fixtures use an in-memory SQLite database (aiosqlite, single shared
connection) created fresh for each test.
"""

import pytest
import pytest_asyncio

from docgraph.config import DatabaseConfig, LLMConfig
from docgraph.graph import Edge, Graph, Node
from docgraph.storage import (
    DocumentRepository,
    GraphStore,
    create_engine,
    create_session_factory,
    init_db,
)


# Config fixtures
@pytest.fixture
def llm_config():
    """Completion settings with a credential, pointing at a fake endpoint."""
    return LLMConfig(
        api_key="sk-test",
        api_url="https://llm.example.com/v1/chat/completions",
        model="test-model",
        temperature=0.0,
        timeout_seconds=5,
        max_input_chars=4000,
    )


@pytest.fixture
def memory_db_config():
    return DatabaseConfig(url="sqlite+aiosqlite:///:memory:", echo=False)


# Database fixtures
@pytest_asyncio.fixture
async def engine(memory_db_config):
    """Fresh in-memory database with all tables created."""
    engine = create_engine(memory_db_config)
    await init_db(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def documents(session_factory):
    return DocumentRepository(session_factory)


@pytest.fixture
def store(session_factory):
    return GraphStore(session_factory)


@pytest_asyncio.fixture
async def document_id(documents):
    """Id of a stored document with plain content."""
    return await documents.add("memo.txt", content="Jane works at Acme.")


# Sample data fixtures
@pytest.fixture
def jane_graph():
    """Graph for "Jane works at Acme."."""
    return Graph(
        nodes=[
            Node(label="Person", name="Jane", properties={}),
            Node(label="Org", name="Acme", properties={}),
        ],
        edges=[
            Edge(source="Jane", target="Acme", relationship="WORKS_AT", properties={}),
        ],
    )


@pytest.fixture
def jane_json():
    """Model output for "Jane works at Acme.", wrapped in a json fence."""
    return (
        "```json\n"
        '{"nodes":[{"label":"Person","name":"Jane","properties":{}},'
        '{"label":"Org","name":"Acme","properties":{}}],'
        '"edges":[{"source":"Jane","target":"Acme","relationship":"WORKS_AT","properties":{}}]}\n'
        "```"
    )


@pytest.fixture
def bob_graph():
    """A second, unrelated graph."""
    return Graph(
        nodes=[
            Node(label="Person", name="Bob", properties={"age": 41}),
            Node(label="City", name="Turin", properties={"country": "IT"}),
            Node(label="Org", name="Fiat", properties={}),
        ],
        edges=[
            Edge(source="Bob", target="Turin", relationship="LIVES_IN", properties={"since": 1999}),
            Edge(source="Bob", target="Fiat", relationship="WORKS_FOR", properties={}),
        ],
    )
