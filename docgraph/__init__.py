"""
DocGraph: knowledge graph extraction for stored documents
=========================================================

Extracts entities and relationships from document text with a language
model call and stores them in relational node/edge tables, replacing the
previous graph of the document atomically.

Quick Start:
    from docgraph import DocGraph, DocGraphConfig

    async with DocGraph(DocGraphConfig()) as dg:
        graph = await dg.analyze(document_id)
        print(graph.to_dict())

Components:
- graph: Node, Edge, Graph, validate_graph
- extraction: CompletionClient, LLMGraphExtractor, FallbackGraphExtractor
- storage: GraphStore, DocumentRepository
- core: GraphAnalyzer, DocGraph
"""

__version__ = "0.1.0"

from docgraph.config import DocGraphConfig, LLMConfig, DatabaseConfig
from docgraph.core import DocGraph, GraphAnalyzer
from docgraph.graph import Node, Edge, Graph, validate_graph

__all__ = [
    "DocGraph",
    "GraphAnalyzer",
    "DocGraphConfig",
    "LLMConfig",
    "DatabaseConfig",
    "Node",
    "Edge",
    "Graph",
    "validate_graph",
]
