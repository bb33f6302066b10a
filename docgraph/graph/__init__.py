"""
DocGraph Graph Schema
=====================

Components:
- Node, Edge, Graph: pydantic models for an extracted graph
- validate_graph: referential check of edges against nodes
"""

from docgraph.graph.schema import Node, Edge, Graph
from docgraph.graph.validation import validate_graph

__all__ = [
    "Node",
    "Edge",
    "Graph",
    "validate_graph",
]
