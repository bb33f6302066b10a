"""
Graph Schema
============

Data contract for an extracted document graph.

- Node: labeled, named entity with free-form properties
- Edge: directed relationship between two node *names*
- Graph: ordered nodes + ordered edges

Edges reference nodes by name, never by persisted id; names are resolved to
ids only inside GraphStore.replace().

Example:
    >>> graph = Graph.from_json('{"nodes": [], "edges": []}')
    >>> graph.to_dict()
    {'nodes': [], 'edges': []}
"""

from collections import Counter
from typing import Any, Dict, List, Set, Tuple

from pydantic import BaseModel, Field, StrictStr, field_validator


class _Element(BaseModel):
    properties: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("properties", mode="before")
    @classmethod
    def _null_properties(cls, value: Any) -> Any:
        # Models often emit "properties": null for "no properties"
        return {} if value is None else value


class Node(_Element):
    """An entity extracted from text (e.g. Person "Jane")."""

    label: StrictStr
    name: StrictStr


class Edge(_Element):
    """A directed relationship ``source -[relationship]-> target`` between node names."""

    source: StrictStr
    target: StrictStr
    relationship: StrictStr


class Graph(BaseModel):
    """Nodes and edges extracted from one document."""

    nodes: List[Node]
    edges: List[Edge]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Graph":
        return cls.model_validate(data)

    @classmethod
    def from_json(cls, raw: str) -> "Graph":
        return cls.model_validate_json(raw)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable ``{"nodes": [...], "edges": [...]}``."""
        return self.model_dump(mode="json")

    def node_names(self) -> Set[str]:
        return {node.name for node in self.nodes}

    def duplicate_names(self) -> List[str]:
        """Node names occurring more than once, sorted."""
        counts = Counter(node.name for node in self.nodes)
        return sorted(name for name, count in counts.items() if count > 1)

    def dangling_references(self) -> List[Tuple[int, str, str]]:
        """
        Edge endpoints that name no node of this graph.

        Returns:
            List of ``(edge_index, role, name)`` with role ``"source"`` or
            ``"target"``, in edge order.
        """
        names = self.node_names()
        dangling = []
        for index, edge in enumerate(self.edges):
            if edge.source not in names:
                dangling.append((index, "source", edge.source))
            if edge.target not in names:
                dangling.append((index, "target", edge.target))
        return dangling
