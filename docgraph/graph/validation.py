"""Structural validation of extracted graphs."""

from docgraph.exceptions import GraphValidationError
from docgraph.graph.schema import Graph


def validate_graph(graph: Graph) -> None:
    """
    Check that every edge names nodes present in the same graph.

    Pure function, never touches storage.

    Raises:
        GraphValidationError: listing every dangling ``(edge_index, role, name)``
    """
    dangling = graph.dangling_references()
    if dangling:
        raise GraphValidationError(dangling)
