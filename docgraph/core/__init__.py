"""
DocGraph Core
=============

Orchestration layer: the analyze pipeline and the service façade.

    from docgraph import DocGraph

    async with DocGraph() as dg:
        graph = await dg.analyze(document_id)
"""

from .analyzer import GraphAnalyzer
from .docgraph import DocGraph

__all__ = [
    "GraphAnalyzer",
    "DocGraph",
]
