"""
Graph Extractors
================

Strategies turning document text into a Graph.

- LLMGraphExtractor: one completion call, fence stripping, strict parsing
- FallbackGraphExtractor: fixed illustrative graph, used when no credential
  is configured so the pipeline runs without external services

create_extractor() picks the strategy from an injected LLMConfig.

Example:
    >>> extractor = create_extractor(LLMConfig(api_key=None))
    >>> graph = await extractor.extract("any text")
    >>> [n.name for n in graph.nodes]
    ['John Doe', 'Readur Corp']
"""

from abc import ABC, abstractmethod
from typing import Optional

import structlog

from docgraph.config import LLMConfig
from docgraph.extraction.client import CompletionClient
from docgraph.extraction.parsing import parse_graph
from docgraph.extraction.prompts import SYSTEM_PROMPT, build_extraction_prompt
from docgraph.graph.schema import Edge, Graph, Node

log = structlog.get_logger(__name__)


class GraphExtractor(ABC):
    """Interface for extraction strategies."""

    @abstractmethod
    async def extract(self, text: str) -> Graph:
        """
        Extract a graph from document text.

        Raises:
            ExtractionError: If the graph cannot be produced
        """


class LLMGraphExtractor(GraphExtractor):
    """
    Extract a graph with a single completion call.

    The text is cut to ``config.max_input_chars`` characters before being
    embedded in the prompt. Errors from the client (TransportError,
    UpstreamError) and from parsing (ParseError) propagate unchanged.
    """

    def __init__(self, client: CompletionClient, config: LLMConfig):
        self.client = client
        self.config = config

    async def extract(self, text: str) -> Graph:
        if len(text) > self.config.max_input_chars:
            log.info(
                "Truncating document text for extraction",
                original_chars=len(text),
                max_chars=self.config.max_input_chars,
            )

        prompt = build_extraction_prompt(text, self.config.max_input_chars)
        raw = await self.client.complete(system_prompt=SYSTEM_PROMPT, user_prompt=prompt)
        graph = parse_graph(raw)

        log.info(
            "Graph extracted",
            model=self.config.model,
            nodes=len(graph.nodes),
            edges=len(graph.edges),
        )
        return graph


class FallbackGraphExtractor(GraphExtractor):
    """Return the same illustrative graph for any input. Never fails."""

    async def extract(self, text: str) -> Graph:
        log.info("No completion credential configured, using fallback graph")
        return fallback_graph()


def fallback_graph() -> Graph:
    """Fixed graph returned by FallbackGraphExtractor (fresh copy per call)."""
    return Graph(
        nodes=[
            Node(label="Person", name="John Doe", properties={"role": "Engineer"}),
            Node(label="Company", name="Readur Corp", properties={"industry": "Tech"}),
        ],
        edges=[
            Edge(source="John Doe", target="Readur Corp", relationship="WORKS_FOR", properties={}),
        ],
    )


def create_extractor(config: LLMConfig, client: Optional[CompletionClient] = None) -> GraphExtractor:
    """
    Select the extraction strategy.

    Args:
        config: Completion settings; ``config.enabled`` selects the real extractor
        client: Optional pre-built client (a new one is created otherwise)

    Returns:
        LLMGraphExtractor if a credential is configured, else FallbackGraphExtractor
    """
    if not config.enabled:
        return FallbackGraphExtractor()
    return LLMGraphExtractor(client or CompletionClient(config), config)
