"""
DocGraph Extraction
===================

Document text -> Graph, via a completion service or a fixed fallback.

Example:
    from docgraph.config import LLMConfig
    from docgraph.extraction import create_extractor

    extractor = create_extractor(LLMConfig())
    graph = await extractor.extract(text)
"""

from docgraph.extraction.client import CompletionClient
from docgraph.extraction.extractors import (
    GraphExtractor,
    LLMGraphExtractor,
    FallbackGraphExtractor,
    create_extractor,
    fallback_graph,
)
from docgraph.extraction.parsing import parse_graph, strip_code_fences
from docgraph.extraction.prompts import SYSTEM_PROMPT, build_extraction_prompt, truncate_text

__all__ = [
    "CompletionClient",
    "GraphExtractor",
    "LLMGraphExtractor",
    "FallbackGraphExtractor",
    "create_extractor",
    "fallback_graph",
    "parse_graph",
    "strip_code_fences",
    "SYSTEM_PROMPT",
    "build_extraction_prompt",
    "truncate_text",
]
