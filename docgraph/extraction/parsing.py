"""
Model Output Parsing
====================

Turns the raw completion text into a Graph.

- strip_code_fences(): removes a leading ```` ``` ```` / ```` ```json ```` fence and a
  trailing ```` ``` ```` fence
- parse_graph(): strict JSON decode into the Graph shape

Malformed JSON or a shape mismatch raises ParseError; nothing is defaulted.
"""

import json
import re

from pydantic import ValidationError

from docgraph.exceptions import ParseError
from docgraph.graph.schema import Graph

_LEADING_FENCE = re.compile(r"^```[A-Za-z0-9_+-]*[ \t]*\r?\n?")
_TRAILING_FENCE = re.compile(r"\r?\n?```$")

PREVIEW_CHARS = 200


def strip_code_fences(raw: str) -> str:
    """
    Remove markdown code-fence markers around a model response.

    Example:
        >>> strip_code_fences('```json\\n{"nodes": [], "edges": []}\\n```')
        '{"nodes": [], "edges": []}'
    """
    cleaned = raw.strip()
    cleaned = _LEADING_FENCE.sub("", cleaned, count=1)
    cleaned = _TRAILING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def parse_graph(raw: str) -> Graph:
    """
    Parse a (possibly fence-wrapped) model response into a Graph.

    Args:
        raw: Completion text

    Returns:
        Graph

    Raises:
        ParseError: If the text is not JSON or does not match the Graph shape
    """
    cleaned = strip_code_fences(raw)
    preview = cleaned[:PREVIEW_CHARS]

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ParseError(f"Failed to parse graph JSON: {e}", preview=preview) from e

    if not isinstance(data, dict):
        raise ParseError(
            f"Expected a JSON object with 'nodes' and 'edges', got {type(data).__name__}",
            preview=preview,
        )

    try:
        return Graph.from_dict(data)
    except ValidationError as e:
        raise ParseError(f"Graph JSON does not match the expected shape: {e}", preview=preview) from e
