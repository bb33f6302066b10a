# =============================================================================
# Graph Extraction Prompts
# =============================================================================
#
# Single-shot instruction prompt asking the model for a strict two-key JSON
# object:
#
#   {"nodes": [{"label", "name", "properties"}],
#    "edges": [{"source", "target", "relationship", "properties"}]}
#
# The document text is cut to a fixed prefix before it is embedded in the
# prompt (lossy truncation, not an error).
#
# =============================================================================

SYSTEM_PROMPT = "You are a helpful assistant that extracts knowledge graphs from text."

GRAPH_SHAPE = (
    "Return ONLY a JSON object with two keys: "
    "'nodes' (list of objects with 'label', 'name', 'properties') and "
    "'edges' (list of objects with 'source' (name), 'target' (name), "
    "'relationship', 'properties')."
)


def truncate_text(text: str, max_chars: int) -> str:
    """Return at most the first ``max_chars`` characters of ``text``."""
    if max_chars <= 0:
        return ""
    return text[:max_chars]


def build_extraction_prompt(text: str, max_chars: int = 4000) -> str:
    """
    Build the user prompt for graph extraction.

    Args:
        text: Document text (OCR or stored content)
        max_chars: Characters of ``text`` embedded in the prompt

    Returns:
        Formatted prompt string
    """
    excerpt = truncate_text(text, max_chars)
    return (
        "Extract entities (nodes) and relationships (edges) from the following "
        "text to build a knowledge graph. "
        f"{GRAPH_SHAPE} "
        "Every edge 'source' and 'target' must be the 'name' of a node in 'nodes'. "
        f"Text: {excerpt}"
    )
