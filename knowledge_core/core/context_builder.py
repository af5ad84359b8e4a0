"""
Context assembly for the answer generation step.

Formats ranked results into one provenance-tagged text block.
No truncation or re-ranking: length limits belong to the caller.

Dependencies: knowledge_core.models
System role: Last stage of retrieval, hands context to generation
"""

import math

from knowledge_core.models.knowledge import SearchResult

ENTRY_SEPARATOR = "\n\n---\n\n"


def similarity_percent(similarity: float) -> int:
    """Round similarity*100 half away from zero."""
    scaled = similarity * 100
    return int(math.floor(abs(scaled) + 0.5)) * (1 if scaled >= 0 else -1)


def format_entry(position: int, result: SearchResult) -> str:
    """Format a single numbered, labelled entry."""
    return (
        f"[{position}] ({result.label}, relevance: {similarity_percent(result.similarity)}%)\n"
        f"{result.content}"
    )


def build_context(results: list[SearchResult]) -> str:
    """
    Build the context block from search results in rank order.

    Args:
        results: Ranked search results

    Returns:
        str: Entries joined by ENTRY_SEPARATOR ("" for no results)
    """
    return ENTRY_SEPARATOR.join(
        format_entry(i, result) for i, result in enumerate(results, start=1)
    )
