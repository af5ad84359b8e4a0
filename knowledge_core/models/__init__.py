"""
Domain models and API schemas.

Pydantic models shared across the core, service and API layers.
"""

from knowledge_core.models.knowledge import (
    ChunkOutcome,
    ChunkStatus,
    IndexResult,
    IndexStats,
    IndexStatus,
    MatchType,
    ReembedResult,
    SearchFilters,
    SearchResult,
    SourceMetadata,
    SourceType,
    parse_source_types,
)

__all__ = [
    "ChunkOutcome",
    "ChunkStatus",
    "IndexResult",
    "IndexStats",
    "IndexStatus",
    "MatchType",
    "ReembedResult",
    "SearchFilters",
    "SearchResult",
    "SourceMetadata",
    "SourceType",
    "parse_source_types",
]
