"""
Knowledge API request/response schemas.

Request/response contracts for search, indexing, deletion and stats.

Dependencies: pydantic, knowledge_core.models.knowledge
System role: Knowledge API contracts
"""

import uuid

from pydantic import BaseModel, Field

from knowledge_core.models.knowledge import (
    ChunkOutcome,
    IndexStatus,
    MatchType,
)


class SearchFiltersRequest(BaseModel):
    """Loosely-typed filters as sent by clients; validated into SearchFilters."""

    source_types: list[str] | None = Field(default=None, description="Restrict to these source types")
    subject_id: str | None = Field(default=None, description="Restrict to one subject")
    lesson_id: str | None = Field(default=None, description="Restrict to one lesson")
    program_id: str | None = Field(default=None, description="Restrict to one program")
    min_similarity: float | None = Field(
        default=None,
        description="Semantic threshold (defaults to configured value)",
    )


class SearchRequest(BaseModel):
    """Request schema for hybrid knowledge search."""

    query: str = Field(..., min_length=1, max_length=2000, description="Search text")
    limit: int | None = Field(default=None, ge=1, description="Maximum results")
    filters: SearchFiltersRequest = Field(default_factory=SearchFiltersRequest)
    include_context: bool = Field(
        default=False,
        description="Also return the provenance-tagged context block",
    )


class SearchResultResponse(BaseModel):
    """Single search hit with truncated content preview."""

    id: uuid.UUID
    content: str
    similarity: float
    match_type: MatchType
    source_type: str
    source_id: str
    lesson_id: str | None
    subject_id: str | None
    program_id: str | None
    title: str | None
    tags: list[str]


class SearchResponse(BaseModel):
    """Response schema for hybrid knowledge search."""

    query: str
    results: list[SearchResultResponse]
    total_results: int
    context: str | None = None


class IndexRequest(BaseModel):
    """Request schema for indexing one finalized artifact."""

    content: str = Field(..., description="Full artifact text")
    source_type: str = Field(..., description="transcript | slide | cornell-note | summary")
    source_id: str = Field(..., min_length=1, max_length=255)
    lesson_id: str | None = None
    subject_id: str | None = None
    program_id: str | None = None
    title: str | None = Field(default=None, max_length=512)
    tags: list[str] = Field(default_factory=list)


class IndexResponse(BaseModel):
    """Response schema for indexing."""

    source_type: str
    source_id: str
    status: IndexStatus
    chunk_ids: list[uuid.UUID]
    embedded: int
    unembedded: int
    outcomes: list[ChunkOutcome]


class DeleteSourceResponse(BaseModel):
    """Response schema for delete-by-source."""

    source_type: str
    source_id: str
    deleted: int
