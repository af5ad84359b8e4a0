"""
Knowledge domain models.

Source metadata, closed search filters, ranked results and per-item
indexing outcomes shared by the indexer, retriever and service layer.

Dependencies: pydantic, knowledge_core.core.exceptions
System role: Knowledge chunk data structures
"""

import enum
import uuid
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field, field_validator

from knowledge_core.core.exceptions import InvalidFilterError


class SourceType(str, enum.Enum):
    """
    Kind of study artifact a chunk was cut from.

    TRANSCRIPT: Lecture audio transcript segment
    SLIDE: OCR text of a single slide
    CORNELL_NOTE: Generated Cornell-style lesson notes
    SUMMARY: Generated lesson summary with key points
    """

    TRANSCRIPT = "transcript"
    SLIDE = "slide"
    CORNELL_NOTE = "cornell-note"
    SUMMARY = "summary"


def parse_source_types(values: Iterable[str | SourceType] | None) -> frozenset[SourceType]:
    """
    Convert caller-supplied source type names into a closed set.

    Args:
        values: Source type names or enum members (None or empty means "all")

    Returns:
        frozenset[SourceType]: Parsed source types

    Raises:
        InvalidFilterError: If any value is not a known source type
    """
    if not values:
        return frozenset()

    parsed = set()
    for value in values:
        try:
            parsed.add(SourceType(value))
        except ValueError:
            allowed = ", ".join(t.value for t in SourceType)
            raise InvalidFilterError(
                f"Unknown source type '{value}'. Must be one of: {allowed}",
                field="source_types",
                value=str(value),
            )
    return frozenset(parsed)


class SourceMetadata(BaseModel):
    """Natural key plus provenance attached to every chunk of one artifact."""

    source_type: SourceType = Field(description="Artifact kind")
    source_id: str = Field(min_length=1, max_length=255, description="Originating artifact ID")
    lesson_id: str | None = Field(default=None, max_length=255, description="Lesson filter reference")
    subject_id: str | None = Field(default=None, max_length=255, description="Subject filter reference")
    program_id: str | None = Field(default=None, max_length=255, description="Program filter reference")
    title: str | None = Field(default=None, max_length=512, description="Display label and lexical boost")
    tags: list[str] = Field(default_factory=list, description="Free-form categorization")

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, tags: list[str]) -> list[str]:
        """Tags are a set: strip, drop blanks, de-duplicate, sort."""
        return sorted({t.strip() for t in tags if t and t.strip()})


class SearchFilters(BaseModel):
    """
    Closed filter struct for hybrid search.

    Empty source_types means every source type. Hierarchy filters are
    exact-match on the stored reference.
    """

    model_config = ConfigDict(frozen=True)

    source_types: frozenset[SourceType] = Field(default_factory=frozenset)
    subject_id: str | None = None
    lesson_id: str | None = None
    program_id: str | None = None
    min_similarity: float = Field(default=0.2, ge=0.0, le=1.0)

    @classmethod
    def from_options(
        cls,
        source_types: Iterable[str | SourceType] | None = None,
        subject_id: str | None = None,
        lesson_id: str | None = None,
        program_id: str | None = None,
        min_similarity: float = 0.2,
    ) -> "SearchFilters":
        """
        Build validated filters from loosely-typed caller options.

        Raises:
            InvalidFilterError: Unknown source type or similarity outside [0, 1]
        """
        if not 0.0 <= min_similarity <= 1.0:
            raise InvalidFilterError(
                "min_similarity must be between 0.0 and 1.0",
                field="min_similarity",
                value=min_similarity,
            )
        return cls(
            source_types=parse_source_types(source_types),
            subject_id=subject_id or None,
            lesson_id=lesson_id or None,
            program_id=program_id or None,
            min_similarity=min_similarity,
        )


class MatchType(str, enum.Enum):
    """Retrieval channel that produced a result."""

    LEXICAL = "lexical"
    SEMANTIC = "semantic"


class SearchResult(BaseModel):
    """Single ranked chunk returned by hybrid search."""

    id: uuid.UUID
    content: str
    similarity: float
    match_type: MatchType
    source_type: SourceType
    source_id: str
    lesson_id: str | None = None
    subject_id: str | None = None
    program_id: str | None = None
    title: str | None = None
    tags: list[str] = Field(default_factory=list)

    @property
    def label(self) -> str:
        """Human label: title, else "{source_type}/{source_id}"."""
        return self.title or f"{self.source_type.value}/{self.source_id}"


class ChunkStatus(str, enum.Enum):
    """
    Per-chunk indexing outcome.

    EMBEDDED: Stored with its vector
    UNEMBEDDED: Stored without a vector; waits for the re-embed pass
    SKIPPED: Below minimum useful length, never stored
    """

    EMBEDDED = "embedded"
    UNEMBEDDED = "unembedded"
    SKIPPED = "skipped"


class ChunkOutcome(BaseModel):
    """Result of indexing one chunk of an artifact."""

    index: int = Field(description="Position of the piece in chunker output")
    status: ChunkStatus
    chunk_id: uuid.UUID | None = None
    token_count: int = 0
    error: str | None = None


class IndexStatus(str, enum.Enum):
    """
    Artifact-level indexing outcome.

    COMPLETE: Every stored chunk has an embedding
    PARTIAL: Stored, but some chunks still lack an embedding
    ALREADY_INDEXED: Natural key already present, nothing written
    SKIPPED_TOO_SHORT: Content below minimum useful length, nothing written
    """

    COMPLETE = "complete"
    PARTIAL = "partial"
    ALREADY_INDEXED = "already_indexed"
    SKIPPED_TOO_SHORT = "skipped_too_short"


class IndexResult(BaseModel):
    """Outcome of one index() call."""

    source_type: SourceType
    source_id: str
    status: IndexStatus
    chunk_ids: list[uuid.UUID] = Field(default_factory=list)
    outcomes: list[ChunkOutcome] = Field(default_factory=list)
    total_tokens: int = 0

    @property
    def embedded_count(self) -> int:
        return sum(1 for o in self.outcomes if o.status == ChunkStatus.EMBEDDED)

    @property
    def unembedded_count(self) -> int:
        return sum(1 for o in self.outcomes if o.status == ChunkStatus.UNEMBEDDED)


class ReembedResult(BaseModel):
    """Outcome of a re-embed pass over chunks missing vectors."""

    attempted: int = 0
    embedded: int = 0
    failed: int = 0
    completed_sources: int = 0


class IndexStats(BaseModel):
    """Aggregate counts over the knowledge store."""

    total_chunks: int
    by_source_type: dict[str, int]
    by_program: dict[str, int]
    missing_embeddings: int
    partial_sources: int
