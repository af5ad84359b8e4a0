"""
Knowledge validation utilities.

Turns loosely-typed request bodies into the closed domain structs before any
store access. Unknown source types and out-of-range values are rejected here.

Dependencies: knowledge_core.models, knowledge_core.configs
System role: Knowledge request validation
"""

from knowledge_core.configs.retrieval import RetrievalSettings
from knowledge_core.core.exceptions import InvalidFilterError, ValidationError
from knowledge_core.models.knowledge import SearchFilters, SourceMetadata, SourceType, parse_source_types
from knowledge_core.models.search import IndexRequest, SearchRequest


def validate_search_request(request: SearchRequest, settings: RetrievalSettings) -> tuple[SearchFilters, int]:
    """
    Validate a search request.

    Args:
        request: Raw search request
        settings: Retrieval defaults and bounds

    Returns:
        tuple[SearchFilters, int]: Closed filters and effective limit

    Raises:
        ValidationError: Blank query or limit above the configured maximum
        InvalidFilterError: Unknown source type or similarity outside [0, 1]
    """
    if not request.query.strip():
        raise ValidationError("Query cannot be empty or whitespace-only", field="query")

    limit = request.limit if request.limit is not None else settings.default_limit
    if limit > settings.max_limit:
        raise ValidationError(
            f"limit cannot exceed {settings.max_limit}",
            field="limit",
            details={"value": limit},
        )

    raw = request.filters
    min_similarity = raw.min_similarity if raw.min_similarity is not None else settings.min_similarity
    filters = SearchFilters.from_options(
        source_types=raw.source_types,
        subject_id=raw.subject_id,
        lesson_id=raw.lesson_id,
        program_id=raw.program_id,
        min_similarity=min_similarity,
    )
    return filters, limit


def validate_source_type(value: str) -> SourceType:
    """
    Parse a single source type name.

    Raises:
        InvalidFilterError: If the name is not a known source type
    """
    (source_type,) = parse_source_types([value])
    return source_type


def validate_index_request(request: IndexRequest) -> SourceMetadata:
    """
    Validate an index request and extract its source metadata.

    Raises:
        InvalidFilterError: Unknown source type
        ValidationError: Blank source_id
    """
    source_type = validate_source_type(request.source_type)
    if not request.source_id.strip():
        raise ValidationError("source_id cannot be empty or whitespace-only", field="source_id")

    return SourceMetadata(
        source_type=source_type,
        source_id=request.source_id.strip(),
        lesson_id=request.lesson_id,
        subject_id=request.subject_id,
        program_id=request.program_id,
        title=request.title,
        tags=request.tags,
    )


def validate_reembed_limit(limit: int) -> int:
    """Re-embed passes are bounded to 1..1000 chunks."""
    if not 1 <= limit <= 1000:
        raise InvalidFilterError("limit must be between 1 and 1000", field="limit", value=limit)
    return limit
