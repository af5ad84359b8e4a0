"""
Knowledge response mapping utilities.

Transforms domain results into Pydantic response models. Search previews
are truncated here; the context block is built from untruncated results.

Dependencies: knowledge_core.models
System role: Knowledge response transformation
"""

from knowledge_core.models.knowledge import IndexResult, SearchResult, SourceType
from knowledge_core.models.search import (
    DeleteSourceResponse,
    IndexResponse,
    SearchResponse,
    SearchResultResponse,
)


def truncate_preview(content: str, preview_chars: int) -> str:
    """Cut content to preview_chars, marking the cut with '...'."""
    if len(content) <= preview_chars:
        return content
    return content[:preview_chars] + "..."


def map_result_to_response(result: SearchResult, preview_chars: int) -> SearchResultResponse:
    """
    Transform a SearchResult into a SearchResultResponse.

    Args:
        result: Ranked search result
        preview_chars: Maximum content characters before truncation

    Returns:
        SearchResultResponse: Pydantic model for API response
    """
    return SearchResultResponse(
        id=result.id,
        content=truncate_preview(result.content, preview_chars),
        similarity=result.similarity,
        match_type=result.match_type,
        source_type=result.source_type.value,
        source_id=result.source_id,
        lesson_id=result.lesson_id,
        subject_id=result.subject_id,
        program_id=result.program_id,
        title=result.title,
        tags=result.tags,
    )


def map_search_to_response(
    query: str,
    search_data: dict,
    preview_chars: int,
    context: str | None = None,
) -> SearchResponse:
    """
    Transform service search output into SearchResponse.

    Args:
        query: Original query text
        search_data: {"results": [...], "total_results": int} from KnowledgeService.search
        preview_chars: Maximum content characters per result
        context: Optional context block

    Returns:
        SearchResponse: Pydantic model for API response
    """
    return SearchResponse(
        query=query,
        results=[map_result_to_response(r, preview_chars) for r in search_data["results"]],
        total_results=search_data["total_results"],
        context=context,
    )


def map_index_result_to_response(result: IndexResult) -> IndexResponse:
    """Transform an IndexResult into IndexResponse."""
    return IndexResponse(
        source_type=result.source_type.value,
        source_id=result.source_id,
        status=result.status,
        chunk_ids=result.chunk_ids,
        embedded=result.embedded_count,
        unembedded=result.unembedded_count,
        outcomes=result.outcomes,
    )


def map_delete_to_response(source_type: SourceType, source_id: str, deleted: int) -> DeleteSourceResponse:
    """Build the delete-by-source response."""
    return DeleteSourceResponse(source_type=source_type.value, source_id=source_id, deleted=deleted)
