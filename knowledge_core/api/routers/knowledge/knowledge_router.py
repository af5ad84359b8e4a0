"""
Knowledge API endpoints.

Routes:
- POST /knowledge/search - Hybrid search with optional context block
- GET /knowledge/stats - Index statistics
- POST /knowledge/index - Index one finalized artifact
- POST /knowledge/refresh - Re-index an artifact whose content changed
- DELETE /knowledge/sources/{source_type}/{source_id} - Delete an indexed artifact
- POST /knowledge/reembed - Attach missing embeddings

Dependencies: knowledge_core.application.services, knowledge_core.models
System role: Knowledge HTTP API
"""

import logging

from fastapi import APIRouter, Depends

from knowledge_core.api.deps.dependencies import get_knowledge_service, get_settings_dependency
from knowledge_core.application.services.knowledge_service import KnowledgeService
from knowledge_core.configs import Settings
from knowledge_core.models.knowledge import IndexStats, ReembedResult
from knowledge_core.models.search import (
    DeleteSourceResponse,
    IndexRequest,
    IndexResponse,
    SearchRequest,
    SearchResponse,
)

from .knowledge_error_handling import handle_knowledge_errors
from .knowledge_validators import (
    validate_index_request,
    validate_reembed_limit,
    validate_search_request,
    validate_source_type,
)
from .knowledge_responses import (
    map_delete_to_response,
    map_index_result_to_response,
    map_search_to_response,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/knowledge", tags=["knowledge"])


@router.post("/search", response_model=SearchResponse)
@handle_knowledge_errors
async def search_knowledge(
    request: SearchRequest,
    knowledge_service: KnowledgeService = Depends(get_knowledge_service),
    settings: Settings = Depends(get_settings_dependency),
) -> SearchResponse:
    """
    Hybrid search over indexed study material.

    Args:
        request: SearchRequest with query, limit, filters, include_context
        knowledge_service: Injected KnowledgeService
        settings: Injected application settings

    Returns:
        SearchResponse: Truncated results, total count and optional context

    Raises:
        HTTPException(400): Invalid query, limit or filter
        HTTPException(500): Store unavailable
    """
    filters, limit = validate_search_request(request, settings.retrieval)

    logger.info(
        "Searching knowledge",
        extra={"limit": limit, "source_types": sorted(t.value for t in filters.source_types)},
    )

    search_data = await knowledge_service.search(request.query, filters=filters, limit=limit)
    context = knowledge_service.build_context(search_data["results"]) if request.include_context else None

    return map_search_to_response(
        request.query,
        search_data,
        preview_chars=settings.retrieval.preview_chars,
        context=context,
    )


@router.get("/stats", response_model=IndexStats)
@handle_knowledge_errors
async def get_stats(
    knowledge_service: KnowledgeService = Depends(get_knowledge_service),
) -> IndexStats:
    """Index statistics: totals by source type and program, embedding gaps."""
    return await knowledge_service.get_index_stats()


@router.post("/index", response_model=IndexResponse)
@handle_knowledge_errors
async def index_knowledge(
    request: IndexRequest,
    knowledge_service: KnowledgeService = Depends(get_knowledge_service),
) -> IndexResponse:
    """
    Index one finalized artifact.

    Already-indexed and too-short artifacts are reported through the
    response status, not as errors.

    Raises:
        HTTPException(400): Unknown source type
        HTTPException(500): Store write failed
    """
    metadata = validate_index_request(request)

    logger.info(
        "Indexing knowledge source",
        extra={"source_type": metadata.source_type.value, "source_id": metadata.source_id},
    )

    result = await knowledge_service.index_content(request.content, metadata)
    return map_index_result_to_response(result)


@router.post("/refresh", response_model=IndexResponse)
@handle_knowledge_errors
async def refresh_knowledge(
    request: IndexRequest,
    knowledge_service: KnowledgeService = Depends(get_knowledge_service),
) -> IndexResponse:
    """
    Re-index an artifact if its content differs from what was indexed.

    Unchanged content comes back as already_indexed.

    Raises:
        HTTPException(400): Unknown source type
        HTTPException(500): Store write failed
    """
    metadata = validate_index_request(request)
    result = await knowledge_service.refresh_content(request.content, metadata)
    return map_index_result_to_response(result)


@router.delete("/sources/{source_type}/{source_id}", response_model=DeleteSourceResponse)
@handle_knowledge_errors
async def delete_source(
    source_type: str,
    source_id: str,
    knowledge_service: KnowledgeService = Depends(get_knowledge_service),
) -> DeleteSourceResponse:
    """
    Delete every chunk of an artifact so it can be indexed again.

    Raises:
        HTTPException(400): Unknown source type
        HTTPException(404): Source not indexed
    """
    parsed_type = validate_source_type(source_type)
    deleted = await knowledge_service.delete_source(parsed_type, source_id)

    logger.info(
        "Knowledge source deleted",
        extra={"source_type": source_type, "source_id": source_id, "deleted": deleted},
    )
    return map_delete_to_response(parsed_type, source_id, deleted)


@router.post("/reembed", response_model=ReembedResult)
@handle_knowledge_errors
async def reembed_missing(
    limit: int = 100,
    knowledge_service: KnowledgeService = Depends(get_knowledge_service),
) -> ReembedResult:
    """Attach embeddings to chunks that were stored without one."""
    return await knowledge_service.reembed_missing(limit=validate_reembed_limit(limit))
