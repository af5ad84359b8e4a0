"""
Knowledge service orchestrator.

Coordinates hybrid search, artifact indexing and refresh, deletion,
re-embedding and index statistics for one request-scoped database session.

Dependencies: knowledge_core.core, knowledge_core.boundary.db.CRUD
System role: Knowledge use case orchestration
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_core.boundary.db.CRUD.indexed_source_crud import indexed_source_crud
from knowledge_core.boundary.db.CRUD.knowledge_chunk_crud import knowledge_chunk_crud
from knowledge_core.boundary.db.models.indexed_source_model import SourceStatus
from knowledge_core.core.context_builder import build_context
from knowledge_core.core.exceptions import SourceNotFoundError
from knowledge_core.core.indexer import Indexer
from knowledge_core.core.retriever import HybridRetriever
from knowledge_core.models.knowledge import (
    IndexResult,
    IndexStats,
    IndexStatus,
    ReembedResult,
    SearchFilters,
    SearchResult,
    SourceMetadata,
    SourceType,
)

logger = logging.getLogger(__name__)


class KnowledgeService:
    """Knowledge service orchestrator."""

    def __init__(self, db: AsyncSession, indexer: Indexer, retriever: HybridRetriever) -> None:
        """
        Initialize knowledge service.

        Args:
            db: Async SQLAlchemy session
            indexer: Artifact indexer (shares the process embedding client)
            retriever: Hybrid retriever (shares the process embedding client)
        """
        self.db = db
        self.indexer = indexer
        self.retriever = retriever

    async def search(
        self,
        query: str,
        filters: SearchFilters | None = None,
        limit: int | None = None,
    ) -> dict:
        """
        Run hybrid search.

        Args:
            query: Search text
            filters: Closed filter struct
            limit: Maximum results

        Returns:
            dict: {"results": list[SearchResult], "total_results": int}

        Raises:
            ValidationError: Blank query or bad limit
            RetrievalError: Store unavailable
        """
        results = await self.retriever.search(self.db, query, filters=filters, limit=limit)
        return {"results": results, "total_results": len(results)}

    def build_context(self, results: list[SearchResult]) -> str:
        """Format results into the provenance-tagged context block."""
        return build_context(results)

    async def index_content(self, content: str, metadata: SourceMetadata) -> IndexResult:
        """
        Index one finalized artifact.

        Raises:
            IndexingError: If the store rejects the write
        """
        return await self.indexer.index(self.db, content, metadata)

    async def refresh_content(self, content: str, metadata: SourceMetadata) -> IndexResult:
        """
        Re-index an artifact only if its content changed since it was indexed.

        Unchanged content is reported as ALREADY_INDEXED without touching the
        store; changed or never-indexed content is deleted and indexed again.

        Raises:
            IndexingError: If the store rejects the write
        """
        if not await self.indexer.is_stale(self.db, metadata.source_type, metadata.source_id, content):
            return IndexResult(
                source_type=metadata.source_type,
                source_id=metadata.source_id,
                status=IndexStatus.ALREADY_INDEXED,
            )

        logger.info(
            f"{__name__}:refresh_content - Content changed, re-indexing",
            extra={"source_type": metadata.source_type.value, "source_id": metadata.source_id},
        )
        return await self.indexer.reindex(self.db, content, metadata)

    async def delete_source(self, source_type: SourceType, source_id: str) -> int:
        """
        Delete an indexed artifact so it can be indexed again.

        Returns:
            int: Number of deleted chunks

        Raises:
            SourceNotFoundError: If nothing is indexed under the natural key
        """
        if not await self.indexer.is_indexed(self.db, source_type, source_id):
            raise SourceNotFoundError(source_type.value, source_id)
        return await self.indexer.delete_by_source(self.db, source_type, source_id)

    async def reembed_missing(self, limit: int = 100) -> ReembedResult:
        """Attach embeddings to chunks stored without one."""
        return await self.indexer.reembed_missing(self.db, limit=limit)

    async def get_index_stats(self) -> IndexStats:
        """
        Aggregate counts over the knowledge store.

        Returns:
            IndexStats: Totals by source type and program, plus embedding gaps
        """
        return IndexStats(
            total_chunks=await knowledge_chunk_crud.count(self.db),
            by_source_type=await knowledge_chunk_crud.count_by_source_type(self.db),
            by_program=await knowledge_chunk_crud.count_by_program(self.db),
            missing_embeddings=await knowledge_chunk_crud.count_missing_embeddings(self.db),
            partial_sources=await indexed_source_crud.count_by_status(self.db, SourceStatus.PARTIAL),
        )
