"""
Hybrid retriever.

Query + closed filters -> ranked chunk list. A lexical phase (substring hit
in content or title) runs first; a semantic phase (cosine similarity over a
bounded candidate window) fills the remaining slots. Lexical results are
inserted first and never overwritten by the semantic phase.

An embedding provider failure or a failed vector fetch never fails a search:
the semantic phase is skipped and the lexical results are returned as-is.

Dependencies: sqlalchemy, knowledge_core.boundary, knowledge_core.core.similarity
System role: Read side of the knowledge store
"""

import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_core.boundary.db.CRUD.knowledge_chunk_crud import KnowledgeChunkCRUD, knowledge_chunk_crud
from knowledge_core.boundary.db.models.knowledge_chunk_model import KnowledgeChunkModel
from knowledge_core.boundary.embeddings.embedding_client import EmbeddingClient
from knowledge_core.configs.retrieval import RetrievalSettings
from knowledge_core.core.exceptions import EmbeddingProviderError, RetrievalError, ValidationError
from knowledge_core.core.similarity import cosine_similarity
from knowledge_core.models.knowledge import MatchType, SearchFilters, SearchResult, SourceType

logger = logging.getLogger(__name__)


def to_search_result(chunk: KnowledgeChunkModel, similarity: float, match_type: MatchType) -> SearchResult:
    """Convert a stored chunk into a ranked result carrying its provenance."""
    return SearchResult(
        id=chunk.id,
        content=chunk.content,
        similarity=similarity,
        match_type=match_type,
        source_type=SourceType(chunk.source_type),
        source_id=chunk.source_id,
        lesson_id=chunk.lesson_id,
        subject_id=chunk.subject_id,
        program_id=chunk.program_id,
        title=chunk.title,
        tags=list(chunk.tags or []),
    )


class HybridRetriever:
    """Lexical-then-semantic retriever over the knowledge store."""

    def __init__(
        self,
        embedding_client: EmbeddingClient,
        settings: RetrievalSettings | None = None,
        chunk_crud: KnowledgeChunkCRUD = knowledge_chunk_crud,
    ) -> None:
        """
        Initialize retriever.

        Args:
            embedding_client: Capability used to embed the query
            settings: Scores, limits and candidate window (defaults if None)
            chunk_crud: Knowledge chunk persistence
        """
        self.embedding_client = embedding_client
        self.settings = settings or RetrievalSettings()
        self.chunk_crud = chunk_crud

    def _lexical_score(self, query: str, chunk: KnowledgeChunkModel) -> float:
        if chunk.title and query.lower() in chunk.title.lower():
            return self.settings.title_match_score
        return self.settings.content_match_score

    async def search(
        self,
        db: AsyncSession,
        query: str,
        filters: SearchFilters | None = None,
        limit: int | None = None,
    ) -> list[SearchResult]:
        """
        Search the knowledge store.

        Args:
            db: Async database session
            query: Search text (non-blank)
            filters: Closed filter struct (all sources if None)
            limit: Maximum results (configured default if None)

        Returns:
            list[SearchResult]: At most limit results, similarity non-increasing

        Raises:
            ValidationError: Blank query or limit out of range
            RetrievalError: If the lexical scan cannot read the store
        """
        query = (query or "").strip()
        if not query:
            raise ValidationError("Query cannot be empty", field="query")

        limit = self.settings.default_limit if limit is None else limit
        if not 1 <= limit <= self.settings.max_limit:
            raise ValidationError(
                f"limit must be between 1 and {self.settings.max_limit}",
                field="limit",
                details={"value": limit},
            )

        if filters is None:
            filters = SearchFilters(min_similarity=self.settings.min_similarity)

        merged: dict[uuid.UUID, SearchResult] = {}

        try:
            lexical = await self.chunk_crud.find_lexical(db, query, filters, limit * 2)
        except SQLAlchemyError as e:
            raise RetrievalError("Lexical search failed", details={"error": str(e)}) from e

        for chunk in lexical:
            merged[chunk.id] = to_search_result(chunk, self._lexical_score(query, chunk), MatchType.LEXICAL)

        if len(merged) < limit:
            await self._semantic_phase(db, query, filters, merged)

        ranked = sorted(merged.values(), key=lambda r: r.similarity, reverse=True)[:limit]
        logger.info(
            f"{__name__}:search - Search complete",
            extra={"lexical": len(lexical), "returned": len(ranked), "limit": limit},
        )
        return ranked

    async def _semantic_phase(
        self,
        db: AsyncSession,
        query: str,
        filters: SearchFilters,
        merged: dict[uuid.UUID, SearchResult],
    ) -> None:
        """Add semantic hits at or above min_similarity to merged, in place."""
        try:
            query_vector = await self.embedding_client.embed(query)
        except EmbeddingProviderError as e:
            logger.warning(
                f"{__name__}:search - Embedding unavailable, returning lexical results only",
                extra={"error": e.message},
            )
            return

        try:
            candidates = await self.chunk_crud.find_semantic_candidates(
                db, filters, list(merged.keys()), self.settings.candidate_window
            )
        except SQLAlchemyError as e:
            logger.warning(
                f"{__name__}:search - Semantic candidate scan failed, returning lexical results only",
                extra={"error": str(e)},
            )
            return

        mismatched = 0
        for chunk in candidates:
            if chunk.id in merged:
                continue
            if len(chunk.embedding) != len(query_vector):
                mismatched += 1
                continue
            similarity = cosine_similarity(query_vector, chunk.embedding)
            if similarity >= filters.min_similarity:
                merged[chunk.id] = to_search_result(chunk, similarity, MatchType.SEMANTIC)

        if mismatched:
            logger.warning(
                f"{__name__}:search - Skipped vectors from another embedding model",
                extra={"skipped": mismatched, "query_dimension": len(query_vector)},
            )
