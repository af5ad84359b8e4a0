"""
Knowledge chunk CRUD operations.

Provides natural-key lookups, filtered lexical and semantic-candidate
queries, re-embed helpers and aggregate counts for KnowledgeChunkModel.

Dependencies: sqlalchemy, knowledge_core.boundary.db.models
System role: Knowledge chunk persistence and retrieval queries
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_core.boundary.db.CRUD.base_crud import BaseCRUD
from knowledge_core.boundary.db.models.knowledge_chunk_model import KnowledgeChunkModel
from knowledge_core.models.knowledge import SearchFilters, SourceType


class KnowledgeChunkCRUD(BaseCRUD[KnowledgeChunkModel]):
    """
    CRUD operations for KnowledgeChunkModel.

    Extends BaseCRUD with natural-key access, filter-restricted search
    queries and the aggregates behind index statistics.
    """

    def __init__(self) -> None:
        """Initialize KnowledgeChunkCRUD with KnowledgeChunkModel."""
        super().__init__(KnowledgeChunkModel)

    def _apply_filters(self, stmt: Select, filters: SearchFilters) -> Select:
        """Restrict a select to the closed filter struct."""
        if filters.source_types:
            stmt = stmt.where(KnowledgeChunkModel.source_type.in_(sorted(filters.source_types)))
        if filters.subject_id:
            stmt = stmt.where(KnowledgeChunkModel.subject_id == filters.subject_id)
        if filters.lesson_id:
            stmt = stmt.where(KnowledgeChunkModel.lesson_id == filters.lesson_id)
        if filters.program_id:
            stmt = stmt.where(KnowledgeChunkModel.program_id == filters.program_id)
        return stmt

    async def exists_for_source(
        self,
        session: AsyncSession,
        source_type: SourceType,
        source_id: str,
    ) -> bool:
        """
        Check whether any chunk is stored under a natural key.

        Args:
            session: Async database session
            source_type: Artifact kind
            source_id: Originating artifact ID

        Returns:
            True if at least one chunk exists
        """
        stmt = (
            select(KnowledgeChunkModel.id)
            .where(
                KnowledgeChunkModel.source_type == source_type,
                KnowledgeChunkModel.source_id == source_id,
            )
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def get_by_source(
        self,
        session: AsyncSession,
        source_type: SourceType,
        source_id: str,
    ) -> Sequence[KnowledgeChunkModel]:
        """
        Retrieve every chunk of one artifact in chunker order.

        Args:
            session: Async database session
            source_type: Artifact kind
            source_id: Originating artifact ID

        Returns:
            Sequence of KnowledgeChunkModels ordered by chunk_index
        """
        stmt = (
            select(KnowledgeChunkModel)
            .where(
                KnowledgeChunkModel.source_type == source_type,
                KnowledgeChunkModel.source_id == source_id,
            )
            .order_by(KnowledgeChunkModel.chunk_index)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def delete_by_source(
        self,
        session: AsyncSession,
        source_type: SourceType,
        source_id: str,
    ) -> int:
        """
        Delete every chunk of one artifact.

        Args:
            session: Async database session
            source_type: Artifact kind
            source_id: Originating artifact ID

        Returns:
            Number of deleted chunks
        """
        stmt = delete(KnowledgeChunkModel).where(
            KnowledgeChunkModel.source_type == source_type,
            KnowledgeChunkModel.source_id == source_id,
        )
        result = await session.execute(stmt)
        return result.rowcount or 0

    async def find_lexical(
        self,
        session: AsyncSession,
        query: str,
        filters: SearchFilters,
        limit: int,
    ) -> Sequence[KnowledgeChunkModel]:
        """
        Case-insensitive substring match against content or title.

        LIKE wildcards in the query are escaped, so "%" and "_" match
        literally.

        Args:
            session: Async database session
            query: Search text
            filters: Closed filter struct
            limit: Maximum rows to return

        Returns:
            Sequence of matching KnowledgeChunkModels
        """
        stmt = select(KnowledgeChunkModel).where(
            or_(
                KnowledgeChunkModel.content.icontains(query, autoescape=True),
                KnowledgeChunkModel.title.icontains(query, autoescape=True),
            )
        )
        stmt = self._apply_filters(stmt, filters)
        stmt = stmt.order_by(KnowledgeChunkModel.created_at, KnowledgeChunkModel.chunk_index).limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def find_semantic_candidates(
        self,
        session: AsyncSession,
        filters: SearchFilters,
        exclude_ids: Sequence[UUID],
        window: int,
    ) -> Sequence[KnowledgeChunkModel]:
        """
        Bounded window of embedded chunks eligible for cosine scoring.

        Args:
            session: Async database session
            filters: Closed filter struct
            exclude_ids: Chunk IDs already matched lexically
            window: Maximum candidates to return

        Returns:
            Sequence of KnowledgeChunkModels with a non-null embedding
        """
        stmt = select(KnowledgeChunkModel).where(KnowledgeChunkModel.embedding.is_not(None))
        if exclude_ids:
            stmt = stmt.where(KnowledgeChunkModel.id.not_in(exclude_ids))
        stmt = self._apply_filters(stmt, filters)
        stmt = stmt.order_by(KnowledgeChunkModel.created_at.desc()).limit(window)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_missing_embeddings(
        self,
        session: AsyncSession,
        limit: int,
    ) -> Sequence[KnowledgeChunkModel]:
        """
        Retrieve chunks that were stored without an embedding.

        Args:
            session: Async database session
            limit: Maximum rows to return

        Returns:
            Sequence of KnowledgeChunkModels, oldest first
        """
        stmt = (
            select(KnowledgeChunkModel)
            .where(KnowledgeChunkModel.embedding.is_(None))
            .order_by(KnowledgeChunkModel.created_at, KnowledgeChunkModel.chunk_index)
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def set_embedding(
        self,
        session: AsyncSession,
        id: UUID,
        embedding: list[float],
        embedding_model: str,
    ) -> bool:
        """
        Attach a vector to a chunk that has none.

        Args:
            session: Async database session
            id: Chunk UUID
            embedding: Vector to store
            embedding_model: Model that produced the vector

        Returns:
            True if the chunk was updated
        """
        stmt = (
            update(KnowledgeChunkModel)
            .where(KnowledgeChunkModel.id == id, KnowledgeChunkModel.embedding.is_(None))
            .values(embedding=embedding, embedding_model=embedding_model)
        )
        result = await session.execute(stmt)
        return result.rowcount > 0

    async def count_for_source(
        self,
        session: AsyncSession,
        source_type: SourceType,
        source_id: str,
        missing_only: bool = False,
    ) -> int:
        """
        Count chunks of one artifact.

        Args:
            session: Async database session
            source_type: Artifact kind
            source_id: Originating artifact ID
            missing_only: Only count chunks without an embedding

        Returns:
            Number of matching chunks
        """
        stmt = select(func.count()).select_from(KnowledgeChunkModel).where(
            KnowledgeChunkModel.source_type == source_type,
            KnowledgeChunkModel.source_id == source_id,
        )
        if missing_only:
            stmt = stmt.where(KnowledgeChunkModel.embedding.is_(None))
        result = await session.execute(stmt)
        return result.scalar_one()

    async def count_missing_embeddings(self, session: AsyncSession) -> int:
        """Count chunks stored without an embedding."""
        stmt = (
            select(func.count())
            .select_from(KnowledgeChunkModel)
            .where(KnowledgeChunkModel.embedding.is_(None))
        )
        result = await session.execute(stmt)
        return result.scalar_one()

    async def count_by_source_type(self, session: AsyncSession) -> dict[str, int]:
        """
        Count chunks grouped by source type.

        Returns:
            Mapping of source type value to chunk count
        """
        stmt = select(KnowledgeChunkModel.source_type, func.count()).group_by(
            KnowledgeChunkModel.source_type
        )
        result = await session.execute(stmt)
        return {SourceType(source_type).value: count for source_type, count in result.all()}

    async def count_by_program(self, session: AsyncSession) -> dict[str, int]:
        """
        Count chunks grouped by program.

        Chunks without a program are omitted.

        Returns:
            Mapping of program ID to chunk count
        """
        stmt = (
            select(KnowledgeChunkModel.program_id, func.count())
            .where(KnowledgeChunkModel.program_id.is_not(None))
            .group_by(KnowledgeChunkModel.program_id)
        )
        result = await session.execute(stmt)
        return {program_id: count for program_id, count in result.all()}


knowledge_chunk_crud = KnowledgeChunkCRUD()
