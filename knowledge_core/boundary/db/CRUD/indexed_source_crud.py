"""
Indexed source CRUD operations.

Claim-row access by natural key and status bookkeeping for
IndexedSourceModel.

Dependencies: sqlalchemy, knowledge_core.boundary.db.models
System role: Idempotency and completeness tracking persistence
"""

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_core.boundary.db.CRUD.base_crud import BaseCRUD
from knowledge_core.boundary.db.models.indexed_source_model import IndexedSourceModel, SourceStatus
from knowledge_core.models.knowledge import SourceType


class IndexedSourceCRUD(BaseCRUD[IndexedSourceModel]):
    """CRUD operations for IndexedSourceModel."""

    def __init__(self) -> None:
        """Initialize IndexedSourceCRUD with IndexedSourceModel."""
        super().__init__(IndexedSourceModel)

    async def get_by_natural_key(
        self,
        session: AsyncSession,
        source_type: SourceType,
        source_id: str,
    ) -> IndexedSourceModel | None:
        """
        Retrieve the claim row for an artifact.

        Args:
            session: Async database session
            source_type: Artifact kind
            source_id: Originating artifact ID

        Returns:
            IndexedSourceModel if the artifact was indexed, None otherwise
        """
        stmt = select(IndexedSourceModel).where(
            IndexedSourceModel.source_type == source_type,
            IndexedSourceModel.source_id == source_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def delete_by_natural_key(
        self,
        session: AsyncSession,
        source_type: SourceType,
        source_id: str,
    ) -> bool:
        """
        Delete the claim row for an artifact.

        Returns:
            True if a claim row was deleted
        """
        stmt = delete(IndexedSourceModel).where(
            IndexedSourceModel.source_type == source_type,
            IndexedSourceModel.source_id == source_id,
        )
        result = await session.execute(stmt)
        return result.rowcount > 0

    async def update_embedded_count(
        self,
        session: AsyncSession,
        source_type: SourceType,
        source_id: str,
        embedded_count: int,
        status: SourceStatus,
    ) -> bool:
        """
        Record re-embed progress on a claim row.

        Args:
            session: Async database session
            source_type: Artifact kind
            source_id: Originating artifact ID
            embedded_count: Chunks of the source that now have a vector
            status: New completeness status

        Returns:
            True if the claim row was updated
        """
        stmt = (
            update(IndexedSourceModel)
            .where(
                IndexedSourceModel.source_type == source_type,
                IndexedSourceModel.source_id == source_id,
            )
            .values(embedded_count=embedded_count, status=status)
        )
        result = await session.execute(stmt)
        return result.rowcount > 0

    async def count_by_status(self, session: AsyncSession, status: SourceStatus) -> int:
        """Count claim rows with a given completeness status."""
        stmt = (
            select(func.count())
            .select_from(IndexedSourceModel)
            .where(IndexedSourceModel.status == status)
        )
        result = await session.execute(stmt)
        return result.scalar_one()


indexed_source_crud = IndexedSourceCRUD()
