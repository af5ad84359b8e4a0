"""
Test suite for IndexedSourceCRUD database operations.

Tests claim-row uniqueness, lookups by natural key and status bookkeeping.

System role: Verification of idempotency tracking persistence
"""

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_core.boundary.db.CRUD.indexed_source_crud import IndexedSourceCRUD
from knowledge_core.boundary.db.models.indexed_source_model import IndexedSourceModel, SourceStatus
from knowledge_core.models.knowledge import SourceType


@pytest.fixture
def source_crud() -> IndexedSourceCRUD:
    """Provide IndexedSourceCRUD instance for testing."""
    return IndexedSourceCRUD()


@pytest.fixture
async def claim(source_crud: IndexedSourceCRUD, test_async_db: AsyncSession) -> IndexedSourceModel:
    """Create a partial claim row."""
    row = await source_crud.create(
        test_async_db,
        source_type=SourceType.TRANSCRIPT,
        source_id="t1",
        status=SourceStatus.PARTIAL,
        chunk_count=3,
        embedded_count=2,
        content_hash="a" * 64,
        embedding_model="m",
    )
    await test_async_db.commit()
    return row


class TestIndexedSourceCRUD:
    """Test suite for IndexedSourceCRUD."""

    def test_init_should_set_model_to_indexed_source_model(self) -> None:
        assert IndexedSourceCRUD().model == IndexedSourceModel

    async def test_get_by_natural_key_should_return_claim(
        self,
        source_crud: IndexedSourceCRUD,
        test_async_db: AsyncSession,
        claim: IndexedSourceModel,
    ) -> None:
        # Act
        found = await source_crud.get_by_natural_key(test_async_db, SourceType.TRANSCRIPT, "t1")
        other_type = await source_crud.get_by_natural_key(test_async_db, SourceType.SLIDE, "t1")

        # Assert
        assert found.id == claim.id
        assert other_type is None

    async def test_create_should_reject_second_claim_for_same_key(
        self,
        source_crud: IndexedSourceCRUD,
        test_async_db: AsyncSession,
        claim: IndexedSourceModel,
    ) -> None:
        with pytest.raises(IntegrityError):
            await source_crud.create(
                test_async_db,
                source_type=SourceType.TRANSCRIPT,
                source_id="t1",
                content_hash="b" * 64,
            )
        await test_async_db.rollback()

    async def test_update_embedded_count_should_flip_status(
        self,
        source_crud: IndexedSourceCRUD,
        test_async_db: AsyncSession,
        claim: IndexedSourceModel,
    ) -> None:
        # Act
        updated = await source_crud.update_embedded_count(
            test_async_db, SourceType.TRANSCRIPT, "t1", embedded_count=3, status=SourceStatus.COMPLETE
        )

        # Assert
        assert updated is True
        assert await source_crud.count_by_status(test_async_db, SourceStatus.PARTIAL) == 0
        assert await source_crud.count_by_status(test_async_db, SourceStatus.COMPLETE) == 1

    async def test_delete_by_natural_key_should_remove_claim(
        self,
        source_crud: IndexedSourceCRUD,
        test_async_db: AsyncSession,
        claim: IndexedSourceModel,
    ) -> None:
        assert await source_crud.delete_by_natural_key(test_async_db, SourceType.TRANSCRIPT, "t1") is True
        assert await source_crud.delete_by_natural_key(test_async_db, SourceType.TRANSCRIPT, "t1") is False
        assert await source_crud.count(test_async_db) == 0
