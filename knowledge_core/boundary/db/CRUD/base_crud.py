"""
Base CRUD operations for SQLAlchemy models.

Provides generic Create, Read, Delete operations that can be
inherited and extended by model-specific CRUD classes.

Dependencies: sqlalchemy, uuid
System role: Foundation for all database CRUD operations
"""

from typing import Generic, TypeVar, Sequence
from uuid import UUID

from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_core.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """
    Generic base class for CRUD operations.

    Provides standard database operations that work with any SQLAlchemy model.
    Subclasses specify the model class and extend these methods with
    model-specific queries.

    Type Parameters:
        ModelT: SQLAlchemy model class inheriting from Base

    Attributes:
        model: The SQLAlchemy model class to operate on
    """

    def __init__(self, model: type[ModelT]) -> None:
        """
        Initialize CRUD with target model.

        Args:
            model: SQLAlchemy model class for database operations
        """
        self.model = model

    async def create(self, session: AsyncSession, **kwargs) -> ModelT:
        """
        Create a new record in the database.

        Flushes but does not commit; the caller owns the transaction.

        Args:
            session: Async database session
            **kwargs: Model field values

        Returns:
            Created model instance with generated ID and timestamps

        Raises:
            IntegrityError: If a unique constraint is violated
        """
        instance = self.model(**kwargs)
        session.add(instance)
        await session.flush()
        return instance

    async def create_many(self, session: AsyncSession, rows: list[dict]) -> list[ModelT]:
        """
        Create several records in one flush.

        Args:
            session: Async database session
            rows: Field values per record

        Returns:
            Created model instances in input order

        Raises:
            IntegrityError: If a unique constraint is violated
        """
        instances = [self.model(**row) for row in rows]
        session.add_all(instances)
        await session.flush()
        return instances

    async def get_by_id(self, session: AsyncSession, id: UUID) -> ModelT | None:
        """
        Retrieve a single record by primary key.

        Args:
            session: Async database session
            id: UUID primary key

        Returns:
            Model instance if found, None otherwise
        """
        stmt = select(self.model).where(self.model.id == id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_ids(self, session: AsyncSession, ids: Sequence[UUID]) -> Sequence[ModelT]:
        """
        Retrieve records by a set of primary keys.

        Args:
            session: Async database session
            ids: UUID primary keys

        Returns:
            Sequence of model instances found (order not guaranteed)
        """
        if not ids:
            return []
        stmt = select(self.model).where(self.model.id.in_(ids))
        result = await session.execute(stmt)
        return result.scalars().all()

    async def count(self, session: AsyncSession) -> int:
        """
        Count all records.

        Args:
            session: Async database session

        Returns:
            Number of rows in the table
        """
        stmt = select(func.count()).select_from(self.model)
        result = await session.execute(stmt)
        return result.scalar_one()

    async def delete_by_id(self, session: AsyncSession, id: UUID) -> bool:
        """
        Delete a record by primary key.

        Args:
            session: Async database session
            id: UUID primary key

        Returns:
            True if record was deleted, False if not found
        """
        stmt = delete(self.model).where(self.model.id == id)
        result = await session.execute(stmt)
        return result.rowcount > 0
