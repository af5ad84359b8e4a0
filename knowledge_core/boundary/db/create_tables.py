"""
Database table creation script.

Creates all tables defined in ORM models using SQLAlchemy metadata.

Dependencies: sqlalchemy, knowledge_core.configs
System role: Database schema initialization

Usage:
    python -m knowledge_core.boundary.db.create_tables
"""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncEngine

from knowledge_core.boundary.db.base import Base
from knowledge_core.boundary.db.connection import get_async_engine

# Import all models to register them with Base.metadata
from knowledge_core.boundary.db.models.knowledge_chunk_model import KnowledgeChunkModel  # noqa: F401
from knowledge_core.boundary.db.models.indexed_source_model import IndexedSourceModel  # noqa: F401

logger = logging.getLogger(__name__)


async def create_all_tables(engine: AsyncEngine | None = None) -> None:
    """
    Create all database tables from registered ORM models.

    Idempotent: calls CREATE TABLE IF NOT EXISTS for each model, so safe
    to run multiple times. Existing tables remain unchanged.

    Args:
        engine: Engine to use (defaults to the configured engine)

    Raises:
        SQLAlchemyError: If database connection fails or table creation fails
    """
    engine = engine or get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Knowledge tables created")


async def drop_all_tables(engine: AsyncEngine | None = None) -> None:
    """
    Drop all database tables and their data.

    WARNING: Irreversible data loss. Only use in development environments.
    """
    engine = engine or get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.info("Knowledge tables dropped")


if __name__ == "__main__":
    asyncio.run(create_all_tables())
