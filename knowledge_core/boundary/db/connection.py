"""
Database connection management.

Provides the async SQLAlchemy engine, session factory, and FastAPI
dependency for database session injection.

Dependencies: sqlalchemy, knowledge_core.configs
System role: Database connection lifecycle management
"""

from functools import lru_cache
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker

from knowledge_core.configs import get_settings


def _unicode_lower(value: str | None) -> str | None:
    return value.lower() if value is not None else None


def register_sqlite_functions(engine: AsyncEngine) -> None:
    """
    Replace SQLite's ASCII-only lower() on every new connection.

    Case-insensitive matching (ILIKE-style icontains) compiles to
    lower(column) LIKE lower(:param), so accented text such as "Ácido"
    only folds correctly with a Unicode-aware lower().

    Args:
        engine: Async engine bound to a SQLite URL
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:
        dbapi_connection.create_function("lower", 1, _unicode_lower)


@lru_cache
def get_async_engine() -> AsyncEngine:
    """
    Create the process-wide async SQLAlchemy engine.

    PostgreSQL gets a sized pool with pre-ping; SQLite URLs get the
    driver defaults since they do not accept pool sizing options, plus a
    Unicode-aware lower().

    Returns:
        AsyncEngine: Configured async SQLAlchemy engine

    Raises:
        ArgumentError: If database URL is invalid or engine creation fails

    Usage:
        engine = get_async_engine()
        async with engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
    """
    settings = get_settings()
    db_config = settings.database

    if db_config.is_sqlite:
        engine = create_async_engine(db_config.async_database_url, echo=db_config.echo_sql)
        register_sqlite_functions(engine)
        return engine

    return create_async_engine(
        db_config.async_database_url,
        echo=db_config.echo_sql,
        pool_size=db_config.pool_size,
        max_overflow=db_config.max_overflow,
        pool_timeout=db_config.pool_timeout,
        pool_pre_ping=True,
    )


@lru_cache
def get_async_session_factory() -> async_sessionmaker:
    """
    Create async session factory for database operations.

    Returns async_sessionmaker bound to the engine with autoflush=False and
    expire_on_commit=False for explicit transaction control.

    Returns:
        async_sessionmaker: Async session factory configured for manual transaction control

    Usage:
        SessionFactory = get_async_session_factory()
        async with SessionFactory() as session:
            session.add(obj)
            await session.commit()
    """
    return async_sessionmaker(
        bind=get_async_engine(),
        autoflush=False,
        expire_on_commit=False,
    )


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency for async database session injection.

    Commits when the route completes normally, rolls back when it raises,
    and always closes the session.

    Yields:
        AsyncSession: Async SQLAlchemy database session (scoped to request lifetime)

    Raises:
        SQLAlchemyError: Propagated from database operations

    Usage:
        from fastapi import Depends

        @app.get("/knowledge/stats")
        async def stats(db: AsyncSession = Depends(get_async_db)):
            return await knowledge_chunk_crud.count(db)
    """
    SessionFactory = get_async_session_factory()
    async with SessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
