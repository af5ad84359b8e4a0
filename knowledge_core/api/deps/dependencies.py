"""
Dependency injection container.

Factory functions for FastAPI dependencies. The embedding client is the
only process-wide capability; it is built lazily here, once, and handed to
the indexer and retriever.

Dependencies: knowledge_core.configs, knowledge_core.core, knowledge_core.boundary
System role: DI container for service injection
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_core.application.services.knowledge_service import KnowledgeService
from knowledge_core.boundary.db.connection import get_async_db
from knowledge_core.boundary.embeddings.embedding_client import EmbeddingClient
from knowledge_core.boundary.embeddings.embedding_client_factory import create_embedding_client
from knowledge_core.configs import Settings, get_settings
from knowledge_core.core.indexer import Indexer
from knowledge_core.core.retriever import HybridRetriever


class ServiceCache:
    """Container for cached service instances."""

    def __init__(self, settings: Settings | None = None):
        self._settings = settings
        self._embedding_client = None
        self._indexer = None
        self._retriever = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def embedding_client(self) -> EmbeddingClient:
        """Get cached embedding client."""
        if self._embedding_client is None:
            self._embedding_client = create_embedding_client(self.settings.embedding)
        return self._embedding_client

    @property
    def indexer(self) -> Indexer:
        """Get cached indexer."""
        if self._indexer is None:
            self._indexer = Indexer(self.embedding_client, chunking=self.settings.chunking)
        return self._indexer

    @property
    def retriever(self) -> HybridRetriever:
        """Get cached hybrid retriever."""
        if self._retriever is None:
            self._retriever = HybridRetriever(self.embedding_client, settings=self.settings.retrieval)
        return self._retriever

    def clear(self) -> None:
        """Clear all cached instances."""
        self._embedding_client = None
        self._indexer = None
        self._retriever = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


def get_knowledge_service(db: AsyncSession = Depends(get_async_db)) -> KnowledgeService:
    """
    Get knowledge service instance.

    Args:
        db: Async database session (injected via Depends)

    Returns:
        KnowledgeService: Service wired to the cached indexer and retriever
    """
    cache = get_service_cache()
    return KnowledgeService(db=db, indexer=cache.indexer, retriever=cache.retriever)
