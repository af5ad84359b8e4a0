"""
Embedding client factory.

Builds the configured EmbeddingClient implementation from settings.

Dependencies: knowledge_core.configs
System role: Provider selection for the composition root
"""

import logging

from knowledge_core.boundary.embeddings.embedding_client import EmbeddingClient
from knowledge_core.boundary.embeddings.gemini_embeddings import GeminiEmbeddingClient
from knowledge_core.configs.embedding import EmbeddingSettings

logger = logging.getLogger(__name__)


def create_embedding_client(settings: EmbeddingSettings) -> EmbeddingClient:
    """
    Create the embedding client named by settings.provider.

    Args:
        settings: Embedding configuration

    Returns:
        EmbeddingClient: Ready-to-use client

    Raises:
        ValueError: If the provider is not supported
    """
    provider = settings.provider.lower()
    if provider == "gemini":
        logger.info(
            f"{__name__}:create_embedding_client - Using Gemini embeddings",
            extra={"model": settings.model, "dimension": settings.dimension},
        )
        return GeminiEmbeddingClient(settings)

    raise ValueError(f"Unsupported embedding provider: {settings.provider}")
