"""
Embedding provider boundary.

Exports the EmbeddingClient capability interface, the Gemini-backed
implementation and the settings-driven factory.
"""

from knowledge_core.boundary.embeddings.embedding_client import EmbeddingClient
from knowledge_core.boundary.embeddings.gemini_embeddings import (
    FixedDimensionEmbeddings,
    GeminiEmbeddingClient,
)
from knowledge_core.boundary.embeddings.embedding_client_factory import create_embedding_client

__all__ = [
    "EmbeddingClient",
    "FixedDimensionEmbeddings",
    "GeminiEmbeddingClient",
    "create_embedding_client",
]
