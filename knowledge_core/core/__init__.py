"""
Core business logic module.

Contains the chunker, indexer, hybrid retriever, context builder and the
exception hierarchy. Import components from their modules directly.
"""

from knowledge_core.core.exceptions import (
    KnowledgeBaseException,
    ValidationError,
    InvalidFilterError,
    SourceNotFoundError,
    EmbeddingProviderError,
    IndexingError,
    RetrievalError,
)

__all__ = [
    "KnowledgeBaseException",
    "ValidationError",
    "InvalidFilterError",
    "SourceNotFoundError",
    "EmbeddingProviderError",
    "IndexingError",
    "RetrievalError",
]
