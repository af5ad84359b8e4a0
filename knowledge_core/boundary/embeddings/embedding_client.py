"""
Embedding capability interface.

Opaque text -> fixed-length vector capability consumed by the indexer and
the hybrid retriever. Implementations are constructed once at the
composition root and passed in explicitly.

Dependencies: None
System role: Seam between the knowledge core and the embedding provider
"""

from abc import ABC, abstractmethod


class EmbeddingClient(ABC):
    """
    Abstract async embedding client.

    Attributes:
        model_name: Identifier recorded on every stored vector
        dimension: Length of every vector this client returns
        max_batch_size: Upper bound on texts per provider call
    """

    model_name: str = "unknown"
    dimension: int = 0
    max_batch_size: int = 100

    @abstractmethod
    async def embed(self, text: str) -> list[float]:
        """
        Embed a single text (used for search queries).

        Raises:
            EmbeddingProviderError: Provider unavailable after retries
        """

    @abstractmethod
    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """
        Embed several texts, preserving order.

        Implementations split the input into provider calls of at most
        max_batch_size items.

        Raises:
            EmbeddingProviderError: Provider unavailable after retries
        """
