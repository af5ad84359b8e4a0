"""
Google Generative AI embedding client.

FixedDimensionEmbeddings pins output dimensionality on every call (the base
GoogleGenerativeAIEmbeddings ignores it in the constructor).
GeminiEmbeddingClient adapts it to the async EmbeddingClient interface:
blocking SDK calls run in a worker thread and are retried with exponential
jitter backoff before surfacing EmbeddingProviderError.

Dependencies: langchain_google_genai, tenacity
System role: Production embedding provider
"""

import asyncio
import logging
from typing import List

from langchain_google_genai import GoogleGenerativeAIEmbeddings
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential_jitter

from knowledge_core.boundary.embeddings.embedding_client import EmbeddingClient
from knowledge_core.configs.embedding import EmbeddingSettings
from knowledge_core.core.exceptions import EmbeddingProviderError

logger = logging.getLogger(__name__)

DOCUMENT_TASK_TYPE = "RETRIEVAL_DOCUMENT"
QUERY_TASK_TYPE = "RETRIEVAL_QUERY"


class FixedDimensionEmbeddings(GoogleGenerativeAIEmbeddings):
    """
    GoogleGenerativeAIEmbeddings wrapper with fixed output dimensionality.

    Every stored vector must share one dimensionality per model generation,
    so all embed calls use the configured dimension unless explicitly
    overridden by the caller.
    """

    _output_dimensionality: int = 768

    def __init__(
        self,
        model: str = "models/gemini-embedding-001",
        output_dimensionality: int = 768,
        **kwargs,
    ) -> None:
        """
        Initialize embeddings with fixed output dimensionality.

        Args:
            model: Google embedding model ID
            output_dimensionality: Fixed dimension for all embeddings
            **kwargs: Additional arguments for GoogleGenerativeAIEmbeddings
        """
        super().__init__(model=model, **kwargs)
        self._output_dimensionality = output_dimensionality
        logger.info(
            f"{__name__}:__init__ - Initialized with model={model}, "
            f"output_dimensionality={output_dimensionality}"
        )

    def embed_documents(
        self,
        texts: List[str],
        *,
        batch_size: int = 100,
        task_type: str | None = None,
        titles: List[str] | None = None,
        output_dimensionality: int | None = None,
    ) -> List[List[float]]:
        """
        Embed documents with fixed output dimensionality.

        Args:
            texts: List of texts to embed
            batch_size: Batch size for API calls
            task_type: Optional task type for embedding
            titles: Optional titles for documents
            output_dimensionality: Override dimension (uses configured if None)

        Returns:
            List of embedding vectors
        """
        dim = output_dimensionality or self._output_dimensionality
        return super().embed_documents(
            texts,
            batch_size=batch_size,
            task_type=task_type,
            titles=titles,
            output_dimensionality=dim,
        )

    def embed_query(
        self,
        text: str,
        task_type: str | None = None,
        title: str | None = None,
        output_dimensionality: int | None = None,
    ) -> List[float]:
        """
        Embed query with fixed output dimensionality.

        Args:
            text: Query text to embed
            task_type: Optional task type for embedding
            title: Optional title
            output_dimensionality: Override dimension (uses configured if None)

        Returns:
            Embedding vector
        """
        dim = output_dimensionality or self._output_dimensionality
        return super().embed_query(
            text,
            task_type=task_type,
            title=title,
            output_dimensionality=dim,
        )


class GeminiEmbeddingClient(EmbeddingClient):
    """Async EmbeddingClient backed by Google Gemini embeddings."""

    def __init__(
        self,
        settings: EmbeddingSettings,
        embeddings: GoogleGenerativeAIEmbeddings | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            settings: Embedding configuration (model, dimension, batching, retries)
            embeddings: Pre-built LangChain embeddings (built from settings if None)
        """
        self.model_name = settings.model
        self.dimension = settings.dimension
        self.max_batch_size = settings.batch_size
        self._max_retries = settings.max_retries
        self._retry_max_wait = settings.retry_max_wait

        if embeddings is None:
            kwargs = {}
            if settings.api_key:
                kwargs["google_api_key"] = settings.api_key
            embeddings = FixedDimensionEmbeddings(
                model=settings.model,
                output_dimensionality=settings.dimension,
                **kwargs,
            )
        self._embeddings = embeddings

    async def _call_with_retry(self, operation: str, func, *args, **kwargs):
        """Run a blocking provider call in a thread, retrying transient failures."""
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._max_retries),
                wait=wait_exponential_jitter(initial=0.5, max=self._retry_max_wait, jitter=1),
                before_sleep=lambda retry_state: logger.warning(
                    f"{__name__}:{operation} - Retry {retry_state.attempt_number}/{self._max_retries}",
                    extra={"error": str(retry_state.outcome.exception())},
                ),
                reraise=True,
            ):
                with attempt:
                    return await asyncio.to_thread(func, *args, **kwargs)
        except Exception as e:
            logger.error(
                f"{__name__}:{operation} - Embedding provider failed",
                extra={"error": str(e), "model": self.model_name},
            )
            raise EmbeddingProviderError(
                f"Embedding provider failed: {e}",
                provider="gemini",
                details={"operation": operation, "model": self.model_name},
            ) from e

    async def embed(self, text: str) -> list[float]:
        return await self._call_with_retry(
            "embed",
            self._embeddings.embed_query,
            text,
            task_type=QUERY_TASK_TYPE,
        )

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        vectors: list[list[float]] = []
        for start in range(0, len(texts), self.max_batch_size):
            batch = texts[start : start + self.max_batch_size]
            vectors.extend(
                await self._call_with_retry(
                    "embed_batch",
                    self._embeddings.embed_documents,
                    batch,
                    batch_size=self.max_batch_size,
                    task_type=DOCUMENT_TASK_TYPE,
                )
            )
        if len(vectors) != len(texts):
            raise EmbeddingProviderError(
                "Embedding provider returned a mismatched number of vectors",
                provider="gemini",
                details={"expected": len(texts), "received": len(vectors)},
            )
        return vectors
