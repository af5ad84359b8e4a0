"""
Knowledge indexer.

Turns one finalized artifact (content + source metadata) into stored,
embedded chunks exactly once per (source_type, source_id).

Flow: existence check -> length gate -> chunk -> embed (batched, with
per-chunk fallback) -> claim row + chunk rows in one transaction.
A chunk whose embedding still fails is stored without a vector and the
source is marked PARTIAL until reembed_missing fills the gap.

Dependencies: sqlalchemy, knowledge_core.boundary, knowledge_core.core.chunker
System role: Write side of the knowledge store
"""

import hashlib
import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_core.boundary.db.CRUD.indexed_source_crud import IndexedSourceCRUD, indexed_source_crud
from knowledge_core.boundary.db.CRUD.knowledge_chunk_crud import KnowledgeChunkCRUD, knowledge_chunk_crud
from knowledge_core.boundary.db.models.indexed_source_model import SourceStatus
from knowledge_core.boundary.embeddings.embedding_client import EmbeddingClient
from knowledge_core.configs.chunking import ChunkingSettings
from knowledge_core.core.chunker import SentenceChunker, estimate_tokens
from knowledge_core.core.exceptions import EmbeddingProviderError, IndexingError
from knowledge_core.models.knowledge import (
    ChunkOutcome,
    ChunkStatus,
    IndexResult,
    IndexStatus,
    ReembedResult,
    SourceMetadata,
    SourceType,
)

logger = logging.getLogger(__name__)


def content_hash(content: str) -> str:
    """sha256 hex digest of artifact content."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


@dataclass
class EmbeddedPiece:
    """Embedding attempt for one text: vector on success, error otherwise."""

    vector: list[float] | None = None
    error: str | None = None


class Indexer:
    """
    Idempotent artifact indexer.

    The embedding client is injected; the indexer never builds one itself.
    Every write method commits its own transaction so batch callers get
    per-artifact isolation.
    """

    def __init__(
        self,
        embedding_client: EmbeddingClient,
        chunking: ChunkingSettings | None = None,
        chunk_crud: KnowledgeChunkCRUD = knowledge_chunk_crud,
        source_crud: IndexedSourceCRUD = indexed_source_crud,
    ) -> None:
        """
        Initialize indexer.

        Args:
            embedding_client: Capability used to embed chunk text
            chunking: Chunk budgets and minimum lengths (defaults if None)
            chunk_crud: Knowledge chunk persistence
            source_crud: Claim row persistence
        """
        self.embedding_client = embedding_client
        self.chunking = chunking or ChunkingSettings()
        self.chunker = SentenceChunker(self.chunking.max_tokens, self.chunking.overlap_tokens)
        self.chunk_crud = chunk_crud
        self.source_crud = source_crud

    async def is_indexed(self, db: AsyncSession, source_type: SourceType, source_id: str) -> bool:
        """True if a claim row or any chunk exists for the natural key."""
        claim = await self.source_crud.get_by_natural_key(db, source_type, source_id)
        if claim is not None:
            return True
        return await self.chunk_crud.exists_for_source(db, source_type, source_id)

    async def _embed_pieces(self, texts: list[str]) -> list[EmbeddedPiece]:
        """
        Embed texts batch by batch.

        When a whole batch fails, each text of that batch is retried alone
        so a single bad chunk cannot cost the others their vectors.
        """
        pieces: list[EmbeddedPiece] = []
        batch_size = self.embedding_client.max_batch_size

        for start in range(0, len(texts), batch_size):
            batch = texts[start : start + batch_size]
            try:
                vectors = await self.embedding_client.embed_batch(batch)
                pieces.extend(EmbeddedPiece(vector=v) for v in vectors)
                continue
            except EmbeddingProviderError as e:
                logger.warning(
                    f"{__name__}:_embed_pieces - Batch embedding failed, falling back to single items",
                    extra={"batch_start": start, "batch_size": len(batch), "error": e.message},
                )

            for text in batch:
                try:
                    vector = (await self.embedding_client.embed_batch([text]))[0]
                    pieces.append(EmbeddedPiece(vector=vector))
                except EmbeddingProviderError as e:
                    pieces.append(EmbeddedPiece(error=e.message))

        return pieces

    async def index(
        self,
        db: AsyncSession,
        content: str,
        metadata: SourceMetadata,
    ) -> IndexResult:
        """
        Index one artifact.

        Args:
            db: Async database session
            content: Full artifact text
            metadata: Natural key and provenance

        Returns:
            IndexResult: Status, created chunk ids and per-chunk outcomes

        Raises:
            IndexingError: If the store rejects the write (other than a duplicate key)
        """
        source_type = metadata.source_type
        source_id = metadata.source_id
        log_extra = {"source_type": source_type.value, "source_id": source_id}

        if await self.is_indexed(db, source_type, source_id):
            logger.info(f"{__name__}:index - Already indexed, skipping", extra=log_extra)
            return IndexResult(source_type=source_type, source_id=source_id, status=IndexStatus.ALREADY_INDEXED)

        min_chars = self.chunking.min_content_chars.get(source_type.value, 0)
        if not content or len(content.strip()) < max(min_chars, 1):
            logger.info(
                f"{__name__}:index - Content too short, skipping",
                extra={**log_extra, "length": len(content.strip()) if content else 0, "min_chars": min_chars},
            )
            return IndexResult(source_type=source_type, source_id=source_id, status=IndexStatus.SKIPPED_TOO_SHORT)

        outcomes: list[ChunkOutcome] = []
        kept: list[tuple[int, str]] = []
        for position, piece in enumerate(self.chunker.chunk(content)):
            if len(piece) < self.chunking.min_chunk_chars:
                outcomes.append(ChunkOutcome(index=position, status=ChunkStatus.SKIPPED))
            else:
                kept.append((position, piece))

        if not kept:
            logger.info(f"{__name__}:index - No chunk reached minimum length", extra=log_extra)
            return IndexResult(
                source_type=source_type,
                source_id=source_id,
                status=IndexStatus.SKIPPED_TOO_SHORT,
                outcomes=outcomes,
            )

        embedded = await self._embed_pieces([piece for _, piece in kept])

        rows = []
        for (position, piece), attempt in zip(kept, embedded):
            rows.append(
                {
                    "source_type": source_type,
                    "source_id": source_id,
                    "chunk_index": position,
                    "content": piece,
                    "lesson_id": metadata.lesson_id,
                    "subject_id": metadata.subject_id,
                    "program_id": metadata.program_id,
                    "title": metadata.title,
                    "tags": list(metadata.tags),
                    "token_count": estimate_tokens(piece),
                    "embedding": attempt.vector,
                    "embedding_model": self.embedding_client.model_name if attempt.vector is not None else None,
                }
            )

        embedded_count = sum(1 for attempt in embedded if attempt.vector is not None)
        status = SourceStatus.COMPLETE if embedded_count == len(rows) else SourceStatus.PARTIAL

        try:
            await self.source_crud.create(
                db,
                source_type=source_type,
                source_id=source_id,
                status=status,
                chunk_count=len(rows),
                embedded_count=embedded_count,
                content_hash=content_hash(content),
                embedding_model=self.embedding_client.model_name,
            )
            chunks = await self.chunk_crud.create_many(db, rows)
            await db.commit()
        except IntegrityError:
            await db.rollback()
            logger.info(f"{__name__}:index - Lost indexing race, already indexed", extra=log_extra)
            return IndexResult(source_type=source_type, source_id=source_id, status=IndexStatus.ALREADY_INDEXED)
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"{__name__}:index - Store write failed", extra={**log_extra, "error": str(e)})
            raise IndexingError(
                "Failed to store chunks",
                source_type=source_type.value,
                source_id=source_id,
                details={"error": str(e)},
            ) from e

        for chunk, attempt in zip(chunks, embedded):
            outcomes.append(
                ChunkOutcome(
                    index=chunk.chunk_index,
                    status=ChunkStatus.EMBEDDED if attempt.vector is not None else ChunkStatus.UNEMBEDDED,
                    chunk_id=chunk.id,
                    token_count=chunk.token_count,
                    error=attempt.error,
                )
            )
        outcomes.sort(key=lambda o: o.index)

        result = IndexResult(
            source_type=source_type,
            source_id=source_id,
            status=IndexStatus.COMPLETE if status == SourceStatus.COMPLETE else IndexStatus.PARTIAL,
            chunk_ids=[chunk.id for chunk in chunks],
            outcomes=outcomes,
            total_tokens=sum(chunk.token_count for chunk in chunks),
        )
        logger.info(
            f"{__name__}:index - Indexed source",
            extra={
                **log_extra,
                "status": result.status.value,
                "chunks": len(chunks),
                "unembedded": result.unembedded_count,
            },
        )
        return result

    async def delete_by_source(self, db: AsyncSession, source_type: SourceType, source_id: str) -> int:
        """
        Remove every chunk and the claim row of an artifact.

        Returns:
            int: Number of deleted chunks
        """
        deleted = await self.chunk_crud.delete_by_source(db, source_type, source_id)
        await self.source_crud.delete_by_natural_key(db, source_type, source_id)
        await db.commit()
        logger.info(
            f"{__name__}:delete_by_source - Deleted source",
            extra={"source_type": source_type.value, "source_id": source_id, "deleted": deleted},
        )
        return deleted

    async def is_stale(
        self,
        db: AsyncSession,
        source_type: SourceType,
        source_id: str,
        content: str,
    ) -> bool:
        """
        Compare content against the hash recorded at indexing time.

        Returns:
            bool: True if the source is not indexed or its content changed
        """
        claim = await self.source_crud.get_by_natural_key(db, source_type, source_id)
        if claim is None:
            return True
        return claim.content_hash != content_hash(content)

    async def reindex(self, db: AsyncSession, content: str, metadata: SourceMetadata) -> IndexResult:
        """Explicitly delete then index an artifact."""
        await self.delete_by_source(db, metadata.source_type, metadata.source_id)
        return await self.index(db, content, metadata)

    async def reembed_missing(self, db: AsyncSession, limit: int = 100) -> ReembedResult:
        """
        Attach embeddings to chunks stored without one.

        Sources whose chunks are all embedded afterwards are flipped to
        COMPLETE.

        Args:
            db: Async database session
            limit: Maximum chunks to process in this pass

        Returns:
            ReembedResult: Attempted, embedded and failed counts
        """
        chunks = await self.chunk_crud.get_missing_embeddings(db, limit)
        if not chunks:
            return ReembedResult()

        embedded = await self._embed_pieces([chunk.content for chunk in chunks])

        result = ReembedResult(attempted=len(chunks))
        touched: set[tuple[SourceType, str]] = set()
        for chunk, attempt in zip(chunks, embedded):
            if attempt.vector is None:
                result.failed += 1
                continue
            if await self.chunk_crud.set_embedding(db, chunk.id, attempt.vector, self.embedding_client.model_name):
                result.embedded += 1
                touched.add((chunk.source_type, chunk.source_id))

        for source_type, source_id in touched:
            total = await self.chunk_crud.count_for_source(db, source_type, source_id)
            missing = await self.chunk_crud.count_for_source(db, source_type, source_id, missing_only=True)
            status = SourceStatus.COMPLETE if missing == 0 else SourceStatus.PARTIAL
            updated = await self.source_crud.update_embedded_count(
                db, source_type, source_id, embedded_count=total - missing, status=status
            )
            if updated and status == SourceStatus.COMPLETE:
                result.completed_sources += 1

        await db.commit()
        logger.info(f"{__name__}:reembed_missing - Re-embed pass finished", extra=result.model_dump())
        return result
