"""
Indexed source ORM model.

Claim row reserving a (source_type, source_id) natural key. The unique
constraint makes concurrent indexing of the same artifact safe: the second
writer fails on insert and its transaction is rolled back.

Dependencies: sqlalchemy, knowledge_core.boundary.db.base
System role: Idempotency and completeness tracking for indexed artifacts
"""

import enum

from sqlalchemy import Enum, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from knowledge_core.boundary.db.base import Base, UUIDMixin, TimestampMixin
from knowledge_core.boundary.db.models.knowledge_chunk_model import _enum_values
from knowledge_core.models.knowledge import SourceType


class SourceStatus(str, enum.Enum):
    """Source completeness enum."""

    COMPLETE = "complete"
    PARTIAL = "partial"


class IndexedSourceModel(Base, UUIDMixin, TimestampMixin):
    """
    Indexed source ORM model.

    Attributes:
        id: UUID primary key
        source_type: Artifact kind
        source_id: Originating artifact ID
        status: COMPLETE when every chunk has an embedding, PARTIAL otherwise
        chunk_count: Number of stored chunks
        embedded_count: Number of stored chunks with an embedding
        content_hash: sha256 hex digest of the indexed content
        embedding_model: Model used for the embedded chunks
        created_at: Timestamp of indexing
        updated_at: Timestamp of last status change
    """

    __tablename__ = "indexed_sources"
    __table_args__ = (
        UniqueConstraint("source_type", "source_id", name="uq_indexed_sources_natural_key"),
    )

    source_type: Mapped[SourceType] = mapped_column(
        Enum(SourceType, native_enum=False, length=32, values_callable=_enum_values),
        nullable=False,
    )

    source_id: Mapped[str] = mapped_column(String(255), nullable=False)

    status: Mapped[SourceStatus] = mapped_column(
        Enum(SourceStatus, native_enum=False, length=16, values_callable=_enum_values),
        nullable=False,
        default=SourceStatus.COMPLETE,
    )

    chunk_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    embedded_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    content_hash: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        doc="sha256 of the indexed content, used for staleness checks",
    )

    embedding_model: Mapped[str | None] = mapped_column(String(128), nullable=True, default=None)
