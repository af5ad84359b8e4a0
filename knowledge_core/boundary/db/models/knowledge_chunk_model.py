"""
Knowledge chunk ORM model.

One bounded slice of a study artifact with its provenance, heuristic token
count and (optionally) its embedding vector.

Dependencies: sqlalchemy, knowledge_core.boundary.db.base
System role: Searchable unit of the knowledge store
"""

from sqlalchemy import Enum, Index, Integer, JSON, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from knowledge_core.boundary.db.base import Base, UUIDMixin, TimestampMixin
from knowledge_core.models.knowledge import SourceType


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


class KnowledgeChunkModel(Base, UUIDMixin, TimestampMixin):
    """
    Knowledge chunk ORM model.

    Rows are created in bulk by an indexing run and never rewritten, except
    for attaching a missing embedding during the re-embed pass. Deletion
    happens only per (source_type, source_id).

    Attributes:
        id: UUID primary key
        source_type: Artifact kind (transcript, slide, cornell-note, summary)
        source_id: Originating artifact ID (natural key with source_type)
        chunk_index: Position in chunker output, unique within a source
        content: Chunk text
        lesson_id: Optional lesson reference (filter only)
        subject_id: Optional subject reference (filter only)
        program_id: Optional program reference (filter only)
        title: Optional display label, boosts lexical matches
        tags: Sorted, de-duplicated tag list
        token_count: Heuristic token estimate (ceil(len/4))
        embedding: Vector as JSON float list, NULL until embedded
        embedding_model: Model that produced the vector
        created_at: Row creation timestamp (UTC)
        updated_at: Last modification timestamp (UTC)
    """

    __tablename__ = "knowledge_chunks"
    __table_args__ = (
        UniqueConstraint(
            "source_type", "source_id", "chunk_index",
            name="uq_knowledge_chunks_source_chunk",
        ),
        Index("ix_knowledge_chunks_source", "source_type", "source_id"),
        Index("ix_knowledge_chunks_lesson", "lesson_id"),
        Index("ix_knowledge_chunks_subject", "subject_id"),
        Index("ix_knowledge_chunks_program", "program_id"),
    )

    source_type: Mapped[SourceType] = mapped_column(
        Enum(SourceType, native_enum=False, length=32, values_callable=_enum_values),
        nullable=False,
    )

    source_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Originating artifact ID",
    )

    chunk_index: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        doc="Position in chunker output (debugging and uniqueness only)",
    )

    content: Mapped[str] = mapped_column(Text, nullable=False)

    lesson_id: Mapped[str | None] = mapped_column(String(255), nullable=True, default=None)
    subject_id: Mapped[str | None] = mapped_column(String(255), nullable=True, default=None)
    program_id: Mapped[str | None] = mapped_column(String(255), nullable=True, default=None)

    title: Mapped[str | None] = mapped_column(
        String(512),
        nullable=True,
        default=None,
        doc="Display label; a query hit in the title scores higher",
    )

    tags: Mapped[list] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )

    token_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    embedding: Mapped[list | None] = mapped_column(
        JSON(none_as_null=True),
        nullable=True,
        default=None,
        doc="Embedding vector (list of floats); NULL until embedded",
    )

    embedding_model: Mapped[str | None] = mapped_column(
        String(128),
        nullable=True,
        default=None,
    )
