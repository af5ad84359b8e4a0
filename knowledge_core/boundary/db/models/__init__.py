"""
Database models package.

Exports:
  - KnowledgeChunkModel: Knowledge chunk ORM model
  - IndexedSourceModel, SourceStatus: Claim row ORM model and status enum

Dependencies: sqlalchemy, knowledge_core.boundary.db.base
System role: Database model definitions for the knowledge store
"""

from knowledge_core.boundary.db.models.knowledge_chunk_model import KnowledgeChunkModel
from knowledge_core.boundary.db.models.indexed_source_model import IndexedSourceModel, SourceStatus

__all__ = [
    "KnowledgeChunkModel",
    "IndexedSourceModel",
    "SourceStatus",
]
