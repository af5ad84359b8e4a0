"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from knowledge_core.boundary.db.CRUD import knowledge_chunk_crud

    chunks = await knowledge_chunk_crud.get_by_source(db, SourceType.SLIDE, "slide-1")
"""

from knowledge_core.boundary.db.CRUD.base_crud import BaseCRUD
from knowledge_core.boundary.db.CRUD.knowledge_chunk_crud import KnowledgeChunkCRUD, knowledge_chunk_crud
from knowledge_core.boundary.db.CRUD.indexed_source_crud import IndexedSourceCRUD, indexed_source_crud

__all__ = [
    "BaseCRUD",
    "KnowledgeChunkCRUD",
    "knowledge_chunk_crud",
    "IndexedSourceCRUD",
    "indexed_source_crud",
]
