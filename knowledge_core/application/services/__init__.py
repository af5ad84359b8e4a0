"""
Application services.

Exports:
  - KnowledgeService: Search, indexing and maintenance use cases
"""

from knowledge_core.application.services.knowledge_service import KnowledgeService

__all__ = ["KnowledgeService"]
