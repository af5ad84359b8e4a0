"""
Knowledge router package.

Exports the router for knowledge search and indexing endpoints.
"""

from .knowledge_router import router

__all__ = ["router"]
