"""
FastAPI dependency factories.
"""

from knowledge_core.api.deps.dependencies import (
    ServiceCache,
    get_service_cache,
    get_settings_dependency,
    get_knowledge_service,
)

__all__ = [
    "ServiceCache",
    "get_service_cache",
    "get_settings_dependency",
    "get_knowledge_service",
]
