"""
Observability module.

Provides structured logging configuration, correlation ID tracking
and HTTP request logging middleware.
"""

from knowledge_core.observability.correlation import (
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from knowledge_core.observability.logger import configure_logging

__all__ = [
    "configure_logging",
    "set_correlation_id",
    "get_correlation_id",
    "clear_correlation_id",
]
