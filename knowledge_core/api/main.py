"""
FastAPI application with assembled routers.

Initializes FastAPI app with all API routers and configures uvicorn server.

Dependencies: fastapi, knowledge_core.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import logging
from knowledge_core import __version__
from knowledge_core.configs import get_settings
from knowledge_core.observability import configure_logging
from knowledge_core.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware
from knowledge_core.api.deps.dependencies import get_service_cache
from .routers import health_router, knowledge_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events.
    """
    logger = logging.getLogger("uvicorn")

    # Startup
    logger.info("Pre-warming service cache...")
    cache = get_service_cache()
    _ = cache.embedding_client
    logger.info("Service cache pre-warmed")

    yield

    # Shutdown
    cache.clear()
    logger.info("Service cache cleared")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Study Knowledge Retrieval API",
        description="Chunking, indexing and hybrid retrieval over study material",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability middleware
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    # Register all routers with /api/v1 prefix for versioning
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(knowledge_router, prefix="/api/v1")

    return app


if __name__ == "__main__":
    uvicorn.run(
        "knowledge_core.api.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
    )
