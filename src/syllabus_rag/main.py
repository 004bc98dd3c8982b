"""
Syllabus RAG Service Entry Point

This module defines the FastAPI application instance, registers all routers,
configures global exception handling, and provides a test-friendly
application factory.

Design Goals
------------
- Deterministic startup
- Centralized router registration
- Global exception safety net
- Test-friendly via create_app()
"""

from __future__ import annotations

import contextlib
import logging
from typing import AsyncIterator

from fastapi import FastAPI

from .config import settings
from .core.errors import register_exception_handlers
from .store import create_tables, get_engine

from .api import (
    document_routes,
    search_routes,
    health_routes,
)


logger = logging.getLogger("syllabus_rag.app")


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Prepare storage on startup and release connections on shutdown.

    AI credentials are not checked here. A missing key surfaces as a 503
    on the first request that needs it.
    """
    logger.info("Starting syllabus-rag (vector store: %s)", settings.vector_store_backend)

    if settings.vector_store_backend == "postgres":
        await create_tables(get_engine())

    yield

    logger.info("Shutting down syllabus-rag")
    if settings.vector_store_backend == "postgres":
        await get_engine().dispose()


# ---------------------------------------------------------------------
# Application Factory (Test-Friendly)
# ---------------------------------------------------------------------

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns
    -------
    FastAPI
        Fully configured FastAPI application.
    """
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="syllabus-rag",
        version="1.0.0",
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    app.include_router(health_routes.router)
    app.include_router(document_routes.router)
    app.include_router(search_routes.router)

    return app


# ---------------------------------------------------------------------
# Default Application Instance (for Uvicorn/Gunicorn)
# ---------------------------------------------------------------------

app = create_app()
