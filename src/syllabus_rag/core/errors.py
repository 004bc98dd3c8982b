"""
Error Taxonomy & Global Error Handling

This module defines the exceptions raised by the RAG core and the
application-wide handlers that translate them into HTTP responses.

Design Goals
------------
- Never leak internal exception details to clients
- Always return deterministic, machine-readable error responses
- Keep "misconfigured", "service unavailable" and "bad request" distinct
- Log full stack traces internally for debugging
"""

from __future__ import annotations

import logging
from typing import Dict, Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger("syllabus_rag.errors")


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class RagError(RuntimeError):
    """Base class for I/O-facing failures of the RAG core."""


class ConfigurationError(RagError):
    """Raised at first use when AI credentials or endpoints are missing."""


class EmbeddingServiceError(RagError):
    """Raised when the embedding provider call fails or returns garbage."""


class CompletionServiceError(RagError):
    """Raised when the chat-completion provider call fails."""


class DimensionMismatchError(RagError):
    """Raised when a query vector and a stored vector differ in length."""


class VectorStoreError(RagError):
    """Raised when the vector index store cannot complete an operation."""


class RagValidationError(ValueError):
    """Raised when a caller passes arguments the core cannot accept."""


# ---------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------

def _error_response(status_code: int, error: str, detail: str) -> JSONResponse:
    payload: Dict[str, Any] = {
        "error": error,
        "detail": detail,
    }
    return JSONResponse(status_code=status_code, content=payload)


# ---------------------------------------------------------------------
# Public Exception Handlers
# ---------------------------------------------------------------------

async def configuration_error_handler(
    request: Request,
    exc: ConfigurationError,
) -> JSONResponse:
    """
    Misconfiguration is actionable only by an operator; the message is
    kept generic for the end user and the details go to the log.
    """
    logger.error(
        "Configuration error on %s %s: %s",
        request.method,
        request.url.path,
        exc,
    )
    return _error_response(
        503,
        "service_misconfigured",
        "The assistant is not configured yet. Please contact an administrator.",
    )


async def ai_service_error_handler(
    request: Request,
    exc: RagError,
) -> JSONResponse:
    logger.error(
        "AI service failure on %s %s (%s)",
        request.method,
        request.url.path,
        type(exc).__name__,
    )
    return _error_response(
        502,
        "ai_service_unavailable",
        "Sorry, we couldn't process your question right now. Please try again.",
    )


async def dimension_mismatch_handler(
    request: Request,
    exc: DimensionMismatchError,
) -> JSONResponse:
    logger.error("Index dimension mismatch on %s: %s", request.url.path, exc)
    return _error_response(
        409,
        "index_out_of_date",
        "Your syllabus index was built with a different model and must be re-indexed.",
    )


async def vector_store_error_handler(
    request: Request,
    exc: VectorStoreError,
) -> JSONResponse:
    logger.error("Vector store failure on %s: %s", request.url.path, exc)
    return _error_response(
        503,
        "storage_unavailable",
        "Storage is temporarily unavailable. Please try again.",
    )


async def validation_error_handler(
    request: Request,
    exc: RagValidationError,
) -> JSONResponse:
    return _error_response(422, "invalid_request", str(exc))


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Last-resort handler: log the traceback and answer with a bare 500.

    Exception text is never echoed to the client.
    """
    logger.exception(
        "Unhandled exception during request: %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return _error_response(500, "internal_server_error", "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    """
    Attach all handlers to an application instance.

    Starlette resolves handlers by walking the exception's MRO, so the
    specific RagError subclasses win over the catch-all.
    """
    app.add_exception_handler(ConfigurationError, configuration_error_handler)
    app.add_exception_handler(EmbeddingServiceError, ai_service_error_handler)
    app.add_exception_handler(CompletionServiceError, ai_service_error_handler)
    app.add_exception_handler(DimensionMismatchError, dimension_mismatch_handler)
    app.add_exception_handler(VectorStoreError, vector_store_error_handler)
    app.add_exception_handler(RagValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
