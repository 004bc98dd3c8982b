"""
Document Index Routes

This module exposes endpoints for:
- (Re)indexing a syllabus's extracted text
- Removing a syllabus from the index
- Querying the caller's index statistics

They are invoked by the upload and deletion flows after the raw document
has been stored or removed.
"""

import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends

from .dependencies import get_pipeline, get_date_extractor
from .models import (
    IndexDocumentRequest,
    IndexDocumentResponse,
    IndexStatsResponse,
    OperationResult,
)
from ..auth.models import UserContext
from ..auth.security import get_current_user
from ..core.errors import RagError
from ..llm.extraction import DateExtractor, ExtractedEvent
from ..rag.models import EXTRACTION_FAILED
from ..rag.pipeline import RagPipeline

logger = logging.getLogger("syllabus_rag.api")

router = APIRouter(prefix="/documents", tags=["documents"])


@router.get(
    "/stats",
    response_model=IndexStatsResponse,
    summary="Get the caller's index statistics",
)
async def get_index_stats(
    user: Annotated[UserContext, Depends(get_current_user)],
    pipeline: Annotated[RagPipeline, Depends(get_pipeline)],
) -> IndexStatsResponse:
    stats = await pipeline.stats(user.user_id)
    return IndexStatsResponse(**stats)


@router.put(
    "/{document_id}/index",
    response_model=IndexDocumentResponse,
    summary="Index or re-index a syllabus",
)
async def index_document(
    document_id: str,
    req: IndexDocumentRequest,
    user: Annotated[UserContext, Depends(get_current_user)],
    pipeline: Annotated[RagPipeline, Depends(get_pipeline)],
    extractor: Annotated[DateExtractor, Depends(get_date_extractor)],
) -> IndexDocumentResponse:
    """
    Replace the document's chunks with chunks of the supplied text.

    Workflow
    --------
    1. Chunk, embed and atomically swap in the new chunks.
    2. Optionally extract dated events from the same text.

    Service failures are reported in ``warning`` rather than as an error
    status, so the caller's upload still succeeds.
    """
    text = EXTRACTION_FAILED if req.extraction_failed else req.text

    outcome = await pipeline.safe_index_document(
        user.user_id,
        document_id,
        req.class_label,
        text,
        replace=True,
    )
    warnings = [outcome.warning] if outcome.warning else []

    events: List[ExtractedEvent] = []
    if req.extract_dates and not req.extraction_failed:
        try:
            events = await extractor.extract(req.text, req.class_label)
        except RagError:
            logger.exception("Date extraction failed for document %s", document_id)
            warnings.append("Dates could not be extracted.")

    return IndexDocumentResponse(
        document_id=document_id,
        chunks_indexed=outcome.chunk_count,
        warning=" ".join(warnings) or None,
        events=events,
    )


@router.delete(
    "/{document_id}",
    response_model=OperationResult,
    summary="Remove a syllabus from the index",
)
async def remove_document(
    document_id: str,
    user: Annotated[UserContext, Depends(get_current_user)],
    pipeline: Annotated[RagPipeline, Depends(get_pipeline)],
) -> OperationResult:
    count = await pipeline.remove_document(user.user_id, document_id)
    return OperationResult(status="deleted", count=count)
