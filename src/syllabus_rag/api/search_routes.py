"""
Search & Ask Routes

Semantic search over the caller's own syllabi, and question answering on top
of the retrieved passages.
"""

from fastapi import APIRouter, Depends, status
from typing import List, Annotated

from .dependencies import get_pipeline, get_answer_composer
from .models import SearchRequest, SearchResult, AskRequest, AskResponse
from ..auth.models import UserContext
from ..auth.security import get_current_user
from ..config import settings
from ..llm.answer import AnswerComposer
from ..rag.pipeline import RagPipeline

router = APIRouter(tags=["search"])


@router.post(
    "/search",
    response_model=List[SearchResult],
    summary="Vector-based semantic search",
    status_code=status.HTTP_200_OK,
)
async def search(
    req: SearchRequest,
    user: Annotated[UserContext, Depends(get_current_user)],
    pipeline: Annotated[RagPipeline, Depends(get_pipeline)],
) -> List[SearchResult]:
    top_k = req.k if req.k is not None else settings.default_top_k
    passages = await pipeline.query(user.user_id, req.query, top_k)
    return [SearchResult(**p.model_dump()) for p in passages]


@router.post(
    "/ask",
    response_model=AskResponse,
    summary="Answer a question from the caller's syllabi",
)
async def ask(
    req: AskRequest,
    user: Annotated[UserContext, Depends(get_current_user)],
    pipeline: Annotated[RagPipeline, Depends(get_pipeline)],
    composer: Annotated[AnswerComposer, Depends(get_answer_composer)],
) -> AskResponse:
    """
    Retrieve the top passages and compose a cited answer.

    With nothing indexed the composer returns its canned reply without
    calling the model; provider failures surface through the global
    handlers as a retryable 502.
    """
    passages = await pipeline.query(user.user_id, req.question, settings.default_top_k)
    composed = await composer.answer(req.question, passages, req.chat_history)
    return AskResponse(answer=composed.answer, sources=composed.sources)
