"""
API Models

This module defines the Pydantic models used for request/response
validation across the document, search and ask endpoints.
"""

from __future__ import annotations

from typing import List, Optional, Dict, Literal
from pydantic import BaseModel, Field, ConfigDict

from ..llm.answer import HistoryTurn
from ..llm.extraction import ExtractedEvent


class OperationResult(BaseModel):
    """
    Standardized mutation operation result.
    """
    status: Literal["indexed", "deleted", "ok"]
    count: Optional[int] = Field(default=None, ge=0)

    model_config = ConfigDict(extra="forbid")


# ---------------------------------------------------------------------
# Document Models
# ---------------------------------------------------------------------

class IndexDocumentRequest(BaseModel):
    """
    Extracted text of an uploaded syllabus, to be (re)indexed.
    """
    class_label: str = Field(..., min_length=1, max_length=200)
    text: str = ""
    extraction_failed: bool = False
    extract_dates: bool = False

    model_config = ConfigDict(extra="forbid")


class IndexDocumentResponse(BaseModel):
    document_id: str
    chunks_indexed: int = Field(..., ge=0)
    warning: Optional[str] = None
    events: List[ExtractedEvent] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class IndexStatsResponse(BaseModel):
    total_chunks: int = Field(..., ge=0)
    total_documents: int = Field(..., ge=0)
    documents: Dict[str, int] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")


# ---------------------------------------------------------------------
# Search / Ask Models
# ---------------------------------------------------------------------

class SearchRequest(BaseModel):
    query: str = Field(..., min_length=1)
    # Bounded by settings.max_top_k in RagPipeline.query; None means default_top_k
    k: Optional[int] = None

    model_config = ConfigDict(extra="forbid")


class SearchResult(BaseModel):
    text: str = Field(..., min_length=1)
    class_label: str
    document_id: str
    chunk_index: int = Field(..., ge=0)
    score: float

    model_config = ConfigDict(extra="forbid")


class AskRequest(BaseModel):
    question: str = Field(..., min_length=1)
    chat_history: List[HistoryTurn] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class AskResponse(BaseModel):
    answer: str
    sources: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")
