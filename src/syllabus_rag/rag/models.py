"""
RAG Data Models

This module defines the canonical record stored in the vector index and the
shapes returned by the retrieval pipeline.

Each ChunkRecord corresponds to ONE embedding vector and ONE chunk of text.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict


class ChunkRecord(BaseModel):
    """
    A single indexed syllabus chunk.

    This model is the authoritative schema for:
    - Vector store rows (SQL and in-memory)
    - Candidate input to the similarity ranker
    """

    owner_id: str = Field(
        ...,
        min_length=1,
        description="User whose private index partition this chunk belongs to.",
    )

    document_id: str = Field(
        ...,
        min_length=1,
        description="Syllabus/document the chunk was derived from.",
    )

    class_label: str = Field(
        ...,
        description="Course label supplied at ingest, carried through for citation.",
    )

    chunk_index: int = Field(
        ...,
        ge=0,
        description="0-based position of the chunk within its document.",
    )

    text: str = Field(
        ...,
        min_length=1,
        description="Verbatim chunk content.",
    )

    vector: List[float] = Field(
        ...,
        description="Embedding of `text`.",
    )

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
    )


class RankedPassage(BaseModel):
    """
    A retrieved passage with source attribution, as returned by a query.
    """
    text: str
    class_label: str
    document_id: str
    chunk_index: int = Field(..., ge=0)
    score: float

    model_config = ConfigDict(extra="forbid", frozen=True)


class IndexOutcome(BaseModel):
    """
    Result of indexing at the upload boundary, where failures must not
    abort the surrounding flow.
    """
    chunk_count: int = Field(default=0, ge=0)
    warning: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class _ExtractionFailed:
    """Marker for documents whose text could not be extracted."""

    _instance: Optional["_ExtractionFailed"] = None

    def __new__(cls) -> "_ExtractionFailed":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "EXTRACTION_FAILED"

    def __bool__(self) -> bool:
        return False


EXTRACTION_FAILED = _ExtractionFailed()
