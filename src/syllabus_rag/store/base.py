"""
Vector Index Store Interface

Every operation is scoped by ``owner_id``; no implementation may read or
write another owner's chunks. Writes are all-or-nothing per call.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, List, Sequence, Tuple

from ..rag.models import ChunkRecord

ChunkInput = Tuple[str, List[float]]


def build_records(
    owner_id: str,
    document_id: str,
    class_label: str,
    chunks: Sequence[ChunkInput],
) -> List[ChunkRecord]:
    """
    Build ChunkRecords with sequence indices assigned in input order.
    """
    return [
        ChunkRecord(
            owner_id=owner_id,
            document_id=document_id,
            class_label=class_label,
            chunk_index=i,
            text=text,
            vector=list(vector),
        )
        for i, (text, vector) in enumerate(chunks)
    ]


class VectorIndexStore(ABC):
    """
    Durable per-owner, per-document collection of chunk records.
    """

    @abstractmethod
    async def insert_many(
        self,
        owner_id: str,
        document_id: str,
        class_label: str,
        chunks: Sequence[ChunkInput],
    ) -> int:
        """Insert chunks with indices 0..n-1. Returns the number inserted."""

    @abstractmethod
    async def delete_by_document(self, owner_id: str, document_id: str) -> int:
        """Remove all chunks of one document. Idempotent; returns count removed."""

    @abstractmethod
    async def list_by_owner(self, owner_id: str) -> List[ChunkRecord]:
        """Return every chunk belonging to the owner, in any order."""

    @abstractmethod
    async def replace_document(
        self,
        owner_id: str,
        document_id: str,
        class_label: str,
        chunks: Sequence[ChunkInput],
    ) -> int:
        """Delete and re-insert a document's chunks in one atomic step."""

    @abstractmethod
    async def delete_by_owner(self, owner_id: str) -> int:
        """Remove every chunk of an owner (account deletion cascade)."""

    @abstractmethod
    async def count_by_owner(self, owner_id: str) -> Dict[str, object]:
        """
        Return statistics: total_chunks, total_documents and a
        document_id -> chunk count mapping.
        """
