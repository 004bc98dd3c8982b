"""
In-Memory Vector Index Store

Process-local store used for development and tests. Records are grouped per
(owner, document); writers build the complete replacement list before
swapping it in under the lock, so readers never observe a partially written
or partially deleted document.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Sequence, Tuple

from ..core.errors import VectorStoreError
from ..rag.models import ChunkRecord
from .base import ChunkInput, VectorIndexStore, build_records

logger = logging.getLogger("syllabus_rag.store")


class InMemoryVectorStore(VectorIndexStore):

    def __init__(self) -> None:
        self._docs: Dict[Tuple[str, str], List[ChunkRecord]] = {}
        self._lock = asyncio.Lock()

    async def insert_many(
        self,
        owner_id: str,
        document_id: str,
        class_label: str,
        chunks: Sequence[ChunkInput],
    ) -> int:
        if not chunks:
            return 0

        # Validation happens before the lock; a bad record aborts the
        # whole call with nothing stored.
        records = build_records(owner_id, document_id, class_label, chunks)

        async with self._lock:
            key = (owner_id, document_id)
            # Same rule as the unique (owner, document, chunk_index) constraint
            if key in self._docs:
                raise VectorStoreError(
                    f"Document {document_id} already has indexed chunks; "
                    "use replace_document to re-index it."
                )
            self._docs[key] = records

        return len(records)

    async def delete_by_document(self, owner_id: str, document_id: str) -> int:
        async with self._lock:
            removed = self._docs.pop((owner_id, document_id), [])
        return len(removed)

    async def list_by_owner(self, owner_id: str) -> List[ChunkRecord]:
        async with self._lock:
            return [
                record
                for (owner, _), records in self._docs.items()
                if owner == owner_id
                for record in records
            ]

    async def replace_document(
        self,
        owner_id: str,
        document_id: str,
        class_label: str,
        chunks: Sequence[ChunkInput],
    ) -> int:
        records = build_records(owner_id, document_id, class_label, chunks)

        async with self._lock:
            if records:
                self._docs[(owner_id, document_id)] = records
            else:
                self._docs.pop((owner_id, document_id), None)

        return len(records)

    async def delete_by_owner(self, owner_id: str) -> int:
        async with self._lock:
            keys = [key for key in self._docs if key[0] == owner_id]
            removed = sum(len(self._docs.pop(key)) for key in keys)

        logger.info("Removed %d chunks for owner %s", removed, owner_id)
        return removed

    async def count_by_owner(self, owner_id: str) -> Dict[str, object]:
        async with self._lock:
            per_document = {
                doc_id: len(records)
                for (owner, doc_id), records in self._docs.items()
                if owner == owner_id
            }

        return {
            "total_chunks": sum(per_document.values()),
            "total_documents": len(per_document),
            "documents": per_document,
        }
