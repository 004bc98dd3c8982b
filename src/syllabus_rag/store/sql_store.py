"""
SQL Vector Index Store

PostgreSQL + pgvector backed chunk storage. Similarity is computed by the
in-process ranker over the owner's full chunk list, so the database is only
asked for scoped reads and transactional writes.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence

from sqlalchemy import select, delete, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..core.errors import VectorStoreError
from ..rag.models import ChunkRecord
from .base import ChunkInput, VectorIndexStore, build_records
from .models import ChunkEmbedding

logger = logging.getLogger("syllabus_rag.store")


class SqlVectorStore(VectorIndexStore):
    """
    PostgreSQL-backed vector store.

    Each public operation opens its own session and runs inside a single
    transaction, so a failure midway rolls back every row of that call.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """
        Parameters
        ----------
        session_factory : async_sessionmaker[AsyncSession]
            Factory producing sessions bound to the target database.
        """
        self._session_factory = session_factory

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _add_records(session: AsyncSession, records: List[ChunkRecord]) -> None:
        for record in records:
            session.add(
                ChunkEmbedding(
                    owner_id=record.owner_id,
                    document_id=record.document_id,
                    class_label=record.class_label,
                    chunk_index=record.chunk_index,
                    text=record.text,
                    embedding=record.vector,
                )
            )

    @staticmethod
    def _to_record(row: ChunkEmbedding) -> ChunkRecord:
        return ChunkRecord(
            owner_id=row.owner_id,
            document_id=row.document_id,
            class_label=row.class_label,
            chunk_index=row.chunk_index,
            text=row.text,
            vector=[float(x) for x in row.embedding],
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def insert_many(
        self,
        owner_id: str,
        document_id: str,
        class_label: str,
        chunks: Sequence[ChunkInput],
    ) -> int:
        if not chunks:
            return 0

        records = build_records(owner_id, document_id, class_label, chunks)

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    self._add_records(session, records)
        except SQLAlchemyError as exc:
            logger.error(
                "Failed to insert %d chunks for document %s: %s",
                len(records),
                document_id,
                type(exc).__name__,
            )
            raise VectorStoreError(
                f"Chunk insert failed: {type(exc).__name__}"
            ) from exc

        return len(records)

    async def delete_by_document(self, owner_id: str, document_id: str) -> int:
        stmt = delete(ChunkEmbedding).where(
            ChunkEmbedding.owner_id == owner_id,
            ChunkEmbedding.document_id == document_id,
        )

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(stmt)
        except SQLAlchemyError as exc:
            raise VectorStoreError(
                f"Chunk delete failed: {type(exc).__name__}"
            ) from exc

        return result.rowcount or 0

    async def list_by_owner(self, owner_id: str) -> List[ChunkRecord]:
        stmt = (
            select(ChunkEmbedding)
            .where(ChunkEmbedding.owner_id == owner_id)
            .order_by(ChunkEmbedding.document_id, ChunkEmbedding.chunk_index)
        )

        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                rows = result.scalars().all()
        except SQLAlchemyError as exc:
            raise VectorStoreError(
                f"Chunk listing failed: {type(exc).__name__}"
            ) from exc

        return [self._to_record(row) for row in rows]

    async def replace_document(
        self,
        owner_id: str,
        document_id: str,
        class_label: str,
        chunks: Sequence[ChunkInput],
    ) -> int:
        records = build_records(owner_id, document_id, class_label, chunks)
        stmt = delete(ChunkEmbedding).where(
            ChunkEmbedding.owner_id == owner_id,
            ChunkEmbedding.document_id == document_id,
        )

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await session.execute(stmt)
                    self._add_records(session, records)
        except SQLAlchemyError as exc:
            raise VectorStoreError(
                f"Chunk replace failed: {type(exc).__name__}"
            ) from exc

        return len(records)

    async def delete_by_owner(self, owner_id: str) -> int:
        stmt = delete(ChunkEmbedding).where(ChunkEmbedding.owner_id == owner_id)

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(stmt)
        except SQLAlchemyError as exc:
            raise VectorStoreError(
                f"Owner delete failed: {type(exc).__name__}"
            ) from exc

        removed = result.rowcount or 0
        logger.info("Removed %d chunks for owner %s", removed, owner_id)
        return removed

    async def count_by_owner(self, owner_id: str) -> Dict[str, object]:
        stmt = (
            select(ChunkEmbedding.document_id, func.count().label("chunk_count"))
            .where(ChunkEmbedding.owner_id == owner_id)
            .group_by(ChunkEmbedding.document_id)
        )

        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                rows = result.all()
        except SQLAlchemyError as exc:
            raise VectorStoreError(
                f"Chunk stats failed: {type(exc).__name__}"
            ) from exc

        per_document = {row.document_id: row.chunk_count for row in rows}

        return {
            "total_chunks": sum(per_document.values()),
            "total_documents": len(per_document),
            "documents": per_document,
        }
