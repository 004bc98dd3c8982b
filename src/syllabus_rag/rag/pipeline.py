"""
RAG Pipeline

Composes the chunker, embedding client, vector index store and similarity
ranker into the three operations the rest of the application uses:

- index_document: chunk -> embed -> store
- query: list owner's chunks -> embed question -> rank
- remove_document: delete a document's chunks

Failure Semantics
-----------------
- An embedding failure during indexing aborts before any store write.
- An embedding failure during a query propagates to the caller.
- safe_index_document wraps indexing for upload flows that must not fail.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

from ..core.errors import EmbeddingServiceError, RagError, RagValidationError
from ..embeddings.embedder import Embedder
from ..store.base import VectorIndexStore
from .chunker import DEFAULT_CHUNK_SIZE, DEFAULT_OVERLAP, chunk_text, validate_chunking
from .models import EXTRACTION_FAILED, IndexOutcome, RankedPassage, _ExtractionFailed
from .ranker import rank

logger = logging.getLogger("syllabus_rag.pipeline")

DocumentText = Union[str, _ExtractionFailed, None]


class RagPipeline:
    """
    Retrieval-augmented generation index and query orchestrator.

    All collaborators are injected; the pipeline holds no state of its own
    beyond its configuration.
    """

    def __init__(
        self,
        store: VectorIndexStore,
        embedder: Embedder,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        overlap: int = DEFAULT_OVERLAP,
        max_top_k: int = 50,
    ) -> None:
        """
        Parameters
        ----------
        store : VectorIndexStore
            Persistence for chunk records.
        embedder : Embedder
            Client producing vectors for chunks and questions.
        chunk_size : int
            Words per chunk.
        overlap : int
            Words shared by consecutive chunks. Must be < chunk_size.
        max_top_k : int
            Upper bound accepted for query top_k.

        Raises
        ------
        RagValidationError
            If the chunking configuration can never advance.
        """
        try:
            validate_chunking(chunk_size, overlap)
        except ValueError as exc:
            raise RagValidationError(str(exc)) from exc

        self._store = store
        self._embedder = embedder
        self.chunk_size = chunk_size
        self.overlap = overlap
        self.max_top_k = max_top_k

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _require_ids(**ids: str) -> None:
        for name, value in ids.items():
            if not value or not str(value).strip():
                raise RagValidationError(f"{name} is required")

    def _chunks_for(self, text: DocumentText) -> List[str]:
        if text is None or text is EXTRACTION_FAILED:
            return []
        return chunk_text(text, self.chunk_size, self.overlap)

    async def _embed_chunks(self, chunks: List[str]) -> List[List[float]]:
        vectors = await self._embedder.embed_batch(chunks)
        if len(vectors) != len(chunks):
            raise EmbeddingServiceError(
                f"Expected {len(chunks)} embeddings, got {len(vectors)}."
            )
        return vectors

    # ------------------------------------------------------------------
    # Ingest
    # ------------------------------------------------------------------

    async def index_document(
        self,
        owner_id: str,
        document_id: str,
        class_label: str,
        text: DocumentText,
    ) -> int:
        """
        Chunk, embed and store a document's text.

        Returns
        -------
        int
            Number of chunks indexed. 0 for empty text or failed extraction,
            in which case neither the embedder nor the store is called.
        """
        self._require_ids(owner_id=owner_id, document_id=document_id)

        chunks = self._chunks_for(text)
        if not chunks:
            logger.info("No indexable text for document %s", document_id)
            return 0

        vectors = await self._embed_chunks(chunks)
        count = await self._store.insert_many(
            owner_id,
            document_id,
            class_label,
            list(zip(chunks, vectors)),
        )

        logger.info("Indexed %d chunks for document %s", count, document_id)
        return count

    async def reindex_document(
        self,
        owner_id: str,
        document_id: str,
        class_label: str,
        text: DocumentText,
    ) -> int:
        """
        Replace a document's chunks. The old chunks survive an embedding
        failure because the swap happens only after all vectors exist.
        """
        self._require_ids(owner_id=owner_id, document_id=document_id)

        chunks = self._chunks_for(text)
        vectors = await self._embed_chunks(chunks) if chunks else []

        count = await self._store.replace_document(
            owner_id,
            document_id,
            class_label,
            list(zip(chunks, vectors)),
        )

        logger.info("Re-indexed document %s with %d chunks", document_id, count)
        return count

    async def safe_index_document(
        self,
        owner_id: str,
        document_id: str,
        class_label: str,
        text: DocumentText,
        replace: bool = False,
    ) -> IndexOutcome:
        """
        Index without raising on service failures.

        Upload flows call this so that storing the raw document never
        depends on the embedding provider being available.
        """
        operation = self.reindex_document if replace else self.index_document

        try:
            count = await operation(owner_id, document_id, class_label, text)
        except RagError as exc:
            logger.exception("Indexing failed for document %s", document_id)
            return IndexOutcome(
                chunk_count=0,
                warning=f"Document stored but not indexed ({type(exc).__name__}).",
            )

        return IndexOutcome(chunk_count=count)

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    async def query(
        self,
        owner_id: str,
        question: str,
        top_k: int = 5,
    ) -> List[RankedPassage]:
        """
        Return the owner's passages most similar to ``question``.

        Parameters
        ----------
        owner_id : str
            Requesting user; only their chunks are considered.
        question : str
            Natural-language question.
        top_k : int
            Maximum number of passages, 1..max_top_k.

        Returns
        -------
        List[RankedPassage]
            Highest score first. Empty, without calling the embedder, when
            the owner has nothing indexed.

        Raises
        ------
        RagValidationError
            For a blank question or out-of-range top_k.
        EmbeddingServiceError
            If the question cannot be embedded.
        DimensionMismatchError
            If the index was built with a different embedding model.
        """
        self._require_ids(owner_id=owner_id)
        if not question or not question.strip():
            raise RagValidationError("question must not be empty")
        if not 1 <= top_k <= self.max_top_k:
            raise RagValidationError(
                f"top_k must be between 1 and {self.max_top_k}, got {top_k}"
            )

        candidates = await self._store.list_by_owner(owner_id)
        if not candidates:
            return []

        query_vector = await self._embedder.embed(question)
        ranked = rank(query_vector, candidates, top_k)

        return [
            RankedPassage(
                text=record.text,
                class_label=record.class_label,
                document_id=record.document_id,
                chunk_index=record.chunk_index,
                score=score,
            )
            for record, score in ranked
        ]

    # ------------------------------------------------------------------
    # Delete / stats
    # ------------------------------------------------------------------

    async def remove_document(self, owner_id: str, document_id: str) -> int:
        """Remove a document's chunks. Idempotent."""
        self._require_ids(owner_id=owner_id, document_id=document_id)
        return await self._store.delete_by_document(owner_id, document_id)

    async def remove_owner(self, owner_id: str) -> int:
        self._require_ids(owner_id=owner_id)
        return await self._store.delete_by_owner(owner_id)

    async def stats(self, owner_id: str) -> Dict[str, Any]:
        self._require_ids(owner_id=owner_id)
        return await self._store.count_by_owner(owner_id)


def build_pipeline(
    store: VectorIndexStore,
    embedder: Embedder,
    settings: Optional[Any] = None,
) -> RagPipeline:
    """
    Construct a pipeline from settings-driven chunking and top-k limits.
    """
    if settings is None:
        from ..config import settings as default_settings
        settings = default_settings

    return RagPipeline(
        store=store,
        embedder=embedder,
        chunk_size=settings.chunk_size,
        overlap=settings.chunk_overlap,
        max_top_k=settings.max_top_k,
    )
