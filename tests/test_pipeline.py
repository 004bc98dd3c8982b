"""
RAG Pipeline Tests

Exercises ingest, query and delete against the in-memory store with a
deterministic keyword embedder.
"""

import pytest
from unittest.mock import AsyncMock

from syllabus_rag.core.errors import (
    DimensionMismatchError,
    EmbeddingServiceError,
    RagValidationError,
    VectorStoreError,
)
from syllabus_rag.rag.models import EXTRACTION_FAILED
from syllabus_rag.rag.pipeline import RagPipeline
from syllabus_rag.store import VectorIndexStore

from conftest import FailingEmbedder, KeywordEmbedder, make_syllabus


class TestIndexDocument:

    @pytest.mark.asyncio
    async def test_end_to_end_index_and_query(self, pipeline, store, embedder):
        count = await pipeline.index_document("u1", "d1", "CS 101", make_syllabus())
        assert count == 3

        results = await pipeline.query("u1", "When is the final exam?", top_k=2)

        assert len(results) == 2
        chunks = await store.list_by_owner("u1")
        chunk_two = next(c for c in chunks if c.chunk_index == 2)
        assert results[0].text == chunk_two.text
        assert results[0].class_label == "CS 101"
        assert results[0].document_id == "d1"
        assert results[0].chunk_index == 2
        assert results[0].score >= results[1].score

    @pytest.mark.asyncio
    async def test_sequence_indices_follow_chunker_order(self, pipeline, store, embedder):
        await pipeline.index_document("u1", "d1", "CS 101", make_syllabus())

        assert len(embedder.batch_calls) == 1
        emitted = embedder.batch_calls[0]

        stored = sorted(await store.list_by_owner("u1"), key=lambda c: c.chunk_index)
        assert [c.chunk_index for c in stored] == [0, 1, 2]
        assert [c.text for c in stored] == emitted

    @pytest.mark.asyncio
    async def test_empty_text_makes_no_calls(self, embedder):
        store = AsyncMock(spec=VectorIndexStore)
        pipeline = RagPipeline(store=store, embedder=embedder)

        assert await pipeline.index_document("u1", "d2", "Math", "") == 0
        assert embedder.call_count == 0
        store.insert_many.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", [None, EXTRACTION_FAILED, "   \n  "])
    async def test_unusable_text_indexes_nothing(self, pipeline, store, embedder, text):
        assert await pipeline.index_document("u1", "d2", "Math", text) == 0
        assert embedder.call_count == 0
        assert await store.list_by_owner("u1") == []

    @pytest.mark.asyncio
    async def test_embedding_failure_writes_nothing(self):
        store = AsyncMock(spec=VectorIndexStore)
        pipeline = RagPipeline(store=store, embedder=FailingEmbedder())

        with pytest.raises(EmbeddingServiceError):
            await pipeline.index_document("u1", "d1", "CS 101", "syllabus text")

        store.insert_many.assert_not_called()

    @pytest.mark.asyncio
    async def test_embedding_count_mismatch_is_service_error(self, store):
        embedder = KeywordEmbedder()
        embedder.embed_batch = AsyncMock(return_value=[[1.0, 0.0, 0.0]])
        pipeline = RagPipeline(store=store, embedder=embedder, chunk_size=10, overlap=2)

        with pytest.raises(EmbeddingServiceError):
            await pipeline.index_document("u1", "d1", "CS 101", make_syllabus(30, 0))

        assert await store.list_by_owner("u1") == []

    @pytest.mark.asyncio
    async def test_safe_index_reports_warning_instead_of_raising(self, store):
        pipeline = RagPipeline(store=store, embedder=FailingEmbedder())

        outcome = await pipeline.safe_index_document("u1", "d1", "CS 101", "quiz one")

        assert outcome.chunk_count == 0
        assert "EmbeddingServiceError" in outcome.warning
        assert await store.list_by_owner("u1") == []

    @pytest.mark.asyncio
    async def test_safe_index_success_has_no_warning(self, pipeline):
        outcome = await pipeline.safe_index_document("u1", "d1", "CS 101", "quiz one")
        assert outcome.chunk_count == 1
        assert outcome.warning is None

    @pytest.mark.asyncio
    async def test_indexing_same_document_twice_requires_reindex(self, pipeline, store):
        await pipeline.index_document("u1", "d1", "CS 101", "lecture one")

        with pytest.raises(VectorStoreError):
            await pipeline.index_document("u1", "d1", "CS 101", "quiz two")

        outcome = await pipeline.safe_index_document("u1", "d1", "CS 101", "quiz two")
        assert outcome.chunk_count == 0
        assert "VectorStoreError" in outcome.warning

        assert [c.text for c in await store.list_by_owner("u1")] == ["lecture one"]

    @pytest.mark.asyncio
    async def test_missing_document_id_rejected(self, pipeline):
        with pytest.raises(RagValidationError):
            await pipeline.index_document("u1", "", "CS 101", "text")


class TestReindex:

    @pytest.mark.asyncio
    async def test_reindex_replaces_previous_chunks(self, pipeline, store):
        await pipeline.index_document("u1", "d1", "CS 101", make_syllabus())
        count = await pipeline.reindex_document("u1", "d1", "CS 102", "quiz on friday")

        chunks = await store.list_by_owner("u1")
        assert count == 1
        assert [(c.text, c.class_label, c.chunk_index) for c in chunks] == [
            ("quiz on friday", "CS 102", 0)
        ]

    @pytest.mark.asyncio
    async def test_reindex_failure_keeps_old_chunks(self, store):
        good = RagPipeline(store=store, embedder=KeywordEmbedder())
        await good.index_document("u1", "d1", "CS 101", "lecture notes")

        failing = RagPipeline(store=store, embedder=FailingEmbedder())
        with pytest.raises(EmbeddingServiceError):
            await failing.reindex_document("u1", "d1", "CS 101", "new text")

        chunks = await store.list_by_owner("u1")
        assert [c.text for c in chunks] == ["lecture notes"]

    @pytest.mark.asyncio
    async def test_reindex_with_empty_text_clears_document(self, pipeline, store):
        await pipeline.index_document("u1", "d1", "CS 101", "lecture notes")
        assert await pipeline.reindex_document("u1", "d1", "CS 101", "") == 0
        assert await store.list_by_owner("u1") == []


class TestQuery:

    @pytest.mark.asyncio
    async def test_new_owner_gets_empty_result_without_embedding(self, pipeline, embedder):
        assert await pipeline.query("nobody", "what is due?", top_k=5) == []
        assert embedder.call_count == 0

    @pytest.mark.asyncio
    async def test_tenant_isolation(self, pipeline, store):
        await pipeline.index_document("A", "d1", "CS 101", "lecture alpha lecture beta")
        await pipeline.index_document("B", "d1", "HIST 200", "final gamma final delta")

        assert all(c.owner_id == "A" for c in await store.list_by_owner("A"))

        results = await pipeline.query("A", "final exam", top_k=10)
        assert [r.text for r in results] == ["lecture alpha lecture beta"]
        assert all(r.class_label == "CS 101" for r in results)

    @pytest.mark.asyncio
    async def test_query_failure_propagates(self, store):
        await store.insert_many("u1", "d1", "CS 101", [("text", [1.0, 0.0, 0.0])])
        pipeline = RagPipeline(store=store, embedder=FailingEmbedder())

        with pytest.raises(EmbeddingServiceError):
            await pipeline.query("u1", "anything", top_k=3)

    @pytest.mark.asyncio
    async def test_model_change_without_reindex_fails_closed(self, store):
        await store.insert_many("u1", "d1", "CS 101", [("old chunk", [1.0, 0.0])])
        pipeline = RagPipeline(store=store, embedder=KeywordEmbedder())

        with pytest.raises(DimensionMismatchError):
            await pipeline.query("u1", "final", top_k=3)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("top_k", [0, -1, 51])
    async def test_top_k_out_of_range_rejected(self, pipeline, top_k):
        with pytest.raises(RagValidationError):
            await pipeline.query("u1", "question", top_k=top_k)

    @pytest.mark.asyncio
    async def test_blank_question_rejected(self, pipeline):
        with pytest.raises(RagValidationError):
            await pipeline.query("u1", "   ", top_k=3)


class TestRemove:

    @pytest.mark.asyncio
    async def test_delete_removes_every_chunk(self, pipeline, store):
        await pipeline.index_document("u1", "d1", "CS 101", make_syllabus())
        await pipeline.index_document("u1", "d2", "MATH 1", "quiz quiz quiz")

        removed = await pipeline.remove_document("u1", "d1")

        assert removed == 3
        remaining = await store.list_by_owner("u1")
        assert {c.document_id for c in remaining} == {"d2"}

        results = await pipeline.query("u1", "final lecture quiz", top_k=10)
        assert all(r.document_id == "d2" for r in results)

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self, pipeline):
        assert await pipeline.remove_document("u1", "missing") == 0
        assert await pipeline.remove_document("u1", "missing") == 0

    @pytest.mark.asyncio
    async def test_delete_does_not_touch_other_owner(self, pipeline, store):
        await pipeline.index_document("A", "d1", "CS 101", "lecture one")
        await pipeline.index_document("B", "d1", "CS 101", "lecture two")

        await pipeline.remove_document("A", "d1")

        assert await store.list_by_owner("A") == []
        assert [c.text for c in await store.list_by_owner("B")] == ["lecture two"]

    @pytest.mark.asyncio
    async def test_remove_owner_and_stats(self, pipeline):
        await pipeline.index_document("u1", "d1", "CS 101", make_syllabus())
        await pipeline.index_document("u1", "d2", "MATH 1", "quiz")

        stats = await pipeline.stats("u1")
        assert stats == {
            "total_chunks": 4,
            "total_documents": 2,
            "documents": {"d1": 3, "d2": 1},
        }

        assert await pipeline.remove_owner("u1") == 4
        assert (await pipeline.stats("u1"))["total_chunks"] == 0


def test_invalid_chunk_configuration_rejected(store, embedder):
    with pytest.raises(RagValidationError):
        RagPipeline(store=store, embedder=embedder, chunk_size=50, overlap=50)
