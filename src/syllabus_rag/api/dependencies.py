from functools import lru_cache

from ..config import settings
from ..embeddings.embedder import Embedder
from ..llm.answer import AnswerComposer
from ..llm.client import LLMClient
from ..llm.extraction import DateExtractor
from ..rag.pipeline import RagPipeline, build_pipeline
from ..store import InMemoryVectorStore, SqlVectorStore, VectorIndexStore, get_session_factory


@lru_cache
def get_llm_client() -> LLMClient:
    return LLMClient(settings)


@lru_cache
def get_embedder() -> Embedder:
    return Embedder(settings)


@lru_cache
def get_vector_store() -> VectorIndexStore:
    if settings.vector_store_backend == "memory":
        return InMemoryVectorStore()
    return SqlVectorStore(get_session_factory())


@lru_cache
def get_pipeline() -> RagPipeline:
    return build_pipeline(get_vector_store(), get_embedder(), settings)


@lru_cache
def get_answer_composer() -> AnswerComposer:
    return AnswerComposer(get_llm_client())


@lru_cache
def get_date_extractor() -> DateExtractor:
    return DateExtractor(get_llm_client())
