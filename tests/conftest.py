import pytest
from typing import List, Sequence

from syllabus_rag.config import Settings
from syllabus_rag.core.errors import EmbeddingServiceError
from syllabus_rag.rag.pipeline import RagPipeline
from syllabus_rag.store import InMemoryVectorStore


class KeywordEmbedder:
    """
    Deterministic stand-in for the embedding client.

    Each vector counts the words starting with each keyword, so texts about
    the same topic point in the same direction.
    """

    def __init__(self, keywords=("lecture", "final", "quiz")):
        self.keywords = keywords
        self.batch_calls: List[List[str]] = []
        self.single_calls: List[str] = []

    def vector_for(self, text: str) -> List[float]:
        words = text.lower().split()
        return [float(sum(w.startswith(k) for w in words)) for k in self.keywords]

    async def embed_batch(self, texts: Sequence[str]) -> List[List[float]]:
        self.batch_calls.append(list(texts))
        return [self.vector_for(t) for t in texts]

    async def embed(self, text: str) -> List[float]:
        self.single_calls.append(text)
        return self.vector_for(text)

    @property
    def call_count(self) -> int:
        return len(self.batch_calls) + len(self.single_calls)


class FailingEmbedder(KeywordEmbedder):
    async def embed_batch(self, texts):
        self.batch_calls.append(list(texts))
        raise EmbeddingServiceError("provider unreachable")

    async def embed(self, text):
        self.single_calls.append(text)
        raise EmbeddingServiceError("provider unreachable")


def make_syllabus(lecture_words: int = 900, final_words: int = 300) -> str:
    """Synthetic syllabus: lecture vocabulary first, then final-exam vocabulary."""
    words = [f"lecture{i}" for i in range(lecture_words)]
    words += [f"final{i}" for i in range(final_words)]
    return " ".join(words)


@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        openai_api_key="sk-test",
        vector_store_backend="memory",
    )


@pytest.fixture
def embedder():
    return KeywordEmbedder()


@pytest.fixture
def store():
    return InMemoryVectorStore()


@pytest.fixture
def pipeline(store, embedder):
    return RagPipeline(store=store, embedder=embedder, chunk_size=500, overlap=50)
