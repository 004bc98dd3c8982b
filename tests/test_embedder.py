import json

import httpx
import pytest

from syllabus_rag.config import Settings
from syllabus_rag.core.errors import ConfigurationError, EmbeddingServiceError
from syllabus_rag.embeddings.embedder import Embedder
from syllabus_rag.llm.provider import credentials_configured


def _vector_for(text: str):
    return [float(len(text)), 1.0]


class RecordingProvider:
    """httpx.MockTransport handler that mimics the embeddings endpoint."""

    def __init__(self, reverse=False, status_code=200):
        self.requests = []
        self.reverse = reverse
        self.status_code = status_code

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append((request, body))

        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"error": "nope"})

        data = [
            {"index": i, "embedding": _vector_for(text)}
            for i, text in enumerate(body["input"])
        ]
        if self.reverse:
            data.reverse()
        return httpx.Response(200, json={"data": data})


def _embedder(settings, handler, **kwargs):
    return Embedder(settings, transport=httpx.MockTransport(handler), **kwargs)


@pytest.mark.asyncio
async def test_batches_are_limited_and_sequential(test_settings):
    provider = RecordingProvider()
    embedder = _embedder(test_settings, provider)
    texts = [f"chunk {'x' * i}" for i in range(40)]

    vectors = await embedder.embed_batch(texts)

    assert [len(body["input"]) for _, body in provider.requests] == [16, 16, 8]
    assert vectors == [_vector_for(t) for t in texts]


@pytest.mark.asyncio
async def test_results_are_reordered_by_index(test_settings):
    provider = RecordingProvider(reverse=True)
    embedder = _embedder(test_settings, provider)
    texts = ["a", "bb", "ccc"]

    assert await embedder.embed_batch(texts) == [_vector_for(t) for t in texts]


@pytest.mark.asyncio
async def test_empty_batch_makes_no_request(test_settings):
    provider = RecordingProvider()
    embedder = _embedder(test_settings, provider)

    assert await embedder.embed_batch([]) == []
    assert provider.requests == []


@pytest.mark.asyncio
async def test_openai_request_shape(test_settings):
    provider = RecordingProvider()
    embedder = _embedder(test_settings, provider)

    await embedder.embed("when is the midterm?")

    request, body = provider.requests[0]
    assert str(request.url) == "https://api.openai.com/v1/embeddings"
    assert request.headers["Authorization"] == "Bearer sk-test"
    assert body["model"] == "text-embedding-3-small"
    assert body["input"] == ["when is the midterm?"]


@pytest.mark.asyncio
async def test_azure_request_shape():
    settings = Settings(
        _env_file=None,
        ai_provider="azure",
        azure_openai_endpoint="https://campus.openai.azure.com/",
        azure_openai_api_key="azure-key",
        embedding_model="embed-deploy",
    )
    provider = RecordingProvider()
    embedder = _embedder(settings, provider)

    await embedder.embed("syllabus")

    request, body = provider.requests[0]
    assert request.url.path == "/openai/deployments/embed-deploy/embeddings"
    assert request.url.params["api-version"] == "2024-08-01-preview"
    assert request.headers["api-key"] == "azure-key"
    assert "model" not in body


@pytest.mark.asyncio
async def test_http_error_becomes_embedding_service_error(test_settings):
    embedder = _embedder(test_settings, RecordingProvider(status_code=401))

    with pytest.raises(EmbeddingServiceError):
        await embedder.embed_batch(["text"])


@pytest.mark.asyncio
async def test_transport_error_becomes_embedding_service_error(test_settings):
    def unreachable(request):
        raise httpx.ConnectError("connection refused", request=request)

    embedder = _embedder(test_settings, unreachable)

    with pytest.raises(EmbeddingServiceError):
        await embedder.embed("text")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"data": "nope"},
        {"data": [{"vector": [1.0]}]},
        {"data": [{"embedding": ["a", "b"]}]},
        {"data": [{"embedding": []}]},
        {"data": []},
    ],
)
async def test_malformed_responses_rejected(test_settings, payload):
    embedder = _embedder(test_settings, lambda request: httpx.Response(200, json=payload))

    with pytest.raises(EmbeddingServiceError):
        await embedder.embed_batch(["text"])


@pytest.mark.asyncio
async def test_blank_text_rejected_without_request(test_settings):
    provider = RecordingProvider()
    embedder = _embedder(test_settings, provider)

    with pytest.raises(EmbeddingServiceError):
        await embedder.embed("   ")
    assert provider.requests == []


@pytest.mark.asyncio
async def test_missing_credentials_raise_at_first_use():
    settings = Settings(_env_file=None, openai_api_key=None)
    provider = RecordingProvider()
    embedder = _embedder(settings, provider)

    with pytest.raises(ConfigurationError):
        await embedder.embed_batch(["text"])
    assert provider.requests == []


@pytest.mark.parametrize(
    "overrides, expected",
    [
        ({"openai_api_key": "sk-test"}, True),
        ({"openai_api_key": None}, False),
        ({"ai_provider": "azure", "azure_openai_api_key": "k"}, False),
        (
            {
                "ai_provider": "azure",
                "azure_openai_endpoint": "https://campus.openai.azure.com",
                "azure_openai_api_key": "k",
            },
            True,
        ),
    ],
)
def test_credentials_configured_matches_endpoint_resolution(overrides, expected):
    settings = Settings(_env_file=None, **overrides)
    assert credentials_configured(settings) is expected
