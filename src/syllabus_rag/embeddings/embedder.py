"""
Embedding Client

This module implements the embedding client used by the RAG pipeline. It
talks to the OpenAI (or Azure OpenAI) embeddings API and is responsible for:

- Batching inputs to respect the provider's per-call limit
- Issuing batches sequentially (one request in flight per call)
- Network and transport error isolation
- Strict response validation, including order and count

Instances are constructed explicitly and injected; there is no module-level
client.
"""

from __future__ import annotations

from typing import List, Sequence, Optional
import logging
import httpx

from ..config import Settings, settings as default_settings
from ..core.errors import EmbeddingServiceError
from ..llm.provider import resolve_endpoint

logger = logging.getLogger("syllabus_rag.embedder")


class Embedder:
    """
    Asynchronous embedding generator.

    This class performs no caching and assumes the caller handles
    persistence of the resulting vectors.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        model: Optional[str] = None,
        batch_size: Optional[int] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize an Embedder.

        Parameters
        ----------
        settings : Optional[Settings]
            Configuration source. Defaults to the process settings.

        model : Optional[str]
            Override for the embedding model (or Azure deployment).

        batch_size : Optional[int]
            Maximum texts per request. Defaults to settings.embedding_batch_size.

        timeout : Optional[float]
            HTTP timeout for each request.

        transport : Optional[httpx.AsyncBaseTransport]
            Custom transport, e.g. httpx.MockTransport in tests.
        """
        self.settings = settings or default_settings
        self.model = model or self.settings.embedding_model
        self.batch_size = batch_size or self.settings.embedding_batch_size
        self.timeout = timeout or self.settings.ai_timeout_seconds
        self._transport = transport

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def embed(self, text: str) -> List[float]:
        """
        Embed a single text (typically a question).

        Raises
        ------
        EmbeddingServiceError
            If the text is blank or the provider call fails.
        """
        if not text or not text.strip():
            raise EmbeddingServiceError("Cannot embed empty text.")

        vectors = await self.embed_batch([text])
        return vectors[0]

    async def embed_batch(self, texts: Sequence[str]) -> List[List[float]]:
        """
        Generate embeddings for a sequence of input texts.

        Parameters
        ----------
        texts : Sequence[str]
            Input strings. Output position i corresponds to texts[i].

        Returns
        -------
        List[List[float]]
            One embedding per input, in input order.

        Raises
        ------
        ConfigurationError
            If provider credentials are missing.
        EmbeddingServiceError
            If any batch fails or the response is malformed.
        """
        if not texts:
            return []

        endpoint = resolve_endpoint(self.settings, "embeddings", self.model)
        all_embeddings: List[List[float]] = []

        async with httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            for start in range(0, len(texts), self.batch_size):
                batch = list(texts[start : start + self.batch_size])
                payload = {**endpoint.payload, "input": batch}

                try:
                    response = await client.post(
                        endpoint.url,
                        json=payload,
                        headers=endpoint.headers,
                        params=endpoint.params,
                    )
                    response.raise_for_status()
                    data = response.json()
                except (httpx.HTTPError, ValueError) as exc:
                    logger.error(
                        "Embedding request failed (%s): batch size=%d, error=%s",
                        type(exc).__name__,
                        len(batch),
                        str(exc),
                    )
                    raise EmbeddingServiceError(
                        f"Embedding generation failed: {type(exc).__name__}"
                    ) from exc

                embeddings = self._extract_embeddings(data)
                if len(embeddings) != len(batch):
                    raise EmbeddingServiceError(
                        f"Provider returned {len(embeddings)} embeddings "
                        f"for {len(batch)} inputs."
                    )
                all_embeddings.extend(embeddings)

        return all_embeddings

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _extract_embeddings(data: dict) -> List[List[float]]:
        """
        Parse and validate embedding output format.

        OpenAI returns:
            { "data": [ {"index": 0, "embedding": [...]}, ... ] }

        Records are re-ordered by ``index`` when the provider sends it.

        Raises
        ------
        EmbeddingServiceError
            If the API returns unexpected structure.
        """
        if not isinstance(data, dict) or "data" not in data:
            raise EmbeddingServiceError("Embedding response missing 'data' field.")

        records = data["data"]
        if not isinstance(records, list):
            raise EmbeddingServiceError("'data' field must be a list.")

        for index, record in enumerate(records):
            if not isinstance(record, dict) or "embedding" not in record:
                raise EmbeddingServiceError(
                    f"Malformed embedding record at index {index}."
                )

        if all(isinstance(r.get("index"), int) for r in records):
            records = sorted(records, key=lambda r: r["index"])

        embeddings: List[List[float]] = []

        for index, record in enumerate(records):
            emb = record["embedding"]
            if not isinstance(emb, list) or not emb or not all(
                isinstance(x, (float, int)) and not isinstance(x, bool) for x in emb
            ):
                raise EmbeddingServiceError(
                    f"Invalid embedding vector at index {index}: must be float list."
                )

            embeddings.append([float(x) for x in emb])

        return embeddings
