from typing import List, Dict, Optional
import logging

import httpx

from ..config import Settings, settings as default_settings
from ..core.errors import CompletionServiceError
from .provider import resolve_endpoint

logger = logging.getLogger("syllabus_rag.llm")


class LLMClient:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        model: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or default_settings
        self.model = model or self.settings.chat_model
        self._transport = transport

    async def chat(
        self,
        system_prompt: str,
        messages: List[Dict[str, str]],
        temperature: float = 0.3,
        max_tokens: int = 2000,
    ) -> str:
        """
        Returns the assistant message content, or a fixed placeholder when
        the provider replies with an empty message.
        """
        endpoint = resolve_endpoint(self.settings, "chat/completions", self.model)
        payload = {
            **endpoint.payload,
            "messages": [{"role": "system", "content": system_prompt}] + messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.ai_timeout_seconds,
                transport=self._transport,
            ) as client:
                resp = await client.post(
                    endpoint.url,
                    json=payload,
                    headers=endpoint.headers,
                    params=endpoint.params,
                )
            resp.raise_for_status()
            data = resp.json()
            content = data["choices"][0]["message"].get("content")
        except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as exc:
            logger.error("Chat completion failed (%s)", type(exc).__name__)
            raise CompletionServiceError(
                f"Chat completion failed: {type(exc).__name__}"
            ) from exc

        return content or "No response generated."
