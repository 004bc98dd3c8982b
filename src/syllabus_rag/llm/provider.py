"""
AI Provider Endpoint Resolution

Maps the configured provider (OpenAI or Azure OpenAI) onto the URL, headers
and payload fields of an OpenAI-compatible REST call. Credentials are
checked here, at first use, rather than at startup.
"""

from __future__ import annotations

from typing import Dict, Literal, NamedTuple

from ..config import Settings
from ..core.errors import ConfigurationError

Operation = Literal["embeddings", "chat/completions"]


class Endpoint(NamedTuple):
    url: str
    headers: Dict[str, str]
    params: Dict[str, str]
    # Extra payload fields (the model name for OpenAI; Azure puts the
    # deployment in the URL instead).
    payload: Dict[str, str]


def resolve_endpoint(settings: Settings, operation: Operation, model: str) -> Endpoint:
    """
    Build the endpoint description for ``operation`` against ``model``.

    Raises
    ------
    ConfigurationError
        If the selected provider is missing its key or endpoint.
    """
    if settings.ai_provider == "azure":
        if not settings.azure_openai_endpoint or settings.azure_openai_api_key is None:
            raise ConfigurationError(
                "Azure OpenAI credentials not configured. Set "
                "AZURE_OPENAI_ENDPOINT and AZURE_OPENAI_API_KEY."
            )
        base = settings.azure_openai_endpoint.rstrip("/")
        return Endpoint(
            url=f"{base}/openai/deployments/{model}/{operation}",
            headers={"api-key": settings.azure_openai_api_key.get_secret_value()},
            params={"api-version": settings.azure_openai_api_version},
            payload={},
        )

    if settings.openai_api_key is None:
        raise ConfigurationError("OpenAI credentials not configured. Set OPENAI_API_KEY.")

    return Endpoint(
        url=f"{settings.openai_base_url.rstrip('/')}/{operation}",
        headers={"Authorization": f"Bearer {settings.openai_api_key.get_secret_value()}"},
        params={},
        payload={"model": model},
    )


def credentials_configured(settings: Settings) -> bool:
    """True when the selected provider has what resolve_endpoint needs."""
    if settings.ai_provider == "azure":
        return bool(settings.azure_openai_endpoint) and settings.azure_openai_api_key is not None
    return settings.openai_api_key is not None
