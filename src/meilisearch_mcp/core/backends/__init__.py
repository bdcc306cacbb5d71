# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Language-model backends for the AI tool router and the summarizer.

Every backend is an async callable ``(messages) -> str``; the router and the
summarizer never see which provider sits behind it.

Available backends:
    - ``openai_compat``: Any OpenAI-compatible HTTP API (OpenAI, OpenRouter,
      the Hugging Face router, self-hosted gateways).
    - ``ollama``: Convenience wrapper for local Ollama inference.
    - ``callback``: POST to an external HTTP endpoint.

Usage::

    from meilisearch_mcp.core.backends import create_backend
    from meilisearch_mcp.core.config import get_config

    backend = create_backend(get_config())
"""

from __future__ import annotations

import logging

from ..config import CoreSettings
from ..exceptions import ConfigException
from .callback import create_callback_backend
from .ollama import DEFAULT_OLLAMA_HOST, create_ollama_backend
from .openai_compat import Backend, create_openai_backend

logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
HUGGINGFACE_BASE_URL = "https://router.huggingface.co/v1"
HUGGINGFACE_MAX_TOKENS = 512

__all__ = [
    "Backend",
    "create_backend",
    "create_callback_backend",
    "create_ollama_backend",
    "create_openai_backend",
    "resolve_openai_endpoint",
]


def resolve_openai_endpoint(provider: str, model: str) -> tuple[str | None, str]:
    """Resolve ``(base_url, model)`` for OpenAI-shaped providers.

    Plain OpenAI models talk to the official endpoint. Anything else, including
    namespaced models under the ``openai`` provider, goes through OpenRouter
    with a ``provider/model`` identifier.
    """
    namespaced = "/" in model
    if provider == "openai" and not namespaced:
        return None, model
    if provider in ("openai", "openrouter") and namespaced:
        return OPENROUTER_BASE_URL, model
    if model.startswith(f"{provider}/"):
        return OPENROUTER_BASE_URL, model
    return OPENROUTER_BASE_URL, f"{provider}/{model}"


def create_backend(settings: CoreSettings) -> Backend:
    """Build the backend selected by ``AI_PROVIDER_NAME``.

    Raises:
        ConfigException: If the provider needs credentials or a URL that
            were not configured.
    """
    provider = settings.ai_provider_name.strip().lower()
    model = settings.llm_model
    timeout = settings.ai_provider_timeout

    if provider == "ollama":
        return create_ollama_backend(model, host=settings.ai_provider_base_url or DEFAULT_OLLAMA_HOST, timeout=timeout)

    if provider == "callback":
        if not settings.ai_provider_base_url:
            raise ConfigException("The callback provider requires a URL", missing_vars=["AI_PROVIDER_BASE_URL"])
        return create_callback_backend(
            settings.ai_provider_base_url,
            token=settings.ai_provider_api_key or None,
            timeout=timeout,
        )

    if not settings.ai_provider_api_key:
        raise ConfigException(f"AI provider {provider!r} requires an API key", missing_vars=["AI_PROVIDER_API_KEY"])

    if provider == "huggingface":
        return create_openai_backend(
            api_key=settings.ai_provider_api_key,
            model=model,
            base_url=settings.ai_provider_base_url or HUGGINGFACE_BASE_URL,
            timeout=timeout,
            max_tokens=HUGGINGFACE_MAX_TOKENS,
        )

    base_url, resolved_model = resolve_openai_endpoint(provider, model)
    if settings.ai_provider_base_url:
        base_url = settings.ai_provider_base_url
    logger.info(f"Using AI provider {provider} (model={resolved_model}, url={base_url or 'openai'})")
    return create_openai_backend(
        api_key=settings.ai_provider_api_key,
        model=resolved_model,
        base_url=base_url,
        timeout=timeout,
    )
