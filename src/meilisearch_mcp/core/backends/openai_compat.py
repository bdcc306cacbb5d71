# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""OpenAI-compatible HTTP API backend.

Works with any provider that implements the OpenAI chat-completions API:
OpenAI itself, OpenRouter, the Hugging Face router, Ollama (/v1 endpoint), etc.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Coroutine
from typing import Any

from openai import AsyncOpenAI

logger = logging.getLogger(__name__)

Backend = Callable[[list[dict[str, str]]], Coroutine[Any, Any, str]]


def create_openai_backend(
    api_key: str,
    model: str,
    base_url: str | None = None,
    timeout: float = 60.0,
    max_tokens: int | None = None,
) -> Backend:
    """Return an async callable ``(messages) -> str``.

    The messages are sent unchanged as a chat-completions request and the reply
    text is taken from ``choices[0].message.content``.

    Args:
        api_key: API key.  For providers that don't require one (e.g. Ollama),
            pass any non-empty string such as ``"ollama"``.
        model: Model identifier as the provider expects it.
        base_url: API root URL.  None means the official OpenAI endpoint.
        timeout: Request timeout in seconds.  Defaults to 60 s.
        max_tokens: Optional completion cap.

    Raises:
        openai.APIError: At call time, if the provider returns an error.
        RuntimeError: At call time, if the reply carries no content.
    """
    client = AsyncOpenAI(base_url=base_url, api_key=api_key, timeout=timeout)

    async def backend(messages: list[dict[str, str]]) -> str:
        kwargs: dict[str, Any] = {"model": model, "messages": messages}
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens

        response = await client.chat.completions.create(**kwargs)

        if not response.choices:
            raise RuntimeError(f"OpenAI-compat backend ({base_url or 'openai'}) returned no choices for model {model!r}")
        content = response.choices[0].message.content
        if content is None:
            raise RuntimeError(f"OpenAI-compat backend ({base_url or 'openai'}) returned empty content for model {model!r}")

        logger.debug(
            "OpenAI-compat backend: received %d chars (model=%s url=%s)",
            len(content),
            model,
            base_url,
        )
        return content

    backend.__name__ = f"openai_compat_backend({model}@{base_url or 'openai'})"
    backend._model = model  # type: ignore[attr-defined]
    backend._base_url = base_url  # type: ignore[attr-defined]
    return backend
