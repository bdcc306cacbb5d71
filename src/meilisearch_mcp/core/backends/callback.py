# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""HTTP callback inference backend.

Delegates inference to an external HTTP endpoint, so a host platform can
answer model calls with its own providers and keys.

Contract:
  Request:  POST callback_url {"messages": [...], "system": "...", "prompt": "..."}
  Response: {"text": "..."}
"""

from __future__ import annotations

import logging

import httpx

from .openai_compat import Backend

logger = logging.getLogger(__name__)


def create_callback_backend(
    callback_url: str,
    token: str | None = None,
    timeout: float = 120.0,
) -> Backend:
    """Return an async callable ``(messages) -> str`` that POSTs to *callback_url*.

    ``system`` and ``prompt`` are convenience copies of the system and last user
    message for endpoints that only understand a single prompt.

    Raises:
        RuntimeError: At call time, if the callback returns non-200 or
            a body without a ``text`` field.
        httpx.TimeoutException: At call time, if the request exceeds timeout.
    """
    headers: dict[str, str] = {"Content-Type": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"

    async def backend(messages: list[dict[str, str]]) -> str:
        system = "\n".join(m["content"] for m in messages if m.get("role") == "system")
        users = [m["content"] for m in messages if m.get("role") == "user"]
        payload = {"messages": messages, "system": system, "prompt": users[-1] if users else ""}

        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.post(callback_url, json=payload, headers=headers)

        if response.status_code != 200:
            body = response.text[:500]
            raise RuntimeError(f"Callback backend ({callback_url}) returned HTTP {response.status_code}: {body}")

        data = response.json()
        text = data.get("text")
        if text is None:
            raise RuntimeError(f"Callback backend ({callback_url}) response missing 'text' field: {data!r}")

        logger.debug("Callback backend: received %d chars from %s", len(text), callback_url)
        return text

    backend.__name__ = f"callback_backend({callback_url})"
    backend._callback_url = callback_url  # type: ignore[attr-defined]
    return backend
