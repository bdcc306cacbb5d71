"""Ollama local inference backend.

Ollama runs models locally (no API key, no cloud costs).
Exposes an OpenAI-compatible API at ``/v1`` on the local host.
"""

from __future__ import annotations

from .openai_compat import Backend, create_openai_backend

DEFAULT_OLLAMA_HOST = "http://localhost:11434"


def create_ollama_backend(
    model: str,
    host: str = DEFAULT_OLLAMA_HOST,
    timeout: float = 120.0,
) -> Backend:
    """Return an async callable that routes chat calls through a local Ollama server.

    Args:
        model: Model name as registered in Ollama (check with ``ollama list``).
        host: Ollama server URL.  Defaults to ``"http://localhost:11434"``.
        timeout: Request timeout in seconds.  Local models can be slow.

    Example::

        backend = create_ollama_backend("qwen3:8b")
        reply = await backend([{"role": "user", "content": "hi"}])
    """
    backend = create_openai_backend(
        api_key="ollama",  # Ollama doesn't validate the key
        model=model,
        base_url=f"{host.rstrip('/')}/v1",
        timeout=timeout,
    )
    backend.__name__ = f"ollama_backend({model}@{host})"
    backend._host = host  # type: ignore[attr-defined]
    backend._provider = "ollama"  # type: ignore[attr-defined]
    return backend
