# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Summarization of tool results through the language-model backend.

Text that fits in one chunk takes a single call. Longer text is split into
chunks that are summarized concurrently, followed by one synthesis call over
the joined chunk summaries. A failed chunk fails the whole summary.
"""

from __future__ import annotations

import asyncio
import logging
import re

from .backends import Backend
from .exceptions import SummarizationError
from .prompts import SUMMARY_PROMPT, SYNTHESIS_PROMPT

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 4000

_SENTENCE_END_RE = re.compile(r"(?<=[.!?])\s+")
_WHITESPACE_RE = re.compile(r"\s+")


def _pack(pieces: list[str], limit: int, joiner: str) -> list[str]:
    """Greedily join pieces (each already <= limit) into chunks <= limit."""
    chunks: list[str] = []
    current = ""
    for piece in pieces:
        if not current:
            current = piece
        elif len(current) + len(joiner) + len(piece) <= limit:
            current = f"{current}{joiner}{piece}"
        else:
            chunks.append(current)
            current = piece
    if current:
        chunks.append(current)
    return chunks


def _split_words(sentence: str, limit: int) -> list[str]:
    pieces: list[str] = []
    for word in _WHITESPACE_RE.split(sentence):
        if not word:
            continue
        if len(word) <= limit:
            pieces.append(word)
        else:
            pieces.extend(word[i : i + limit] for i in range(0, len(word), limit))
    return _pack(pieces, limit, " ")


def split_into_chunks(text: str, chunk_size: int) -> list[str]:
    """Split *text* into chunks of at most *chunk_size* characters.

    Splits on sentence boundaries first; sentences longer than the limit are
    split on whitespace, and single words longer than the limit are sliced.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    text = text.strip()
    if not text:
        return []
    if len(text) <= chunk_size:
        return [text]

    pieces: list[str] = []
    for sentence in _SENTENCE_END_RE.split(text):
        if not sentence:
            continue
        if len(sentence) <= chunk_size:
            pieces.append(sentence)
        else:
            pieces.extend(_split_words(sentence, chunk_size))
    return _pack(pieces, chunk_size, " ")


async def _complete(backend: Backend, system: str, text: str) -> str:
    return await backend([{"role": "system", "content": system}, {"role": "user", "content": text}])


class Summarizer:
    """Summarizes text with a language-model backend."""

    def __init__(self, backend: Backend | None, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.backend = backend
        self.chunk_size = chunk_size

    @property
    def available(self) -> bool:
        return self.backend is not None

    async def summarize(self, text: str) -> str:
        """Return an HTML summary of *text*.

        Raises:
            SummarizationError: If no backend is configured, or any chunk or
                the synthesis call fails.
        """
        backend = self.backend
        if backend is None:
            raise SummarizationError("No AI provider is configured")

        chunks = split_into_chunks(text, self.chunk_size)
        if not chunks:
            return ""

        if len(chunks) == 1:
            try:
                return await _complete(backend, SUMMARY_PROMPT, chunks[0])
            except Exception as exc:  # noqa: BLE001
                raise SummarizationError(f"Summarization failed: {exc}", chunk_index=0) from exc

        logger.debug(f"Summarizing {len(text)} chars in {len(chunks)} chunks")
        results = await asyncio.gather(
            *(_complete(backend, SUMMARY_PROMPT, chunk) for chunk in chunks),
            return_exceptions=True,
        )
        for index, result in enumerate(results):
            if isinstance(result, BaseException):
                logger.warning(f"Summary of chunk {index} failed: {result}")
                raise SummarizationError(f"Summarization of chunk {index} failed: {result}", chunk_index=index) from result

        partials = "\n\n".join(str(r) for r in results)
        try:
            return await _complete(backend, SYNTHESIS_PROMPT, partials)
        except Exception as exc:  # noqa: BLE001
            raise SummarizationError(f"Summary synthesis failed: {exc}") from exc
