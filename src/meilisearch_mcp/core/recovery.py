# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Lenient JSON extraction from language-model replies.

Models wrap JSON in Markdown fences, ``<json>`` tags or ``<think>`` blocks,
add comments and trailing commas, and forget to quote keys. ``markdown_to_json``
undoes those habits; it never guesses at anything beyond them.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

FENCE_RE = re.compile(r"^```(?:json)?\s*([\s\S]*?)\s*```$")
JSON_TAG_RE = re.compile(r"<json>\s*([\s\S]*?)\s*</json>")
THINK_TAG_RE = re.compile(r"<think>[\s\S]*?</think>")

# Each pattern matches a whole string literal first so nothing inside one is rewritten.
STRING = r'"(?:\\.|[^"\\])*"'
COMMENT_RE = re.compile(rf"{STRING}|(//[^\r\n]*|/\*[\s\S]*?\*/)")
TRAILING_COMMA_RE = re.compile(rf"{STRING}|,(\s*[}}\]])")
UNQUOTED_KEY_RE = re.compile(rf"{STRING}|([{{,]\s*)([a-zA-Z_][a-zA-Z0-9_]*)(\s*):")


def _extract(text: str) -> str:
    """Strip a surrounding fenced block or an embedded ``<json>`` tag, if present."""
    fence = FENCE_RE.match(text)
    if fence:
        return fence.group(1).strip()
    tag = JSON_TAG_RE.search(text)
    if tag:
        return tag.group(1).strip()
    return text


def _drop_comment(match: re.Match[str]) -> str:
    return "" if match.group(1) else match.group(0)


def _drop_trailing_comma(match: re.Match[str]) -> str:
    return match.group(1) if match.group(1) is not None else match.group(0)


def _quote_key(match: re.Match[str]) -> str:
    if match.group(2) is None:
        return match.group(0)
    return f'{match.group(1)}"{match.group(2)}"{match.group(3)}:'


def _clean(text: str) -> str:
    text = COMMENT_RE.sub(_drop_comment, text).strip()
    text = TRAILING_COMMA_RE.sub(_drop_trailing_comma, text)
    return UNQUOTED_KEY_RE.sub(_quote_key, text)


def _loads(text: str) -> tuple[bool, Any]:
    try:
        return True, json.loads(text)
    except json.JSONDecodeError:
        return False, None


def markdown_to_json(text: Any) -> Any | None:
    """Recover a JSON value from a loosely formatted model reply.

    The whole reply is parsed strictly first, so clean JSON comes back
    unchanged even when its strings mention fences or tags. Only when that
    fails are ``<think>`` blocks, fences and ``<json>`` tags unwrapped, then
    comments and trailing commas removed and bare keys quoted. String
    literals are never rewritten.

    Returns:
        The parsed value with nested JSON strings expanded once, or None when
        nothing parseable remains.
    """
    if not isinstance(text, str):
        return None

    text = text.strip()
    if not text:
        return None

    ok, parsed = _loads(text)
    if not ok:
        candidate = _extract(THINK_TAG_RE.sub("", text).strip())
        if not candidate:
            return None
        ok, parsed = _loads(candidate)
        if not ok:
            cleaned = _clean(candidate)
            if not cleaned:
                return None
            ok, parsed = _loads(cleaned)
            if not ok:
                logger.debug(f"Could not recover JSON from model output: {cleaned[:200]!r}")
                return None

    return parse_nested_json_strings(parsed)


def _try_parse_json_string(value: str) -> Any:
    if len(value) >= 2 and (
        (value.startswith("{") and value.endswith("}")) or (value.startswith("[") and value.endswith("]"))
    ):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value
    return value


def parse_nested_json_strings(value: Any) -> Any:
    """Re-parse string leaves that look like a JSON object or array.

    A single pass: values produced by the re-parse are not walked again, so a
    doubly encoded string stays a string one level down.
    """
    if isinstance(value, list):
        return [parse_nested_json_strings(item) for item in value]
    if isinstance(value, dict):
        return {key: parse_nested_json_strings(item) for key, item in value.items()}
    if isinstance(value, str):
        return _try_parse_json_string(value)
    return value


def strip_nulls(value: Any) -> Any:
    """Drop ``None`` members from objects, recursively.

    Arrays keep their length: only the objects inside them are cleaned.
    """
    if isinstance(value, dict):
        return {key: strip_nulls(item) for key, item in value.items() if item is not None}
    if isinstance(value, list):
        return [strip_nulls(item) for item in value]
    return value
