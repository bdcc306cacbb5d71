# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Logging for the MCP server.

Every record is stamped with the HTTP request id and the MCP session it was
emitted under, so a tool call can be traced back to the session that made it:

    with request_context(headers.get("x-request-id")):
        with session_context(session.id):
            ...

Handlers installed by :func:`configure_logging` carry a :class:`ContextFilter`;
the JSON formatter writes ``request_id``/``session_id`` fields and the text
formatter prefixes ``[req .. sess ..]``.
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

_request_id: ContextVar[str | None] = ContextVar("request_id", default=None)
_session_id: ContextVar[str | None] = ContextVar("mcp_session_id", default=None)

NOISY_LOGGERS = ("httpx", "httpcore", "openai", "asyncio", "uvicorn.access")


def current_request_id() -> str | None:
    return _request_id.get()


def current_session_id() -> str | None:
    return _session_id.get()


@contextmanager
def request_context(request_id: str | None = None) -> Iterator[str]:
    """Bind a request id (generated when absent) for the enclosed block."""
    rid = request_id or uuid.uuid4().hex[:12]
    token = _request_id.set(rid)
    try:
        yield rid
    finally:
        _request_id.reset(token)


@contextmanager
def session_context(session_id: str) -> Iterator[str]:
    """Bind an MCP session id for the enclosed block."""
    token = _session_id.set(session_id)
    try:
        yield session_id
    finally:
        _session_id.reset(token)


class ContextFilter(logging.Filter):
    """Copy the bound request and session ids onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = _request_id.get()
        if not hasattr(record, "session_id"):
            record.session_id = _session_id.get()
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in ("request_id", "session_id"):
            value = getattr(record, key, None)
            if value:
                log_data[key] = value

        if record.levelno >= logging.WARNING:
            log_data["source"] = f"{record.pathname}:{record.lineno}"
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        if hasattr(record, "tool"):
            log_data["tool"] = record.tool

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Single-line text with a short ``[req .. sess ..]`` prefix."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)-7s %(name)s %(context)s%(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        parts = []
        request_id = getattr(record, "request_id", None)
        session_id = getattr(record, "session_id", None)
        if request_id:
            parts.append(f"req {request_id[:8]}")
        if session_id:
            parts.append(f"sess {session_id[:8]}")
        record.context = f"[{' '.join(parts)}] " if parts else ""
        return super().format(record)


def configure_logging(
    level: str | int | None = None,
    json_format: bool | None = None,
    log_file: str | None = None,
) -> None:
    """Configure the root logger from arguments or the ``MCP_LOG_*`` settings.

    Logs go to stderr, never stdout, since stdout carries the protocol in stdio
    mode. An empty ``log_format`` picks JSON when stderr is not a terminal.
    A log file always gets JSON lines.
    """
    from .config import get_config

    config = get_config()

    if level is None:
        level = config.log_level
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    if json_format is None:
        log_format = config.log_format.lower()
        json_format = log_format == "json" or (log_format != "text" and not sys.stderr.isatty())

    log_file = config.log_file if log_file is None else log_file

    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(JSONFormatter() if json_format else TextFormatter())
    console.addFilter(ContextFilter())
    root.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(JSONFormatter())
        file_handler.addFilter(ContextFilter())
        root.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


class ToolCallLogger:
    """Logs tool calls with Meilisearch credentials redacted.

    Document payloads are summarized by count rather than logged, and long
    strings (``summarize-text`` input, filters) are truncated.
    """

    SENSITIVE_KEYS = ("apikey", "api_key", "masterkey", "token", "secret", "password", "authorization")
    BULK_KEYS = ("documents",)
    MAX_STRING = 500

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger("meilisearch_mcp.tools")

    def log_call(self, tool_name: str, arguments: dict[str, Any]) -> None:
        self.logger.debug(
            f"Tool call: {tool_name} {json.dumps(self.sanitize(arguments), default=str)}",
            extra={"tool": tool_name},
        )

    def log_result(self, tool_name: str, success: bool, duration_ms: float | None = None) -> None:
        msg = f"Tool result: {tool_name} -> {'success' if success else 'failure'}"
        if duration_ms is not None:
            msg += f" ({duration_ms:.1f}ms)"
        self.logger.log(logging.DEBUG if success else logging.INFO, msg, extra={"tool": tool_name})

    def sanitize(self, data: Any) -> Any:
        if isinstance(data, dict):
            result = {}
            for key, value in data.items():
                lowered = key.lower()
                if any(s in lowered for s in self.SENSITIVE_KEYS):
                    result[key] = "[REDACTED]"
                elif lowered in self.BULK_KEYS and isinstance(value, list):
                    result[key] = f"[{len(value)} documents]"
                else:
                    result[key] = self.sanitize(value)
            return result
        if isinstance(data, list):
            return [self.sanitize(item) for item in data]
        if isinstance(data, str) and len(data) > self.MAX_STRING:
            return data[: self.MAX_STRING] + "..."
        return data


tool_logger = ToolCallLogger()
