# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Custom exception hierarchy for the Meilisearch MCP server.

Provides specific exception types for different error categories,
enabling better error handling and clearer error messages.
"""

from __future__ import annotations

import json
from typing import Any


class MeiliMCPException(Exception):  # noqa: N818
    """Base exception for all project errors.

    All project-specific exceptions should inherit from this class.
    """

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigException(MeiliMCPException):
    """Exception for configuration errors.

    Raised when:
    - Required environment variables are missing
    - An unknown AI provider is configured
    - Service configuration is incomplete
    """

    def __init__(self, message: str, missing_vars: list[str] | None = None):
        details = {}
        if missing_vars:
            details["missing_vars"] = missing_vars
        super().__init__(message, details)
        self.missing_vars = missing_vars or []


class ValidationException(MeiliMCPException):
    """Exception for validation errors.

    Raised when:
    - A required tool argument is missing
    - An argument has the wrong shape
    """

    def __init__(self, message: str, field: str | None = None, value: Any = None):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class MeilisearchAPIError(MeiliMCPException):
    """Meilisearch answered with an HTTP status >= 400.

    The upstream status and body are preserved verbatim so the response
    envelope can surface them to the caller.
    """

    def __init__(self, status_code: int, body: Any):
        self.status_code = status_code
        self.body = body
        super().__init__(
            f"Meilisearch API error ({status_code}): {json.dumps(body)}",
            {"status_code": status_code, "body": body},
        )


class MeilisearchConnectionError(MeiliMCPException):
    """Meilisearch could not be reached (DNS, refused connection, timeout)."""

    def __init__(self, message: str, host: str | None = None):
        details = {}
        if host:
            details["host"] = host
        super().__init__(message, details)
        self.host = host


class RouteError(MeiliMCPException):
    """The AI router could not produce a decision.

    Carries a machine-readable ``reason_code`` (``MALFORMED_MODEL_OUTPUT`` or
    ``BACKEND_UNAVAILABLE``). ``to_dict()`` uses the same shape as the
    ``cannot_fulfill_request`` sentinel so clients handle both alike.
    """

    def __init__(
        self,
        reason_code: str,
        message: str,
        missing_parameters: list[str] | None = None,
        raw_output: str | None = None,
    ):
        details: dict[str, Any] = {"reason_code": reason_code}
        if raw_output is not None:
            details["raw_output"] = raw_output[:500]
        super().__init__(message, details)
        self.reason_code = reason_code
        self.missing_parameters = missing_parameters or []
        self.raw_output = raw_output

    def to_dict(self) -> dict:
        return {
            "error": "cannot_fulfill_request",
            "reason_code": self.reason_code,
            "message": self.message,
            "missing_parameters": self.missing_parameters,
        }


class SummarizationError(MeiliMCPException):
    """A summary chunk or the synthesis call failed."""

    def __init__(self, message: str, chunk_index: int | None = None):
        details = {}
        if chunk_index is not None:
            details["chunk_index"] = chunk_index
        super().__init__(message, details)
        self.chunk_index = chunk_index


class TransportError(MeiliMCPException):
    """Transport-level failure; the owning session can no longer be used."""

    def __init__(self, message: str, session_id: str | None = None):
        details = {}
        if session_id:
            details["session_id"] = session_id
        super().__init__(message, details)
        self.session_id = session_id


class TransportClosedError(TransportError):
    """Operation attempted on a transport that was already closed."""

    pass
