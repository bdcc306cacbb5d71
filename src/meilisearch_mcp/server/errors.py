# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""HTTP error bodies for the MCP endpoint.

Every HTTP-level failure uses the same tool-result envelope as tool errors:
{
    "isError": true,
    "content": [{"type": "text", "text": "Bad Request: invalid session ID"}]
}
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from ..core.logging import current_request_id
from ..core.response import create_error_response

logger = logging.getLogger(__name__)

# =============================================================================
# STANDARD MESSAGES
# =============================================================================

INVALID_SESSION_OR_NOT_INITIALIZE = "Bad Request: invalid session ID or not an initialize request"
INVALID_SESSION = "Bad Request: invalid session ID"
INVALID_JSON = "Bad Request: invalid JSON body"
NOT_FOUND = "Not Found"
METHOD_NOT_ALLOWED = "Method Not Allowed"
STREAM_CONFLICT = "Conflict: a push channel is already open for this session"
INTERNAL_ERROR = "Internal server error"


# =============================================================================
# ENVELOPE HELPERS
# =============================================================================


def envelope(message: str | BaseException) -> dict[str, Any]:
    """Wrap a message or exception in the error envelope."""
    return create_error_response(message)


def bad_request(message: str = INVALID_SESSION) -> dict[str, Any]:
    return envelope(message)


def internal_error(exc: BaseException | None = None, message: str = INTERNAL_ERROR) -> dict[str, Any]:
    """500 body. Logs the exception under the bound request id, or a fresh one."""
    request_id = current_request_id() or uuid.uuid4().hex[:12]
    if exc is not None:
        logger.error("request_id=%s %s: %s", request_id, type(exc).__name__, exc)
        return envelope(f"{message} (request_id={request_id}): {exc}")
    return envelope(f"{message} (request_id={request_id})")
