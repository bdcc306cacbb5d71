# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Async HTTP client for the Meilisearch REST API.

Tool handlers forward their parameters through this client verbatim; it adds
the base URL, bearer authentication and the timeout, and turns failures into
:class:`MeilisearchAPIError` / :class:`MeilisearchConnectionError`.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any

import httpx

from .config import CoreSettings
from .exceptions import MeilisearchAPIError, MeilisearchConnectionError

logger = logging.getLogger(__name__)

TERMINAL_TASK_STATUSES = frozenset({"succeeded", "failed", "canceled"})


class MeilisearchClient:
    """Thin async client for one Meilisearch instance."""

    def __init__(
        self,
        host: str = "http://localhost:7700",
        api_key: str = "",
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.host = host.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = httpx.AsyncClient(
            base_url=self.host,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: CoreSettings, transport: httpx.AsyncBaseTransport | None = None) -> MeilisearchClient:
        return cls(
            host=settings.meilisearch_host,
            api_key=settings.meilisearch_api_key,
            timeout=settings.meilisearch_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> MeilisearchClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _handle_response(self, resp: httpx.Response) -> Any:
        """Parse response, raise MeilisearchAPIError on failure."""
        try:
            body = resp.json() if resp.content else None
        except json.JSONDecodeError:
            body = resp.text

        if resp.status_code >= 400:
            raise MeilisearchAPIError(resp.status_code, body)
        return body

    async def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: Any = None,
    ) -> Any:
        """Execute a request with connection error handling."""
        try:
            resp = await self._client.request(
                method,
                path,
                params=params,
                json=body if body is not None else None,
            )
        except httpx.TimeoutException as exc:
            raise MeilisearchConnectionError(f"Meilisearch at {self.host} timed out", host=self.host) from exc
        except httpx.TransportError as exc:
            raise MeilisearchConnectionError(f"Cannot connect to Meilisearch at {self.host}: {exc}", host=self.host) from exc
        return self._handle_response(resp)

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, body: Any = None, params: dict[str, Any] | None = None) -> Any:
        return await self.request("POST", path, params=params, body=body)

    async def put(self, path: str, body: Any = None, params: dict[str, Any] | None = None) -> Any:
        return await self.request("PUT", path, params=params, body=body)

    async def patch(self, path: str, body: Any = None, params: dict[str, Any] | None = None) -> Any:
        return await self.request("PATCH", path, params=params, body=body)

    async def delete(self, path: str, params: dict[str, Any] | None = None, body: Any = None) -> Any:
        return await self.request("DELETE", path, params=params, body=body)

    async def health(self) -> dict[str, Any]:
        return await self.get("/health")

    async def wait_for_task(self, task_uid: int, timeout: float = 5.0, interval: float = 0.5) -> dict[str, Any] | None:
        """Poll ``/tasks/{uid}`` until the task reaches a terminal status.

        Args:
            task_uid: Task to wait for.
            timeout: Total wait bound in seconds.
            interval: Delay between polls in seconds.

        Returns:
            The final task object, or None if the bound was reached first.
        """
        deadline = time.monotonic() + timeout
        while True:
            task = await self.get(f"/tasks/{task_uid}")
            if isinstance(task, dict) and task.get("status") in TERMINAL_TASK_STATUSES:
                return task
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                logger.debug(f"Task {task_uid} not finished after {timeout}s")
                return None
            await asyncio.sleep(min(interval, remaining))
