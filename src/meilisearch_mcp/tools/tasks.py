# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Task management tools."""

from __future__ import annotations

from typing import Any

from ..core.meilisearch import MeilisearchClient
from ..core.registry import ToolRegistry
from ..core.response import create_text_response
from ._utils import join_list, pick, schema

DEFAULT_WAIT_TIMEOUT_MS = 5000
DEFAULT_WAIT_INTERVAL_MS = 500

TASK_STATUSES = ["enqueued", "processing", "succeeded", "failed", "canceled"]
TASK_TYPES = [
    "indexCreation",
    "indexUpdate",
    "indexDeletion",
    "indexSwap",
    "documentAdditionOrUpdate",
    "documentDeletion",
    "settingsUpdate",
    "dumpCreation",
    "taskCancelation",
    "taskDeletion",
    "snapshotCreation",
]

FILTER_KEYS = ("statuses", "types", "indexUids", "uids")


def _filters(statuses: list[str], verb: str) -> dict[str, Any]:
    return {
        "statuses": {"type": "array", "items": {"type": "string", "enum": statuses}, "description": f"Statuses of tasks to {verb}"},
        "types": {"type": "array", "items": {"type": "string", "enum": TASK_TYPES}, "description": f"Types of tasks to {verb}"},
        "indexUids": {"type": "array", "items": {"type": "string"}, "description": "UIDs of the indexes the tasks ran on"},
        "uids": {"type": "array", "items": {"type": "integer"}, "description": f"UIDs of the tasks to {verb}"},
    }


def _filter_params(args: dict[str, Any]) -> dict[str, Any]:
    """Non-empty filters as comma-separated query parameters."""
    return {key: join_list(args[key]) for key in FILTER_KEYS if args.get(key)}


def register_task_tools(registry: ToolRegistry, client: MeilisearchClient) -> None:
    @registry.tool(
        "list-tasks",
        "List tasks in the Meilisearch instance with optional filtering",
        schema(
            {
                "limit": {"type": "integer", "minimum": 0, "description": "Maximum number of tasks to return"},
                "from": {"type": "integer", "minimum": 0, "description": "Task uid from which to start fetching"},
                **_filters(TASK_STATUSES, "return"),
            }
        ),
    )
    async def list_tasks(args: dict[str, Any]) -> dict[str, Any]:
        params = {**pick(args, "limit", "from"), **_filter_params(args)}
        return create_text_response(await client.get("/tasks", params=params))

    @registry.tool(
        "get-task",
        "Get information about a specific task",
        schema({"taskUid": {"type": "integer", "description": "Unique identifier of the task"}}, ["taskUid"]),
    )
    async def get_task(args: dict[str, Any]) -> dict[str, Any]:
        return create_text_response(await client.get(f"/tasks/{int(args['taskUid'])}"))

    @registry.tool(
        "cancel-tasks",
        "Cancel tasks based on provided filters",
        schema(_filters(["enqueued", "processing"], "cancel")),
    )
    async def cancel_tasks(args: dict[str, Any]) -> dict[str, Any]:
        return create_text_response(await client.post("/tasks/cancel", params=_filter_params(args)))

    @registry.tool(
        "delete-tasks",
        "Delete finished tasks based on provided filters",
        schema(_filters(["succeeded", "failed", "canceled"], "delete")),
    )
    async def delete_tasks(args: dict[str, Any]) -> dict[str, Any]:
        return create_text_response(await client.delete("/tasks", params=_filter_params(args)))

    @registry.tool(
        "wait-for-task",
        "Wait for a specific task to complete",
        schema(
            {
                "taskUid": {"type": "integer", "description": "Unique identifier of the task to wait for"},
                "timeoutMs": {"type": "integer", "minimum": 0, "description": "Maximum time to wait in milliseconds (default: 5000)"},
                "intervalMs": {"type": "integer", "minimum": 100, "description": "Polling interval in milliseconds (default: 500)"},
            },
            ["taskUid"],
        ),
    )
    async def wait_for_task(args: dict[str, Any]) -> dict[str, Any]:
        task_uid = int(args["taskUid"])
        timeout_ms = args.get("timeoutMs", DEFAULT_WAIT_TIMEOUT_MS)
        interval_ms = max(args.get("intervalMs", DEFAULT_WAIT_INTERVAL_MS), 100)

        task = await client.wait_for_task(task_uid, timeout=timeout_ms / 1000, interval=interval_ms / 1000)
        if task is None:
            return create_text_response(f"Task {task_uid} did not complete within the timeout period of {timeout_ms}ms")
        return create_text_response(task)
