"""Tests for the task tools."""

from __future__ import annotations

import pytest


@pytest.mark.asyncio
async def test_list_tasks_joins_filters(meili, call):
    meili.on("GET", "/tasks", {"results": [], "total": 0})

    await call(
        "list-tasks",
        {"limit": 10, "statuses": ["failed", "canceled"], "indexUids": ["movies"], "types": []},
    )

    params = meili.last.url.params
    assert params["limit"] == "10"
    assert params["statuses"] == "failed,canceled"
    assert params["indexUids"] == "movies"
    assert "types" not in params


@pytest.mark.asyncio
async def test_cancel_tasks(meili, call):
    meili.on("POST", "/tasks/cancel", {"taskUid": 20, "type": "taskCancelation"})

    await call("cancel-tasks", {"uids": [1, 2]})

    assert meili.last.url.params["uids"] == "1,2"


@pytest.mark.asyncio
async def test_delete_tasks(meili, call):
    meili.on("DELETE", "/tasks", {"taskUid": 21, "type": "taskDeletion"})

    await call("delete-tasks", {"statuses": ["succeeded"]})

    assert meili.last.url.params["statuses"] == "succeeded"


@pytest.mark.asyncio
async def test_get_task(meili, call):
    meili.on("GET", "/tasks/5", {"uid": 5, "status": "processing"})

    _, data = await call("get-task", {"taskUid": 5})

    assert data["status"] == "processing"


class TestWaitForTask:
    @pytest.mark.asyncio
    async def test_returns_finished_task(self, meili, call):
        states = iter(["enqueued", "processing", "succeeded"])
        meili.on("GET", "/tasks/5", lambda request: {"uid": 5, "status": next(states)})

        _, data = await call("wait-for-task", {"taskUid": 5, "timeoutMs": 2000, "intervalMs": 100})

        assert data == {"uid": 5, "status": "succeeded"}
        assert len(meili.paths("GET")) == 3

    @pytest.mark.asyncio
    async def test_failed_task_is_returned_not_raised(self, meili, call):
        meili.on("GET", "/tasks/6", {"uid": 6, "status": "failed", "error": {"code": "invalid_document_id"}})

        result, data = await call("wait-for-task", {"taskUid": 6})

        assert not result.get("isError")
        assert data["status"] == "failed"

    @pytest.mark.asyncio
    async def test_timeout_message(self, meili, call):
        meili.on("GET", "/tasks/7", {"uid": 7, "status": "processing"})

        result, text = await call("wait-for-task", {"taskUid": 7, "timeoutMs": 0})

        assert not result.get("isError")
        assert text == "Task 7 did not complete within the timeout period of 0ms"
