"""Tests for the backend sync gateway."""

import pytest

from todo_assistant.models.task import Task
from todo_assistant.services.sync_gateway import SyncGateway

from .fakes import FakeBackend

API_URL = "http://backend.test"


@pytest.mark.asyncio
async def test_pull_rehydrates_tasks() -> None:
    backend = FakeBackend(
        [
            {
                "id": "1",
                "title": "Buy milk",
                "completed": False,
                "priority": "low",
                "createdAt": "2024-01-15T09:00:00Z",
                "updatedAt": "2024-01-15T10:00:00Z",
                "dueDate": "2024-01-16",
                "tags": ["errands"],
            }
        ]
    )
    async with SyncGateway(API_URL, transport=backend.transport) as gateway:
        tasks = await gateway.pull()

    assert len(tasks) == 1
    assert tasks[0].title == "Buy milk"
    assert tasks[0].updated_at.hour == 10
    assert tasks[0].due_date.isoformat() == "2024-01-16"


@pytest.mark.asyncio
async def test_pull_skips_malformed_items() -> None:
    backend = FakeBackend([{"id": "1", "title": "ok"}, {"id": "2", "title": "  "}, "junk"])
    async with SyncGateway(API_URL, transport=backend.transport) as gateway:
        tasks = await gateway.pull()

    assert [task.id for task in tasks] == ["1"]


@pytest.mark.asyncio
async def test_pull_failure_returns_empty_list() -> None:
    backend = FakeBackend(fail=True)
    async with SyncGateway(API_URL, transport=backend.transport) as gateway:
        assert await gateway.pull() == []


@pytest.mark.asyncio
async def test_push_sends_full_snapshot() -> None:
    backend = FakeBackend()
    task = Task(id="1", title="Buy milk")

    async with SyncGateway(API_URL, transport=backend.transport) as gateway:
        gateway.push([task])
        await gateway.flush()

    assert backend.posts == [[task.to_wire()]]


@pytest.mark.asyncio
async def test_rapid_pushes_send_only_latest_snapshot() -> None:
    backend = FakeBackend()
    first = [Task(id="1", title="One")]
    second = first + [Task(id="2", title="Two")]
    third = second + [Task(id="3", title="Three")]

    async with SyncGateway(API_URL, transport=backend.transport) as gateway:
        gateway.push(first)
        gateway.push(second)
        gateway.push(third)
        assert gateway.busy
        await gateway.flush()
        assert not gateway.busy

    assert len(backend.posts) == 1
    assert [item["id"] for item in backend.posts[0]] == ["1", "2", "3"]


@pytest.mark.asyncio
async def test_push_after_flush_sends_again() -> None:
    backend = FakeBackend()

    async with SyncGateway(API_URL, transport=backend.transport) as gateway:
        gateway.push([Task(id="1", title="One")])
        await gateway.flush()
        gateway.push([])
        await gateway.flush()

    assert backend.posts[-1] == []
    assert len(backend.posts) == 2


@pytest.mark.asyncio
async def test_push_failure_is_swallowed_and_logged(caplog: pytest.LogCaptureFixture) -> None:
    backend = FakeBackend(fail=True)

    async with SyncGateway(API_URL, transport=backend.transport) as gateway:
        gateway.push([Task(id="1", title="One")])
        await gateway.flush()

    assert "Error saving tasks to backend" in caplog.text


@pytest.mark.asyncio
async def test_close_flushes_pending_push() -> None:
    backend = FakeBackend()

    async with SyncGateway(API_URL, transport=backend.transport) as gateway:
        gateway.push([Task(id="1", title="One")])

    assert len(backend.posts) == 1
