"""Shared fixtures."""

from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from todo_assistant.main import app
from todo_assistant.models.chat import AssistantConfig
from todo_assistant.models.task import Priority, TaskDraft
from todo_assistant.routes.collection import get_task_store
from todo_assistant.services.repository import TaskRepository
from todo_assistant.services.store import FileTaskStore

from .fakes import RecordingSink


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    return tmp_path / "todos.json"


@pytest.fixture
def store(store_path: Path) -> FileTaskStore:
    return FileTaskStore(store_path)


@pytest.fixture
def client(store: FileTaskStore) -> Iterator[TestClient]:
    """API client backed by a per-test store file."""
    app.dependency_overrides[get_task_store] = lambda: store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def repository(sink: RecordingSink) -> TaskRepository:
    """Repository seeded with three tasks; the seeding pushes are discarded."""
    repo = TaskRepository(sink=sink)
    repo.add(TaskDraft(title="Buy milk", priority=Priority.LOW, tags=["Errands"]))
    repo.add(TaskDraft(title="Write report", description="Quarterly numbers", priority=Priority.HIGH))
    done = repo.add(TaskDraft(title="Call mom", tags=["family"]))
    repo.toggle_completion(done.id)
    sink.snapshots.clear()
    return repo


@pytest.fixture
def assistant_config() -> AssistantConfig:
    return AssistantConfig(base_url="http://ollama.test", model="test-model")
