"""Tests for the flat-file task store."""

from datetime import date, datetime, timezone
from pathlib import Path

from todo_assistant.models.task import Priority, Task
from todo_assistant.services.store import FileTaskStore


def test_read_all_missing_file_is_empty(store: FileTaskStore) -> None:
    assert store.read_all() == []


def test_read_all_corrupt_file_is_empty(store: FileTaskStore, store_path: Path) -> None:
    store_path.write_text("{not json")
    assert store.read_all() == []


def test_read_all_non_array_is_empty(store: FileTaskStore, store_path: Path) -> None:
    store_path.write_text('{"id": "1"}')
    assert store.read_all() == []


def test_write_all_acknowledges(store: FileTaskStore) -> None:
    ack = store.write_all([])
    assert ack.status == "ok"


def test_write_all_creates_parent_directories(tmp_path: Path) -> None:
    store = FileTaskStore(tmp_path / "nested" / "dir" / "todos.json")
    store.write_all([{"id": "1", "title": "One"}])
    assert store.read_all() == [{"id": "1", "title": "One"}]


def test_round_trip_preserves_tasks(store: FileTaskStore) -> None:
    """Test that timestamps, dates and tags survive a write and read."""
    created = datetime(2024, 1, 15, 9, 30, 12, 345678, tzinfo=timezone.utc)
    tasks = [
        Task(
            id="a",
            title="Buy milk",
            description="2%",
            priority=Priority.LOW,
            created_at=created,
            updated_at=created,
            due_date=date(2024, 1, 16),
            tags=["errands", "errands", "home"],
        ),
        Task(id="b", title="Ship release", completed=True, priority=Priority.HIGH),
    ]

    store.write_all([task.to_wire() for task in tasks])
    loaded = [Task.model_validate(item) for item in store.read_all()]

    assert loaded == tasks
    assert loaded[0].tags == ["errands", "errands", "home"]
    assert loaded[0].created_at == created
