"""In-memory task list with filtering, statistics and push-on-change."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Protocol

from ..models.task import (
    Priority,
    PriorityFilter,
    StatusFilter,
    Task,
    TaskDraft,
    TaskFilters,
    TaskStats,
    utcnow,
)

logger = logging.getLogger(__name__)

# snake_case names accepted from callers, mapped to the wire names
_FIELD_ALIASES = {"due_date": "dueDate"}

# Fields a partial update may touch. id and createdAt never change.
_UPDATABLE_FIELDS = {"title", "description", "completed", "priority", "dueDate", "tags"}


class TaskSink(Protocol):
    """Where the repository sends a full snapshot after each mutation."""

    def push(self, tasks: list[Task]) -> None: ...


def _as_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _next_timestamp(previous: datetime) -> datetime:
    """A timestamp strictly later than ``previous``, even within one clock tick."""
    now = utcnow()
    previous = _as_aware(previous)
    if now <= previous:
        return previous + timedelta(microseconds=1)
    return now


def updatable_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """The subset of ``fields`` a partial update may change, keyed by wire name."""
    changes: dict[str, Any] = {}
    for key, value in fields.items():
        key = _FIELD_ALIASES.get(key, key)
        if key in _UPDATABLE_FIELDS:
            changes[key] = value
    return changes


def matches_filters(task: Task, filters: TaskFilters) -> bool:
    """Status, then priority, then case-insensitive search. All must hold."""
    if filters.status == StatusFilter.COMPLETED and not task.completed:
        return False
    if filters.status == StatusFilter.PENDING and task.completed:
        return False

    if filters.priority != PriorityFilter.ALL and task.priority.value != filters.priority.value:
        return False

    if filters.search:
        needle = filters.search.lower()
        in_title = needle in task.title.lower()
        in_description = needle in (task.description or "").lower()
        in_tags = any(needle in tag.lower() for tag in task.tags)
        if not (in_title or in_description or in_tags):
            return False

    return True


class TaskRepository:
    """Owns the task list. Every mutation pushes the full list to the sink."""

    def __init__(self, tasks: Iterable[Task] = (), sink: TaskSink | None = None) -> None:
        self._tasks: list[Task] = list(tasks)
        self._sink = sink

    @property
    def tasks(self) -> list[Task]:
        """Snapshot of the current list, in insertion order."""
        return list(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def get(self, task_id: str) -> Task | None:
        index = self._index_of(task_id)
        return None if index is None else self._tasks[index]

    def replace_all(self, tasks: Iterable[Task]) -> None:
        """Load a list (e.g. after a pull) without pushing it back."""
        self._tasks = list(tasks)

    def add(self, draft: TaskDraft) -> Task:
        """Create a task from a draft, assigning its id and timestamps."""
        now = utcnow()
        task = Task(
            title=draft.title,
            description=draft.description,
            completed=draft.completed,
            priority=draft.priority,
            due_date=draft.due_date,
            tags=list(draft.tags),
            created_at=now,
            updated_at=now,
        )
        self._tasks.append(task)
        logger.info(f"Added task {task.id}: {task.title}")
        self._commit()
        return task

    def update(self, task_id: str, fields: dict[str, Any]) -> Task | None:
        """Merge partial fields into a task. Unknown ids are ignored.

        Raises:
            pydantic.ValidationError: if the merged task is invalid. The list
                is left unchanged in that case.
        """
        index = self._index_of(task_id)
        if index is None:
            logger.debug(f"Update ignored, no task with id {task_id}")
            return None

        changes = updatable_fields(fields)
        current = self._tasks[index]
        merged = {
            **current.model_dump(by_alias=True),
            **changes,
            "updatedAt": _next_timestamp(current.updated_at),
        }
        updated = Task.model_validate(merged)
        self._tasks[index] = updated
        logger.info(f"Updated task {task_id}: {sorted(changes)}")
        self._commit()
        return updated

    def remove(self, task_id: str) -> None:
        before = len(self._tasks)
        self._tasks = [task for task in self._tasks if task.id != task_id]
        if len(self._tasks) != before:
            logger.info(f"Removed task {task_id}")
        self._commit()

    def toggle_completion(self, task_id: str) -> Task | None:
        index = self._index_of(task_id)
        if index is None:
            return None

        current = self._tasks[index]
        toggled = current.model_copy(
            update={
                "completed": not current.completed,
                "updated_at": _next_timestamp(current.updated_at),
            }
        )
        self._tasks[index] = toggled
        self._commit()
        return toggled

    def clear_completed(self) -> int:
        """Drop every completed task. Returns how many were removed."""
        before = len(self._tasks)
        self._tasks = [task for task in self._tasks if not task.completed]
        removed = before - len(self._tasks)
        logger.info(f"Cleared {removed} completed tasks")
        self._commit()
        return removed

    def apply_filter(self, filters: TaskFilters) -> list[Task]:
        return [task for task in self._tasks if matches_filters(task, filters)]

    def compute_stats(self) -> TaskStats:
        total = len(self._tasks)
        completed = sum(1 for task in self._tasks if task.completed)
        high_open = sum(
            1 for task in self._tasks if task.priority == Priority.HIGH and not task.completed
        )
        return TaskStats(
            total=total,
            completed=completed,
            pending=total - completed,
            high_priority_open=high_open,
        )

    def _index_of(self, task_id: str) -> int | None:
        for index, task in enumerate(self._tasks):
            if task.id == task_id:
                return index
        return None

    def _commit(self) -> None:
        if self._sink is not None:
            self._sink.push(self.tasks)
