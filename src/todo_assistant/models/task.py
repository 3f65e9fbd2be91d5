"""Task-related Pydantic models."""

import uuid
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Priority(str, Enum):
    """Task priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class StatusFilter(str, Enum):
    """Completion status selector for list filtering."""

    ALL = "all"
    COMPLETED = "completed"
    PENDING = "pending"


class PriorityFilter(str, Enum):
    """Priority selector for list filtering."""

    ALL = "all"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def _clean_title(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("title must not be empty")
    return value


def _lower_priority(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class TaskDraft(BaseModel):
    """User-supplied fields for a new task (from the form or the assistant)."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., description="Task title, trimmed and non-empty")
    description: str | None = Field(None, description="Optional free-text description")
    completed: bool = False
    priority: Priority = Priority.MEDIUM
    due_date: date | None = Field(None, alias="dueDate", description="Due date in YYYY-MM-DD format")
    tags: list[str] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def _title(cls, value: str) -> str:
        return _clean_title(value)

    @field_validator("description", mode="before")
    @classmethod
    def _description(cls, value: Any) -> Any:
        value = _blank_to_none(value)
        return value.strip() if isinstance(value, str) else value

    @field_validator("priority", mode="before")
    @classmethod
    def _priority(cls, value: Any) -> Any:
        return _lower_priority(value)

    @field_validator("due_date", mode="before")
    @classmethod
    def _due_date(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, value: Any) -> Any:
        # "work, home" as typed into the form
        if isinstance(value, str):
            return [tag.strip() for tag in value.split(",") if tag.strip()]
        return value


class Task(BaseModel):
    """A single to-do item as held in memory and persisted to the store."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: str
    description: str | None = None
    completed: bool = False
    priority: Priority = Priority.MEDIUM
    created_at: datetime = Field(default_factory=utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=utcnow, alias="updatedAt")
    due_date: date | None = Field(None, alias="dueDate")
    tags: list[str] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def _title(cls, value: str) -> str:
        return _clean_title(value)

    @field_validator("priority", mode="before")
    @classmethod
    def _priority(cls, value: Any) -> Any:
        return _lower_priority(value)

    @field_validator("due_date", mode="before")
    @classmethod
    def _due_date(cls, value: Any) -> Any:
        return _blank_to_none(value)

    def to_wire(self) -> dict[str, Any]:
        """Serialize with camelCase keys and ISO-8601 dates."""
        return self.model_dump(mode="json", by_alias=True)


class TaskFilters(BaseModel):
    """Filter criteria for the task list. Derived, never persisted."""

    status: StatusFilter = StatusFilter.ALL
    priority: PriorityFilter = PriorityFilter.ALL
    search: str = ""


class TaskStats(BaseModel):
    """Summary counts over the task list."""

    total: int
    completed: int
    pending: int
    high_priority_open: int = Field(..., alias="highPriorityOpen")

    model_config = ConfigDict(populate_by_name=True)


class StoreAck(BaseModel):
    """Acknowledgement returned after the store is overwritten."""

    status: str = "ok"
