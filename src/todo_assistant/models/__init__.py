"""Pydantic models for tasks, chat and assistant settings."""

from .chat import AssistantConfig, ChatMessage, ChatRole, Intent, OllamaGenerateResponse
from .task import (
    Priority,
    PriorityFilter,
    StatusFilter,
    StoreAck,
    Task,
    TaskDraft,
    TaskFilters,
    TaskStats,
)

__all__ = [
    "Task",
    "TaskDraft",
    "TaskFilters",
    "TaskStats",
    "Priority",
    "PriorityFilter",
    "StatusFilter",
    "StoreAck",
    "AssistantConfig",
    "ChatMessage",
    "ChatRole",
    "Intent",
    "OllamaGenerateResponse",
]
