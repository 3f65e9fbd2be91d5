"""Business logic services."""

from .assistant import AssistantBridge, IntentClassifier, KeywordIntentClassifier
from .chat import ChatSession
from .ollama import OllamaClient
from .repository import TaskRepository
from .store import FileTaskStore
from .sync_gateway import SyncGateway

__all__ = [
    "FileTaskStore",
    "TaskRepository",
    "SyncGateway",
    "OllamaClient",
    "AssistantBridge",
    "IntentClassifier",
    "KeywordIntentClassifier",
    "ChatSession",
]
