"""Chat and assistant models."""

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from ..config import Settings
from .task import utcnow


class ChatRole(str, Enum):
    """Who wrote a chat message."""

    USER = "user"
    ASSISTANT = "assistant"


class Intent(str, Enum):
    """What a chat request is asking the assistant to do."""

    ADD = "add"
    EDIT = "edit"
    SUGGEST = "suggest"


class ChatMessage(BaseModel):
    """A single transcript entry. Lives for the session only."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    content: str
    role: ChatRole
    timestamp: datetime = Field(default_factory=utcnow)


class AssistantConfig(BaseModel):
    """Connection and sampling settings for the Ollama endpoint."""

    base_url: str = Field("http://localhost:11434", description="Ollama server address")
    model: str = Field("mistral-small", description="Model name as known to Ollama")
    temperature: float = Field(0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(1000, gt=0, description="Sent as options.num_predict")
    timeout: float | None = Field(None, description="Request timeout in seconds, None for no limit")

    @classmethod
    def from_settings(cls, settings: Settings) -> "AssistantConfig":
        """Build the session defaults from application settings."""
        return cls(
            base_url=settings.ollama_base_url,
            model=settings.ollama_model,
            temperature=settings.ollama_temperature,
            max_tokens=settings.ollama_max_tokens,
            timeout=settings.ollama_timeout_seconds,
        )

    @property
    def root_url(self) -> str:
        return self.base_url.rstrip("/")


class OllamaGenerateResponse(BaseModel):
    """Subset of the /api/generate reply we rely on."""

    response: str = ""
    done: bool = True
    total_duration: int | None = None
    eval_count: int | None = None
