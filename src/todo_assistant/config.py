"""Application configuration via environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    environment: str = "development"
    debug: bool = False
    service_name: str = "todo-assistant"

    # CORS
    cors_origins: list[str] = ["*"]

    # Backend
    host: str = "127.0.0.1"
    port: int = 4000
    store_path: Path = Path("todos.json")

    # Client side: where the backend lives
    api_url: str = "http://localhost:4000"

    # Ollama defaults (runtime-adjustable from the chat settings panel)
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "mistral-small"
    ollama_temperature: float = 0.7
    ollama_max_tokens: int = 1000
    ollama_timeout_seconds: float | None = None  # None = wait as long as the model needs

    # Chat
    connection_poll_seconds: float = 10.0

    class Config:
        env_prefix = "TODO_ASSISTANT_"
        env_file = ".env"
        case_sensitive = False


settings = Settings()
