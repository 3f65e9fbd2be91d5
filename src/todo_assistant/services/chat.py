"""Chat session: routes free-text requests to the assistant and applies the result."""

import asyncio
import contextlib
import logging
from typing import Any

from pydantic import ValidationError

from ..models.chat import AssistantConfig, ChatMessage, ChatRole, Intent
from ..models.task import Task, TaskDraft
from .assistant import AssistantBridge, IntentClassifier, KeywordIntentClassifier, find_target
from .ollama import OllamaClient
from .repository import TaskRepository, updatable_fields

logger = logging.getLogger(__name__)

GENERIC_ERROR_REPLY = (
    "Sorry, I encountered an error. Please check your Ollama connection and try again."
)
DISCONNECTED_REPLY = "I'm not connected to Ollama right now. Check the settings and test the connection."
HELP_REPLY = (
    "I'm here to help you manage your todos! You can ask me to add new tasks, "
    "edit existing ones, or get suggestions for better organization."
)
ADD_UNCLEAR_REPLY = "I couldn't understand what todo you wanted to add. Please try being more specific."
EDIT_UNCLEAR_REPLY = (
    "I couldn't understand what changes you wanted to make. Please try being more specific."
)


def _without(fields: dict[str, Any], names: set[str]) -> dict[str, Any]:
    """Drop draft fields by wire or Python name."""
    dropped = set(names)
    for name, info in TaskDraft.model_fields.items():
        if name in dropped or info.alias in dropped:
            dropped.update({name, info.alias})
    return {key: value for key, value in fields.items() if key not in dropped}


class ChatSession:
    """One user's chat with the assistant.

    Holds the transcript, the loading flag and the last known connection
    state. Assistant settings are passed in explicitly and can be swapped
    with :meth:`configure`.
    """

    def __init__(
        self,
        repository: TaskRepository,
        config: AssistantConfig,
        classifier: IntentClassifier | None = None,
        bridge: AssistantBridge | None = None,
    ) -> None:
        self.repository = repository
        self.config = config
        self.classifier = classifier or KeywordIntentClassifier()
        self.bridge = bridge or AssistantBridge(OllamaClient(config))
        self.messages: list[ChatMessage] = []
        self.is_loading = False
        self.is_connected = False
        self._poller: asyncio.Task[None] | None = None

    def configure(self, config: AssistantConfig) -> None:
        """Point the session at a new endpoint/model. Connection state is re-tested lazily."""
        self.config = config
        self.bridge = AssistantBridge(OllamaClient(config))
        self.is_connected = False
        logger.info(f"Assistant configured: {config.root_url} model={config.model}")

    async def test_connection(self) -> bool:
        self.is_connected = await self.bridge.test_connectivity()
        return self.is_connected

    async def handle_message(self, text: str) -> ChatMessage:
        """Record ``text``, act on it and return the assistant's reply."""
        self.messages.append(ChatMessage(content=text, role=ChatRole.USER))

        if not self.is_connected:
            return self._reply(DISCONNECTED_REPLY)

        self.is_loading = True
        try:
            content = await self._respond(text)
        except Exception:
            logger.exception("Chat request failed")
            content = GENERIC_ERROR_REPLY
        finally:
            self.is_loading = False

        return self._reply(content)

    async def _respond(self, text: str) -> str:
        intent = self.classifier.classify(text)
        tasks = self.repository.tasks
        logger.info(f"Chat intent: {intent.value}")

        if intent == Intent.ADD:
            return await self._add(text, tasks)

        if intent == Intent.EDIT:
            target = find_target(text, tasks)
            if target is not None:
                return await self._edit(text, target, tasks)
            logger.info("No task title found in edit request, offering suggestions instead")

        return await self._suggest(tasks)

    async def _add(self, text: str, tasks: list[Task]) -> str:
        fields = await self.bridge.extract_new_task(text, tasks)
        if not fields.get("title"):
            return ADD_UNCLEAR_REPLY
        try:
            draft = TaskDraft.model_validate({**fields, "completed": False})
        except ValidationError as e:
            invalid = {str(err["loc"][0]) for err in e.errors() if err["loc"]}
            if "title" in invalid:
                logger.warning(f"AI draft rejected: {e}")
                return ADD_UNCLEAR_REPLY
            # Optional fields fall back to their defaults
            logger.warning(f"Dropping invalid AI draft fields {sorted(invalid)}")
            try:
                draft = TaskDraft.model_validate({**_without(fields, invalid), "completed": False})
            except ValidationError as retry_error:
                logger.warning(f"AI draft rejected: {retry_error}")
                return ADD_UNCLEAR_REPLY
        task = self.repository.add(draft)
        return f'Added new task: "{task.title}"'

    async def _edit(self, text: str, target: Task, tasks: list[Task]) -> str:
        updates = updatable_fields(await self.bridge.extract_update(text, target, tasks))
        if not updates:
            return EDIT_UNCLEAR_REPLY
        try:
            self.repository.update(target.id, updates)
        except ValidationError as e:
            logger.warning(f"AI update rejected for {target.id}: {e}")
            return EDIT_UNCLEAR_REPLY
        return f'Updated task: "{target.title}"'

    async def _suggest(self, tasks: list[Task]) -> str:
        suggestions = await self.bridge.suggest(tasks)
        if not suggestions:
            return HELP_REPLY
        lines = "\n".join(f"{i}. {s}" for i, s in enumerate(suggestions, start=1))
        return f"Here are some suggestions for your todo list:\n\n{lines}"

    def _reply(self, content: str) -> ChatMessage:
        message = ChatMessage(content=content, role=ChatRole.ASSISTANT)
        self.messages.append(message)
        return message

    # Background connectivity polling

    def start_polling(self, interval: float) -> None:
        """Check the connection now and then every ``interval`` seconds."""
        if self._poller is not None and not self._poller.done():
            return
        self._poller = asyncio.get_running_loop().create_task(self._poll(interval))

    async def stop_polling(self) -> None:
        if self._poller is None:
            return
        self._poller.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._poller
        self._poller = None

    async def _poll(self, interval: float) -> None:
        while True:
            was_connected = self.is_connected
            await self.test_connection()
            if was_connected != self.is_connected:
                logger.info(f"Ollama {'connected' if self.is_connected else 'disconnected'}")
            await asyncio.sleep(interval)
