"""Natural-language task management on top of a local Ollama model."""

import json
import logging
import re
from typing import Any, Protocol

from ..models.chat import Intent
from ..models.task import Task
from .ollama import OllamaClient

logger = logging.getLogger(__name__)

ADD_KEYWORDS = ("add", "create", "new", "todo", "task")
EDIT_KEYWORDS = ("edit", "update", "change", "modify")

# Greedy: first opening bracket through the last closing one
_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")
_ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")


class IntentClassifier(Protocol):
    """Decides what a chat request wants done."""

    def classify(self, text: str) -> Intent: ...


class KeywordIntentClassifier:
    """Keyword presence, add set checked first. Anything else is a suggestion request."""

    def __init__(
        self,
        add_keywords: tuple[str, ...] = ADD_KEYWORDS,
        edit_keywords: tuple[str, ...] = EDIT_KEYWORDS,
    ) -> None:
        self.add_keywords = add_keywords
        self.edit_keywords = edit_keywords

    def classify(self, text: str) -> Intent:
        lowered = text.lower()
        if any(keyword in lowered for keyword in self.add_keywords):
            return Intent.ADD
        if any(keyword in lowered for keyword in self.edit_keywords):
            return Intent.EDIT
        return Intent.SUGGEST


def _strip_code_fences(content: str) -> str:
    # Handle markdown code blocks
    if "```json" in content:
        return content.split("```json")[1].split("```")[0]
    if "```" in content:
        parts = content.split("```")
        if len(parts) >= 3:
            return parts[1]
    return content


def _search_json(content: str, pattern: re.Pattern[str], kind: type) -> Any | None:
    """Greedy match over the whole reply, then over the fenced block if that fails."""
    candidates = [content]
    fenced = _strip_code_fences(content)
    if fenced != content:
        candidates.append(fenced)

    for candidate in candidates:
        match = pattern.search(candidate)
        if not match:
            continue
        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse AI response: {e}")
            continue
        if isinstance(parsed, kind):
            return parsed
    return None


def extract_json_object(content: str) -> dict[str, Any] | None:
    """Parse the first-``{``-to-last-``}`` span of a reply, or None."""
    return _search_json(content, _OBJECT_PATTERN, dict)


def extract_json_array(content: str) -> list[Any] | None:
    """Parse the first-``[``-to-last-``]`` span of a reply, or None."""
    return _search_json(content, _ARRAY_PATTERN, list)


def _task_summaries(tasks: list[Task], with_ids: bool = False) -> str:
    summaries = []
    for task in tasks:
        entry: dict[str, Any] = {"title": task.title, "completed": task.completed}
        if with_ids:
            entry = {"id": task.id, **entry}
        summaries.append(entry)
    return json.dumps(summaries, ensure_ascii=False)


def find_target(text: str, tasks: list[Task]) -> Task | None:
    """First task whose title appears in the request, ignoring case."""
    lowered = text.lower()
    for task in tasks:
        if task.title.lower() in lowered:
            return task
    return None


class AssistantBridge:
    """Builds prompts from the task list and turns model replies into task data.

    Model failures raise ``AssistantUnavailableError``. Replies that do not
    contain usable JSON degrade to a safe default instead.
    """

    def __init__(self, client: OllamaClient) -> None:
        self.client = client

    async def extract_new_task(self, text: str, tasks: list[Task]) -> dict[str, Any]:
        """
        Ask the model to turn a request into a new task draft.

        Args:
            text: Raw chat input like "Add a high priority task to review the report"
            tasks: Current task list, given to the model as context

        Returns:
            Draft fields as returned by the model, unchecked. Falls back to
            the raw text as title with medium priority.
        """
        prompt = f"""You are a helpful AI assistant that helps manage a todo list.
The user wants to add a new todo item. Extract the todo information from their request.

Current todos: {_task_summaries(tasks)}

Return only a JSON object with the following structure, no explanation:
{{
  "title": "The todo title",
  "description": "Optional description",
  "priority": "low|medium|high",
  "dueDate": "YYYY-MM-DD (optional)",
  "tags": ["tag1", "tag2"]
}}

User request: {text}"""

        reply = await self.client.generate(prompt)
        draft = extract_json_object(reply)
        if draft is None:
            logger.info("No JSON object in AI reply, falling back to raw text")
            return {"title": text, "priority": "medium", "tags": []}
        return draft

    async def extract_update(self, text: str, target: Task, tasks: list[Task]) -> dict[str, Any]:
        """Ask the model which fields of ``target`` the request changes. ``{}`` if unclear."""
        prompt = f"""You are a helpful AI assistant that helps manage a todo list.
The user wants to edit an existing todo item. Understand their request and provide the updated information.

Current todo to edit: {json.dumps(target.to_wire(), ensure_ascii=False)}
All todos: {_task_summaries(tasks, with_ids=True)}

Return only a JSON object with just the fields that should be updated:
{{
  "title": "Updated title (if changed)",
  "description": "Updated description (if changed)",
  "priority": "low|medium|high (if changed)",
  "completed": true/false (if changed),
  "dueDate": "YYYY-MM-DD (if changed)",
  "tags": ["tag1", "tag2"] (if changed)
}}

User request: {text}"""

        reply = await self.client.generate(prompt)
        return extract_json_object(reply) or {}

    async def suggest(self, tasks: list[Task]) -> list[str]:
        """Three-ish free-text tips for the current list. Empty if the reply is unusable."""
        prompt = f"""You are a helpful AI assistant that provides suggestions for todo management.
Based on the current todos, provide 3 helpful suggestions for the user.

Current todos: {json.dumps([task.to_wire() for task in tasks], ensure_ascii=False)}

Return only a JSON array of suggestions:
["suggestion 1", "suggestion 2", "suggestion 3"]"""

        reply = await self.client.generate(prompt)
        suggestions = extract_json_array(reply)
        if suggestions is None:
            return []
        return [str(item) for item in suggestions]

    async def test_connectivity(self) -> bool:
        return await self.client.check_connection()
