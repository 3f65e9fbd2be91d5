"""Terminal client: task list, forms, settings and assistant chat."""

import asyncio
import logging
from datetime import datetime
from typing import Callable, TypeVar

import typer
import uvicorn
from pydantic import ValidationError
from rich.console import Console

from . import views
from .config import settings
from .logging_setup import setup_logging
from .models.chat import AssistantConfig
from .models.task import Priority, PriorityFilter, StatusFilter, Task, TaskDraft, TaskFilters
from .services.chat import ChatSession
from .services.ollama import OllamaClient
from .services.repository import TaskRepository
from .services.sync_gateway import SyncGateway

app = typer.Typer(help="Personal task tracker with a local LLM assistant")
console = Console()
logger = logging.getLogger(__name__)

T = TypeVar("T")

CHAT_HELP = """[bold]Chat commands[/bold]
  /list                 show the task list
  /stats                show task counts
  /settings             show assistant settings
  /set <key> <value>    change base_url, model, temperature, max_tokens or timeout
  /test                 test the Ollama connection
  /quit                 leave the chat"""


def _open_gateway() -> SyncGateway:
    return SyncGateway(settings.api_url)


def _with_repository(action: Callable[[TaskRepository], T]) -> T:
    """Pull the list, run ``action`` against it and wait for the resulting push."""

    async def runner() -> T:
        async with _open_gateway() as gateway:
            repository = TaskRepository(await gateway.pull(), sink=gateway)
            return action(repository)

    return asyncio.run(runner())


def _resolve(repository: TaskRepository, task_id: str) -> Task:
    """Find a task by full id or unique id prefix."""
    task = repository.get(task_id)
    if task:
        return task

    matches = [t for t in repository.tasks if t.id.startswith(task_id)]
    if len(matches) == 1:
        return matches[0]

    if matches:
        console.print(f"[red]Ambiguous task id: {task_id} ({len(matches)} matches)[/red]")
    else:
        console.print(f"[red]Task not found: {task_id}[/red]")
    raise typer.Exit(1)


def _assistant_config(
    base_url: str | None,
    model: str | None,
    temperature: float | None,
    max_tokens: int | None,
) -> AssistantConfig:
    overrides = {
        "base_url": base_url,
        "model": model,
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    defaults = AssistantConfig.from_settings(settings)
    try:
        return AssistantConfig.model_validate(
            {**defaults.model_dump(), **{k: v for k, v in overrides.items() if v is not None}}
        )
    except ValidationError as e:
        console.print(f"[red]Invalid assistant settings: {e}[/red]")
        raise typer.Exit(1)


@app.callback()
def main(debug: bool = typer.Option(False, "--debug", help="Verbose logging")):
    """Personal task tracker with a local LLM assistant."""
    setup_logging(debug=debug or settings.debug, level=logging.WARNING)


@app.command()
def serve(
    host: str = typer.Option(settings.host, "--host", help="Interface to bind"),
    port: int = typer.Option(settings.port, "--port", "-p", help="Port to listen on"),
):
    """Run the task store backend."""
    console.print(f"[green]Serving tasks from {settings.store_path} on http://{host}:{port}[/green]")
    uvicorn.run("todo_assistant.main:app", host=host, port=port)


@app.command("list")
def list_tasks(
    status: StatusFilter = typer.Option(StatusFilter.ALL, "--status", "-s", help="Filter by status"),
    priority: PriorityFilter = typer.Option(PriorityFilter.ALL, "--priority", "-p", help="Filter by priority"),
    search: str = typer.Option("", "--search", "-q", help="Match title, description or tags"),
):
    """Show tasks, filtered, with live counts."""
    filters = TaskFilters(status=status, priority=priority, search=search)

    def action(repository: TaskRepository) -> None:
        tasks = repository.apply_filter(filters)
        if not tasks:
            console.print("[yellow]No tasks found[/yellow]")
        else:
            console.print(views.task_table(tasks, filters))
        console.print(views.stats_line(repository.compute_stats()))

    _with_repository(action)


@app.command()
def show(task_id: str):
    """Show details of a single task."""
    _with_repository(lambda repository: console.print(views.task_detail(_resolve(repository, task_id))))


@app.command()
def add(
    title: str = typer.Argument(..., help="What needs to be done?"),
    description: str = typer.Option(None, "--description", "-d", help="Optional details"),
    priority: Priority = typer.Option(Priority.MEDIUM, "--priority", "-p"),
    due: datetime = typer.Option(None, "--due", formats=["%Y-%m-%d"], help="Due date (YYYY-MM-DD)"),
    tags: str = typer.Option("", "--tags", "-t", help="Comma-separated tags"),
):
    """Create a task."""
    try:
        draft = TaskDraft(
            title=title,
            description=description,
            priority=priority,
            due_date=due.date() if due else None,
            tags=tags,
        )
    except ValidationError as e:
        console.print(f"[red]Invalid task: {e.errors()[0]['msg']}[/red]")
        raise typer.Exit(1)

    task = _with_repository(lambda repository: repository.add(draft))
    console.print(f"[green]Added task {views.short_id(task)}: {task.title}[/green]")


@app.command()
def edit(
    task_id: str,
    title: str = typer.Option(None, "--title"),
    description: str = typer.Option(None, "--description", "-d"),
    priority: Priority = typer.Option(None, "--priority", "-p"),
    due: datetime = typer.Option(None, "--due", formats=["%Y-%m-%d"], help="Due date (YYYY-MM-DD)"),
    tags: str = typer.Option(None, "--tags", "-t", help="Comma-separated tags, replaces existing"),
    clear_due: bool = typer.Option(False, "--clear-due", help="Remove the due date"),
):
    """Edit fields of a task. Only the given options change."""
    fields: dict[str, object] = {}
    if title is not None:
        fields["title"] = title
    if description is not None:
        fields["description"] = description or None
    if priority is not None:
        fields["priority"] = priority
    if due is not None:
        fields["dueDate"] = due.date()
    elif clear_due:
        fields["dueDate"] = None
    if tags is not None:
        fields["tags"] = [tag.strip() for tag in tags.split(",") if tag.strip()]

    if not fields:
        console.print("[yellow]Nothing to change[/yellow]")
        return

    def action(repository: TaskRepository) -> Task | None:
        return repository.update(_resolve(repository, task_id).id, fields)

    try:
        task = _with_repository(action)
    except ValidationError as e:
        console.print(f"[red]Invalid task: {e.errors()[0]['msg']}[/red]")
        raise typer.Exit(1)

    if task:
        console.print(f"[green]Updated task {views.short_id(task)}: {task.title}[/green]")


@app.command()
def toggle(task_id: str):
    """Flip a task between completed and pending."""

    def action(repository: TaskRepository) -> Task | None:
        return repository.toggle_completion(_resolve(repository, task_id).id)

    task = _with_repository(action)
    if task:
        state = "completed" if task.completed else "pending"
        console.print(f"[green]{task.title} is now {state}[/green]")


@app.command()
def delete(task_id: str):
    """Delete a task."""

    def action(repository: TaskRepository) -> Task:
        task = _resolve(repository, task_id)
        repository.remove(task.id)
        return task

    task = _with_repository(action)
    console.print(f"[green]Deleted task {views.short_id(task)}: {task.title}[/green]")


@app.command("clear-completed")
def clear_completed():
    """Delete every completed task."""
    count = _with_repository(lambda repository: repository.clear_completed())
    console.print(f"[green]Cleared {count} completed tasks[/green]")


@app.command()
def stats():
    """Show task counts."""
    _with_repository(lambda repository: console.print(views.stats_line(repository.compute_stats())))


@app.command("test-connection")
def test_connection(
    base_url: str = typer.Option(None, "--base-url", help="Ollama server address"),
    model: str = typer.Option(None, "--model", "-m"),
):
    """Check that the Ollama server answers."""
    config = _assistant_config(base_url, model, None, None)
    connected = asyncio.run(OllamaClient(config).check_connection())
    console.print(f"{config.root_url}: {views.connection_badge(connected)}")
    if not connected:
        raise typer.Exit(1)


@app.command()
def config():
    """Show current configuration."""
    console.print("\n[bold]Configuration[/bold]")
    console.print(f"  Environment: {settings.environment}")
    console.print(f"  Store path: {settings.store_path}")
    console.print(f"  Backend: http://{settings.host}:{settings.port}")
    console.print(f"  API URL: {settings.api_url}")
    console.print(f"  Ollama: {settings.ollama_base_url}")
    console.print(f"  Model: {settings.ollama_model}")
    console.print(f"  Temperature: {settings.ollama_temperature}")
    console.print(f"  Max tokens: {settings.ollama_max_tokens}")
    console.print(f"  Poll interval: {settings.connection_poll_seconds}s")


# ============ Assistant Chat ============


async def _run_chat_command(session: ChatSession, line: str) -> bool:
    """Handle a slash command. Returns False when the chat should end."""
    command, _, rest = line[1:].partition(" ")
    command = command.lower()

    if command in ("quit", "exit", "q"):
        return False

    if command == "help":
        console.print(CHAT_HELP)
    elif command == "list":
        tasks = session.repository.tasks
        console.print(views.task_table(tasks) if tasks else "[yellow]No tasks yet[/yellow]")
    elif command == "stats":
        console.print(views.stats_line(session.repository.compute_stats()))
    elif command == "settings":
        console.print(views.settings_table(session.config, session.is_connected))
    elif command == "set":
        key, _, value = rest.strip().partition(" ")
        if key not in AssistantConfig.model_fields or not value:
            console.print(f"[red]Usage: /set <{'|'.join(AssistantConfig.model_fields)}> <value>[/red]")
            return True
        try:
            new_config = AssistantConfig.model_validate(
                {**session.config.model_dump(), key: None if value == "none" else value.strip()}
            )
        except ValidationError as e:
            console.print(f"[red]Invalid value for {key}: {e.errors()[0]['msg']}[/red]")
            return True
        session.configure(new_config)
        with console.status("Testing connection..."):
            await session.test_connection()
        console.print(views.settings_table(session.config, session.is_connected))
    elif command == "test":
        with console.status("Testing connection..."):
            connected = await session.test_connection()
        console.print(f"{session.config.root_url}: {views.connection_badge(connected)}")
    else:
        console.print(f"[red]Unknown command: /{command}[/red] (try /help)")

    return True


async def _chat_loop(config: AssistantConfig) -> None:
    async with _open_gateway() as gateway:
        repository = TaskRepository(await gateway.pull(), sink=gateway)
        session = ChatSession(repository, config)

        with console.status("Connecting to Ollama..."):
            await session.test_connection()
        console.print(f"[bold]AI Assistant[/bold] {views.connection_badge(session.is_connected)}")
        if session.is_connected:
            console.print("[dim]Try: Add a high priority task to review the quarterly report[/dim]")
            console.print("[dim]Try: What suggestions do you have for my todo list?[/dim]")
        else:
            console.print("[yellow]Connect to Ollama to start chatting (/settings, /set, /test)[/yellow]")
        console.print("[dim]/help for commands[/dim]")

        session.start_polling(settings.connection_poll_seconds)
        try:
            while True:
                line = (await asyncio.to_thread(console.input, "[bold blue]> [/bold blue]")).strip()
                if not line:
                    continue
                if line.startswith("/"):
                    if not await _run_chat_command(session, line):
                        break
                    continue

                with console.status("Thinking..."):
                    reply = await session.handle_message(line)
                console.print(views.chat_message(reply))
        except EOFError:
            console.print()
        finally:
            await session.stop_polling()


@app.command()
def chat(
    base_url: str = typer.Option(None, "--base-url", help="Ollama server address"),
    model: str = typer.Option(None, "--model", "-m"),
    temperature: float = typer.Option(None, "--temperature"),
    max_tokens: int = typer.Option(None, "--max-tokens"),
):
    """Talk to the assistant to add, edit or get suggestions for tasks."""
    config = _assistant_config(base_url, model, temperature, max_tokens)
    try:
        asyncio.run(_chat_loop(config))
    except KeyboardInterrupt:
        console.print("\n[dim]Bye[/dim]")


if __name__ == "__main__":
    app()
