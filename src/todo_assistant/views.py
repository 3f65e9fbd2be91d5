"""Rich renderables for the terminal client."""

from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models.chat import AssistantConfig, ChatMessage, ChatRole
from .models.task import Priority, Task, TaskFilters, TaskStats

SHORT_ID_LENGTH = 8

PRIORITY_COLORS = {
    Priority.HIGH: "red",
    Priority.MEDIUM: "yellow",
    Priority.LOW: "green",
}


def short_id(task: Task) -> str:
    return task.id[:SHORT_ID_LENGTH]


def task_table(tasks: list[Task], filters: TaskFilters | None = None) -> Table:
    """Task list as a table, one row per task in list order."""
    title = f"Tasks ({len(tasks)})"
    if filters is not None and filters != TaskFilters():
        title += f" - status={filters.status.value} priority={filters.priority.value}"
        if filters.search:
            title += f' search="{filters.search}"'

    table = Table(title=title)
    table.add_column("ID", style="cyan")
    table.add_column("Done")
    table.add_column("Title")
    table.add_column("Priority")
    table.add_column("Due")
    table.add_column("Tags", style="magenta")
    table.add_column("Updated", style="dim")

    for task in tasks:
        color = PRIORITY_COLORS.get(task.priority, "white")
        title_text = Text(task.title, style="dim strike" if task.completed else "")
        if task.description:
            title_text.append(f"\n{task.description}", style="dim")

        table.add_row(
            short_id(task),
            "[green]x[/green]" if task.completed else "",
            title_text,
            f"[{color}]{task.priority.value}[/{color}]",
            task.due_date.isoformat() if task.due_date else "-",
            ", ".join(task.tags),
            task.updated_at.astimezone().strftime("%Y-%m-%d %H:%M"),
        )

    return table


def stats_line(stats: TaskStats) -> str:
    return (
        f"[bold]{stats.total}[/bold] total, "
        f"[green]{stats.completed}[/green] completed, "
        f"[yellow]{stats.pending}[/yellow] pending, "
        f"[red]{stats.high_priority_open}[/red] high priority open"
    )


def task_detail(task: Task) -> str:
    lines = [
        f"\n[bold]Task {task.id}[/bold]",
        f"  Title: {task.title}",
        f"  Status: {'completed' if task.completed else 'pending'}",
        f"  Priority: {task.priority.value}",
    ]
    if task.description:
        lines.append(f"  Description: {task.description}")
    if task.due_date:
        lines.append(f"  Due: {task.due_date.isoformat()}")
    if task.tags:
        lines.append(f"  Tags: {', '.join(task.tags)}")
    lines.append(f"  Created: {task.created_at.astimezone():%Y-%m-%d %H:%M}")
    lines.append(f"  Updated: {task.updated_at.astimezone():%Y-%m-%d %H:%M}")
    return "\n".join(lines)


def connection_badge(connected: bool) -> str:
    return "[green]Connected[/green]" if connected else "[red]Disconnected[/red]"


def settings_table(config: AssistantConfig, connected: bool) -> Table:
    table = Table(title="Ollama Settings", show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("base_url", config.base_url)
    table.add_row("model", config.model)
    table.add_row("temperature", f"{config.temperature}")
    table.add_row("max_tokens", f"{config.max_tokens}")
    table.add_row("timeout", "none" if config.timeout is None else f"{config.timeout}s")
    table.add_row("status", connection_badge(connected))
    return table


def chat_message(message: ChatMessage) -> Panel:
    if message.role == ChatRole.USER:
        return Panel(Text(message.content), title="You", title_align="right", border_style="blue")
    return Panel(Markdown(message.content), title="Assistant", title_align="left", border_style="green")
