"""Tests for the terminal client commands."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from todo_assistant.cli import app
from todo_assistant.models.task import Task
from todo_assistant.services.sync_gateway import SyncGateway

from .fakes import FakeBackend

runner = CliRunner()

MILK_ID = "abc12345-0000-0000-0000-000000000001"
MOM_ID = "abd99999-0000-0000-0000-000000000002"


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend(
        [
            Task(id=MILK_ID, title="Buy milk", priority="low").to_wire(),
            Task(id=MOM_ID, title="Call mom", completed=True).to_wire(),
        ]
    )


@pytest.fixture(autouse=True)
def gateway(backend: FakeBackend):
    with patch(
        "todo_assistant.cli._open_gateway",
        side_effect=lambda: SyncGateway("http://backend.test", transport=backend.transport),
    ):
        yield


def test_list_shows_stats(backend: FakeBackend) -> None:
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 0
    assert "Buy milk" in result.output
    assert "2 total" in result.output
    assert "1 completed" in result.output
    assert backend.posts == []


def test_list_filters_by_status() -> None:
    result = runner.invoke(app, ["list", "--status", "pending"])
    assert result.exit_code == 0
    assert "Buy milk" in result.output
    assert "Call mom" not in result.output


def test_list_with_no_matches() -> None:
    result = runner.invoke(app, ["list", "--search", "dentist"])
    assert result.exit_code == 0
    assert "No tasks found" in result.output


def test_add_pushes_new_task(backend: FakeBackend) -> None:
    result = runner.invoke(
        app,
        ["add", "  Review report ", "--priority", "high", "--tags", "work, q3", "--due", "2024-03-01"],
    )

    assert result.exit_code == 0
    assert "Added task" in result.output
    added = backend.posts[-1][-1]
    assert added["title"] == "Review report"
    assert added["priority"] == "high"
    assert added["tags"] == ["work", "q3"]
    assert added["dueDate"] == "2024-03-01"
    assert len(backend.posts[-1]) == 3


def test_add_rejects_blank_title(backend: FakeBackend) -> None:
    result = runner.invoke(app, ["add", "   "])
    assert result.exit_code == 1
    assert "Invalid task" in result.output
    assert backend.posts == []


def test_toggle_by_id_prefix(backend: FakeBackend) -> None:
    result = runner.invoke(app, ["toggle", "abc1"])
    assert result.exit_code == 0
    assert "now completed" in result.output
    assert backend.posts[-1][0]["completed"] is True


def test_ambiguous_prefix_fails(backend: FakeBackend) -> None:
    result = runner.invoke(app, ["toggle", "ab"])
    assert result.exit_code == 1
    assert "Ambiguous" in result.output
    assert backend.posts == []


def test_edit_changes_given_fields(backend: FakeBackend) -> None:
    result = runner.invoke(app, ["edit", MILK_ID, "--priority", "high", "--title", "Buy oat milk"])
    assert result.exit_code == 0
    edited = backend.posts[-1][0]
    assert edited["priority"] == "high"
    assert edited["title"] == "Buy oat milk"
    assert edited["id"] == MILK_ID


def test_edit_without_options_does_nothing(backend: FakeBackend) -> None:
    result = runner.invoke(app, ["edit", MILK_ID])
    assert result.exit_code == 0
    assert "Nothing to change" in result.output
    assert backend.posts == []


def test_delete_unknown_task(backend: FakeBackend) -> None:
    result = runner.invoke(app, ["delete", "zzz"])
    assert result.exit_code == 1
    assert "Task not found" in result.output


def test_delete(backend: FakeBackend) -> None:
    result = runner.invoke(app, ["delete", MOM_ID])
    assert result.exit_code == 0
    assert [task["id"] for task in backend.posts[-1]] == [MILK_ID]


def test_clear_completed(backend: FakeBackend) -> None:
    result = runner.invoke(app, ["clear-completed"])
    assert result.exit_code == 0
    assert "Cleared 1 completed tasks" in result.output
    assert [task["id"] for task in backend.posts[-1]] == [MILK_ID]


def test_test_connection_reports_failure() -> None:
    client = MagicMock()
    client.check_connection = AsyncMock(return_value=False)
    with patch("todo_assistant.cli.OllamaClient", return_value=client):
        result = runner.invoke(app, ["test-connection", "--base-url", "http://nowhere.test"])

    assert result.exit_code == 1
    assert "Disconnected" in result.output
