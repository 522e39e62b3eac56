"""Shared CLI output formatters."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from a2ac.protocols.a2a.models import TaskStatusUpdateEvent

if TYPE_CHECKING:
    from a2ac.protocols.a2a.models import TaskArtifactUpdateEvent
    from a2ac.registry.registry import AgentRegistry

console = Console()
err_console = Console(stderr=True)


def configure_logging(*, verbose: bool = False) -> None:
    """Send ``a2ac`` log records to stderr through rich."""
    logger = logging.getLogger("a2ac")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(RichHandler(console=err_console, show_path=False))


def print_error(message: str) -> None:
    console.print(f"[red]Error:[/red] {escape(message)}")


def print_payload(payload: Any) -> None:
    """Pretty-print a JSON-compatible value."""
    console.print_json(json.dumps(payload, default=str))


def print_endpoints_table(registry: AgentRegistry) -> None:
    """Pretty-print configured endpoints and their probe outcome."""
    table = Table(title="A2A Agents")
    table.add_column("ID", style="cyan")
    table.add_column("URL")
    table.add_column("Status")

    clients = registry.all_clients()
    failures = registry.failures()
    for endpoint in registry.endpoints():
        if endpoint.id in clients:
            status = "[green]connected[/green]"
        else:
            status = f"[red]unreachable[/red] {escape(_truncate(failures.get(endpoint.id, '')))}"
        table.add_row(endpoint.id, endpoint.url, status)

    console.print(table)


def print_tools_table(tools: list[dict[str, Any]]) -> None:
    """Pretty-print a list of tool schemas as a table."""
    table = Table(title="A2A Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Required")

    for tool in tools:
        func = tool.get("function", {})
        table.add_row(
            func.get("name", "?"),
            _truncate(func.get("description", "")),
            ", ".join(func.get("parameters", {}).get("required", [])) or "-",
        )

    console.print(table)


def print_event(event: TaskStatusUpdateEvent | TaskArtifactUpdateEvent) -> None:
    """Print one streamed task event as a single line."""
    marker = " [bold](final)[/bold]" if event.final else ""
    if isinstance(event, TaskStatusUpdateEvent):
        state = getattr(event.status.state, "value", event.status.state)
        text = event.status.message.text if event.status.message else ""
        console.print(f"[cyan]{event.id}[/cyan] status={state}{marker} {escape(_truncate(text))}")
    else:
        text = "".join(part.text for part in event.artifact.parts)
        name = event.artifact.name or f"#{event.artifact.index}"
        console.print(f"[cyan]{event.id}[/cyan] artifact={name}{marker} {escape(_truncate(text))}")


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
