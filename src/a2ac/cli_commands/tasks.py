"""``a2ac tasks`` — send, inspect, cancel and follow A2A tasks."""

from __future__ import annotations

import json
import sys
from typing import TYPE_CHECKING, Any

import click

from a2ac.cli_commands._output import console, print_error, print_event, print_payload
from a2ac.cli_commands._runtime import agent_id_for, dispatcher_for, run_with_registry

if TYPE_CHECKING:
    from a2ac.protocols.a2a.client import TaskEventStream
    from a2ac.registry.registry import AgentRegistry
    from a2ac.tools.models import ToolResult

_agent_option = click.option(
    "--agent",
    "-a",
    default=None,
    help="Agent id or URL. Defaults to the first reachable agent.",
)
_required_agent_option = click.option(
    "--agent", "-a", required=True, help="Agent id or URL that owns the task."
)
_max_updates_option = click.option(
    "--max-updates",
    "-n",
    type=click.IntRange(min=1),
    default=None,
    help="Stop after this many events (default: A2A_MAX_UPDATES or 10).",
)


@click.group()
def tasks() -> None:
    """Work with tasks on remote agents."""


def _call_tool(name: str, agent: str | None, arguments: dict[str, Any]) -> None:
    async def _call(registry: AgentRegistry) -> ToolResult:
        agent_id = agent_id_for(registry, agent)
        if agent_id:
            arguments["agentId"] = agent_id
        return await dispatcher_for(registry).call(name, arguments)

    result = run_with_registry(_call)
    if result.is_error:
        print_error(result.text.removeprefix("Error: "))
        sys.exit(1)
    print_payload(json.loads(result.text))


@tasks.command("send")
@click.argument("message")
@click.option("--task-id", default=None, help="Task id; generated when omitted.")
@_agent_option
def send(message: str, task_id: str | None, agent: str | None) -> None:
    """Send MESSAGE as a new task and print the agent's reply."""
    arguments: dict[str, Any] = {"message": message}
    if task_id:
        arguments["taskId"] = task_id
    _call_tool("a2a_send_task", agent, arguments)


@tasks.command("get")
@click.argument("task_id")
@_required_agent_option
def get(task_id: str, agent: str) -> None:
    """Print the current state of TASK_ID."""
    _call_tool("a2a_get_task", agent, {"taskId": task_id})


@tasks.command("cancel")
@click.argument("task_id")
@_required_agent_option
def cancel(task_id: str, agent: str) -> None:
    """Cancel TASK_ID."""
    _call_tool("a2a_cancel_task", agent, {"taskId": task_id})


@tasks.command("subscribe")
@click.argument("message")
@click.option("--task-id", default=None, help="Task id; generated when omitted.")
@_agent_option
@_max_updates_option
def subscribe(
    message: str, task_id: str | None, agent: str | None, max_updates: int | None
) -> None:
    """Send MESSAGE as a streaming task and print updates as they arrive."""

    async def _open(registry: AgentRegistry) -> int:
        agent_id, client = registry.resolve(agent_id_for(registry, agent))
        stream = client.send_task_subscribe(message, task_id=task_id)
        console.print(f"[dim]Streaming from agent {agent_id}[/dim]")
        return await _follow(stream, max_updates)

    run_with_registry(_open)


@tasks.command("resubscribe")
@click.argument("task_id")
@_required_agent_option
@_max_updates_option
def resubscribe(task_id: str, agent: str, max_updates: int | None) -> None:
    """Resume printing updates for TASK_ID after an interrupted stream."""

    async def _open(registry: AgentRegistry) -> int:
        _, client = registry.resolve(agent_id_for(registry, agent))
        return await _follow(client.resubscribe_task(task_id), max_updates)

    run_with_registry(_open)


async def _follow(stream: TaskEventStream, max_updates: int | None) -> int:
    """Print events until a final one, the event cap, or end of stream."""
    limit = max_updates or click.get_current_context().obj.max_updates
    count = 0
    async with stream:
        async for event in stream:
            print_event(event)
            count += 1
            if event.final or count >= limit:
                break
    if count == 0:
        console.print("[yellow]No updates received.[/yellow]")
    return count
