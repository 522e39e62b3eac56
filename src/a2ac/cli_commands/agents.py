"""``a2ac agents`` — list configured agents and show their agent cards."""

from __future__ import annotations

import json
import sys
from typing import TYPE_CHECKING

import click

from a2ac.cli_commands._output import console, print_endpoints_table, print_error, print_payload
from a2ac.cli_commands._runtime import agent_id_for, dispatcher_for, run_with_registry

if TYPE_CHECKING:
    from a2ac.registry.registry import AgentRegistry
    from a2ac.tools.models import ToolResult


@click.group()
def agents() -> None:
    """Inspect the configured A2A agents."""


@agents.command("list")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format.",
)
def list_agents(fmt: str) -> None:
    """List configured agents and whether they answered at startup."""

    async def _list(registry: AgentRegistry) -> AgentRegistry:
        return registry

    registry = run_with_registry(_list)

    if not registry.endpoints():
        console.print("[yellow]No A2A endpoints configured.[/yellow]")
        return

    if fmt == "json":
        clients = registry.all_clients()
        failures = registry.failures()
        print_payload([
            {
                "agentId": endpoint.id,
                "url": endpoint.url,
                "connected": endpoint.id in clients,
                **({"error": failures[endpoint.id]} if endpoint.id in failures else {}),
            }
            for endpoint in registry.endpoints()
        ])
    else:
        print_endpoints_table(registry)


@agents.command("info")
@click.argument("agent", required=False)
def agent_info(agent: str | None) -> None:
    """Show the agent card of AGENT (id or URL), or of every live agent."""

    async def _info(registry: AgentRegistry) -> ToolResult:
        arguments = {"agentId": agent_id_for(registry, agent)} if agent else {}
        return await dispatcher_for(registry).call("a2a_agent_info", arguments)

    result = run_with_registry(_info)
    if result.is_error:
        print_error(result.text.removeprefix("Error: "))
        sys.exit(1)
    print_payload(json.loads(result.text))
