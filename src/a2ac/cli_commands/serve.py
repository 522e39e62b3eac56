"""``a2ac serve`` — run the A2A tools as an MCP server on stdio."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from a2ac.cli_commands._output import err_console
from a2ac.cli_commands._runtime import dispatcher_for, run_with_registry
from a2ac.protocols.mcp.server import MCPServer
from a2ac.protocols.mcp.transport import StdioServerTransport

if TYPE_CHECKING:
    from a2ac.registry.registry import AgentRegistry


@click.command()
def serve() -> None:
    """Serve the A2A tools and resources to an MCP host over stdio.

    Agent cards are fetched once at startup; stdout carries only protocol
    messages until stdin is closed.
    """
    err_console.print("Starting A2A client MCP server")
    transport = StdioServerTransport()

    async def _serve(registry: AgentRegistry) -> None:
        server = MCPServer(dispatcher_for(registry))
        err_console.print(
            f"A2A client MCP server running on stdio "
            f"({len(registry.all_clients())}/{len(registry.endpoints())} agents connected)"
        )
        await server.serve(transport)

    run_with_registry(_serve)
