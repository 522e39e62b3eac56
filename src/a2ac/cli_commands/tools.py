"""``a2ac tools`` — list and call the A2A tools directly."""

from __future__ import annotations

import json
import sys
from typing import TYPE_CHECKING

import click

from a2ac.cli_commands._output import console, print_error, print_tools_table
from a2ac.cli_commands._runtime import dispatcher_for, run_with_registry
from a2ac.tools.dispatcher import TOOL_SCHEMAS

if TYPE_CHECKING:
    from a2ac.registry.registry import AgentRegistry
    from a2ac.tools.models import ToolResult


@click.group()
def tools() -> None:
    """List and invoke A2A tools."""


@tools.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output the raw function schemas.")
def list_tools(as_json: bool) -> None:
    """List the available tools."""
    if as_json:
        console.print_json(json.dumps(TOOL_SCHEMAS))
    else:
        print_tools_table(TOOL_SCHEMAS)


@tools.command("call")
@click.argument("name")
@click.option("--args", "raw_args", default="{}", help="Tool arguments as a JSON object.")
def call_tool(name: str, raw_args: str) -> None:
    """Call tool NAME and print its result."""
    try:
        arguments = json.loads(raw_args)
    except ValueError as exc:
        print_error(f"--args is not valid JSON: {exc}")
        sys.exit(1)
    if not isinstance(arguments, dict):
        print_error("--args must be a JSON object")
        sys.exit(1)

    async def _call(registry: AgentRegistry) -> ToolResult:
        return await dispatcher_for(registry).call(name, arguments)

    result = run_with_registry(_call)
    if result.is_error:
        print_error(result.text.removeprefix("Error: "))
        sys.exit(1)
    console.print(result.text, markup=False, highlight=False, soft_wrap=True)
