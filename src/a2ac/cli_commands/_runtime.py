"""Shared plumbing for CLI commands: settings, registry and agent lookup."""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypeVar

import click

from a2ac.cli_commands._output import print_error
from a2ac.config import ConfigError, load_endpoints
from a2ac.protocols.errors import A2AError
from a2ac.registry.registry import AgentRegistry, make_client_factory
from a2ac.tools.dispatcher import A2AToolDispatcher

if TYPE_CHECKING:
    from a2ac.config import Settings

_T = TypeVar("_T")


async def open_registry(settings: Settings) -> AgentRegistry:
    """Load the configured endpoints and probe each of them once."""
    endpoints = load_endpoints(settings)
    return await AgentRegistry.create(
        endpoints, client_factory=make_client_factory(timeout=settings.timeout)
    )


def agent_id_for(registry: AgentRegistry, agent: str | None) -> str | None:
    """Accept either an endpoint id or an endpoint URL on the command line."""
    if not agent or registry.endpoint(agent) is not None:
        return agent
    endpoint = registry.endpoint_by_url(agent)
    return endpoint.id if endpoint is not None else agent


def run_with_registry(work: Callable[[AgentRegistry], Awaitable[_T]]) -> _T:
    """Open the registry from the current settings and run *work* on it.

    Configuration and A2A errors are printed and end the process with
    exit status 1.
    """
    settings: Settings = click.get_current_context().obj

    async def _main() -> _T:
        registry = await open_registry(settings)
        return await work(registry)

    try:
        return asyncio.run(_main())
    except (ConfigError, A2AError) as exc:
        print_error(str(exc))
        sys.exit(1)


def dispatcher_for(registry: AgentRegistry) -> A2AToolDispatcher:
    settings: Settings = click.get_current_context().obj
    return A2AToolDispatcher(registry, max_updates=settings.max_updates)
