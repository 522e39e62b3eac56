"""CLI fixtures: route the CLI's registry through the in-memory agent network."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from a2ac.config import (
    ENV_ENDPOINT_URL,
    ENV_ENDPOINT_URLS,
    ENV_ENDPOINTS_FILE,
    ENV_MAX_UPDATES,
    ENV_TIMEOUT,
    load_endpoints,
)
from a2ac.registry import AgentRegistry, make_client_factory

if TYPE_CHECKING:
    from a2ac.config import Settings
    from conftest import AgentNetwork


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    names = (ENV_ENDPOINT_URLS, ENV_ENDPOINT_URL, ENV_ENDPOINTS_FILE, ENV_TIMEOUT, ENV_MAX_UPDATES)
    monkeypatch.delenv("A2A_OTLP_ENDPOINT", raising=False)
    for name in names:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def cli_network(network: AgentNetwork, monkeypatch: pytest.MonkeyPatch) -> AgentNetwork:
    """Make every CLI command talk to *network* instead of real hosts."""

    async def open_registry(settings: Settings) -> AgentRegistry:
        factory = make_client_factory(timeout=settings.timeout, transport=network.transport)
        return await AgentRegistry.create(load_endpoints(settings), client_factory=factory)

    monkeypatch.setattr("a2ac.cli_commands._runtime.open_registry", open_registry)
    return network
