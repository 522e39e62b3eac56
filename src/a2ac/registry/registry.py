"""AgentRegistry — one A2A client per configured endpoint, probed at startup.

The registry is built once and never changes afterwards, so concurrent
callers can share it without locking.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

from a2ac.protocols.a2a.client import DEFAULT_TIMEOUT, A2AClient
from a2ac.protocols.errors import A2AError, RoutingError
from a2ac.registry.policy import DefaultAgentPolicy, FirstConfiguredPolicy
from a2ac.utils.ids import new_id

if TYPE_CHECKING:
    import httpx

    from a2ac.config import Endpoint
    from a2ac.utils.ids import IdFactory

logger = logging.getLogger(__name__)

ClientFactory = Callable[["Endpoint"], A2AClient]


def make_client_factory(
    *,
    timeout: float | None = DEFAULT_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
    id_factory: IdFactory = new_id,
) -> ClientFactory:
    """Build a factory creating identically configured clients."""

    def create(endpoint: Endpoint) -> A2AClient:
        return A2AClient(endpoint.url, id_factory=id_factory, transport=transport, timeout=timeout)

    return create


class AgentRegistry:
    """Routes calls to the live client of each configured endpoint.

    Usage::

        registry = await AgentRegistry.create(load_endpoints(settings))
        client = registry.require(agent_id)
        agent_id, client = registry.resolve()   # default agent
    """

    def __init__(
        self,
        endpoints: Iterable[Endpoint],
        clients: Mapping[str, A2AClient],
        *,
        failures: Mapping[str, str] | None = None,
        policy: DefaultAgentPolicy | None = None,
    ) -> None:
        self._endpoints = tuple(endpoints)
        _check_unique_ids(self._endpoints)

        known = {endpoint.id for endpoint in self._endpoints}
        stray = set(clients) - known
        if stray:
            raise ValueError(f"Clients registered for unknown endpoints: {sorted(stray)}")

        self._clients = MappingProxyType(
            {e.id: clients[e.id] for e in self._endpoints if e.id in clients}
        )
        self._failures = MappingProxyType(dict(failures or {}))
        self._policy = policy or FirstConfiguredPolicy()

    @classmethod
    async def create(
        cls,
        endpoints: Iterable[Endpoint],
        *,
        client_factory: ClientFactory | None = None,
        policy: DefaultAgentPolicy | None = None,
    ) -> AgentRegistry:
        """Instantiate and probe one client per endpoint.

        Each endpoint is probed once with :meth:`A2AClient.agent_card`.  A
        failed probe is logged and recorded in :meth:`failures`; the
        endpoint stays configured but gets no live client.
        """
        endpoints = tuple(endpoints)
        _check_unique_ids(endpoints)
        factory = client_factory or (lambda endpoint: A2AClient(endpoint.url))

        clients = [factory(endpoint) for endpoint in endpoints]
        outcomes = await asyncio.gather(
            *(_probe(endpoint, client) for endpoint, client in zip(endpoints, clients))
        )

        live: dict[str, A2AClient] = {}
        failures: dict[str, str] = {}
        for endpoint, client, error in zip(endpoints, clients, outcomes):
            if error is None:
                live[endpoint.id] = client
            else:
                failures[endpoint.id] = error
        return cls(endpoints, live, failures=failures, policy=policy)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def lookup(self, agent_id: str) -> A2AClient | None:
        """Return the live client for *agent_id*, if any."""
        return self._clients.get(agent_id)

    def require(self, agent_id: str) -> A2AClient:
        """Return the live client for *agent_id*.

        Raises:
            RoutingError: If the id is unknown or its probe failed.
        """
        client = self._clients.get(agent_id)
        if client is None:
            raise RoutingError(agent_id)
        return client

    def resolve(self, agent_id: str | None = None) -> tuple[str, A2AClient]:
        """Route to *agent_id*, or to the policy's default agent."""
        if agent_id:
            return agent_id, self.require(agent_id)
        selected = self._policy.select(self._endpoints, self._clients)
        if selected is None or selected not in self._clients:
            raise RoutingError(None)
        return selected, self._clients[selected]

    def all_clients(self) -> Mapping[str, A2AClient]:
        """Live clients keyed by endpoint id, in configured order."""
        return self._clients

    def endpoints(self) -> tuple[Endpoint, ...]:
        """Every configured endpoint, reachable or not."""
        return self._endpoints

    def endpoint(self, agent_id: str) -> Endpoint | None:
        return next((e for e in self._endpoints if e.id == agent_id), None)

    def endpoint_by_url(self, url: str) -> Endpoint | None:
        wanted = url.rstrip("/")
        return next((e for e in self._endpoints if e.url.rstrip("/") == wanted), None)

    def failures(self) -> Mapping[str, str]:
        """Probe error messages of unreachable endpoints, keyed by id."""
        return self._failures


def _check_unique_ids(endpoints: tuple[Endpoint, ...]) -> None:
    seen: set[str] = set()
    for endpoint in endpoints:
        if endpoint.id in seen:
            raise ValueError(f"Duplicate endpoint id: {endpoint.id}")
        seen.add(endpoint.id)


async def _probe(endpoint: Endpoint, client: A2AClient) -> str | None:
    """Fetch the agent card once; return the error message on failure."""
    try:
        card = await client.agent_card()
    except A2AError as exc:
        logger.error("Failed to connect to agent %s at %s: %s", endpoint.id, endpoint.url, exc)
        return str(exc)
    logger.info("Connected to agent %s at %s (%s)", endpoint.id, endpoint.url, card.name)
    return None
