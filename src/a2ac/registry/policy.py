"""Default-agent selection for calls that do not name an agent."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from a2ac.config import Endpoint
    from a2ac.protocols.a2a.client import A2AClient


@runtime_checkable
class DefaultAgentPolicy(Protocol):
    """Chooses the agent used when a caller omits an agent id."""

    def select(
        self, endpoints: Sequence[Endpoint], clients: Mapping[str, A2AClient]
    ) -> str | None:
        """Return the id of the chosen live client, or ``None``."""
        ...


class FirstConfiguredPolicy:
    """Pick the first reachable agent in configured endpoint order."""

    def select(
        self, endpoints: Sequence[Endpoint], clients: Mapping[str, A2AClient]
    ) -> str | None:
        for endpoint in endpoints:
            if endpoint.id in clients:
                return endpoint.id
        return None
