"""Agent registry — configured endpoints and their live A2A clients."""

from a2ac.registry.policy import DefaultAgentPolicy, FirstConfiguredPolicy
from a2ac.registry.registry import AgentRegistry, ClientFactory, make_client_factory

__all__ = [
    "AgentRegistry",
    "ClientFactory",
    "DefaultAgentPolicy",
    "FirstConfiguredPolicy",
    "make_client_factory",
]
