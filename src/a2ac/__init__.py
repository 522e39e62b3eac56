"""a2ac — a client for remote agents speaking the A2A task protocol."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from a2ac.protocols.a2a.client import A2AClient as A2AClient
    from a2ac.registry.registry import AgentRegistry as AgentRegistry

_LAZY_EXPORTS = {
    "A2AClient": "a2ac.protocols.a2a.client",
    "AgentRegistry": "a2ac.registry.registry",
}


def __getattr__(name: str) -> object:
    module_path = _LAZY_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'a2ac' has no attribute {name!r}")
