"""Protocol layer — JSON-RPC envelopes, SSE decoding and the A2A client."""

from a2ac.protocols.errors import (
    A2AError,
    AgentError,
    HttpStatusError,
    NetworkError,
    ProtocolError,
    RoutingError,
    StreamFrameError,
)

__all__ = [
    "A2AError",
    "AgentError",
    "HttpStatusError",
    "NetworkError",
    "ProtocolError",
    "RoutingError",
    "StreamFrameError",
]
