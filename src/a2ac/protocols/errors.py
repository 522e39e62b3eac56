"""Shared error types for the A2A client layers.

Three failure layers are kept distinct so callers can branch on them:
the transport (:class:`NetworkError`), HTTP (:class:`HttpStatusError`) and
JSON-RPC (:class:`ProtocolError` / :class:`AgentError`).
"""

from __future__ import annotations

from typing import Any


class A2AError(Exception):
    """Base error for all A2A client failures."""


class NetworkError(A2AError):
    """The remote agent could not be reached or the connection was aborted."""


class HttpStatusError(A2AError):
    """The agent answered with a non-2xx status and no JSON-RPC error body."""

    def __init__(
        self,
        status_code: int,
        body: str = "",
        reason: str = "",
        *,
        message: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.body = body
        self.reason = reason
        if message is None:
            message = f"HTTP error {status_code}: {reason}" + (f" - {body}" if body else "")
        super().__init__(message)


class ProtocolError(A2AError):
    """A response envelope or payload is malformed."""


class AgentError(ProtocolError):
    """The agent reported an error inside a well-formed JSON-RPC envelope."""

    def __init__(self, code: int | None, message: str, data: Any = None) -> None:
        self.code = code
        self.message = message
        self.data = data
        super().__init__(f"{message} ({code})")


class StreamFrameError(A2AError):
    """A single SSE data frame could not be decoded."""

    def __init__(self, detail: str, frame: str = "") -> None:
        self.detail = detail
        self.frame = frame
        super().__init__(f"Invalid stream frame: {detail}")


class RoutingError(A2AError):
    """No live agent client matches the requested identifier."""

    def __init__(self, agent_id: str | None) -> None:
        self.agent_id = agent_id
        if agent_id:
            super().__init__(f"No agent found with ID {agent_id}")
        else:
            super().__init__("No available agent")
