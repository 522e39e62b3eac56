"""Errors raised by the tool front end."""

from __future__ import annotations

from a2ac.protocols.errors import A2AError


class ToolNotFoundError(A2AError):
    """Requested tool does not exist."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class ToolArgumentError(A2AError):
    """Tool arguments failed validation."""

    def __init__(self, name: str, detail: str) -> None:
        self.name = name
        self.detail = detail
        super().__init__(f"Invalid arguments for {name}: {detail}")


class ResourceNotFoundError(A2AError):
    """A resource URI does not name any known resource."""

    def __init__(self, uri: str) -> None:
        self.uri = uri
        super().__init__(f"Resource not found: {uri}")


class ResourceReadError(A2AError):
    """A known resource could not be produced."""

    def __init__(self, uri: str, message: str) -> None:
        self.uri = uri
        super().__init__(message)
