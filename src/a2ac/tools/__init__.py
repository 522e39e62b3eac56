"""Tool front end — registry operations as named tools and resources."""

from a2ac.tools.dispatcher import TOOL_SCHEMAS, A2AToolDispatcher
from a2ac.tools.errors import (
    ResourceNotFoundError,
    ResourceReadError,
    ToolArgumentError,
    ToolNotFoundError,
)
from a2ac.tools.models import Resource, ResourceContents, ToolResult

__all__ = [
    "TOOL_SCHEMAS",
    "A2AToolDispatcher",
    "Resource",
    "ResourceContents",
    "ResourceNotFoundError",
    "ResourceReadError",
    "ToolArgumentError",
    "ToolNotFoundError",
    "ToolResult",
]
