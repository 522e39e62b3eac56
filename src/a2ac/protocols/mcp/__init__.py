"""MCP front end — serves the A2A tools and resources to an MCP host."""

from a2ac.protocols.mcp.server import MCPServer
from a2ac.protocols.mcp.transport import MCPServerTransport, StdioServerTransport

__all__ = [
    "MCPServer",
    "MCPServerTransport",
    "StdioServerTransport",
]
