"""MCP payloads — tool definitions and the parameters of incoming requests."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MCPToolDef(BaseModel):
    """A tool definition as returned by ``tools/list``."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str = ""
    input_schema: dict[str, Any] = Field(default_factory=dict, alias="inputSchema")

    @classmethod
    def from_function_schema(cls, schema: dict[str, Any]) -> MCPToolDef:
        """Convert an OpenAI-style function schema to an MCP tool."""
        function = schema["function"]
        return cls(
            name=function["name"],
            description=function.get("description", ""),
            input_schema=function.get("parameters") or {"type": "object", "properties": {}},
        )


class InitializeParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    protocol_version: str | None = Field(default=None, alias="protocolVersion")


class CallToolParams(BaseModel):
    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class ReadResourceParams(BaseModel):
    uri: str
