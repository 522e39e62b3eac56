"""MCPServer — exposes :class:`A2AToolDispatcher` to MCP hosts.

Handles the MCP lifecycle (``initialize``, ``ping``) plus ``tools/list``,
``tools/call``, ``resources/list`` and ``resources/read``.  Requests are
answered one at a time in arrival order; notifications get no reply.

Usage::

    registry = await AgentRegistry.create(endpoints)
    server = MCPServer(A2AToolDispatcher(registry))
    await server.serve(StdioServerTransport())
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel, ValidationError

from a2ac import __version__
from a2ac.protocols.errors import A2AError
from a2ac.protocols.jsonrpc import JSONRPC_VERSION, JsonRpcError
from a2ac.protocols.mcp.models import (
    CallToolParams,
    InitializeParams,
    MCPToolDef,
    ReadResourceParams,
)
from a2ac.tools.errors import ResourceNotFoundError, ToolArgumentError

if TYPE_CHECKING:
    from a2ac.protocols.mcp.transport import MCPServerTransport
    from a2ac.tools.dispatcher import A2AToolDispatcher

logger = logging.getLogger(__name__)

SERVER_NAME = "a2a-client-server"
PROTOCOL_VERSION = "2024-11-05"
SUPPORTED_PROTOCOL_VERSIONS = (PROTOCOL_VERSION, "2025-03-26", "2025-06-18")

# JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
RESOURCE_NOT_FOUND = -32002

_Handler = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]
_ParamsT = TypeVar("_ParamsT", bound=BaseModel)


class MCPServer:
    """Answers MCP requests with the dispatcher's tools and resources."""

    def __init__(
        self,
        dispatcher: A2AToolDispatcher,
        *,
        name: str = SERVER_NAME,
        version: str = __version__,
    ) -> None:
        self._dispatcher = dispatcher
        self._name = name
        self._version = version
        self._handlers: dict[str, _Handler] = {
            "initialize": self._initialize,
            "ping": self._ping,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
            "resources/list": self._list_resources,
            "resources/read": self._read_resource,
        }

    async def serve(self, transport: MCPServerTransport) -> None:
        """Answer requests from *transport* until its input ends."""
        logger.info("MCP server %s running", self._name)
        while (line := await transport.receive()) is not None:
            reply = await self.handle_line(line)
            if reply is not None:
                await transport.send(reply)
        logger.info("MCP server %s input closed", self._name)

    async def handle_line(self, line: str) -> dict[str, Any] | None:
        """Decode one line of JSON and handle it."""
        try:
            message = json.loads(line)
        except ValueError as exc:
            logger.warning("Unparseable MCP message: %s", exc)
            return _error(None, PARSE_ERROR, f"Parse error: {exc}")
        return await self.handle(message)

    async def handle(self, message: Any) -> dict[str, Any] | None:
        """Handle one decoded JSON-RPC message; ``None`` means no reply."""
        if not isinstance(message, dict) or not isinstance(message.get("method"), str):
            request_id = message.get("id") if isinstance(message, dict) else None
            return _error(request_id, INVALID_REQUEST, "Invalid Request")

        method: str = message["method"]
        if "id" not in message:
            logger.debug("MCP notification %s", method)
            return None

        request_id = message["id"]
        handler = self._handlers.get(method)
        if handler is None:
            return _error(request_id, METHOD_NOT_FOUND, f"Method not found: {method}")

        params = message.get("params")
        if params is None:
            params = {}
        if not isinstance(params, dict):
            return _error(request_id, INVALID_PARAMS, "params must be an object")

        try:
            result = await handler(params)
        except ToolArgumentError as exc:
            return _error(request_id, INVALID_PARAMS, str(exc))
        except ResourceNotFoundError as exc:
            return _error(request_id, RESOURCE_NOT_FOUND, str(exc))
        except A2AError as exc:
            logger.error("MCP request %s failed: %s", method, exc)
            return _error(request_id, INTERNAL_ERROR, str(exc))
        return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def _initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        requested = _parse("initialize", InitializeParams, params).protocol_version
        if requested in SUPPORTED_PROTOCOL_VERSIONS:
            version = requested
        else:
            version = PROTOCOL_VERSION
        return {
            "protocolVersion": version,
            "capabilities": {"tools": {}, "resources": {}},
            "serverInfo": {"name": self._name, "version": self._version},
        }

    async def _ping(self, params: dict[str, Any]) -> dict[str, Any]:
        return {}

    # ------------------------------------------------------------------
    # Tools and resources
    # ------------------------------------------------------------------

    async def _list_tools(self, params: dict[str, Any]) -> dict[str, Any]:
        tools = [MCPToolDef.from_function_schema(s) for s in self._dispatcher.all_tools()]
        return {"tools": [tool.model_dump(by_alias=True) for tool in tools]}

    async def _call_tool(self, params: dict[str, Any]) -> dict[str, Any]:
        call = _parse("tools/call", CallToolParams, params)
        result = await self._dispatcher.call(call.name, call.arguments)
        return {
            "content": [part.model_dump() for part in result.content],
            "isError": result.is_error,
        }

    async def _list_resources(self, params: dict[str, Any]) -> dict[str, Any]:
        resources = self._dispatcher.list_resources()
        return {"resources": [r.model_dump(by_alias=True) for r in resources]}

    async def _read_resource(self, params: dict[str, Any]) -> dict[str, Any]:
        uri = _parse("resources/read", ReadResourceParams, params).uri
        contents = await self._dispatcher.read_resource(uri)
        return {"contents": [contents.model_dump(by_alias=True)]}


def _parse(method: str, model: type[_ParamsT], params: dict[str, Any]) -> _ParamsT:
    try:
        return model.model_validate(params)
    except ValidationError as exc:
        raise ToolArgumentError(method, str(exc)) from exc


def _error(request_id: Any, code: int, message: str) -> dict[str, Any]:
    error = JsonRpcError(code=code, message=message)
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "error": error.model_dump(exclude_none=True),
    }
