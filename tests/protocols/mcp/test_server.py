"""Tests for MCPServer request handling."""

from __future__ import annotations

import io
import json
from typing import TYPE_CHECKING, Any

import pytest

from a2ac.config import Endpoint
from a2ac.protocols.mcp.server import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    PROTOCOL_VERSION,
    RESOURCE_NOT_FOUND,
    MCPServer,
)
from a2ac.protocols.mcp.transport import StdioServerTransport
from a2ac.registry import AgentRegistry, make_client_factory
from a2ac.tools import A2AToolDispatcher

if TYPE_CHECKING:
    from conftest import AgentNetwork, FakeAgent


@pytest.fixture
def alpha(network: AgentNetwork) -> FakeAgent:
    return network.add("http://alpha.test")


@pytest.fixture
async def server(network: AgentNetwork, alpha: FakeAgent) -> MCPServer:
    network.time_out("http://down.test")
    endpoints = [
        Endpoint(id="alpha", url="http://alpha.test"),
        Endpoint(id="down", url="http://down.test"),
    ]
    registry = await AgentRegistry.create(
        endpoints, client_factory=make_client_factory(transport=network.transport)
    )
    dispatcher = A2AToolDispatcher(registry, id_factory=lambda: "generated")
    return MCPServer(dispatcher, version="9.9.9")


async def _request(
    server: MCPServer, method: str, params: Any = None, request_id: int = 1
) -> Any:
    message: dict[str, Any] = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        message["params"] = params
    reply = await server.handle(message)
    assert reply is not None
    assert reply["jsonrpc"] == "2.0"
    assert reply["id"] == request_id
    return reply


class TestLifecycle:
    async def test_initialize(self, server: MCPServer) -> None:
        reply = await _request(
            server,
            "initialize",
            {"protocolVersion": "2025-03-26", "capabilities": {}, "clientInfo": {"name": "host"}},
        )
        assert reply["result"] == {
            "protocolVersion": "2025-03-26",
            "capabilities": {"tools": {}, "resources": {}},
            "serverInfo": {"name": "a2a-client-server", "version": "9.9.9"},
        }

    async def test_initialize_unknown_version(self, server: MCPServer) -> None:
        reply = await _request(server, "initialize", {"protocolVersion": "1999-01-01"})
        assert reply["result"]["protocolVersion"] == PROTOCOL_VERSION

    async def test_ping(self, server: MCPServer) -> None:
        assert (await _request(server, "ping"))["result"] == {}

    async def test_notification_gets_no_reply(self, server: MCPServer) -> None:
        message = {"jsonrpc": "2.0", "method": "notifications/initialized"}
        assert await server.handle(message) is None


class TestTools:
    async def test_list_tools(self, server: MCPServer) -> None:
        tools = (await _request(server, "tools/list"))["result"]["tools"]
        assert [t["name"] for t in tools][:2] == ["a2a_send_task", "a2a_get_task"]
        send = tools[0]
        assert send["description"] == "Send a task to an A2A agent"
        assert send["inputSchema"]["required"] == ["message"]

    async def test_call_tool(self, server: MCPServer, alpha: FakeAgent, frames: Any) -> None:
        alpha.results["tasks/send"] = frames.task("generated", "completed")
        reply = await _request(
            server, "tools/call", {"name": "a2a_send_task", "arguments": {"message": "hi"}}
        )
        result = reply["result"]
        assert result["isError"] is False
        assert result["content"][0]["type"] == "text"
        assert json.loads(result["content"][0]["text"])["id"] == "generated"

    async def test_call_tool_failure_is_a_result(self, server: MCPServer) -> None:
        arguments = {"message": "hi", "agentId": "down"}
        reply = await _request(
            server, "tools/call", {"name": "a2a_send_task", "arguments": arguments}
        )
        assert reply["result"] == {
            "content": [{"type": "text", "text": "Error: No agent found with ID down"}],
            "isError": True,
        }

    async def test_call_tool_without_name(self, server: MCPServer) -> None:
        reply = await _request(server, "tools/call", {"arguments": {}})
        assert reply["error"]["code"] == INVALID_PARAMS


class TestResources:
    async def test_list_resources(self, server: MCPServer) -> None:
        resources = (await _request(server, "resources/list"))["result"]["resources"]
        assert [r["uri"] for r in resources] == [
            "a2a://agent-card/alpha",
            "a2a://agent-card/down",
            "a2a://tasks",
        ]
        assert resources[0]["mimeType"] == "application/json"

    async def test_read_agent_card(self, server: MCPServer) -> None:
        reply = await _request(server, "resources/read", {"uri": "a2a://agent-card/alpha"})
        (contents,) = reply["result"]["contents"]
        assert contents["uri"] == "a2a://agent-card/alpha"
        assert contents["mimeType"] == "application/json"
        assert json.loads(contents["text"])["name"] == "test-agent"

    async def test_read_card_failure(self, server: MCPServer, alpha: FakeAgent) -> None:
        alpha.card_status = 500
        alpha.fallback_status = 500
        reply = await _request(server, "resources/read", {"uri": "a2a://agent-card/alpha"})
        assert reply["error"]["code"] == INTERNAL_ERROR
        assert reply["error"]["message"].startswith("Failed to read agent card: ")

    async def test_read_unreachable_agent(self, server: MCPServer) -> None:
        reply = await _request(server, "resources/read", {"uri": "a2a://agent-card/down"})
        assert reply["error"] == {"code": INTERNAL_ERROR, "message": "No agent found with ID down"}

    async def test_read_unknown_resource(self, server: MCPServer) -> None:
        reply = await _request(server, "resources/read", {"uri": "a2a://nope"})
        assert reply["error"]["code"] == RESOURCE_NOT_FOUND


class TestMalformedMessages:
    async def test_unknown_method(self, server: MCPServer) -> None:
        reply = await _request(server, "prompts/list")
        assert reply["error"] == {
            "code": METHOD_NOT_FOUND,
            "message": "Method not found: prompts/list",
        }

    async def test_not_an_object(self, server: MCPServer) -> None:
        reply = await server.handle([1, 2])
        assert reply is not None
        assert reply["id"] is None
        assert reply["error"]["code"] == INVALID_REQUEST

    async def test_params_not_an_object(self, server: MCPServer) -> None:
        reply = await _request(server, "tools/list", [1])
        assert reply["error"]["code"] == INVALID_PARAMS

    async def test_parse_error(self, server: MCPServer) -> None:
        reply = await server.handle_line("{not json")
        assert reply is not None
        assert reply["id"] is None
        assert reply["error"]["code"] == PARSE_ERROR


class TestServe:
    async def test_answers_each_request_in_order(self, server: MCPServer) -> None:
        lines = [
            {"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {}},
            {"jsonrpc": "2.0", "method": "notifications/initialized"},
            {"jsonrpc": "2.0", "id": 2, "method": "ping"},
            {"jsonrpc": "2.0", "id": 3, "method": "resources/list"},
        ]
        reader = io.StringIO("".join(json.dumps(line) + "\n" for line in lines))
        writer = io.StringIO()

        await server.serve(StdioServerTransport(reader, writer))

        replies = [json.loads(line) for line in writer.getvalue().splitlines()]
        assert [r["id"] for r in replies] == [1, 2, 3]
        assert all("result" in r for r in replies)
