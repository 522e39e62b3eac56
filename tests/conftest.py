"""Shared fixtures: in-memory A2A agents served through ``httpx.MockTransport``."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from typing import Any

import httpx
import pytest


def agent_card_json(
    name: str = "test-agent", url: str = "http://agent.test", **extra: Any
) -> dict[str, Any]:
    return {
        "name": name,
        "version": "1.0.0",
        "url": url,
        "description": "A test agent",
        "capabilities": {"streaming": True},
        "skills": [
            {"id": "summarize", "name": "Summarize", "description": "Summarize text"},
        ],
        **extra,
    }


def task_json(
    task_id: str = "task-1", state: str = "completed", text: str = "Done"
) -> dict[str, Any]:
    return {
        "id": task_id,
        "status": {"state": state},
        "artifacts": [{"parts": [{"type": "text", "text": text}], "index": 0}],
    }


def sse_frame(payload: dict[str, Any]) -> bytes:
    return f"data: {json.dumps(payload)}\n\n".encode()


def result_frame(result: Any, request_id: str = "r") -> bytes:
    return sse_frame({"jsonrpc": "2.0", "id": request_id, "result": result})


class RecordingStream(httpx.AsyncByteStream):
    """Response body that yields fixed chunks and counts ``aclose`` calls."""

    def __init__(self, chunks: list[bytes], agent: FakeAgent) -> None:
        self._chunks = chunks
        self._agent = agent

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for chunk in self._chunks:
            yield chunk

    async def aclose(self) -> None:
        self._agent.stream_closes += 1


class FakeAgent:
    """A scripted A2A agent.

    * ``card`` is served at ``/.well-known/agent.json`` (``card_status``) and
      at ``/agent-card`` (``fallback_status``).
    * ``results[method]`` is returned as the JSON-RPC ``result``;
      ``envelopes[method]`` replaces the whole reply body.
    * ``streams[method]`` is sent as an SSE body, chunk by chunk.
    * ``corrupt`` declares every body gzip-encoded without compressing it,
      so reading the reply fails inside httpx.
    """

    def __init__(self, base_url: str = "http://agent.test") -> None:
        self.base_url = base_url
        self.card: dict[str, Any] = agent_card_json(url=base_url)
        self.card_status = 200
        self.fallback_status = 200
        self.status = 200
        self.results: dict[str, Any] = {}
        self.envelopes: dict[str, Any] = {}
        self.raw_bodies: dict[str, str] = {}
        self.streams: dict[str, list[bytes]] = {}
        self.requests: list[httpx.Request] = []
        self.stream_closes = 0
        self.corrupt = False

    @property
    def rpc_bodies(self) -> list[dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests if r.method == "POST"]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self._respond(request)
        if not self.corrupt:
            return response
        return httpx.Response(
            response.status_code,
            headers={"content-encoding": "gzip", "content-type": response.headers["content-type"]},
            stream=RecordingStream([b"not gzip"], self),
        )

    def _respond(self, request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            if request.url.path == "/.well-known/agent.json":
                return httpx.Response(self.card_status, json=self.card)
            if request.url.path == "/agent-card":
                return httpx.Response(self.fallback_status, json=self.card)
            return httpx.Response(404, text="not found")

        body = json.loads(request.content)
        method = body["method"]
        if method in self.streams:
            return httpx.Response(
                self.status,
                headers={"content-type": "text/event-stream"},
                stream=RecordingStream(self.streams[method], self),
            )
        if method in self.raw_bodies:
            return httpx.Response(self.status, text=self.raw_bodies[method])
        envelope = self.envelopes.get(
            method, {"jsonrpc": "2.0", "id": body["id"], "result": self.results.get(method)}
        )
        return httpx.Response(self.status, json=envelope)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


class AgentNetwork:
    """Routes requests to fake agents by host; unknown hosts are unreachable."""

    def __init__(self) -> None:
        self.agents: dict[str, FakeAgent] = {}
        self.timeouts: set[str] = set()

    def add(self, base_url: str) -> FakeAgent:
        agent = FakeAgent(base_url)
        self.agents[httpx.URL(base_url).host] = agent
        return agent

    def time_out(self, base_url: str) -> None:
        self.timeouts.add(httpx.URL(base_url).host)

    def handle(self, request: httpx.Request) -> httpx.Response:
        host = request.url.host
        if host in self.timeouts:
            raise httpx.ConnectTimeout("timed out", request=request)
        agent = self.agents.get(host)
        if agent is None:
            raise httpx.ConnectError("connection refused", request=request)
        return agent.handle(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


@pytest.fixture
def fake_agent() -> FakeAgent:
    return FakeAgent()


@pytest.fixture
def network() -> AgentNetwork:
    return AgentNetwork()


@pytest.fixture
def frames() -> Any:
    """Expose the SSE helpers to test modules."""

    class _Frames:
        sse = staticmethod(sse_frame)
        result = staticmethod(result_frame)
        task = staticmethod(task_json)
        card = staticmethod(agent_card_json)

    return _Frames
