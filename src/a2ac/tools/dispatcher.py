"""A2AToolDispatcher — exposes registry operations as named tools.

Each tool takes a JSON-style argument dict (camelCase keys) and returns a
:class:`ToolResult` whose text is pretty-printed JSON.  Failures never
escape :meth:`A2AToolDispatcher.call`; they come back as error results so
the caller can tell an unknown agent, an unreachable agent and an
agent-reported error apart by message.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeVar

from opentelemetry import trace
from pydantic import BaseModel, ValidationError

from a2ac.protocols.errors import A2AError
from a2ac.tools.errors import (
    ResourceNotFoundError,
    ResourceReadError,
    ToolArgumentError,
    ToolNotFoundError,
)
from a2ac.tools.models import (
    AgentInfoArgs,
    Resource,
    ResourceContents,
    ResubscribeArgs,
    SendTaskArgs,
    SubscribeArgs,
    TaskRefArgs,
    ToolResult,
)
from a2ac.utils.ids import new_id
from a2ac.utils.telemetry import ATTR_AGENT_ID, ATTR_TOOL_NAME, get_tracer

if TYPE_CHECKING:
    from a2ac.protocols.a2a.client import A2AClient
    from a2ac.protocols.a2a.models import TaskArtifactUpdateEvent, TaskStatusUpdateEvent
    from a2ac.registry.registry import AgentRegistry
    from a2ac.utils.ids import IdFactory

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

DEFAULT_MAX_UPDATES = 10
AGENT_CARD_URI_PREFIX = "a2a://agent-card/"
TASKS_URI = "a2a://tasks"

_AGENT_ID_PROP = {
    "type": "string",
    "description": "ID of the agent. If omitted, the first available agent is used.",
}
_MESSAGE_PROP = {"type": "string", "description": "Message to send to the agent"}
_TASK_ID_PROP = {
    "type": "string",
    "description": "Task ID. If not provided for a new task, a new UUID is generated.",
}
_MAX_UPDATES_PROP = {
    "type": "number",
    "description": f"Maximum number of updates to receive (default: {DEFAULT_MAX_UPDATES})",
}


def _schema(
    name: str, description: str, properties: dict[str, Any], required: list[str]
) -> dict[str, Any]:
    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": {"type": "object", "properties": properties, "required": required},
        },
    }


TOOL_SCHEMAS: list[dict[str, Any]] = [
    _schema(
        "a2a_send_task",
        "Send a task to an A2A agent",
        {"message": _MESSAGE_PROP, "taskId": _TASK_ID_PROP, "agentId": _AGENT_ID_PROP},
        ["message"],
    ),
    _schema(
        "a2a_get_task",
        "Get the current state of a task",
        {"taskId": _TASK_ID_PROP, "agentId": _AGENT_ID_PROP},
        ["taskId", "agentId"],
    ),
    _schema(
        "a2a_cancel_task",
        "Cancel a running task",
        {"taskId": _TASK_ID_PROP, "agentId": _AGENT_ID_PROP},
        ["taskId", "agentId"],
    ),
    _schema(
        "a2a_send_task_subscribe",
        "Send a task and subscribe to updates (streaming)",
        {
            "message": _MESSAGE_PROP,
            "taskId": _TASK_ID_PROP,
            "agentId": _AGENT_ID_PROP,
            "maxUpdates": _MAX_UPDATES_PROP,
        },
        ["message"],
    ),
    _schema(
        "a2a_resubscribe_task",
        "Resume receiving updates for a task after its stream was interrupted",
        {"taskId": _TASK_ID_PROP, "agentId": _AGENT_ID_PROP, "maxUpdates": _MAX_UPDATES_PROP},
        ["taskId", "agentId"],
    ),
    _schema(
        "a2a_agent_info",
        "Get information about the connected A2A agents",
        {"agentId": {"type": "string", "description": "If omitted, all agents are reported."}},
        [],
    ),
]

_Handler = Callable[[dict[str, Any]], Awaitable[Any]]
_ArgsT = TypeVar("_ArgsT", bound=BaseModel)


class A2AToolDispatcher:
    """Maps tool names to registry and client calls.

    Usage::

        dispatcher = A2AToolDispatcher(registry)
        tools = dispatcher.all_tools()
        result = await dispatcher.call("a2a_send_task", {"message": "hi"})
    """

    def __init__(
        self,
        registry: AgentRegistry,
        *,
        id_factory: IdFactory = new_id,
        max_updates: int = DEFAULT_MAX_UPDATES,
    ) -> None:
        self._registry = registry
        self._id_factory = id_factory
        self._max_updates = max_updates
        self._handlers: dict[str, _Handler] = {
            "a2a_send_task": self._send_task,
            "a2a_get_task": self._get_task,
            "a2a_cancel_task": self._cancel_task,
            "a2a_send_task_subscribe": self._send_task_subscribe,
            "a2a_resubscribe_task": self._resubscribe_task,
            "a2a_agent_info": self._agent_info,
        }

    @property
    def registry(self) -> AgentRegistry:
        return self._registry

    def all_tools(self) -> list[dict[str, Any]]:
        """Return every tool as an OpenAI-compatible function schema."""
        return list(TOOL_SCHEMAS)

    async def call(self, name: str, arguments: dict[str, Any] | None = None) -> ToolResult:
        """Run one tool; errors are returned as ``is_error`` results."""
        with _tracer.start_as_current_span("a2a.tool") as span:
            span.set_attribute(ATTR_TOOL_NAME, name)
            handler = self._handlers.get(name)
            try:
                if handler is None:
                    raise ToolNotFoundError(name)
                payload = await handler(arguments or {})
            except A2AError as exc:
                logger.warning("Tool %s failed: %s", name, exc)
                return ToolResult.from_text(f"Error: {exc}", is_error=True)
        return ToolResult.from_text(json.dumps(payload, indent=2))

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------

    async def _send_task(self, arguments: dict[str, Any]) -> Any:
        args = _parse("a2a_send_task", SendTaskArgs, arguments)
        client = self._route(args.agent_id)
        task = await client.send_task(args.message, task_id=args.task_id or self._id_factory())
        return task.to_wire() if task is not None else None

    async def _get_task(self, arguments: dict[str, Any]) -> Any:
        args = _parse("a2a_get_task", TaskRefArgs, arguments)
        task = await self._route(args.agent_id).get_task(args.task_id)
        return task.to_wire() if task is not None else None

    async def _cancel_task(self, arguments: dict[str, Any]) -> Any:
        args = _parse("a2a_cancel_task", TaskRefArgs, arguments)
        task = await self._route(args.agent_id).cancel_task(args.task_id)
        return task.to_wire() if task is not None else None

    async def _send_task_subscribe(self, arguments: dict[str, Any]) -> Any:
        args = _parse("a2a_send_task_subscribe", SubscribeArgs, arguments)
        client = self._route(args.agent_id)
        task_id = args.task_id or self._id_factory()
        stream = client.send_task_subscribe(args.message, task_id=task_id)
        events = await stream.collect(args.max_updates or self._max_updates)
        return {"taskId": task_id, "updates": _dump_events(events)}

    async def _resubscribe_task(self, arguments: dict[str, Any]) -> Any:
        args = _parse("a2a_resubscribe_task", ResubscribeArgs, arguments)
        stream = self._route(args.agent_id).resubscribe_task(args.task_id)
        events = await stream.collect(args.max_updates or self._max_updates)
        return {"taskId": args.task_id, "updates": _dump_events(events)}

    async def _agent_info(self, arguments: dict[str, Any]) -> Any:
        args = _parse("a2a_agent_info", AgentInfoArgs, arguments)
        if args.agent_id:
            card = await self._route(args.agent_id).agent_card()
            return card.to_wire()

        clients = self._registry.all_clients()
        return list(
            await asyncio.gather(*(_card_entry(agent_id, c) for agent_id, c in clients.items()))
        )

    def _route(self, agent_id: str | None) -> A2AClient:
        resolved, client = self._registry.resolve(agent_id)
        trace.get_current_span().set_attribute(ATTR_AGENT_ID, resolved)
        return client

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    def list_resources(self) -> list[Resource]:
        """One agent-card resource per configured endpoint, plus the task list."""
        resources = [
            Resource(
                uri=f"{AGENT_CARD_URI_PREFIX}{endpoint.id}",
                name=f"A2A Agent Card Information ({endpoint.id})",
            )
            for endpoint in self._registry.endpoints()
        ]
        resources.append(Resource(uri=TASKS_URI, name="Recent A2A Tasks"))
        return resources

    async def read_resource(self, uri: str) -> ResourceContents:
        """Read a resource listed by :meth:`list_resources`.

        Tasks are not stored locally, so ``a2a://tasks`` is always empty.
        """
        if uri.startswith(AGENT_CARD_URI_PREFIX):
            agent_id = uri[len(AGENT_CARD_URI_PREFIX) :]
            client = self._registry.require(agent_id)
            try:
                card = await client.agent_card()
            except A2AError as exc:
                raise ResourceReadError(uri, f"Failed to read agent card: {exc}") from exc
            return ResourceContents(uri=uri, text=json.dumps(card.to_wire(), indent=2))
        if uri == TASKS_URI:
            return ResourceContents(uri=uri, text=json.dumps({"tasks": []}, indent=2))
        raise ResourceNotFoundError(uri)


def _parse(name: str, model: type[_ArgsT], arguments: dict[str, Any]) -> _ArgsT:
    try:
        return model.model_validate(arguments)
    except ValidationError as exc:
        raise ToolArgumentError(name, str(exc)) from exc


def _dump_events(
    events: list[TaskStatusUpdateEvent | TaskArtifactUpdateEvent],
) -> list[dict[str, Any]]:
    return [event.to_wire() for event in events]


async def _card_entry(agent_id: str, client: A2AClient) -> dict[str, Any]:
    try:
        card = await client.agent_card()
    except A2AError as exc:
        return {"agentId": agent_id, "error": str(exc)}
    return {"agentId": agent_id, "card": card.to_wire()}
