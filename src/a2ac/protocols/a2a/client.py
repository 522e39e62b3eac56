"""A2AClient — discovers and talks to one remote agent via the A2A protocol."""

from __future__ import annotations

import logging
from contextlib import aclosing
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError

from a2ac.protocols.a2a.models import (
    AgentCard,
    Message,
    Task,
    TaskArtifactUpdateEvent,
    TaskIdParams,
    TaskQueryParams,
    TaskSendParams,
    TaskStatusUpdateEvent,
    parse_task_event,
)
from a2ac.protocols.errors import (
    A2AError,
    HttpStatusError,
    NetworkError,
    ProtocolError,
    StreamFrameError,
)
from a2ac.protocols.jsonrpc import (
    ACCEPT_EVENT_STREAM,
    ACCEPT_JSON,
    build_request,
    decode_response,
    error_for_status,
    request_headers,
)
from a2ac.protocols.sse import iter_sse_results
from a2ac.utils.ids import new_id
from a2ac.utils.telemetry import (
    ATTR_AGENT_URL,
    ATTR_EVENT_COUNT,
    ATTR_METHOD,
    ATTR_TASK_ID,
    ATTR_TASK_STATE,
    get_tracer,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from a2ac.utils.ids import IdFactory

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

DEFAULT_TIMEOUT = 30.0
WELL_KNOWN_CARD_PATH = "/.well-known/agent.json"
FALLBACK_CARD_PATH = "/agent-card"

_CARD_ERROR = "Could not retrieve agent card"
_NETWORK_ERRORS = (httpx.RequestError, httpx.InvalidURL)

_CAPABILITY_FIELDS = {
    "streaming": "streaming",
    "pushNotifications": "push_notifications",
    "push_notifications": "push_notifications",
    "stateTransitionHistory": "state_transition_history",
    "state_transition_history": "state_transition_history",
}

StreamEvent = TaskStatusUpdateEvent | TaskArtifactUpdateEvent


class TaskEventStream:
    """A lazy, single-pass stream of task events.

    Iterate with ``async for``; leave early by breaking out of an
    ``async with`` block (or calling :meth:`aclose`) so the HTTP response
    is released immediately instead of at garbage collection::

        async with client.send_task_subscribe("hello") as stream:
            async for event in stream:
                if event.final:
                    break
    """

    def __init__(self, events: AsyncGenerator[StreamEvent, None]) -> None:
        self._events = events

    def __aiter__(self) -> TaskEventStream:
        return self

    async def __anext__(self) -> StreamEvent:
        return await self._events.__anext__()

    async def __aenter__(self) -> TaskEventStream:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Stop the stream and release its transport."""
        await self._events.aclose()

    async def collect(
        self, max_events: int | None = None, *, stop_on_final: bool = True
    ) -> list[StreamEvent]:
        """Consume up to *max_events* events, then close the stream."""
        events: list[StreamEvent] = []
        try:
            async for event in self:
                events.append(event)
                if max_events is not None and len(events) >= max_events:
                    break
                if stop_on_final and event.final:
                    break
        finally:
            await self.aclose()
        return events


class A2AClient:
    """Communicates with a remote A2A-compatible agent.

    The client holds nothing but the agent's base URL: every call opens
    its own HTTP connection and nothing (not even the agent card) is
    cached between calls.

    Usage::

        client = A2AClient("https://agent.example.com")
        card = await client.agent_card()
        task = await client.send_task("Summarise this document")
        task = await client.get_task(task.id)
    """

    def __init__(
        self,
        base_url: str,
        *,
        id_factory: IdFactory = new_id,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._id_factory = id_factory
        self._transport = transport
        self._timeout = timeout

    def __repr__(self) -> str:
        return f"A2AClient({self._base_url!r})"

    @property
    def base_url(self) -> str:
        return self._base_url

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=self._timeout)

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    async def agent_card(self) -> AgentCard:
        """Fetch the agent card, trying the well-known path first.

        Any failure on ``/.well-known/agent.json`` falls through to
        ``/agent-card``; only a failure there is raised.
        """
        with _tracer.start_as_current_span("a2a.agent_card") as span:
            span.set_attribute(ATTR_AGENT_URL, self._base_url)
            try:
                return await self._fetch_card(WELL_KNOWN_CARD_PATH)
            except A2AError as exc:
                logger.debug("Well-known agent card unavailable for %s: %s", self._base_url, exc)
            try:
                return await self._fetch_card(FALLBACK_CARD_PATH)
            except A2AError as exc:
                logger.error("Failed to fetch or parse agent card for %s: %s", self._base_url, exc)
                raise

    async def supports(self, capability: str) -> bool:
        """Check whether the agent card advertises *capability*.

        Advisory only: an unknown capability or an unreachable card
        yields ``False`` rather than an error.
        """
        field = _CAPABILITY_FIELDS.get(capability)
        if field is None:
            logger.warning("Unknown capability %r", capability)
            return False
        try:
            card = await self.agent_card()
        except A2AError as exc:
            logger.error("Failed to determine support for capability %r: %s", capability, exc)
            return False
        return bool(getattr(card.capabilities, field))

    async def _fetch_card(self, path: str) -> AgentCard:
        url = f"{self._base_url}{path}"
        try:
            async with self._http() as http:
                response = await http.get(url, headers={"Accept": ACCEPT_JSON})
        except _NETWORK_ERRORS as exc:
            raise NetworkError(f"{_CARD_ERROR}: network error fetching {url}: {exc}") from exc

        if not response.is_success:
            raise HttpStatusError(
                response.status_code,
                response.text,
                response.reason_phrase,
                message=(
                    f"{_CARD_ERROR}: HTTP error {response.status_code} fetching agent card "
                    f"from {url}: {response.reason_phrase}"
                ),
            )
        try:
            return AgentCard.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise ProtocolError(f"{_CARD_ERROR}: invalid agent card from {url}: {exc}") from exc

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    async def send_task(
        self,
        message: Message | str,
        *,
        task_id: str | None = None,
        session_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Task | None:
        """Send ``tasks/send``; a missing *task_id* is generated."""
        params = self._send_params(message, task_id, session_id, metadata)
        result = await self._call("tasks/send", params.to_wire(), params.id)
        return self._to_task(result, "tasks/send")

    async def get_task(self, task_id: str, *, history_length: int | None = None) -> Task | None:
        """Send ``tasks/get`` for the current state of *task_id*."""
        params = TaskQueryParams(id=task_id, history_length=history_length)
        result = await self._call("tasks/get", params.to_wire(), task_id)
        return self._to_task(result, "tasks/get")

    async def cancel_task(self, task_id: str) -> Task | None:
        """Send ``tasks/cancel`` for *task_id*."""
        params = TaskIdParams(id=task_id)
        result = await self._call("tasks/cancel", params.to_wire(), task_id)
        return self._to_task(result, "tasks/cancel")

    def send_task_subscribe(
        self,
        message: Message | str,
        *,
        task_id: str | None = None,
        session_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> TaskEventStream:
        """Send ``tasks/sendSubscribe`` and stream the task's updates.

        Nothing goes over the network until the stream is first iterated.
        """
        params = self._send_params(message, task_id, session_id, metadata)
        return TaskEventStream(self._stream("tasks/sendSubscribe", params.to_wire(), params.id))

    def resubscribe_task(self, task_id: str) -> TaskEventStream:
        """Send ``tasks/resubscribe`` to resume watching *task_id*.

        The agent decides what, if anything, is replayed.
        """
        params = TaskIdParams(id=task_id)
        return TaskEventStream(self._stream("tasks/resubscribe", params.to_wire(), task_id))

    def _send_params(
        self,
        message: Message | str,
        task_id: str | None,
        session_id: str | None,
        metadata: dict[str, Any] | None,
    ) -> TaskSendParams:
        if isinstance(message, str):
            message = Message.user_text(message)
        return TaskSendParams(
            id=task_id or self._id_factory(),
            message=message,
            session_id=session_id,
            metadata=metadata,
        )

    @staticmethod
    def _to_task(result: Any, method: str) -> Task | None:
        if result is None:
            return None
        try:
            return Task.model_validate(result)
        except ValidationError as exc:
            raise ProtocolError(f"Invalid task in {method} response: {exc}") from exc

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _call(self, method: str, params: dict[str, Any], task_id: str) -> Any:
        """POST one JSON-RPC request and return the decoded ``result``."""
        body = build_request(method, params, self._id_factory())
        with _tracer.start_as_current_span(f"a2a.{method}") as span:
            span.set_attribute(ATTR_AGENT_URL, self._base_url)
            span.set_attribute(ATTR_METHOD, method)
            span.set_attribute(ATTR_TASK_ID, task_id)
            try:
                async with self._http() as http:
                    response = await http.post(
                        self._base_url, json=body, headers=request_headers(ACCEPT_JSON)
                    )
            except _NETWORK_ERRORS as exc:
                logger.error(
                    "Network error during RPC call %s to %s: %s", method, self._base_url, exc
                )
                raise NetworkError(f"Network error: {exc}") from exc

            try:
                result = decode_response(
                    response.status_code, response.text, response.reason_phrase
                )
            except A2AError as exc:
                logger.error("Error processing RPC response for method %s: %s", method, exc)
                logger.debug("Response body for %s: %s", method, response.text)
                raise

            if isinstance(result, dict) and isinstance(result.get("status"), dict):
                span.set_attribute(ATTR_TASK_STATE, str(result["status"].get("state")))
            return result

    async def _stream(
        self, method: str, params: dict[str, Any], task_id: str
    ) -> AsyncGenerator[StreamEvent, None]:
        """POST one JSON-RPC request and yield the events of its SSE reply.

        The response is closed on every exit: exhaustion, error, or the
        consumer closing the generator early.
        """
        body = build_request(method, params, self._id_factory())
        span = _tracer.start_span(
            f"a2a.{method}",
            attributes={ATTR_AGENT_URL: self._base_url, ATTR_METHOD: method, ATTR_TASK_ID: task_id},
        )
        count = 0
        try:
            async with (
                self._http() as http,
                http.stream(
                    "POST",
                    self._base_url,
                    json=body,
                    headers=request_headers(ACCEPT_EVENT_STREAM),
                ) as response,
            ):
                if not response.is_success:
                    await response.aread()
                    logger.error(
                        "HTTP error %s received for streaming method %s",
                        response.status_code,
                        method,
                    )
                    raise error_for_status(
                        response.status_code, response.text, response.reason_phrase
                    )

                async with aclosing(
                    iter_sse_results(response.aiter_bytes(), method=method)
                ) as results:
                    async for result in results:
                        try:
                            event = parse_task_event(result)
                        except StreamFrameError as exc:
                            logger.error("Skipping stream event for %s: %s", method, exc)
                            continue
                        count += 1
                        yield event
        except _NETWORK_ERRORS as exc:
            logger.error("Network error during stream %s from %s: %s", method, self._base_url, exc)
            raise NetworkError(f"Network error: {exc}") from exc
        finally:
            span.set_attribute(ATTR_EVENT_COUNT, count)
            span.end()
            logger.debug("SSE stream finished for method %s after %d events", method, count)
