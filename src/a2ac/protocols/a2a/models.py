"""A2A models — Agent-to-Agent protocol data structures.

Agents advertise capabilities via ``AgentCard`` at
``.well-known/agent.json`` and exchange tasks via JSON-RPC messages.
Attribute names are snake_case, wire names camelCase; unknown wire members
are kept so nothing is lost when a payload is echoed back to a caller.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from a2ac.protocols.errors import StreamFrameError


class WireModel(BaseModel):
    """Base for every model that crosses the wire."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def to_wire(self) -> dict[str, Any]:
        """Serialize with camelCase names and without unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Agent Discovery
# ---------------------------------------------------------------------------


class AgentSkill(WireModel):
    """A single skill advertised by a remote agent."""

    id: str
    name: str
    description: str | None = None
    tags: list[str] | None = None
    examples: list[str] | None = None
    input_modes: list[str] | None = Field(default=None, alias="inputModes")
    output_modes: list[str] | None = Field(default=None, alias="outputModes")


class AgentProvider(WireModel):
    organization: str
    url: str | None = None


class AgentCapabilities(WireModel):
    """Optional protocol features; an absent flag means unsupported."""

    streaming: bool = False
    push_notifications: bool = Field(default=False, alias="pushNotifications")
    state_transition_history: bool = Field(default=False, alias="stateTransitionHistory")


class AgentAuthentication(WireModel):
    schemes: list[str] = []
    credentials: str | None = None


class AgentCard(WireModel):
    """Agent metadata served at ``.well-known/agent.json``."""

    name: str
    version: str = ""
    url: str
    description: str | None = None
    provider: AgentProvider | None = None
    documentation_url: str | None = Field(default=None, alias="documentationUrl")
    capabilities: AgentCapabilities = Field(default_factory=AgentCapabilities)
    authentication: AgentAuthentication | None = None
    default_input_modes: list[str] | None = Field(default=None, alias="defaultInputModes")
    default_output_modes: list[str] | None = Field(default=None, alias="defaultOutputModes")
    skills: list[AgentSkill] = []


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


class MessagePart(WireModel):
    """A content part within an A2A message."""

    text: str = ""
    type: str | None = None


class Message(WireModel):
    """A message exchanged between a user and an agent."""

    role: Literal["user", "agent"] = "user"
    parts: list[MessagePart] = []
    metadata: dict[str, Any] | None = None

    @classmethod
    def user_text(cls, text: str) -> Message:
        """Create a user message with a single text part."""
        return cls(role="user", parts=[MessagePart(text=text)])

    @property
    def text(self) -> str:
        return "".join(part.text for part in self.parts)


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


class TaskState(str, Enum):
    """Lifecycle states defined by the protocol."""

    SUBMITTED = "submitted"
    WORKING = "working"
    INPUT_REQUIRED = "input-required"
    COMPLETED = "completed"
    CANCELED = "canceled"
    FAILED = "failed"
    UNKNOWN = "unknown"


_FINAL_STATES = frozenset({TaskState.COMPLETED, TaskState.CANCELED, TaskState.FAILED})


class TaskStatus(WireModel):
    """Current status of a task.

    ``state`` is a :class:`TaskState` when recognised; any other value sent
    by a newer agent is kept as the raw string.
    """

    state: Annotated[TaskState | str, Field(union_mode="left_to_right")]
    message: Message | None = None
    timestamp: str | None = None

    @property
    def is_final(self) -> bool:
        return self.state in _FINAL_STATES


class Artifact(WireModel):
    """An output artifact produced by a task."""

    name: str | None = None
    description: str | None = None
    parts: list[MessagePart] = []
    index: int = 0
    append: bool | None = None
    metadata: dict[str, Any] | None = None
    last_chunk: bool | None = Field(default=None, alias="lastChunk")


class Task(WireModel):
    """A task as reported by the remote agent."""

    id: str
    status: TaskStatus
    artifacts: list[Artifact] | None = None
    session_id: str | None = Field(default=None, alias="sessionId")
    metadata: dict[str, Any] | None = None


# ---------------------------------------------------------------------------
# Request parameters
# ---------------------------------------------------------------------------


class TaskIdParams(WireModel):
    """Parameters for ``tasks/cancel`` and ``tasks/resubscribe``."""

    id: str
    metadata: dict[str, Any] | None = None


class TaskQueryParams(TaskIdParams):
    """Parameters for ``tasks/get``."""

    history_length: int | None = Field(default=None, alias="historyLength")


class TaskSendParams(WireModel):
    """Parameters for ``tasks/send`` and ``tasks/sendSubscribe``."""

    id: str
    message: Message
    session_id: str | None = Field(default=None, alias="sessionId")
    metadata: dict[str, Any] | None = None


# ---------------------------------------------------------------------------
# Streaming events
# ---------------------------------------------------------------------------


class TaskStatusUpdateEvent(WireModel):
    """A streamed change of task status."""

    kind: Literal["status-update"] = "status-update"
    id: str
    status: TaskStatus
    final: bool = False
    metadata: dict[str, Any] | None = None


class TaskArtifactUpdateEvent(WireModel):
    """A streamed (possibly partial) artifact."""

    kind: Literal["artifact-update"] = "artifact-update"
    id: str
    artifact: Artifact
    final: bool = False
    metadata: dict[str, Any] | None = None


TaskEvent = Annotated[
    TaskStatusUpdateEvent | TaskArtifactUpdateEvent, Field(discriminator="kind")
]


def parse_task_event(payload: Any) -> TaskStatusUpdateEvent | TaskArtifactUpdateEvent:
    """Turn an untagged stream ``result`` into a tagged event.

    The wire carries no type tag: an object with ``status`` is a status
    update, one with ``artifact`` is an artifact update.

    Raises:
        StreamFrameError: If the payload matches neither shape.
    """
    if not isinstance(payload, dict):
        raise StreamFrameError("event is not an object", repr(payload))
    try:
        if "status" in payload:
            return TaskStatusUpdateEvent.model_validate({**payload, "kind": "status-update"})
        if "artifact" in payload:
            return TaskArtifactUpdateEvent.model_validate({**payload, "kind": "artifact-update"})
    except ValidationError as exc:
        detail = f"invalid task event ({exc.error_count()} errors)"
        raise StreamFrameError(detail, repr(payload)) from exc
    raise StreamFrameError("event has neither status nor artifact", repr(payload))
