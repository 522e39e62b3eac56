"""A2A protocol — agent discovery and task delegation."""

from a2ac.protocols.a2a.client import A2AClient, TaskEventStream
from a2ac.protocols.a2a.models import (
    AgentCapabilities,
    AgentCard,
    AgentSkill,
    Artifact,
    Message,
    MessagePart,
    Task,
    TaskArtifactUpdateEvent,
    TaskEvent,
    TaskState,
    TaskStatus,
    TaskStatusUpdateEvent,
    parse_task_event,
)

__all__ = [
    "A2AClient",
    "AgentCapabilities",
    "AgentCard",
    "AgentSkill",
    "Artifact",
    "Message",
    "MessagePart",
    "Task",
    "TaskArtifactUpdateEvent",
    "TaskEvent",
    "TaskEventStream",
    "TaskState",
    "TaskStatus",
    "TaskStatusUpdateEvent",
    "parse_task_event",
]
