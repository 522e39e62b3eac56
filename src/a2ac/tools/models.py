"""Tool front-end models — tool arguments, results and resources."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class TextContent(BaseModel):
    """Plain text content part."""

    type: Literal["text"] = "text"
    text: str


class ToolResult(BaseModel):
    """The outcome of one tool call."""

    content: list[TextContent] = []
    is_error: bool = False

    @classmethod
    def from_text(cls, text: str, *, is_error: bool = False) -> ToolResult:
        """Create a ToolResult with a single text content part."""
        return cls(content=[TextContent(text=text)], is_error=is_error)

    @property
    def text(self) -> str:
        return "".join(part.text for part in self.content)


class Resource(BaseModel):
    """A readable resource exposed next to the tools."""

    model_config = ConfigDict(populate_by_name=True)

    uri: str
    name: str
    mime_type: str = Field(default="application/json", alias="mimeType")


class ResourceContents(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    uri: str
    mime_type: str = Field(default="application/json", alias="mimeType")
    text: str


# ---------------------------------------------------------------------------
# Arguments
# ---------------------------------------------------------------------------


class _ToolArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SendTaskArgs(_ToolArgs):
    message: str
    task_id: str | None = Field(default=None, alias="taskId")
    agent_id: str | None = Field(default=None, alias="agentId")


class TaskRefArgs(_ToolArgs):
    task_id: str = Field(alias="taskId")
    agent_id: str = Field(alias="agentId")


class SubscribeArgs(SendTaskArgs):
    max_updates: int | None = Field(default=None, alias="maxUpdates", ge=1)


class ResubscribeArgs(TaskRefArgs):
    max_updates: int | None = Field(default=None, alias="maxUpdates", ge=1)


class AgentInfoArgs(_ToolArgs):
    agent_id: str | None = Field(default=None, alias="agentId")
