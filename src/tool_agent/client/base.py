"""Message, tool and stream delta types shared by the client and the agent.

StreamDelta is a closed union: every decoded frame yields ContentChunk,
ReasoningChunk, ToolCallChunk or Finish values and the control loop handles
each case explicitly.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Union


class Role(str, Enum):
    """Message roles in a conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


@dataclass
class Message:
    """A message in a conversation."""

    role: Role
    content: str
    tool_call_id: str | None = None

    @classmethod
    def system(cls, content: str) -> "Message":
        """Create a system message."""
        return cls(role=Role.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "Message":
        """Create a user message."""
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> "Message":
        """Create an assistant message."""
        return cls(role=Role.ASSISTANT, content=content)

    @classmethod
    def tool(cls, content: str, tool_call_id: str) -> "Message":
        """Create a tool response message."""
        return cls(role=Role.TOOL, content=content, tool_call_id=tool_call_id)

    def to_payload(self) -> dict[str, Any]:
        """Convert to the chat completions message format."""
        payload: dict[str, Any] = {"role": self.role.value, "content": self.content}
        if self.tool_call_id:
            payload["tool_call_id"] = self.tool_call_id
        return payload


@dataclass(frozen=True)
class ToolDescriptor:
    """Definition of a tool the model can call."""

    name: str
    description: str
    parameters: dict[str, Any] = field(default_factory=dict)
    required: frozenset[str] = frozenset()

    def to_payload(self) -> dict[str, Any]:
        """Convert to the tools API format."""
        parameters = {"type": "object", "properties": {}, **self.parameters}
        parameters["required"] = sorted(self.required)
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": parameters,
            },
        }


@dataclass(frozen=True)
class ToolCall:
    """A tool call made by the model."""

    id: str
    function_name: str
    arguments: dict[str, Any] = field(default_factory=dict)
    index: int = 0

    def summary(self) -> str:
        """Render the call the way it is recorded in the conversation."""
        return f"Tool call {self.id}: {self.function_name}({json.dumps(self.arguments, sort_keys=True)})"


ToolStatus = Literal["SUCCESS", "FAILED"]


@dataclass
class ToolResponse:
    """Structured result of one tool call, fed back to the model."""

    tool_call_id: str
    status: ToolStatus
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, tool_call_id: str, **data: Any) -> "ToolResponse":
        """Create a successful response."""
        return cls(tool_call_id=tool_call_id, status="SUCCESS", data=data)

    @classmethod
    def failure(cls, tool_call_id: str, error: BaseException | str) -> "ToolResponse":
        """Create a failed response carrying the error message."""
        return cls(tool_call_id=tool_call_id, status="FAILED", data={"error": str(error)})

    @property
    def content(self) -> str:
        """JSON body sent back to the model."""
        try:
            return json.dumps({"status": self.status, "data": self.data})
        except (TypeError, ValueError):
            return json.dumps({"status": "FAILED", "data": "error marshaling tool response"})

    def to_message(self) -> Message:
        """Convert to a tool role message."""
        return Message.tool(content=self.content, tool_call_id=self.tool_call_id)


# Stream deltas


@dataclass(frozen=True)
class ContentChunk:
    """Visible reply text."""

    text: str


@dataclass(frozen=True)
class ReasoningChunk:
    """Text from a dedicated reasoning channel."""

    text: str


@dataclass(frozen=True)
class ToolCallChunk:
    """Tool calls requested in one delta, in arrival order."""

    calls: tuple[ToolCall, ...]


@dataclass(frozen=True)
class Finish:
    """End of the model's turn."""

    reason: str


StreamDelta = Union[ContentChunk, ReasoningChunk, ToolCallChunk, Finish]
