"""Chat client, wire types and the SSE stream decoder."""

from tool_agent.client.base import (
    ContentChunk,
    Finish,
    Message,
    ReasoningChunk,
    Role,
    StreamDelta,
    ToolCall,
    ToolCallChunk,
    ToolDescriptor,
    ToolResponse,
)
from tool_agent.client.chat import ChatClient
from tool_agent.client.sse import DeltaStream, frame_to_deltas, parse_sse_line

__all__ = [
    # Types
    "ContentChunk",
    "Finish",
    "Message",
    "ReasoningChunk",
    "Role",
    "StreamDelta",
    "ToolCall",
    "ToolCallChunk",
    "ToolDescriptor",
    "ToolResponse",
    # Streaming
    "ChatClient",
    "DeltaStream",
    "frame_to_deltas",
    "parse_sse_line",
]
