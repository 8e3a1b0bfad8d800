"""Tool Agent - a streaming, tool-calling chat agent for OpenAI-compatible endpoints.

This package provides an SSE stream decoder, a tool registry with failure
isolation, a token-budgeted conversation ledger and the agent loop that
ties them together.

Quick start:
    import asyncio

    from tool_agent import Agent, ChatClient, ToolRegistry, get_settings, register_builtin_tools

    settings = get_settings()
    registry = register_builtin_tools(ToolRegistry())
    agent = Agent(ChatClient(settings), registry, settings=settings)
    asyncio.run(agent.run())
"""

__version__ = "0.1.0"

# Core utilities
from tool_agent.core import (
    AgentError,
    Settings,
    get_logger,
    get_settings,
    setup_logging,
)

# Client and wire types
from tool_agent.client import (
    ChatClient,
    ContentChunk,
    DeltaStream,
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

# Tools
from tool_agent.tools import ToolRegistry, register_builtin_tools

# Agent
from tool_agent.agent import Agent, AgentState, ConversationLedger, ProgressIndicator, TokenReport

# Token utilities
from tool_agent.utils import TiktokenCounter, TokenCounter, count_tokens

__all__ = [
    # Version
    "__version__",
    # Core
    "AgentError",
    "Settings",
    "get_logger",
    "get_settings",
    "setup_logging",
    # Client
    "ChatClient",
    "ContentChunk",
    "DeltaStream",
    "Finish",
    "Message",
    "ReasoningChunk",
    "Role",
    "StreamDelta",
    "ToolCall",
    "ToolCallChunk",
    "ToolDescriptor",
    "ToolResponse",
    # Tools
    "ToolRegistry",
    "register_builtin_tools",
    # Agent
    "Agent",
    "AgentState",
    "ConversationLedger",
    "ProgressIndicator",
    "TokenReport",
    # Utils
    "TiktokenCounter",
    "TokenCounter",
    "count_tokens",
]
