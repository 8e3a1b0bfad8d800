"""Agent control loop, conversation ledger and progress indicator."""

from tool_agent.agent.ledger import ConversationLedger, TokenReport
from tool_agent.agent.loop import (
    DEFAULT_SYSTEM_PROMPT,
    Agent,
    AgentState,
    CycleResult,
    join_fragments,
    read_stdin_line,
)
from tool_agent.agent.progress import ProgressIndicator

__all__ = [
    "DEFAULT_SYSTEM_PROMPT",
    "Agent",
    "AgentState",
    "ConversationLedger",
    "CycleResult",
    "ProgressIndicator",
    "TokenReport",
    "join_fragments",
    "read_stdin_line",
]
