"""Tool registry, dispatcher and built-in tools."""

from tool_agent.tools.builtin import BUILTIN_TOOLS, register_builtin_tools
from tool_agent.tools.registry import ToolHandler, ToolRegistry

__all__ = [
    "BUILTIN_TOOLS",
    "ToolHandler",
    "ToolRegistry",
    "register_builtin_tools",
]
