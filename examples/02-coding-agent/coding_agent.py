"""Coding Agent Example.

This example gives the agent the file tools so it can explore and edit
the current directory. Python edits are checked for syntax before they
are written.

Features demonstrated:
- All built-in file tools
- Several tool calls in one cycle
- Reasoning output shown separately from the reply
- Context window eviction on long sessions

Usage:
    OLLAMA_CONTEXT_LENGTH=16384 python examples/02-coding-agent/coding_agent.py
"""

import asyncio

from tool_agent import Agent, ChatClient, ToolRegistry, get_logger, get_settings, register_builtin_tools, setup_logging

setup_logging()
logger = get_logger(__name__)

FILE_TOOLS = [
    "tool_read_file",
    "tool_search_files",
    "tool_create_file",
    "tool_code_editor",
]

SYSTEM_PROMPT = """You are a helpful coding assistant that has tools to assist you in coding.

After you request a tool call, you will receive a JSON document with two fields,
"status" and "data". Always check the "status" field to know if the call "SUCCESS"
or "FAILED". The information you need to respond will be provided under the "data"
field. If the call "FAILED", just inform the user and don't try using the tool
again for the current response.

When reading Python source code, always add line numbers to the end of each line
so you can refer to them when making edits.

If you get back results from a tool call, do not verify the results.
"""


async def main() -> None:
    """Chat with the coding agent until end of input."""
    settings = get_settings()
    registry = register_builtin_tools(ToolRegistry(), FILE_TOOLS)

    async with ChatClient(settings) as client:
        agent = Agent(client, registry, settings=settings, system_prompt=SYSTEM_PROMPT)
        logger.info(
            "agent_started",
            model=settings.model,
            tools=[descriptor.name for descriptor in registry.descriptors()],
            budget=settings.context_window_budget,
        )
        await agent.run()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print()
