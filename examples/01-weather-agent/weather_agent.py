"""Weather Agent Example.

This example runs the agent with a single tool so the whole tool-calling
cycle can be followed in the transcript: the model asks for the weather,
the tool response is sent back without waiting for the user, and the
model answers with the result.

Features demonstrated:
- Registering one built-in tool
- Tool responses fed back automatically
- Token report after every append

Usage:
    TOOL_AGENT_MODEL=gpt-oss:latest python examples/01-weather-agent/weather_agent.py
"""

import asyncio

from tool_agent import Agent, ChatClient, ToolRegistry, get_logger, get_settings, register_builtin_tools, setup_logging

setup_logging()
logger = get_logger(__name__)

SYSTEM_PROMPT = """You are a helpful weather assistant.

Use the tool_get_weather tool whenever the user asks about the weather in a
place. The tool answers with a JSON document with "status" and "data" fields.
If the status is "FAILED", tell the user and do not call the tool again for
this answer.
"""


async def main() -> None:
    """Chat with the weather agent until end of input."""
    settings = get_settings()
    registry = register_builtin_tools(ToolRegistry(), ["tool_get_weather"])

    async with ChatClient(settings) as client:
        agent = Agent(client, registry, settings=settings, system_prompt=SYSTEM_PROMPT)
        logger.info("agent_started", model=settings.model, tools=len(registry))
        await agent.run()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print()
