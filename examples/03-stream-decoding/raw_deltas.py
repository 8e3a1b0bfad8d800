"""Raw Stream Decoding Example.

This example opens one streaming request without the agent loop and prints
every decoded delta, which is useful for checking what a server actually
sends (some put reasoning in a separate field, others inline it in
<think> tags).

Features demonstrated:
- ChatClient.stream_chat
- Iterating a DeltaStream
- Handling decode and transport errors
"""

import asyncio

from tool_agent import (
    AgentError,
    ChatClient,
    ContentChunk,
    Finish,
    Message,
    ReasoningChunk,
    ToolCallChunk,
    get_logger,
    get_settings,
    setup_logging,
)
from tool_agent.tools.builtin import WEATHER_TOOL

setup_logging()
logger = get_logger(__name__)


async def print_deltas(question: str) -> None:
    """Send one question and print the decoded deltas.

    Args:
        question: The user message to send.
    """
    settings = get_settings()
    messages = [
        Message.system("You are a helpful assistant."),
        Message.user(question),
    ]

    async with ChatClient(settings) as client:
        stream = await client.stream_chat(messages, [WEATHER_TOOL])
        async with stream:
            async for delta in stream:
                if isinstance(delta, ContentChunk):
                    print(f"content   {delta.text!r}")
                elif isinstance(delta, ReasoningChunk):
                    print(f"reasoning {delta.text!r}")
                elif isinstance(delta, ToolCallChunk):
                    for call in delta.calls:
                        print(f"tool call {call.summary()}")
                elif isinstance(delta, Finish):
                    print(f"finish    {delta.reason}")

        if stream.error is not None:
            raise stream.error


def main() -> None:
    """Run the raw decoding example."""
    print("=" * 60)
    print("Raw Stream Decoding Example")
    print("=" * 60)

    for question in ["Say hello in three words.", "What is the weather in Boston?"]:
        print(f"\n--- Question: {question} ---")
        try:
            asyncio.run(print_deltas(question))
        except AgentError as e:
            logger.error("request_failed", error=str(e))


if __name__ == "__main__":
    main()
