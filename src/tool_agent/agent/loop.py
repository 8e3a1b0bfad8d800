"""Streaming, tool-calling agent control loop.

Each turn the agent sends the conversation to the model and consumes the
streamed deltas. If the model requested tools, their responses are appended
and the model is asked again without waiting for the user. Otherwise the
assembled reply is recorded and the agent waits for the next user message.

Every request cycle runs under a timeout. A cycle that fails (transport,
decode or timeout) leaves the conversation exactly as it was before the
cycle started.
"""

import asyncio
import sys
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import TextIO

from tool_agent.agent.ledger import ConversationLedger, TokenReport
from tool_agent.agent.progress import ProgressIndicator
from tool_agent.client.base import (
    ContentChunk,
    Finish,
    Message,
    ReasoningChunk,
    StreamDelta,
    ToolCallChunk,
)
from tool_agent.client.chat import ChatClient
from tool_agent.core.config import Settings
from tool_agent.core.errors import AgentError, RequestTimeoutError
from tool_agent.core.logging import LogContext, get_logger
from tool_agent.tools.registry import ToolRegistry
from tool_agent.utils.tokens import TiktokenCounter, TokenCounter

logger = get_logger(__name__)

# ANSI colours for the transcript
BLUE = "\u001b[94m"
GREEN = "\u001b[92m"
GREY = "\u001b[90m"
RED = "\u001b[91m"
RESET = "\u001b[0m"

THINK_OPEN = "<think>"
THINK_CLOSE = "</think>"

DEFAULT_SYSTEM_PROMPT = """You are a helpful assistant that has tools to assist you.

After you request a tool call, you will receive a JSON document with two fields,
"status" and "data". Always check the "status" field to know if the call "SUCCESS"
or "FAILED". The information you need to respond will be provided under the "data"
field. If the call "FAILED", just inform the user and don't try using the tool
again for the current response.

If you get back results from a tool call, do not verify the results.
"""

UserInput = Callable[[], Awaitable[str | None]]


class AgentState(str, Enum):
    """States of the control loop."""

    AWAITING_USER = "awaiting_user"
    REQUEST_IN_FLIGHT = "request_in_flight"
    STREAMING_RESPONSE = "streaming_response"
    DISPATCHING_TOOLS = "dispatching_tools"
    DONE = "done"


@dataclass
class CycleResult:
    """Outcome of one request cycle."""

    had_tool_calls: bool = False
    reply: str | None = None
    error: AgentError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def join_fragments(fragments: list[str]) -> str:
    """Join reply fragments with a single space separator.

    No separator is added where the boundary already has whitespace.
    """
    reply = ""
    for fragment in fragments:
        if reply and not reply[-1].isspace() and not fragment[:1].isspace():
            reply += " "
        reply += fragment
    return reply


async def read_stdin_line() -> str | None:
    """Read one line from stdin without blocking the event loop.

    Returns:
        The line without its terminator, or None at end of input.
    """
    line = await asyncio.to_thread(sys.stdin.readline)
    if line == "":
        return None
    return line.rstrip("\r\n")


class Agent:
    """Chat agent that streams replies and calls tools."""

    def __init__(
        self,
        client: ChatClient,
        registry: ToolRegistry,
        get_user_message: UserInput = read_stdin_line,
        settings: Settings | None = None,
        token_counter: TokenCounter | None = None,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        output: TextIO | None = None,
    ) -> None:
        """Initialize the agent.

        Args:
            client: Client used to open streaming requests.
            registry: Tools offered to the model.
            get_user_message: Async callable returning the next user message,
                or None when there is no more input.
            settings: Configuration. Defaults to the client's settings.
            token_counter: Counter for the context budget. Defaults to the
                tiktoken encoding of the configured model.
            system_prompt: Content of the pinned first message.
            output: Stream the transcript is written to.
        """
        self.client = client
        self.registry = registry
        self.settings = settings or client.settings
        self.output = output or sys.stdout
        self._get_user_message = get_user_message
        self._tools = tuple(registry.descriptors())

        self.ledger = ConversationLedger(
            system_prompt=system_prompt,
            budget=self.settings.context_window_budget,
            counter=token_counter or TiktokenCounter(self.settings.model),
            on_report=self._render_report,
        )

        self.state = AgentState.AWAITING_USER
        self.cycles = 0
        self._content: list[str] = []
        self._reasoning: list[str] = []
        self._inline_reasoning = False
        self._reasoning_shown = False

    def _write(self, text: str) -> None:
        self.output.write(text)
        self.output.flush()

    def _render_report(self, report: TokenReport) -> None:
        self._write(f"{GREY}{report.render()}{RESET}\n")
        if report.over_budget and len(self.ledger) > 2:
            self._write(f"{GREY}Removing conversation history{RESET}\n")

    async def run(self) -> None:
        """Chat until the user input source is exhausted."""
        self._write(f"\nChat with {self.settings.model} (use 'ctrl-c' to quit)\n")

        pending_tool_results = False
        while True:
            if not pending_tool_results:
                self.state = AgentState.AWAITING_USER
                self._write(f"{BLUE}\nYou{RESET}: ")
                user_input = await self._get_user_message()
                if user_input is None:
                    break
                self.ledger.append(Message.user(user_input))

            result = await self.run_cycle()
            pending_tool_results = result.had_tool_calls

        self.state = AgentState.DONE
        logger.info("session_finished", cycles=self.cycles, messages=len(self.ledger))

    async def run_cycle(self) -> CycleResult:
        """Send the conversation once and consume the streamed reply."""
        self.cycles += 1
        snapshot = self.ledger.snapshot()
        self._content = []
        self._reasoning = []
        self._inline_reasoning = False
        self._reasoning_shown = False

        self.state = AgentState.REQUEST_IN_FLIGHT
        indicator = ProgressIndicator(self.settings.model, self.output, self.settings.progress_interval)
        indicator.start()

        result = CycleResult()
        with LogContext(cycle=self.cycles):
            try:
                async with asyncio.timeout(self.settings.request_timeout):
                    await self._stream_reply(indicator, result)
            except TimeoutError:
                result.error = RequestTimeoutError(self.settings.request_timeout)
            except AgentError as e:
                result.error = e
            finally:
                await indicator.stop()

            if result.error is not None:
                return self._abandon(snapshot, result)

            if result.had_tool_calls:
                self.state = AgentState.DISPATCHING_TOOLS
            else:
                result.reply = self._flush_reply()
                self.state = AgentState.AWAITING_USER

        return result

    async def _stream_reply(self, indicator: ProgressIndicator, result: CycleResult) -> None:
        stream = await self.client.stream_chat(self.ledger.messages, self._tools)
        async with stream:
            async for delta in stream:
                if indicator.running:
                    await indicator.stop()
                    self.state = AgentState.STREAMING_RESPONSE

                if await self._handle_delta(delta):
                    result.had_tool_calls = True
                if isinstance(delta, Finish):
                    logger.debug("stream_finished", finish_reason=delta.reason)
                    break

        if stream.error is not None:
            raise stream.error

    async def _handle_delta(self, delta: StreamDelta) -> bool:
        """Apply one delta. Returns True if tool responses were recorded."""
        if isinstance(delta, ToolCallChunk):
            return await self._handle_tool_calls(delta)
        if isinstance(delta, ContentChunk):
            self._handle_content(delta.text)
        elif isinstance(delta, ReasoningChunk):
            self._handle_reasoning(delta.text)
        elif isinstance(delta, Finish):
            pass
        else:
            raise TypeError(f"unexpected stream delta: {delta!r}")
        return False

    async def _handle_tool_calls(self, chunk: ToolCallChunk) -> bool:
        self._write("\n\n")
        recorded = False
        for tool_call in chunk.calls:
            if tool_call.function_name not in self.registry:
                logger.debug("tool_call_skipped", tool=tool_call.function_name, tool_call_id=tool_call.id)
                continue

            self.ledger.append(Message.assistant(tool_call.summary()), reasoning=self._reasoning)

            self._write(f"\n{GREEN}{tool_call.function_name}({tool_call.arguments}){RESET}:\n\n")
            response = await self.registry.dispatch(tool_call)
            if response is None:
                continue
            self._write(f"{response.content}\n")
            self.ledger.append(response.to_message(), reasoning=self._reasoning)
            recorded = True
        return recorded

    def _handle_content(self, text: str) -> None:
        if self._reasoning_shown:
            self._reasoning_shown = False
            self._write("\n\n")

        if text == THINK_OPEN:
            self._inline_reasoning = True
            return
        if text == THINK_CLOSE:
            self._inline_reasoning = False
            return

        if self._inline_reasoning:
            self._reasoning.append(text)
            self._write(f"{RED}{text}{RESET}")
        else:
            self._content.append(text)
            self._write(text)

    def _handle_reasoning(self, text: str) -> None:
        if not self._reasoning:
            self._write("\n")
        self._reasoning_shown = True
        self._reasoning.append(text)
        self._write(f"{RED}{text}{RESET}")

    def _flush_reply(self) -> str | None:
        if not self._content:
            return None
        self._write("\n")

        reply = join_fragments(self._content).lstrip()
        if not reply:
            return None

        self.ledger.append(Message.assistant(reply), reasoning=self._reasoning)
        return reply

    def _abandon(self, snapshot: tuple[Message, ...], result: CycleResult) -> CycleResult:
        self.ledger.restore(snapshot)
        self.state = AgentState.AWAITING_USER
        result.had_tool_calls = False
        logger.error(
            "cycle_failed",
            exception_type=type(result.error).__name__,
            exception_message=str(result.error),
        )
        self._write(f"\n\n{RED}ERROR:{result.error}{RESET}\n\n")
        return result
