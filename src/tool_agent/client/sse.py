"""Server-Sent Events decoding for streamed chat completions.

A response body is a sequence of lines. Lines starting with ``data: `` carry
one JSON frame; blank lines and ``data: [DONE]`` are separators; anything
else is ignored. Each frame decodes to zero or more StreamDelta values.

DeltaStream reads the body on a background task and hands deltas to the
consumer through a bounded queue, so a slow consumer stalls the read rather
than buffering without limit.
"""

import asyncio
import json
from typing import Any

import httpx

from tool_agent.client.base import (
    ContentChunk,
    Finish,
    ReasoningChunk,
    StreamDelta,
    ToolCall,
    ToolCallChunk,
)
from tool_agent.core.errors import AgentError, ConnectionFailedError, StreamDecodeError
from tool_agent.core.logging import get_logger

logger = get_logger(__name__)

DATA_PREFIX = "data: "
DONE_LINE = "data: [DONE]"


def parse_sse_line(line: str) -> dict[str, Any] | None:
    """Decode one SSE line into a JSON frame.

    Args:
        line: A single line of the response body, without its terminator.

    Returns:
        The decoded frame, or None for separators and non-data lines.

    Raises:
        StreamDecodeError: If the data payload is not a JSON object.
    """
    if line == "" or line == DONE_LINE:
        return None
    if not line.startswith(DATA_PREFIX):
        return None

    raw = line[len(DATA_PREFIX) :]
    try:
        frame = json.loads(raw)
    except json.JSONDecodeError as e:
        raise StreamDecodeError(f"invalid frame: {e}", line=raw) from e

    if not isinstance(frame, dict):
        raise StreamDecodeError("frame is not a JSON object", line=raw)
    return frame


def _parse_arguments(raw: Any) -> dict[str, Any]:
    """Parse a tool call's arguments into a mapping."""
    if raw is None or raw == "":
        return {}
    if isinstance(raw, dict):
        return raw
    try:
        arguments = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as e:
        raise StreamDecodeError(f"invalid tool call arguments: {e}", line=str(raw)) from e
    if not isinstance(arguments, dict):
        raise StreamDecodeError("tool call arguments are not a JSON object", line=str(raw))
    return arguments


def _expect(value: Any, kind: type, what: str) -> Any:
    """Return value if it has the expected JSON type."""
    if not isinstance(value, kind):
        raise StreamDecodeError(f"{what} has unexpected type {type(value).__name__}", line=repr(value))
    return value


def _parse_tool_calls(raw_calls: Any) -> tuple[ToolCall, ...]:
    calls = []
    for position, raw in enumerate(_expect(raw_calls, list, "tool_calls")):
        _expect(raw, dict, "tool call")
        function = _expect(raw.get("function") or {}, dict, "tool call function")
        calls.append(
            ToolCall(
                id=raw.get("id") or "",
                function_name=function.get("name") or "",
                arguments=_parse_arguments(function.get("arguments")),
                index=raw.get("index", position),
            )
        )
    return tuple(calls)


def frame_to_deltas(frame: dict[str, Any]) -> list[StreamDelta]:
    """Convert a decoded frame into stream deltas.

    Args:
        frame: The chat completion chunk envelope.

    Returns:
        Deltas in the order they should be handled.

    Raises:
        StreamDecodeError: If the frame reports an error or carries
            a field of the wrong type.
    """
    error = frame.get("error")
    if error:
        message = error.get("message") if isinstance(error, dict) else error
        raise StreamDecodeError(f"server error: {message}")

    deltas: list[StreamDelta] = []
    for choice in _expect(frame.get("choices") or [], list, "choices"):
        _expect(choice, dict, "choice")
        delta = _expect(choice.get("delta") or {}, dict, "delta")

        content = delta.get("content")
        if content:
            deltas.append(ContentChunk(_expect(content, str, "content")))

        reasoning = delta.get("reasoning") or delta.get("reasoning_content")
        if reasoning:
            deltas.append(ReasoningChunk(_expect(reasoning, str, "reasoning")))

        raw_calls = delta.get("tool_calls")
        if raw_calls:
            deltas.append(ToolCallChunk(_parse_tool_calls(raw_calls)))

        finish_reason = choice.get("finish_reason")
        if finish_reason:
            deltas.append(Finish(_expect(finish_reason, str, "finish_reason")))

    return deltas


_EOF = object()


class DeltaStream:
    """Lazy, finite, non-restartable sequence of deltas from a response.

    Use as an async context manager so the background reader is cancelled
    and the response released on every exit path:

        async with stream:
            async for delta in stream:
                ...

    Decode and mid-body transport failures end the sequence without raising;
    the failure is kept on ``error``.
    """

    def __init__(self, response: httpx.Response, max_buffered: int = 100) -> None:
        self._response = response
        self._queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=max_buffered)
        self._producer: asyncio.Task[None] | None = None
        self._exhausted = False
        self._released = False
        self.error: AgentError | None = None

    @property
    def released(self) -> bool:
        """Whether the underlying response has been closed."""
        return self._released

    def start(self) -> None:
        """Start the background reader. Called implicitly on first use."""
        if self._producer is None and not self._exhausted:
            self._producer = asyncio.create_task(self._produce())

    async def _produce(self) -> None:
        try:
            async for line in self._response.aiter_lines():
                frame = parse_sse_line(line)
                if frame is None:
                    continue
                for delta in frame_to_deltas(frame):
                    await self._queue.put(delta)
        except StreamDecodeError as e:
            logger.warning("stream_decode_failed", error=e.message, line=e.line)
            self.error = e
        except httpx.HTTPError as e:
            logger.warning("stream_read_failed", error=str(e))
            self.error = ConnectionFailedError(f"stream read failed: {e}", endpoint=str(self._response.url))
        except asyncio.CancelledError:
            logger.debug("stream_cancelled")
            await self._release()
            raise
        except Exception as e:
            logger.exception("stream_reader_crashed")
            error = StreamDecodeError(f"unexpected frame content: {e}")
            error.__cause__ = e
            self.error = error

        await self._release()
        await self._queue.put(_EOF)

    async def _release(self) -> None:
        if self._released:
            return
        self._released = True
        await self._response.aclose()

    def __aiter__(self) -> "DeltaStream":
        return self

    async def __anext__(self) -> StreamDelta:
        if self._exhausted:
            raise StopAsyncIteration
        self.start()
        item = await self._queue.get()
        if item is _EOF:
            self._exhausted = True
            raise StopAsyncIteration
        return item

    async def aclose(self) -> None:
        """Stop reading and release the response. Safe to call repeatedly."""
        self._exhausted = True
        if self._producer is not None and not self._producer.done():
            self._producer.cancel()
        if self._producer is not None:
            await asyncio.gather(self._producer, return_exceptions=True)
        await self._release()

    async def __aenter__(self) -> "DeltaStream":
        self.start()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
