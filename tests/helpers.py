"""Shared builders for streamed responses."""

import asyncio
import json
from collections.abc import AsyncIterator, Iterable
from typing import Any

import httpx

ENDPOINT = "http://model.test/v1/chat/completions"


class WordCounter:
    """Token counter that counts whitespace-separated words."""

    def count(self, text: str) -> int:
        return len(text.split())


class RecordingStream(httpx.AsyncByteStream):
    """Response body that can pause between chunks and counts closes."""

    def __init__(self, chunks: Iterable[bytes], delay: float = 0.0, hang_after: int | None = None) -> None:
        self.chunks = list(chunks)
        self.delay = delay
        self.hang_after = hang_after
        self.close_count = 0
        self.sent = 0

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for position, chunk in enumerate(self.chunks):
            if self.hang_after is not None and position >= self.hang_after:
                await asyncio.sleep(3600)
            if self.delay:
                await asyncio.sleep(self.delay)
            self.sent += 1
            yield chunk

    async def aclose(self) -> None:
        self.close_count += 1


def sse_line(frame: dict[str, Any] | str) -> bytes:
    """Encode one frame as an SSE data line followed by a blank line."""
    payload = frame if isinstance(frame, str) else json.dumps(frame)
    return f"data: {payload}\n\n".encode()


def sse_body(*frames: dict[str, Any] | str, done: bool = True) -> list[bytes]:
    """Encode frames, optionally followed by the [DONE] marker."""
    chunks = [sse_line(frame) for frame in frames]
    if done:
        chunks.append(b"data: [DONE]\n\n")
    return chunks


def content_frame(text: str) -> dict[str, Any]:
    return {"choices": [{"index": 0, "delta": {"content": text}}]}


def reasoning_frame(text: str) -> dict[str, Any]:
    return {"choices": [{"index": 0, "delta": {"reasoning": text}}]}


def tool_call_frame(name: str, arguments: dict[str, Any], call_id: str = "call_1") -> dict[str, Any]:
    return {
        "choices": [
            {
                "index": 0,
                "delta": {
                    "tool_calls": [
                        {
                            "id": call_id,
                            "index": 0,
                            "type": "function",
                            "function": {"name": name, "arguments": json.dumps(arguments)},
                        }
                    ]
                },
            }
        ]
    }


def finish_frame(reason: str = "stop") -> dict[str, Any]:
    return {"choices": [{"index": 0, "delta": {}, "finish_reason": reason}]}


def make_response(chunks: Iterable[bytes], **stream_kwargs: Any) -> tuple[httpx.Response, RecordingStream]:
    """Build a streamed 200 response over a RecordingStream."""
    stream = RecordingStream(chunks, **stream_kwargs)
    response = httpx.Response(200, stream=stream, request=httpx.Request("POST", ENDPOINT))
    return response, stream
