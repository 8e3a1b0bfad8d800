"""Streaming chat completions client for OpenAI-compatible endpoints.

This module builds the chat request payload, performs the HTTP exchange with
httpx and hands a successful response to a DeltaStream. Non-success statuses
and connection failures are translated into the TransportError hierarchy.
"""

import json
import time
from collections.abc import Sequence
from typing import Any

import httpx

from tool_agent import __version__
from tool_agent.client.base import Message, ToolDescriptor
from tool_agent.client.sse import DeltaStream
from tool_agent.core.config import Settings, get_settings
from tool_agent.core.errors import (
    AuthorizationError,
    ConnectionFailedError,
    HTTPStatusError,
    ServiceUnavailableError,
)
from tool_agent.core.logging import get_logger
from tool_agent.core.retry import create_retry_decorator

logger = get_logger(__name__)

UNAVAILABLE_STATUSES = frozenset({429, 502, 503, 504})


class ChatClient:
    """Opens streaming chat completion requests."""

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Endpoint, model and sampling configuration.
            http_client: Optional preconfigured httpx client (tests pass one
                with a mock transport).
        """
        self.settings = settings or get_settings()
        self._owns_client = http_client is None
        # The cycle timeout bounds the whole exchange; httpx only bounds connecting.
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(None, connect=self.settings.connect_timeout),
            follow_redirects=True,
        )
        self._open_with_retry = create_retry_decorator(self.settings)(self._open)

    def _headers(self) -> dict[str, str]:
        headers = {
            "Cache-Control": "no-cache",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": f"tool-agent/{__version__}",
        }
        api_key = self.settings.api_key_value
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        return headers

    def build_payload(
        self,
        messages: Sequence[Message],
        tools: Sequence[ToolDescriptor] = (),
    ) -> dict[str, Any]:
        """Build the JSON body of a streaming chat request."""
        return {
            "model": self.settings.model,
            "messages": [message.to_payload() for message in messages],
            "max_tokens": self.settings.response_token_limit,
            "temperature": self.settings.temperature,
            "top_p": self.settings.top_p,
            "top_k": self.settings.top_k,
            "stream": True,
            "tools": [tool.to_payload() for tool in tools],
            "tool_selection": "auto",
        }

    async def _raise_for_status(self, response: httpx.Response) -> None:
        """Convert a non-success response into a TransportError."""
        endpoint = self.settings.endpoint
        status = response.status_code
        try:
            body = (await response.aread()).decode("utf-8", errors="replace")
        finally:
            await response.aclose()

        if status == 403:
            raise AuthorizationError(endpoint)

        try:
            message = json.loads(body)["error"]["message"]
        except (ValueError, KeyError, TypeError):
            message = body.strip() or response.reason_phrase

        error_class = ServiceUnavailableError if status in UNAVAILABLE_STATUSES else HTTPStatusError
        raise error_class(f"error: status: {status} response: {message}", endpoint, status_code=status)

    async def _open(self, payload: dict[str, Any]) -> httpx.Response:
        request = self._client.build_request(
            "POST",
            self.settings.endpoint,
            json=payload,
            headers=self._headers(),
        )
        try:
            response = await self._client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise ConnectionFailedError(f"do: error: {e}", self.settings.endpoint) from e

        if response.status_code not in (200, 204):
            await self._raise_for_status(response)
        return response

    async def stream_chat(
        self,
        messages: Sequence[Message],
        tools: Sequence[ToolDescriptor] = (),
    ) -> DeltaStream:
        """Send a streaming chat request.

        Args:
            messages: The conversation to send.
            tools: Tools the model may call.

        Returns:
            A DeltaStream over the response body. Use it as an async context
            manager so the connection is always released.

        Raises:
            TransportError: If the endpoint cannot be reached or answers with
                a non-success status (after retries).
        """
        payload = self.build_payload(messages, tools)
        start_time = time.time()
        response = await self._open_with_retry(payload)
        logger.info(
            "stream_opened",
            model=self.settings.model,
            messages=len(payload["messages"]),
            tools=len(payload["tools"]),
            latency_ms=round((time.time() - start_time) * 1000, 1),
        )
        return DeltaStream(response, max_buffered=self.settings.stream_buffer_size)

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "ChatClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
