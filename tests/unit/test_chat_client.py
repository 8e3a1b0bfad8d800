"""Tests for the streaming chat client."""

import json

import httpx
import pytest
from helpers import ENDPOINT, content_frame, finish_frame, sse_body

from tool_agent.client.base import ContentChunk, Finish, Message, ToolDescriptor
from tool_agent.client.chat import ChatClient
from tool_agent.core.config import Settings
from tool_agent.core.errors import (
    AuthorizationError,
    ConnectionFailedError,
    HTTPStatusError,
    ServiceUnavailableError,
    TransportError,
)

WEATHER = ToolDescriptor(
    name="tool_get_weather",
    description="Get the current weather for a location",
    parameters={"type": "object", "properties": {"location": {"type": "string"}}},
    required=frozenset({"location"}),
)


class TestBuildPayload:
    """Tests for the request payload."""

    def test_payload_fields(self, settings: Settings) -> None:
        """Test that every request field is present."""
        client = ChatClient(settings, http_client=httpx.AsyncClient())
        payload = client.build_payload([Message.system("sys"), Message.user("hello")], [WEATHER])

        assert payload["model"] == "test-model"
        assert payload["messages"] == [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "hello"},
        ]
        assert payload["max_tokens"] == 100
        assert payload["temperature"] == 0.0
        assert payload["top_p"] == 0.1
        assert payload["top_k"] == 1
        assert payload["stream"] is True
        assert payload["tool_selection"] == "auto"
        assert payload["tools"][0]["function"]["name"] == "tool_get_weather"
        assert payload["tools"][0]["function"]["parameters"]["required"] == ["location"]

    def test_tool_messages_carry_call_id(self, settings: Settings) -> None:
        """Test that tool responses reference their call."""
        client = ChatClient(settings, http_client=httpx.AsyncClient())
        payload = client.build_payload([Message.tool('{"status": "SUCCESS"}', tool_call_id="call_1")])

        assert payload["messages"][0]["tool_call_id"] == "call_1"

    def test_max_tokens_cap(self) -> None:
        """Test that max_tokens overrides the window budget."""
        settings = Settings(context_window_budget=4096, max_tokens=512)
        client = ChatClient(settings, http_client=httpx.AsyncClient())

        assert client.build_payload([])["max_tokens"] == 512


class TestStreamChat:
    """Tests for opening a stream."""

    @pytest.mark.asyncio
    async def test_successful_stream(self, settings: Settings, mock_http) -> None:
        """Test that a 200 response yields decoded deltas."""
        seen: dict[str, object] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            seen["headers"] = request.headers
            return httpx.Response(200, content=b"".join(sse_body(content_frame("Hi"), finish_frame())))

        client = ChatClient(settings, http_client=mock_http(handler))
        stream = await client.stream_chat([Message.user("hello")])
        async with stream:
            deltas = [delta async for delta in stream]

        assert deltas == [ContentChunk("Hi"), Finish("stop")]
        assert seen["body"]["stream"] is True
        assert seen["headers"]["content-type"] == "application/json"
        assert seen["headers"]["cache-control"] == "no-cache"
        assert "authorization" not in seen["headers"]

    @pytest.mark.asyncio
    async def test_api_key_header(self, mock_http) -> None:
        """Test that a configured API key is sent as a bearer token."""
        settings = Settings(endpoint=ENDPOINT, api_key="sk-test", max_retries=0)
        seen: dict[str, str] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["authorization"]
            return httpx.Response(200, content=b"")

        client = ChatClient(settings, http_client=mock_http(handler))
        stream = await client.stream_chat([])
        await stream.aclose()

        assert seen["auth"] == "Bearer sk-test"

    @pytest.mark.asyncio
    async def test_forbidden(self, settings: Settings, mock_http) -> None:
        """Test that 403 maps to AuthorizationError."""
        client = ChatClient(settings, http_client=mock_http(lambda request: httpx.Response(403, text="no")))

        with pytest.raises(AuthorizationError) as exc_info:
            await client.stream_chat([])

        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_error_body_message(self, settings: Settings, mock_http) -> None:
        """Test that a JSON error body supplies the message."""
        client = ChatClient(
            settings,
            http_client=mock_http(lambda request: httpx.Response(400, json={"error": {"message": "bad model"}})),
        )

        with pytest.raises(HTTPStatusError) as exc_info:
            await client.stream_chat([])

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "error: status: 400 response: bad model"
        assert not isinstance(exc_info.value, ServiceUnavailableError)

    @pytest.mark.asyncio
    async def test_plain_error_body(self, settings: Settings, mock_http) -> None:
        """Test that a non-JSON error body is quoted."""
        client = ChatClient(settings, http_client=mock_http(lambda request: httpx.Response(500, text="boom")))

        with pytest.raises(HTTPStatusError, match="boom"):
            await client.stream_chat([])

    @pytest.mark.asyncio
    async def test_unavailable_is_retried(self, mock_http) -> None:
        """Test that a 503 is retried before giving up."""
        settings = Settings(endpoint=ENDPOINT, max_retries=2, retry_min_wait=0.0, retry_max_wait=0.0)
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            if calls < 3:
                return httpx.Response(503, text="busy")
            return httpx.Response(200, content=b"".join(sse_body(content_frame("ok"))))

        client = ChatClient(settings, http_client=mock_http(handler))
        stream = await client.stream_chat([])
        async with stream:
            deltas = [delta async for delta in stream]

        assert calls == 3
        assert deltas == [ContentChunk("ok")]

    @pytest.mark.asyncio
    async def test_unavailable_exhausts_retries(self, settings: Settings, mock_http) -> None:
        """Test that retries stop at the configured budget."""
        client = ChatClient(settings, http_client=mock_http(lambda request: httpx.Response(503, text="busy")))

        with pytest.raises(ServiceUnavailableError):
            await client.stream_chat([])

    @pytest.mark.asyncio
    async def test_connection_refused(self, settings: Settings, mock_http) -> None:
        """Test that connection failures become transport errors."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = ChatClient(settings, http_client=mock_http(handler))

        with pytest.raises(ConnectionFailedError) as exc_info:
            await client.stream_chat([])

        assert isinstance(exc_info.value, TransportError)
        assert exc_info.value.endpoint == ENDPOINT
