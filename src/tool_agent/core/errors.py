"""Custom exception hierarchy for the tool agent.

Request cycles fail in one of three recoverable ways (transport, decode,
timeout) and tool handlers fail in a fourth, isolated way. Each has its own
branch so the control loop can catch exactly what it knows how to recover
from.
"""

from typing import Any


class AgentError(Exception):
    """Base exception for all tool agent errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(AgentError):
    """Raised when configuration or tool registration is invalid."""

    pass


class TransportError(AgentError):
    """Base exception for failures talking to the model endpoint."""

    def __init__(
        self,
        message: str,
        endpoint: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.endpoint = endpoint
        super().__init__(message, {"endpoint": endpoint, **(details or {})})


class ConnectionFailedError(TransportError):
    """Raised when the endpoint cannot be reached or the connection drops.

    This error is retryable while the stream has not started.
    """

    pass


class HTTPStatusError(TransportError):
    """Raised when the endpoint answers with a non-success status."""

    def __init__(
        self,
        message: str,
        endpoint: str,
        status_code: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(message, endpoint, {"status_code": status_code, **(details or {})})


class AuthorizationError(HTTPStatusError):
    """Raised when the API understands the request but refuses to authorize it."""

    def __init__(self, endpoint: str) -> None:
        super().__init__(
            "api understands the request but refuses to authorize it",
            endpoint,
            status_code=403,
        )


class ServiceUnavailableError(HTTPStatusError):
    """Raised when the service is overloaded or temporarily unavailable.

    This error is retryable while the stream has not started.
    """

    pass


class RequestTimeoutError(AgentError):
    """Raised when a request cycle outlives its lifetime ceiling."""

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"request cycle exceeded {timeout:g}s", {"timeout": timeout})


class StreamDecodeError(AgentError):
    """Raised when an event frame cannot be decoded."""

    def __init__(self, message: str, line: str | None = None) -> None:
        self.line = line
        super().__init__(message, {"line": line} if line is not None else None)


class ToolError(AgentError):
    """Raised by tool handlers for domain failures."""

    def __init__(
        self,
        message: str,
        tool_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.tool_name = tool_name
        super().__init__(message, details)


class ToolArgumentError(ToolError):
    """Raised when a tool call is missing required arguments."""

    def __init__(self, tool_name: str, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(
            f"missing required argument(s): {', '.join(missing)}",
            tool_name,
        )
