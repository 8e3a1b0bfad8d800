"""Core utilities for the tool agent.

This module exports the fundamental building blocks:
- Configuration management
- Error handling
- Logging
- Retry utilities
"""

from tool_agent.core.config import Settings, get_settings
from tool_agent.core.errors import (
    AgentError,
    AuthorizationError,
    ConfigurationError,
    ConnectionFailedError,
    HTTPStatusError,
    RequestTimeoutError,
    ServiceUnavailableError,
    StreamDecodeError,
    ToolArgumentError,
    ToolError,
    TransportError,
)
from tool_agent.core.logging import LogContext, get_logger, log_token_usage, setup_logging
from tool_agent.core.retry import RETRYABLE_EXCEPTIONS, create_retry_decorator

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Errors
    "AgentError",
    "AuthorizationError",
    "ConfigurationError",
    "ConnectionFailedError",
    "HTTPStatusError",
    "RequestTimeoutError",
    "ServiceUnavailableError",
    "StreamDecodeError",
    "ToolArgumentError",
    "ToolError",
    "TransportError",
    # Logging
    "LogContext",
    "get_logger",
    "log_token_usage",
    "setup_logging",
    # Retry
    "RETRYABLE_EXCEPTIONS",
    "create_retry_decorator",
]
