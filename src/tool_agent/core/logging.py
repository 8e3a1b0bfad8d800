"""Structured logging configuration using structlog.

This module provides:
- JSON logging for production (machine-readable)
- Pretty console logging for development (human-readable)
- Automatic context enrichment (timestamps, bound cycle numbers)
- Output on stderr, leaving stdout to the chat transcript
"""

import logging
import sys
from typing import Any, cast

import structlog

from tool_agent.core.config import Settings, get_settings


def setup_logging(settings: Settings | None = None) -> None:
    """Configure structured logging based on settings.

    Call this once at application startup to configure logging.
    """
    settings = settings or get_settings()

    # Configure standard logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, settings.log_level),
    )

    # Configure structlog processors
    shared_processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.log_format == "json":
        # Production: JSON output
        processors = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        # Development: Pretty console output
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=cast(list[structlog.typing.Processor], processors),
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, settings.log_level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a configured logger instance.

    Args:
        name: Optional logger name for identification.

    Returns:
        A bound logger instance.
    """
    return structlog.get_logger(name)


class LogContext:
    """Context manager for adding temporary log context.

    Example:
        with LogContext(cycle=3, model="gpt-oss:latest"):
            logger.info("stream_opened")
    """

    def __init__(self, **kwargs: Any) -> None:
        self.context = kwargs
        self._token: Any = None

    def __enter__(self) -> "LogContext":
        self._token = structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, *args: Any) -> None:
        if self._token is not None:
            structlog.contextvars.unbind_contextvars(*self.context.keys())


def log_token_usage(
    logger: Any,
    content_tokens: int,
    reasoning_tokens: int,
    budget: int,
    **kwargs: Any,
) -> None:
    """Log a conversation token report with standard fields.

    Args:
        logger: The logger instance to use.
        content_tokens: Tokens held by the conversation messages.
        reasoning_tokens: Tokens of the current cycle's reasoning text.
        budget: The configured context window budget.
        **kwargs: Additional context to log.
    """
    logger.debug(
        "token_usage",
        content_tokens=content_tokens,
        reasoning_tokens=reasoning_tokens,
        total_tokens=content_tokens + reasoning_tokens,
        budget=budget,
        **kwargs,
    )
