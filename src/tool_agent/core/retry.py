"""Retry utilities with exponential backoff using tenacity.

Only the opening of a streaming request is retried. Once bytes have been
read from a response, a failure ends the request cycle instead.
"""

from collections.abc import Callable
from typing import Any, ParamSpec, TypeVar

from tenacity import (  # type: ignore[attr-defined]
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from tool_agent.core.config import Settings, get_settings
from tool_agent.core.errors import ConnectionFailedError, ServiceUnavailableError
from tool_agent.core.logging import get_logger

P = ParamSpec("P")
T = TypeVar("T")

logger = get_logger(__name__)


# Exceptions that should trigger a retry
RETRYABLE_EXCEPTIONS: tuple[type[Exception], ...] = (
    ConnectionFailedError,
    ServiceUnavailableError,
)


def create_retry_decorator(
    settings: Settings | None = None,
    max_retries: int | None = None,
    retryable_exceptions: tuple[type[Exception], ...] = RETRYABLE_EXCEPTIONS,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Create a retry decorator from settings.

    Works for plain and async callables alike.

    Args:
        settings: Settings supplying the retry budget and waits.
        max_retries: Overrides settings.max_retries when given.
        retryable_exceptions: Tuple of exception types to retry on.

    Returns:
        A decorator that adds retry logic to functions.
    """
    settings = settings or get_settings()

    max_retries = max_retries if max_retries is not None else settings.max_retries
    min_wait = settings.retry_min_wait
    max_wait = settings.retry_max_wait

    def log_retry(retry_state: Any) -> None:
        """Log retry attempts."""
        exception = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "retry_attempt",
            attempt=retry_state.attempt_number,
            max_attempts=max_retries + 1,
            exception_type=type(exception).__name__ if exception else None,
            exception_message=str(exception) if exception else None,
        )

    return retry(
        stop=stop_after_attempt(max_retries + 1),  # type: ignore[no-untyped-call]
        wait=wait_exponential_jitter(initial=min_wait, max=max_wait, jitter=min_wait),
        retry=retry_if_exception_type(retryable_exceptions),  # type: ignore[no-untyped-call]
        before_sleep=log_retry,
        reraise=True,
    )
