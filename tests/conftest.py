"""Pytest configuration and fixtures."""

import io
from collections.abc import Callable
from typing import Any

import httpx
import pytest
from helpers import ENDPOINT, WordCounter

from tool_agent.core.config import Settings


@pytest.fixture(autouse=True)
def mock_env() -> None:
    """Mock environment for all tests."""
    # Clear any cached settings
    from tool_agent.core.config import get_settings

    get_settings.cache_clear()


@pytest.fixture
def word_counter() -> WordCounter:
    """Deterministic token counter (one token per word)."""
    return WordCounter()


@pytest.fixture
def settings() -> Settings:
    """Settings pointing at a fake endpoint with fast timings."""
    return Settings(
        endpoint=ENDPOINT,
        model="test-model",
        context_window_budget=100,
        request_timeout=2.0,
        progress_interval=0.01,
        max_retries=0,
        retry_min_wait=0.0,
        retry_max_wait=0.0,
    )


@pytest.fixture
def output() -> io.StringIO:
    """Captured transcript output."""
    return io.StringIO()


@pytest.fixture
def mock_http() -> Callable[[Callable[[httpx.Request], Any]], httpx.AsyncClient]:
    """Build an httpx client whose requests are answered by a handler."""

    def build(handler: Callable[[httpx.Request], Any]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return build
