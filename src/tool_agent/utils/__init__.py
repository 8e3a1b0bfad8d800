"""Utility functions for the tool agent.

This module exports token counting helpers used for context budgeting.
"""

from tool_agent.utils.tokens import (
    TiktokenCounter,
    TokenCounter,
    count_tokens,
    get_encoding,
    get_encoding_for_model,
)

__all__ = [
    "TiktokenCounter",
    "TokenCounter",
    "count_tokens",
    "get_encoding",
    "get_encoding_for_model",
]
