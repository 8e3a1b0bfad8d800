"""Token counting utilities using tiktoken.

The conversation ledger only needs ``count(text) -> int``. Any object with
that method satisfies TokenCounter; TiktokenCounter is the default.
"""

from functools import lru_cache
from typing import Protocol

import tiktoken

# Model to encoding mapping
MODEL_ENCODINGS: dict[str, str] = {
    # Open-weight models served through Ollama
    "gpt-oss:latest": "o200k_base",
    "gpt-oss:20b": "o200k_base",
    "gpt-oss:120b": "o200k_base",
    # GPT-4 models
    "gpt-4o": "o200k_base",
    "gpt-4o-mini": "o200k_base",
    "gpt-4-turbo": "cl100k_base",
    "gpt-4": "cl100k_base",
    "gpt-3.5-turbo": "cl100k_base",
}

DEFAULT_ENCODING = "o200k_base"


class TokenCounter(Protocol):
    """Anything that can count the tokens of a text."""

    def count(self, text: str) -> int: ...


@lru_cache(maxsize=10)
def get_encoding(encoding_name: str) -> tiktoken.Encoding:
    """Get a cached tiktoken encoding.

    Args:
        encoding_name: Name of the encoding (e.g., "o200k_base").

    Returns:
        The tiktoken Encoding object.
    """
    return tiktoken.get_encoding(encoding_name)


@lru_cache(maxsize=20)
def get_encoding_for_model(model: str) -> tiktoken.Encoding:
    """Get the tiktoken encoding for a specific model.

    Args:
        model: The model name (e.g., "gpt-oss:latest").

    Returns:
        The tiktoken Encoding object appropriate for the model.
    """
    # Try model-specific encoding first
    if model in MODEL_ENCODINGS:
        return get_encoding(MODEL_ENCODINGS[model])

    # Try tiktoken's built-in model mapping
    try:
        return tiktoken.encoding_for_model(model)
    except KeyError:
        return get_encoding(DEFAULT_ENCODING)


def count_tokens(text: str, model: str = "gpt-oss:latest") -> int:
    """Count the number of tokens in a text string.

    Args:
        text: The text to count tokens for.
        model: The model to use for encoding (affects token count).

    Returns:
        The number of tokens in the text.
    """
    encoding = get_encoding_for_model(model)
    return len(encoding.encode(text, disallowed_special=()))


class TiktokenCounter:
    """TokenCounter backed by the tiktoken encoding of a model."""

    def __init__(self, model: str = "gpt-oss:latest") -> None:
        self.model = model
        self._encoding = get_encoding_for_model(model)

    def count(self, text: str) -> int:
        if not text:
            return 0
        return len(self._encoding.encode(text, disallowed_special=()))
