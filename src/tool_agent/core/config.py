"""Configuration management using Pydantic settings.

This module provides a centralized configuration system that:
- Loads settings from environment variables
- Supports .env files via python-dotenv
- Validates configuration at startup
- Is resolved once and then treated as immutable
"""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):  # type: ignore[misc]
    """Agent settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Prefix: TOOL_AGENT_ (e.g., TOOL_AGENT_LOG_LEVEL=DEBUG)

    Instances are frozen. Build one at process start (or use get_settings)
    and pass it into the client and agent constructors.
    """

    model_config = SettingsConfigDict(
        env_prefix="TOOL_AGENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    # Model endpoint
    endpoint: str = "http://localhost:11434/v1/chat/completions"
    model: str = "gpt-oss:latest"
    api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("TOOL_AGENT_API_KEY", "OPENAI_API_KEY"),
    )

    # Context window, also honoured from the Ollama server setting
    context_window_budget: int = Field(
        default=8192,
        ge=1,
        validation_alias=AliasChoices("TOOL_AGENT_CONTEXT_WINDOW_BUDGET", "OLLAMA_CONTEXT_LENGTH"),
    )

    # Timeouts (seconds)
    request_timeout: float = Field(default=300.0, gt=0.0)
    connect_timeout: float = Field(default=10.0, gt=0.0)

    # Sampling
    max_tokens: int | None = Field(default=None, ge=1)
    temperature: float = Field(default=0.0, ge=0.0, le=2.0)
    top_p: float = Field(default=0.1, ge=0.0, le=1.0)
    top_k: int = Field(default=1, ge=0)

    # Streaming
    stream_buffer_size: int = Field(default=100, ge=1)
    progress_interval: float = Field(default=0.1, gt=0.0)

    # Retry settings
    max_retries: int = Field(default=2, ge=0, le=10)
    retry_min_wait: float = Field(default=0.5, ge=0.0)
    retry_max_wait: float = Field(default=8.0, ge=0.0)

    # Logging settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "console"

    @property
    def api_key_value(self) -> str | None:
        """Get the API key as string."""
        return self.api_key.get_secret_value() if self.api_key else None

    @property
    def response_token_limit(self) -> int:
        """Tokens requested for the reply; the whole window unless capped."""
        return self.max_tokens if self.max_tokens is not None else self.context_window_budget


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: The application settings singleton.
    """
    return Settings()
