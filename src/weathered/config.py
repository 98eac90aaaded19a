"""Typed settings loader for the weathered client and CLI."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError
from .options import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    ClientOptions,
    build_options,
)


class Settings(BaseSettings):
    """Settings loaded from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    user_agent: str = Field(default=DEFAULT_USER_AGENT, alias="WEATHERED_USER_AGENT")
    base_url: str = Field(default=DEFAULT_BASE_URL, alias="WEATHERED_BASE_URL")
    timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS,
        alias="WEATHERED_TIMEOUT_SECONDS",
    )
    use_cache: bool = Field(default=True, alias="WEATHERED_USE_CACHE")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        alias="WEATHERED_LOG_LEVEL",
    )
    max_print: int = Field(default=10, alias="WEATHERED_MAX_PRINT")

    @model_validator(mode="after")
    def validate_values(self) -> Settings:
        if not self.user_agent.strip():
            raise ValueError("WEATHERED_USER_AGENT must not be empty.")
        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError("WEATHERED_BASE_URL must start with http:// or https://.")
        if self.timeout_seconds <= 0:
            raise ValueError("WEATHERED_TIMEOUT_SECONDS must be > 0.")
        if self.max_print <= 0:
            raise ValueError("WEATHERED_MAX_PRINT must be > 0.")
        return self

    def to_options(self) -> ClientOptions:
        return build_options(
            {
                "user_agent": self.user_agent,
                "base_url": self.base_url,
                "timeout_seconds": self.timeout_seconds,
                "use_cache": self.use_cache,
            }
        )

    def safe_summary(self) -> dict[str, Any]:
        """Return a config summary suitable for startup logs."""
        return {
            "base_url": self.base_url,
            "timeout_seconds": self.timeout_seconds,
            "use_cache": self.use_cache,
            "log_level": self.log_level,
        }


def load_settings() -> Settings:
    """Load and validate settings, raising ConfigError on failure."""
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed reading environment/.env: {exc}") from exc
