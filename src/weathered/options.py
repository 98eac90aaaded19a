"""Client-wide options record."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigError

DEFAULT_USER_AGENT = "weathered package"
DEFAULT_BASE_URL = "https://api.weather.gov"
DEFAULT_TIMEOUT_SECONDS = 15.0


class ClientOptions(BaseModel):
    """Immutable options; replace via ``merged`` rather than mutating."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="Outgoing User-Agent")
    base_url: str = Field(default=DEFAULT_BASE_URL, description="API root URL")
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    use_cache: bool = Field(default=True, description="Memoize station/point lookups")

    @field_validator("user_agent")
    @classmethod
    def user_agent_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("user_agent must not be empty.")
        return value

    @field_validator("base_url")
    @classmethod
    def base_url_is_http(cls, value: str) -> str:
        candidate = value.strip().rstrip("/")
        if not candidate.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://.")
        return candidate

    def merged(self, **partial: Any) -> ClientOptions:
        """Return a new record with ``partial`` fields replaced (shallow merge)."""
        return build_options({**self.model_dump(), **partial})


def build_options(values: dict[str, Any] | None = None) -> ClientOptions:
    """Validate option values, raising ConfigError on failure."""
    try:
        return ClientOptions.model_validate(values or {})
    except ValidationError as exc:
        raise ConfigError(f"Invalid client options: {exc}") from exc
