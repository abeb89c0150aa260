"""Application settings powered by Pydantic BaseSettings."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from esigate.fetch.config import FetchConfig
from esigate.fetch.constants import (
    DEFAULT_BASE_URL,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
)


CacheBackend = Literal["memory", "redis"]


class AppSettings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, env_file=".env", env_file_encoding="utf-8"
    )

    base_url: str = Field(default=DEFAULT_BASE_URL, validation_alias="ESI_BASE_URL")
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT, validation_alias="ESI_USER_AGENT"
    )
    cache_backend: CacheBackend = Field(
        default="memory", validation_alias="ESI_CACHE_BACKEND"
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0", validation_alias="REDIS_URL"
    )
    timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS, validation_alias="ESI_TIMEOUT_SECONDS"
    )
    max_retries: int = Field(
        default=DEFAULT_MAX_RETRIES, validation_alias="ESI_MAX_RETRIES"
    )
    enforce_error_budget: bool = Field(
        default=False, validation_alias="ESI_ENFORCE_ERROR_BUDGET"
    )
    hash_tokens_in_cache_keys: bool = Field(
        default=False, validation_alias="ESI_HASH_TOKENS"
    )

    def to_fetch_config(self) -> FetchConfig:
        """Build the fetch layer configuration from these settings."""
        return FetchConfig(
            base_url=self.base_url,
            user_agent=self.user_agent,
            timeout_seconds=self.timeout_seconds,
            max_retries=self.max_retries,
            enforce_error_budget=self.enforce_error_budget,
            hash_tokens_in_cache_keys=self.hash_tokens_in_cache_keys,
        )


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
