"""Configuration models for the ESI fetch layer."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from esigate.fetch.constants import (
    BUDGET_GATE_THRESHOLD,
    BUDGET_WARNING_THRESHOLD,
    DEFAULT_BASE_URL,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
)


class FetchConfig(BaseModel):
    """Configuration for upstream fetch operations.

    Central configuration for the cache-aware ESI client: where to send
    requests, how to identify ourselves, and how hard to retry.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_url: Annotated[str, Field(min_length=1)] = DEFAULT_BASE_URL
    user_agent: Annotated[
        str,
        Field(
            min_length=1,
            max_length=500,
            description="Compliance User-Agent naming the app and a contact",
        ),
    ] = DEFAULT_USER_AGENT
    timeout_seconds: Annotated[float, Field(ge=1.0, le=300.0)] = (
        DEFAULT_TIMEOUT_SECONDS
    )
    max_retries: Annotated[int, Field(ge=0, le=10)] = DEFAULT_MAX_RETRIES
    enforce_error_budget: bool = Field(
        default=False,
        description="Refuse to send requests while the error budget is nearly spent",
    )
    hash_tokens_in_cache_keys: bool = Field(
        default=False,
        description="Key authenticated cache entries on a token hash, not the token",
    )
    budget_warning_threshold: Annotated[int, Field(ge=0)] = BUDGET_WARNING_THRESHOLD
    budget_gate_threshold: Annotated[int, Field(ge=0)] = BUDGET_GATE_THRESHOLD

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base_url so endpoint paths join cleanly."""
        return v.rstrip("/")
