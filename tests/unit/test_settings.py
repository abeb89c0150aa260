"""Unit tests for application settings and fetch configuration."""

import pytest
from pydantic import ValidationError

from esigate.fetch.config import FetchConfig
from esigate.settings.app import AppSettings


class TestFetchConfig:
    """Tests for FetchConfig validation."""

    def test_defaults(self) -> None:
        """Test default configuration values."""
        config = FetchConfig()

        assert config.base_url == "https://esi.evetech.net"
        assert config.timeout_seconds == 30.0
        assert config.max_retries == 3
        assert config.enforce_error_budget is False
        assert config.hash_tokens_in_cache_keys is False
        assert config.budget_warning_threshold == 50
        assert config.budget_gate_threshold == 10

    def test_trailing_slash_stripped(self) -> None:
        """Test base_url normalization."""
        assert FetchConfig(base_url="https://esi.test/").base_url == "https://esi.test"

    def test_rejects_unknown_fields(self) -> None:
        """Test that typos are not silently ignored."""
        with pytest.raises(ValidationError):
            FetchConfig(max_retry=5)  # type: ignore[call-arg]

    def test_rejects_negative_retries(self) -> None:
        """Test bounds on max_retries."""
        with pytest.raises(ValidationError):
            FetchConfig(max_retries=-1)

    def test_frozen(self) -> None:
        """Test that configuration is immutable."""
        config = FetchConfig()

        with pytest.raises(ValidationError):
            config.max_retries = 5  # type: ignore[misc]


class TestAppSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test settings without environment overrides."""
        for name in ("ESI_CACHE_BACKEND", "ESI_BASE_URL", "ESI_MAX_RETRIES"):
            monkeypatch.delenv(name, raising=False)

        settings = AppSettings()

        assert settings.cache_backend == "memory"
        assert settings.base_url == "https://esi.evetech.net"
        assert settings.max_retries == 3

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that ESI_* variables are honoured."""
        monkeypatch.setenv("ESI_BASE_URL", "https://esi.local")
        monkeypatch.setenv("ESI_USER_AGENT", "myapp/1.0 ops@example.com")
        monkeypatch.setenv("ESI_CACHE_BACKEND", "redis")
        monkeypatch.setenv("REDIS_URL", "redis://cache:6379/1")
        monkeypatch.setenv("ESI_TIMEOUT_SECONDS", "10")
        monkeypatch.setenv("ESI_MAX_RETRIES", "5")
        monkeypatch.setenv("ESI_ENFORCE_ERROR_BUDGET", "true")
        monkeypatch.setenv("ESI_HASH_TOKENS", "1")

        settings = AppSettings()

        assert settings.base_url == "https://esi.local"
        assert settings.user_agent == "myapp/1.0 ops@example.com"
        assert settings.cache_backend == "redis"
        assert settings.redis_url == "redis://cache:6379/1"
        assert settings.timeout_seconds == 10.0
        assert settings.max_retries == 5
        assert settings.enforce_error_budget is True
        assert settings.hash_tokens_in_cache_keys is True

    def test_invalid_backend(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that unknown cache backends are rejected."""
        monkeypatch.setenv("ESI_CACHE_BACKEND", "memcached")

        with pytest.raises(ValidationError):
            AppSettings()

    def test_to_fetch_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test conversion into the fetch layer configuration."""
        monkeypatch.setenv("ESI_BASE_URL", "https://esi.local/")
        monkeypatch.setenv("ESI_ENFORCE_ERROR_BUDGET", "true")

        config = AppSettings().to_fetch_config()

        assert config.base_url == "https://esi.local"
        assert config.enforce_error_budget is True
