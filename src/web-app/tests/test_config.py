"""Tests for researchbot.config and researchbot.services wiring."""

from __future__ import annotations

import pytest

from researchbot import config as config_module
from researchbot.services import build_services

_ENV_VARS = (
    "GROQ_API_KEY",
    "LLM_BASE_URL",
    "LLM_MODEL",
    "LLM_MAX_TOKENS",
    "UPSTASH_REDIS_REST_URL",
    "UPSTASH_REDIS_REST_TOKEN",
    "RATELIMIT_REDIS_REST_URL",
    "RATELIMIT_REDIS_REST_TOKEN",
    "RATE_LIMIT_REQUESTS",
    "RATE_LIMIT_WINDOW_SECONDS",
    "SHARE_TTL_SECONDS",
    "SCRAPE_TIMEOUT_SECONDS",
    "SCRAPE_MAX_ATTEMPTS",
    "SCRAPE_RETRY_DELAY_SECONDS",
    "SCRAPE_MAX_CHARS",
    "PORT",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Start from an empty configuration (no .env file, no variables)."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config_module, "_find_env_file", lambda: None)


class TestLoadConfig:
    def test_defaults(self, clean_env) -> None:
        cfg = config_module._load_config()

        assert cfg.groq_api_key == ""
        assert cfg.llm_base_url == "https://api.groq.com/openai/v1"
        assert cfg.llm_max_tokens == 1024
        assert cfg.share_ttl_seconds == 604800
        assert cfg.rate_limit_requests == 5
        assert cfg.rate_limit_window_seconds == 10
        assert cfg.scrape_timeout_seconds == 45.0
        assert cfg.scrape_max_attempts == 3
        assert cfg.scrape_retry_delay_seconds == 2.0
        assert cfg.scrape_max_chars == 8000
        assert not cfg.llm_configured
        assert not cfg.share_configured
        assert not cfg.rate_limit_configured

    def test_rate_limit_store_defaults_to_share_store(self, clean_env, monkeypatch) -> None:
        monkeypatch.setenv("UPSTASH_REDIS_REST_URL", "https://shared.upstash.io")
        monkeypatch.setenv("UPSTASH_REDIS_REST_TOKEN", "tok")

        cfg = config_module._load_config()

        assert cfg.ratelimit_redis_url == "https://shared.upstash.io"
        assert cfg.ratelimit_redis_token == "tok"
        assert cfg.share_configured and cfg.rate_limit_configured

    def test_overrides(self, clean_env, monkeypatch) -> None:
        monkeypatch.setenv("GROQ_API_KEY", "gsk_test")
        monkeypatch.setenv("RATE_LIMIT_REQUESTS", "20")
        monkeypatch.setenv("RATELIMIT_REDIS_REST_URL", "https://limits.upstash.io")
        monkeypatch.setenv("RATELIMIT_REDIS_REST_TOKEN", "limits-token")

        cfg = config_module._load_config()

        assert cfg.llm_configured
        assert cfg.rate_limit_requests == 20
        assert cfg.ratelimit_redis_url == "https://limits.upstash.io"
        assert not cfg.share_configured
        assert cfg.rate_limit_configured

    def test_config_is_frozen(self, clean_env) -> None:
        cfg = config_module._load_config()
        with pytest.raises(AttributeError):
            cfg.port = 1  # type: ignore[misc]


class TestBuildServices:
    @pytest.mark.asyncio
    async def test_unconfigured_optional_services_are_none(self, clean_env) -> None:
        services = build_services(config_module._load_config())

        assert services.source_collector is not None
        assert services.source_collector.max_chars == 8000
        assert services.answer_generator is None
        assert services.share_store is None
        assert services.ratelimit is None
        await services.aclose()

    @pytest.mark.asyncio
    async def test_llm_configured(self, clean_env, monkeypatch) -> None:
        monkeypatch.setenv("GROQ_API_KEY", "gsk_test")
        monkeypatch.setenv("LLM_MODEL", "llama-3.1-8b-instant")

        services = build_services(config_module._load_config())

        assert services.answer_generator is not None
        assert services.answer_generator.model == "llama-3.1-8b-instant"
        await services.aclose()
