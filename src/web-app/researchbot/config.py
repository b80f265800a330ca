"""ResearchBot configuration — loads environment variables into a typed config.

Usage:
    from researchbot.config import config
    print(config.llm_model)

Nothing is strictly required at startup: a missing ``GROQ_API_KEY`` is
reported per chat request, and missing Upstash credentials disable sharing
and rate limiting respectively.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


def _find_env_file() -> Path | None:
    """Search for .env file starting from this file's directory, then up."""
    current = Path(__file__).resolve().parent.parent  # src/web-app/
    candidates = [
        current / ".env",
        current.parent.parent / ".env",  # repo root
    ]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


@dataclass(frozen=True)
class Config:
    """Typed configuration loaded from environment variables."""

    # Hosted LLM (Groq, OpenAI-compatible endpoint)
    groq_api_key: str
    llm_base_url: str
    llm_model: str
    llm_max_tokens: int

    # Upstash Redis — shared conversations
    share_redis_url: str
    share_redis_token: str
    share_ttl_seconds: int

    # Upstash Redis — rate-limit counters
    ratelimit_redis_url: str
    ratelimit_redis_token: str
    rate_limit_requests: int
    rate_limit_window_seconds: int

    # Scraping
    scrape_timeout_seconds: float
    scrape_max_attempts: int
    scrape_retry_delay_seconds: float
    scrape_max_chars: int

    port: int = 8000

    @property
    def llm_configured(self) -> bool:
        return bool(self.groq_api_key)

    @property
    def share_configured(self) -> bool:
        return bool(self.share_redis_url and self.share_redis_token)

    @property
    def rate_limit_configured(self) -> bool:
        return bool(self.ratelimit_redis_url and self.ratelimit_redis_token)


def _load_config() -> Config:
    """Load configuration from environment (and ``.env`` when present)."""
    env_file = _find_env_file()
    if env_file:
        load_dotenv(env_file, override=False)

    share_url = os.environ.get("UPSTASH_REDIS_REST_URL", "")
    share_token = os.environ.get("UPSTASH_REDIS_REST_TOKEN", "")

    return Config(
        groq_api_key=os.environ.get("GROQ_API_KEY", ""),
        llm_base_url=os.environ.get("LLM_BASE_URL", "https://api.groq.com/openai/v1"),
        llm_model=os.environ.get("LLM_MODEL", "llama-3.3-70b-versatile"),
        llm_max_tokens=int(os.environ.get("LLM_MAX_TOKENS", "1024")),
        share_redis_url=share_url,
        share_redis_token=share_token,
        share_ttl_seconds=int(os.environ.get("SHARE_TTL_SECONDS", str(60 * 60 * 24 * 7))),
        ratelimit_redis_url=os.environ.get("RATELIMIT_REDIS_REST_URL", share_url),
        ratelimit_redis_token=os.environ.get("RATELIMIT_REDIS_REST_TOKEN", share_token),
        rate_limit_requests=int(os.environ.get("RATE_LIMIT_REQUESTS", "5")),
        rate_limit_window_seconds=int(os.environ.get("RATE_LIMIT_WINDOW_SECONDS", "10")),
        scrape_timeout_seconds=float(os.environ.get("SCRAPE_TIMEOUT_SECONDS", "45")),
        scrape_max_attempts=int(os.environ.get("SCRAPE_MAX_ATTEMPTS", "3")),
        scrape_retry_delay_seconds=float(os.environ.get("SCRAPE_RETRY_DELAY_SECONDS", "2")),
        scrape_max_chars=int(os.environ.get("SCRAPE_MAX_CHARS", "8000")),
        port=int(os.environ.get("PORT", "8000")),
    )


# Singleton — imported as `from researchbot.config import config`
config = _load_config()
