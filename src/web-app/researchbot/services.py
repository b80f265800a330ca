"""Process-wide service handles, built once in the FastAPI lifespan.

Every external client (LLM, share store, rate-limit store) is constructed
here from :class:`~researchbot.config.Config` and handed to the request
handlers through ``app.state.services``.  Optional collaborators are
``None`` when their credentials are not configured.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial

from openai import AsyncOpenAI
from upstash_redis.asyncio import Redis

from researchbot.answer_generator import AnswerGenerator
from researchbot.config import Config
from researchbot.page_fetcher import PageFetcher
from researchbot.rate_limiter import Limiter, create_ratelimit
from researchbot.share_store import ShareStore
from researchbot.source_collector import SourceCollector

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Injected collaborators for the chat and share handlers."""

    source_collector: SourceCollector
    answer_generator: AnswerGenerator | None = None
    share_store: ShareStore | None = None
    ratelimit: Limiter | None = None
    ratelimit_redis: Redis | None = None

    async def aclose(self) -> None:
        """Release client connections; errors are logged, not raised."""
        closers = [
            ("answer generator", self.answer_generator),
            ("share store", self.share_store),
        ]
        for name, handle in closers:
            if handle is None:
                continue
            try:
                await handle.aclose()
            except Exception:
                logger.warning("Failed to close %s", name, exc_info=True)
        if self.ratelimit_redis is not None:
            try:
                await self.ratelimit_redis.close()
            except Exception:
                logger.warning("Failed to close rate-limit store", exc_info=True)


def build_services(cfg: Config) -> Services:
    """Construct all service handles from configuration."""
    fetcher_factory = partial(
        PageFetcher,
        timeout_seconds=cfg.scrape_timeout_seconds,
        max_attempts=cfg.scrape_max_attempts,
        retry_delay_seconds=cfg.scrape_retry_delay_seconds,
    )
    services = Services(source_collector=SourceCollector(fetcher_factory, max_chars=cfg.scrape_max_chars))

    if cfg.llm_configured:
        client = AsyncOpenAI(api_key=cfg.groq_api_key, base_url=cfg.llm_base_url)
        services.answer_generator = AnswerGenerator(client, cfg.llm_model, cfg.llm_max_tokens)
    else:
        logger.warning("GROQ_API_KEY not set — /api/chat will return a configuration error")

    if cfg.share_configured:
        redis = Redis(url=cfg.share_redis_url, token=cfg.share_redis_token)
        services.share_store = ShareStore(redis, ttl_seconds=cfg.share_ttl_seconds)
    else:
        logger.warning("UPSTASH_REDIS_REST_URL/TOKEN not set — conversation sharing disabled")

    if cfg.rate_limit_configured:
        services.ratelimit_redis = Redis(url=cfg.ratelimit_redis_url, token=cfg.ratelimit_redis_token)
        services.ratelimit = create_ratelimit(
            services.ratelimit_redis,
            max_requests=cfg.rate_limit_requests,
            window_seconds=cfg.rate_limit_window_seconds,
        )
    else:
        logger.warning("Rate-limit store not configured — /api/chat is not rate limited")

    return services
