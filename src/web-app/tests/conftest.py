"""Shared test fixtures for ResearchBot tests.

Config is loaded at import time — set environment defaults before any
``researchbot`` modules are imported by the test collector.
"""

from __future__ import annotations

import os

os.environ.setdefault("GROQ_API_KEY", "test-groq-key")
os.environ.setdefault("UPSTASH_REDIS_REST_URL", "https://test-redis.upstash.io")
os.environ.setdefault("UPSTASH_REDIS_REST_TOKEN", "test-token")

import pytest  # noqa: E402

from researchbot.models import Conversation, Message, Source  # noqa: E402


class FakeRedis:
    """In-memory stand-in for ``upstash_redis.asyncio.Redis`` (get/set only)."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.expiries: dict[str, int | None] = {}

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self.data[key] = value
        self.expiries[key] = ex
        return True

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def close(self) -> None:
        pass


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def sample_source() -> Source:
    return Source(
        url="https://example.com/article",
        content="Example Domain is reserved for documentation.",
        title="Example Domain",
    )


@pytest.fixture
def sample_conversation(sample_source: Source) -> Conversation:
    return Conversation(
        id="k3j5h2l9x0a",
        urls="https://example.com/article, https://example.org",
        messages=[
            Message(role="user", content="What is example.com for?"),
            Message(
                role="ai",
                content="It is reserved for documentation [Source: https://example.com/article].",
                sources=[sample_source],
            ),
        ],
    )
