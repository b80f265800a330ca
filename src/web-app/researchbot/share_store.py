"""Shared conversation storage in Upstash Redis.

One key per shared conversation (``conversation:<id>``) holding the JSON
document, with a fixed expiry.  Ids come from the client and are not checked
for uniqueness or ownership; the last writer for an id wins.
"""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError
from upstash_redis.asyncio import Redis

from researchbot.models import Conversation

logger = logging.getLogger(__name__)

KEY_PREFIX = "conversation:"
DEFAULT_TTL_SECONDS = 60 * 60 * 24 * 7


class ShareStoreError(Exception):
    """The backing store failed or returned unreadable data."""


def conversation_key(conversation_id: str) -> str:
    return f"{KEY_PREFIX}{conversation_id}"


class ShareStore:
    """Save and load shared conversations."""

    def __init__(self, redis: Redis, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        self._redis = redis
        self.ttl_seconds = ttl_seconds

    async def save(self, conversation: Conversation) -> str:
        """Store *conversation* under its id and return the id."""
        key = conversation_key(conversation.id)
        try:
            await self._redis.set(key, conversation.model_dump_json(), ex=self.ttl_seconds)
        except Exception as exc:
            raise ShareStoreError(f"Failed to store {key}") from exc
        logger.info("Stored conversation %s (%d messages)", conversation.id, len(conversation.messages))
        return conversation.id

    async def load(self, conversation_id: str) -> Conversation | None:
        """Return the stored conversation, or ``None`` if absent or expired."""
        key = conversation_key(conversation_id)
        try:
            raw = await self._redis.get(key)
        except Exception as exc:
            raise ShareStoreError(f"Failed to read {key}") from exc

        if raw is None:
            logger.info("Conversation %s not found", conversation_id)
            return None

        try:
            data = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
            return Conversation.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as exc:
            raise ShareStoreError(f"Stored value for {key} is not a conversation") from exc

    async def aclose(self) -> None:
        await self._redis.close()
