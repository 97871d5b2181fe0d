"""Cache host adapters.

Two implementations of the cache host the executor evicts from:
- InMemoryCacheHost: tuple-keyed dict for single-process hosts and tests
- RedisCacheHost: redis-py async client, orjson-encoded values
"""

from __future__ import annotations

import logging
import math
from collections.abc import Awaitable
from typing import TYPE_CHECKING, Any, cast

import orjson
import redis.asyncio as redis

from topicwarden.cache.keys import TopicKey
from topicwarden.cache.registry import DEFAULT_PROFILE
from topicwarden.config import settings

if TYPE_CHECKING:
    from redis.asyncio import Redis

    from topicwarden.cache.registry import TopicRegistry

logger = logging.getLogger(__name__)

# Module-level connection pool
_redis_client: Redis | None = None

# Fallback TTL for values stored by key rather than by topic (seconds)
DEFAULT_TTL = DEFAULT_PROFILE.stale_time


async def get_redis() -> Redis:
    """Get or create the Redis client.

    Uses connection pooling for efficient connection management.
    """
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(  # type: ignore[no-untyped-call]
            settings.redis_url,
            decode_responses=False,
        )
    return _redis_client


async def close_redis() -> None:
    """Close Redis connections."""
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None


class InMemoryCacheHost:
    """Process-local cache keyed by encoded key parts.

    Each process holds its own copy, so peers must be told about flushes
    (see ``FlushBroadcaster``).
    """

    shared = False

    def __init__(self) -> None:
        self._entries: dict[tuple[str, ...], Any] = {}
        self.evictions: list[TopicKey] = []

    def __contains__(self, key: TopicKey) -> bool:
        return key.encoded in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def set(self, key: TopicKey, value: Any) -> None:
        self._entries[key.encoded] = value

    def get(self, key: TopicKey) -> Any | None:
        return self._entries.get(key.encoded)

    def evict(self, key: TopicKey) -> None:
        """Drop the entry, or every entry of the family."""
        doomed = [encoded for encoded in self._entries if key.covers(encoded)]
        for encoded in doomed:
            del self._entries[encoded]
        self.evictions.append(key)


class RedisCacheHost:
    """Cache host backed by Redis.

    Keys are rendered as ``{prefix}:{part}:...``; families are evicted
    with SCAN so large keyspaces never block the server. The keyspace is
    shared by every process using the same server, so one eviction serves
    all of them.
    """

    shared = True

    def __init__(
        self,
        client: Redis,
        registry: TopicRegistry | None = None,
        prefix: str | None = None,
        default_ttl: float = DEFAULT_TTL,
    ) -> None:
        self.client = client
        self.registry = registry
        self.prefix = prefix or settings.cache_key_prefix
        self.default_ttl = default_ttl

    async def get(self, key: TopicKey) -> Any | None:
        """Get a cached value, or None if absent."""
        raw = await self.client.get(key.render(self.prefix))
        if raw is None:
            return None
        return orjson.loads(raw)

    async def set(self, key: TopicKey, value: Any, ttl: float | None = None) -> None:
        """Cache a value under an explicit key.

        Args:
            key: Concrete key (not a family)
            value: orjson-serializable value
            ttl: Lifetime in seconds; ``default_ttl`` when omitted
        """
        if key.family:
            raise ValueError("Cannot store a value under a key family")
        seconds = max(1, math.ceil(ttl if ttl is not None else self.default_ttl))
        await self.client.set(key.render(self.prefix), orjson.dumps(value), ex=seconds)

    async def store(self, topic: str, value: Any, *params: Any, **named: Any) -> TopicKey:
        """Cache a query result for one instance of a topic.

        The key comes from ``TopicRegistry.key_for`` and the TTL from the
        topic's staleness profile. Returns the key written.
        """
        if self.registry is None:
            raise RuntimeError("RedisCacheHost.store needs a topic registry")
        key = self.registry.key_for(topic, *params, **named)
        await self.set(key, value, ttl=self.registry.ttl_for(topic))
        return key

    async def fetch(self, topic: str, *params: Any, **named: Any) -> Any | None:
        """Read the cached result for one instance of a topic."""
        if self.registry is None:
            raise RuntimeError("RedisCacheHost.fetch needs a topic registry")
        return await self.get(self.registry.key_for(topic, *params, **named))

    async def evict(self, key: TopicKey) -> None:
        """Delete the key; for a family also every key below it."""
        name = key.render(self.prefix)
        deleted = cast(int, await self.client.delete(name))

        if key.family:
            async for member in self.client.scan_iter(match=key.pattern(self.prefix)):
                deleted += cast(int, await self.client.delete(member))

        logger.debug(f"Evicted {deleted} Redis key(s) for {name}")

    async def health_check(self) -> bool:
        """Check Redis connectivity."""
        try:
            await cast(Awaitable[bool], self.client.ping())
            return True
        except Exception:
            return False
