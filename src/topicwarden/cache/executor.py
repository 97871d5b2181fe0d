"""Invalidation executor.

The only component that touches the cache host. Given a final topic set
it resolves each name through the registry and asks the host to evict
the key, one eviction per topic, all running concurrently.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Iterable
from typing import Protocol, runtime_checkable

from topicwarden.cache.keys import TopicKey
from topicwarden.cache.registry import TopicRegistry
from topicwarden.errors import EvictionError, UnknownTopicError
from topicwarden.observability.metrics import InvalidationMetrics

logger = logging.getLogger(__name__)


@runtime_checkable
class CacheHost(Protocol):
    """Reactive cache holding query results.

    ``evict`` may be a plain method or a coroutine function.
    """

    def evict(self, key: TopicKey) -> Awaitable[None] | None: ...


class InvalidationExecutor:
    """Evicts resolved topics from a cache host."""

    def __init__(
        self,
        registry: TopicRegistry,
        host: CacheHost,
        metrics: InvalidationMetrics | None = None,
    ) -> None:
        self.registry = registry
        self.host = host
        self.metrics = metrics or InvalidationMetrics()

    async def execute(self, topics: Iterable[str]) -> list[str]:
        """Evict every topic; returns the names actually evicted.

        Names missing from the registry (writes to unregistered triggers)
        have nothing cached under them and are skipped with a warning.
        Every eviction is attempted before failures are reported.

        Raises:
            EvictionError: One or more evictions failed
        """
        keys: dict[str, TopicKey] = {}
        for name in dict.fromkeys(topics):
            try:
                keys[name] = self.registry.resolve(name)
            except UnknownTopicError:
                logger.warning(f"Topic {name} is not registered; nothing to evict")

        if not keys:
            return []

        results = await asyncio.gather(
            *(self._evict(key) for key in keys.values()),
            return_exceptions=True,
        )

        failures: dict[str, BaseException] = {}
        evicted: list[str] = []
        for name, result in zip(keys, results):
            if isinstance(result, BaseException):
                failures[name] = result
                logger.error(f"Evicting {name} failed: {result!r}")
            else:
                evicted.append(name)

        self.metrics.topics_evicted_total.inc(len(evicted))
        if failures:
            raise EvictionError(failures)

        logger.debug(f"Evicted {len(evicted)} topic(s): {', '.join(evicted)}")
        return evicted

    async def _evict(self, key: TopicKey) -> None:
        result = self.host.evict(key)
        if inspect.isawaitable(result):
            await result
