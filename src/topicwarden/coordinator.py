"""Invalidation coordinator.

Wires the pieces together:

    mutation -> RuleResolver -> CoalescingScheduler -> InvalidationExecutor -> cache host
                          \\-> (immediate path) ------------------/

and, when a broadcaster is attached to a process-local host, announces
every local flush to the other instances and evicts the flushes they
announce. Shared hosts (Redis) are evicted once by the origin and never
broadcast to.

Example:
    coordinator = InvalidationCoordinator(
        build_default_registry(), DEFAULT_RULES, InMemoryCacheHost()
    )
    await coordinator.start()
    coordinator.schedule_invalidation("CONTRACTS", {"status": "active"})
    ...
    await coordinator.stop()
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import uuid4

from topicwarden.cache.broadcast import FlushBroadcaster, FlushMessage
from topicwarden.cache.default_rules import DEFAULT_RULES
from topicwarden.cache.executor import CacheHost, InvalidationExecutor
from topicwarden.cache.hosts import InMemoryCacheHost, RedisCacheHost, get_redis
from topicwarden.cache.registry import TopicRegistry
from topicwarden.cache.resolver import RuleResolver
from topicwarden.cache.rules import RuleTable
from topicwarden.cache.scheduler import CoalescingScheduler
from topicwarden.cache.topics import build_default_registry
from topicwarden.config import settings
from topicwarden.observability.logging import LogContext, session_id_var
from topicwarden.observability.metrics import InvalidationMetrics

logger = logging.getLogger(__name__)


class InvalidationCoordinator:
    """Facade over resolution, coalescing and eviction for one cache host.

    Instances share no mutable state; registry and rules are injected.
    """

    def __init__(
        self,
        registry: TopicRegistry,
        rules: RuleTable,
        host: CacheHost,
        window: float | None = None,
        metrics: InvalidationMetrics | None = None,
        broadcaster: FlushBroadcaster | None = None,
        validate_on_start: bool | None = None,
    ) -> None:
        self.registry = registry
        self.rules = rules
        self.host = host
        self.metrics = metrics or InvalidationMetrics.create(enabled=settings.enable_metrics)
        self.resolver = RuleResolver(rules, self.metrics)
        self.executor = InvalidationExecutor(registry, host, self.metrics)
        self.scheduler = CoalescingScheduler(
            self.resolver,
            self._flush,
            window=settings.coalesce_window if window is None else window,
            metrics=self.metrics,
        )
        if broadcaster is not None and getattr(host, "shared", False):
            # Peers already see the origin's evictions in a shared keyspace
            logger.warning(
                f"{type(host).__name__} is shared between instances; flush broadcast disabled"
            )
            broadcaster = None
        self.broadcaster = broadcaster
        self.validate_on_start = (
            settings.validate_rules_on_startup if validate_on_start is None else validate_on_start
        )
        if broadcaster is not None:
            broadcaster.add_handler(self._on_remote_flush)

    def validate(self) -> None:
        """Check every rule against the registry.

        Raises:
            ConfigurationError: A rule names an unregistered topic
        """
        self.rules.validate(self.registry)
        logger.info(
            f"Validated {len(self.rules)} invalidation rule(s) against {len(self.registry)} topic(s)"
        )

    async def start(self) -> None:
        """Validate configuration and start listening for peer flushes."""
        if self.validate_on_start:
            self.validate()
        if self.broadcaster is not None:
            await self.broadcaster.start()

    async def stop(self) -> None:
        """Drop the open batch, finish in-flight flushes, stop broadcasting."""
        await self.scheduler.aclose()
        if self.broadcaster is not None:
            await self.broadcaster.stop()

    def get_affected_topics(self, trigger: str, payload: Any = None) -> list[str]:
        return self.resolver.get_affected_topics(trigger, payload)

    def schedule_invalidation(self, trigger: str, payload: Any = None) -> None:
        """Coalesced path: evicted once the current window closes."""
        self.scheduler.schedule_invalidation(trigger, payload)

    async def invalidate_now(self, trigger: str, payload: Any = None) -> list[str]:
        """Immediate path: resolve and evict without coalescing.

        Returns the resolved topics. Eviction failures propagate.
        """
        topics = self.resolver.get_affected_topics(trigger, payload)
        with LogContext(session_id=uuid4().hex[:8]):
            try:
                await self._flush(topics)
            except Exception:
                self.metrics.flush_failures_total.inc()
                raise
        self.metrics.flushes_total.labels(path="immediate").inc()
        self.metrics.flush_topics.observe(len(topics))
        return topics

    async def flush(self) -> list[str]:
        """Flush the open batch now."""
        return await self.scheduler.flush()

    def cancel_pending(self) -> list[str]:
        return self.scheduler.cancel_pending()

    async def _flush(self, topics: list[str]) -> None:
        await self.executor.execute(topics)

        if self.broadcaster is not None and self.broadcaster.running:
            try:
                await self.broadcaster.publish(topics, session_id=session_id_var.get())
            except Exception as e:
                # Local eviction already happened; peers catch up on TTL
                logger.error(f"Failed to broadcast flush of {len(topics)} topic(s): {e}")

    async def _on_remote_flush(self, message: FlushMessage) -> None:
        with LogContext(session_id=message.session_id):
            await self.executor.execute(message.topics)


# Singleton instance for application use
_coordinator: InvalidationCoordinator | None = None


async def get_coordinator() -> InvalidationCoordinator:
    """Get or create the process-wide coordinator.

    With broadcast enabled every process keeps its own in-memory cache and
    Redis only carries flush announcements; otherwise results live in the
    shared Redis keyspace and no announcements are needed.
    """
    global _coordinator

    if _coordinator is None:
        client = await get_redis()
        registry = build_default_registry()
        host: CacheHost
        broadcaster: FlushBroadcaster | None = None
        if settings.broadcast_enabled:
            host = InMemoryCacheHost()
            broadcaster = FlushBroadcaster(client=client)
        else:
            host = RedisCacheHost(client, registry=registry)
        _coordinator = InvalidationCoordinator(
            registry,
            DEFAULT_RULES,
            host,
            broadcaster=broadcaster,
        )

    return _coordinator


async def start_coordinator() -> InvalidationCoordinator:
    """Start the process-wide coordinator."""
    coordinator = await get_coordinator()
    await coordinator.start()
    return coordinator


async def stop_coordinator() -> None:
    """Stop the process-wide coordinator."""
    global _coordinator
    if _coordinator:
        await _coordinator.stop()
        _coordinator = None
