"""Tests for the invalidation coordinator."""

from __future__ import annotations

import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from topicwarden import coordinator as coordinator_module
from topicwarden.cache.broadcast import FlushBroadcaster, FlushMessage
from topicwarden.cache.default_rules import DEFAULT_RULES
from topicwarden.cache.hosts import InMemoryCacheHost, RedisCacheHost
from topicwarden.cache.keys import TopicKey
from topicwarden.cache.registry import TopicRegistry
from topicwarden.cache.rules import RuleTable, rule
from topicwarden.cache.topics import build_default_registry
from topicwarden.coordinator import InvalidationCoordinator
from topicwarden.errors import ConfigurationError, EvictionError
from topicwarden.observability.metrics import InvalidationMetrics


def _broadcaster(running: bool = True) -> MagicMock:
    broadcaster = MagicMock()
    broadcaster.running = running
    broadcaster.start = AsyncMock()
    broadcaster.stop = AsyncMock()
    broadcaster.publish = AsyncMock(return_value=1)
    return broadcaster


@pytest.fixture
def coordinator(
    registry: TopicRegistry,
    rules: RuleTable,
    host: InMemoryCacheHost,
    metrics: InvalidationMetrics,
) -> InvalidationCoordinator:
    return InvalidationCoordinator(registry, rules, host, window=0.03, metrics=metrics)


class TestCoordinator:
    """Test the coalesced and immediate invalidation paths."""

    async def test_get_affected_topics(self, coordinator: InvalidationCoordinator) -> None:
        """Resolution is delegated to the rule resolver."""
        assert coordinator.get_affected_topics("CONTRACTS", {"status": "active"}) == [
            "CONTRACTS",
            "PROPERTY_STATS",
            "RENTAL_PAYMENTS",
        ]
        assert coordinator.get_affected_topics("CONTRACTS", {"status": "draft"}) == ["CONTRACTS"]

    async def test_scheduled_writes_evicted_once(
        self, coordinator: InvalidationCoordinator, host: InMemoryCacheHost
    ) -> None:
        """A burst of writes evicts the union once."""
        host.set(TopicKey(("beneficiary", "b-1")), {})
        host.set(TopicKey(("beneficiary-stats",)), {})

        for _ in range(3):
            coordinator.schedule_invalidation("BENEFICIARIES")
        await asyncio.sleep(0.1)

        assert len(host) == 0
        assert host.evictions == [
            TopicKey(("beneficiaries",)),
            TopicKey(("beneficiary",), family=True),
            TopicKey(("beneficiary-stats",)),
        ]

    async def test_invalidate_now(
        self,
        coordinator: InvalidationCoordinator,
        host: InMemoryCacheHost,
        metrics: InvalidationMetrics,
    ) -> None:
        """The immediate path evicts without waiting for a window."""
        host.set(TopicKey(("property-stats",)), {})

        topics = await coordinator.invalidate_now("CONTRACTS", {"status": "expired"})

        assert topics == ["CONTRACTS", "PROPERTY_STATS", "RENTAL_PAYMENTS"]
        assert TopicKey(("property-stats",)) not in host
        assert coordinator.scheduler.pending_topics == []
        assert metrics.registry is not None
        assert (
            metrics.registry.get_sample_value("topicwarden_flushes_total", {"path": "immediate"})
            == 1.0
        )

    async def test_invalidate_now_propagates_failures(
        self, registry: TopicRegistry, rules: RuleTable, metrics: InvalidationMetrics
    ) -> None:
        """Eviction failures on the immediate path reach the caller."""
        host = MagicMock()
        host.evict = AsyncMock(side_effect=ConnectionError("down"))
        coordinator = InvalidationCoordinator(registry, rules, host, window=0.03, metrics=metrics)

        with pytest.raises(EvictionError):
            await coordinator.invalidate_now("USERS")

        assert metrics.registry is not None
        assert metrics.registry.get_sample_value("topicwarden_flush_failures_total") == 1.0

    async def test_flush_and_cancel(
        self, coordinator: InvalidationCoordinator, host: InMemoryCacheHost
    ) -> None:
        """Pending batches can be flushed or dropped explicitly."""
        coordinator.schedule_invalidation("USERS")
        assert await coordinator.flush() == ["USERS"]

        coordinator.schedule_invalidation("CONTRACTS")
        assert coordinator.cancel_pending() == ["CONTRACTS"]
        await asyncio.sleep(0.1)

        assert host.evictions == [TopicKey(("users",))]

    async def test_stop_discards_pending(
        self, coordinator: InvalidationCoordinator, host: InMemoryCacheHost
    ) -> None:
        """Stopping drops the open batch."""
        coordinator.schedule_invalidation("USERS")
        await coordinator.stop()
        await asyncio.sleep(0.1)

        assert host.evictions == []


    async def test_writes_after_stop_are_dropped(
        self, coordinator: InvalidationCoordinator, host: InMemoryCacheHost
    ) -> None:
        """A stopped coordinator never evicts again."""
        await coordinator.start()
        await coordinator.stop()

        coordinator.schedule_invalidation("USERS")
        await asyncio.sleep(0.1)

        assert host.evictions == []
        assert coordinator.scheduler.closed


class TestStartup:
    """Test startup validation."""

    async def test_start_validates_rules(
        self, registry: TopicRegistry, host: InMemoryCacheHost
    ) -> None:
        """Rules naming unregistered topics fail at startup."""
        bad_rules = RuleTable([rule("CONTRACTS", affects=["TENANT_LEDGER"])])
        coordinator = InvalidationCoordinator(
            registry, bad_rules, host, window=0.03, validate_on_start=True
        )

        with pytest.raises(ConfigurationError, match="TENANT_LEDGER"):
            await coordinator.start()

    async def test_validation_can_be_disabled(
        self, registry: TopicRegistry, host: InMemoryCacheHost
    ) -> None:
        """With validation off, startup ignores inconsistent rules."""
        bad_rules = RuleTable([rule("CONTRACTS", affects=["TENANT_LEDGER"])])
        coordinator = InvalidationCoordinator(
            registry, bad_rules, host, window=0.03, validate_on_start=False
        )

        await coordinator.start()
        await coordinator.stop()

    async def test_default_configuration_is_consistent(self, host: InMemoryCacheHost) -> None:
        """The shipped catalogue and rules validate cleanly."""
        coordinator = InvalidationCoordinator(
            build_default_registry(), DEFAULT_RULES, host, window=0.03, validate_on_start=True
        )

        await coordinator.start()
        await coordinator.stop()


class TestBroadcast:
    """Test flush announcements between instances."""

    async def test_local_flush_is_published(
        self, registry: TopicRegistry, rules: RuleTable, host: InMemoryCacheHost
    ) -> None:
        """Every local flush is announced with the resolved topics."""
        broadcaster = _broadcaster()
        coordinator = InvalidationCoordinator(
            registry, rules, host, window=0.03, broadcaster=broadcaster
        )

        await coordinator.start()
        await coordinator.invalidate_now("USERS")
        await coordinator.stop()

        broadcaster.add_handler.assert_called_once()
        broadcaster.start.assert_awaited_once()
        broadcaster.stop.assert_awaited_once()
        assert broadcaster.publish.await_args.args == (["USERS"],)

    async def test_publish_failure_keeps_local_eviction(
        self, registry: TopicRegistry, rules: RuleTable, host: InMemoryCacheHost
    ) -> None:
        """A failed announcement does not fail the flush."""
        broadcaster = _broadcaster()
        broadcaster.publish.side_effect = ConnectionError("down")
        coordinator = InvalidationCoordinator(
            registry, rules, host, window=0.03, broadcaster=broadcaster
        )

        assert await coordinator.invalidate_now("USERS") == ["USERS"]
        assert host.evictions == [TopicKey(("users",))]

    async def test_stopped_broadcaster_not_used(
        self, registry: TopicRegistry, rules: RuleTable, host: InMemoryCacheHost
    ) -> None:
        """Nothing is published while the broadcaster is not running."""
        broadcaster = _broadcaster(running=False)
        coordinator = InvalidationCoordinator(
            registry, rules, host, window=0.03, broadcaster=broadcaster
        )

        await coordinator.invalidate_now("USERS")

        broadcaster.publish.assert_not_awaited()

    async def test_remote_flush_evicts_without_resolving(
        self, registry: TopicRegistry, rules: RuleTable, host: InMemoryCacheHost
    ) -> None:
        """Peer flushes evict exactly the announced topics."""
        broadcaster = _broadcaster()
        coordinator = InvalidationCoordinator(
            registry, rules, host, window=0.03, broadcaster=broadcaster
        )
        handler = broadcaster.add_handler.call_args.args[0]

        await handler(FlushMessage(topics=("CONTRACTS",), origin="b2"))

        assert host.evictions == [TopicKey(("contracts",))]
        broadcaster.publish.assert_not_awaited()
        assert coordinator.scheduler.pending_topics == []

    async def test_shared_host_disables_broadcast(
        self, registry: TopicRegistry, rules: RuleTable, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Hosts sharing one keyspace are evicted once, by the origin only."""
        client = AsyncMock()
        client.delete.return_value = 1
        broadcaster = _broadcaster()

        with caplog.at_level(logging.WARNING, logger="topicwarden.coordinator"):
            coordinator = InvalidationCoordinator(
                registry,
                rules,
                RedisCacheHost(client, prefix="tw"),
                window=0.03,
                broadcaster=broadcaster,
            )

        assert coordinator.broadcaster is None
        broadcaster.add_handler.assert_not_called()
        assert "flush broadcast disabled" in caplog.text

        await coordinator.start()
        await coordinator.invalidate_now("USERS")
        await coordinator.stop()

        broadcaster.start.assert_not_awaited()
        broadcaster.publish.assert_not_awaited()
        client.delete.assert_awaited_once_with("tw:users")


class TestProcessCoordinator:
    """Test the process-wide coordinator helpers."""

    @pytest.fixture(autouse=True)
    def _reset(self, monkeypatch: pytest.MonkeyPatch) -> AsyncMock:
        client = AsyncMock()
        monkeypatch.setattr(coordinator_module, "_coordinator", None)
        monkeypatch.setattr(coordinator_module, "get_redis", AsyncMock(return_value=client))
        return client

    async def test_redis_host_without_broadcast(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """By default results live in the shared Redis keyspace."""
        monkeypatch.setattr(coordinator_module.settings, "broadcast_enabled", False)

        coordinator = await coordinator_module.get_coordinator()

        assert isinstance(coordinator.host, RedisCacheHost)
        assert coordinator.host.registry is coordinator.registry
        assert coordinator.broadcaster is None
        assert await coordinator_module.get_coordinator() is coordinator

    async def test_local_host_with_broadcast(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """With broadcast enabled each process caches locally."""
        monkeypatch.setattr(coordinator_module.settings, "broadcast_enabled", True)

        coordinator = await coordinator_module.get_coordinator()

        assert isinstance(coordinator.host, InMemoryCacheHost)
        assert isinstance(coordinator.broadcaster, FlushBroadcaster)
