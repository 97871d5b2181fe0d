"""Prometheus metrics for invalidation flows.

Each coordinator owns its own ``CollectorRegistry`` so independent
instances (one per cache namespace, or one per test) never collide on
metric names.

Usage:
    metrics = InvalidationMetrics.create(enabled=True)
    metrics.flushes_total.labels(path="coalesced").inc()
    exposition = metrics.generate_latest()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest

logger = logging.getLogger(__name__)


class NoOpMetric:
    """No-op metric for when metrics are disabled."""

    def labels(self, **kwargs: Any) -> "NoOpMetric":
        """Return self for chaining."""
        return self

    def inc(self, amount: float = 1) -> None:
        pass

    def dec(self, amount: float = 1) -> None:
        pass

    def set(self, value: float) -> None:
        pass

    def observe(self, value: float) -> None:
        pass


@dataclass
class InvalidationMetrics:
    """Collectors for resolution, scheduling and flush activity."""

    resolutions_total: Any = field(default_factory=NoOpMetric)
    rules_skipped_total: Any = field(default_factory=NoOpMetric)
    schedules_total: Any = field(default_factory=NoOpMetric)
    flushes_total: Any = field(default_factory=NoOpMetric)
    flush_failures_total: Any = field(default_factory=NoOpMetric)
    topics_evicted_total: Any = field(default_factory=NoOpMetric)
    flush_topics: Any = field(default_factory=NoOpMetric)
    pending_topics: Any = field(default_factory=NoOpMetric)

    registry: CollectorRegistry | None = field(default=None, repr=False)

    @classmethod
    def create(cls, enabled: bool = True, namespace: str = "topicwarden") -> "InvalidationMetrics":
        """Build a metrics set, or a no-op set when disabled."""
        if not enabled:
            logger.debug("Invalidation metrics are disabled")
            return cls()

        registry = CollectorRegistry()
        return cls(
            resolutions_total=Counter(
                f"{namespace}_resolutions_total",
                "Trigger resolutions performed",
                registry=registry,
            ),
            rules_skipped_total=Counter(
                f"{namespace}_rules_skipped_total",
                "Conditional rules skipped during resolution",
                ["reason"],
                registry=registry,
            ),
            schedules_total=Counter(
                f"{namespace}_schedules_total",
                "Coalesced invalidation requests",
                registry=registry,
            ),
            flushes_total=Counter(
                f"{namespace}_flushes_total",
                "Invalidation flushes executed",
                ["path"],
                registry=registry,
            ),
            flush_failures_total=Counter(
                f"{namespace}_flush_failures_total",
                "Invalidation flushes that raised",
                registry=registry,
            ),
            topics_evicted_total=Counter(
                f"{namespace}_topics_evicted_total",
                "Topics evicted from the cache host",
                registry=registry,
            ),
            flush_topics=Histogram(
                f"{namespace}_flush_topics",
                "Topics per flush",
                buckets=(1, 2, 4, 8, 16, 32, 64),
                registry=registry,
            ),
            pending_topics=Gauge(
                f"{namespace}_pending_topics",
                "Topics waiting in the open batch",
                registry=registry,
            ),
            registry=registry,
        )

    def generate_latest(self) -> bytes:
        """Generate Prometheus metrics in exposition format."""
        if self.registry is None:
            return b"# Metrics disabled\n"
        return generate_latest(self.registry)
