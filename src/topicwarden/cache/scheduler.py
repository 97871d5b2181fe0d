"""Coalescing invalidation scheduler.

Batches resolutions that arrive within a fixed window into one flush:

    IDLE --schedule--> ACCUMULATING      open a batch, start the window timer
    ACCUMULATING --schedule--> same      union topics, timer untouched
    ACCUMULATING --timer--> IDLE         take the batch, flush it once

The window is anchored to the first call of a burst and never extended,
so a write is invalidated at most one window after it was scheduled.
Each scheduler owns its batch and timer; instances share no state.

Example:
    scheduler = CoalescingScheduler(resolver, executor.execute, window=0.3)
    scheduler.schedule_invalidation("BENEFICIARIES")
    scheduler.schedule_invalidation("BENEFICIARIES", {"status": "active"})
    # ~300 ms later: one executor call with the union of both resolutions
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from uuid import uuid4

from topicwarden.cache.resolver import RuleResolver
from topicwarden.observability.logging import LogContext
from topicwarden.observability.metrics import InvalidationMetrics

logger = logging.getLogger(__name__)

# Default coalescing window (seconds)
DEFAULT_WINDOW = 0.3

FlushHandler = Callable[[list[str]], Awaitable[Any]]


class SchedulerState(str, Enum):
    """State of a coalescing scheduler."""

    IDLE = "idle"
    ACCUMULATING = "accumulating"


@dataclass
class PendingBatch:
    """Topics accumulated for the next flush."""

    session_id: str
    opened_at: float
    topics: dict[str, None] = field(default_factory=dict)

    def merge(self, topics: Iterable[str]) -> None:
        self.topics.update(dict.fromkeys(topics))

    def topic_list(self) -> list[str]:
        return list(self.topics)


class CoalescingScheduler:
    """Merges invalidation requests into one flush per window.

    Must be driven from a running asyncio event loop. All state changes
    happen synchronously on the loop, so taking ownership of a batch is
    atomic with respect to new ``schedule_invalidation`` calls.
    """

    def __init__(
        self,
        resolver: RuleResolver,
        flush_handler: FlushHandler,
        window: float = DEFAULT_WINDOW,
        metrics: InvalidationMetrics | None = None,
    ) -> None:
        if window < 0:
            raise ValueError(f"Coalescing window must be >= 0, got {window}")
        self.resolver = resolver
        self.flush_handler = flush_handler
        self.window = window
        self.metrics = metrics or InvalidationMetrics()
        self._pending: PendingBatch | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._in_flight: set[asyncio.Task[list[str]]] = set()
        self._closed = False

    @property
    def state(self) -> SchedulerState:
        if self._pending is None:
            return SchedulerState.IDLE
        return SchedulerState.ACCUMULATING

    @property
    def pending_topics(self) -> list[str]:
        """Topics in the open batch (empty when idle)."""
        return self._pending.topic_list() if self._pending else []

    @property
    def in_flight(self) -> int:
        """Number of flushes currently running."""
        return len(self._in_flight)

    @property
    def closed(self) -> bool:
        """Whether ``aclose`` was called; closed schedulers drop new writes."""
        return self._closed

    def schedule_invalidation(self, trigger: str, payload: Any = None) -> None:
        """Resolve a write and add its topics to the open batch.

        Opens a batch and starts the window timer when idle. Never waits on
        the flush; failures of timer-driven flushes are logged.
        """
        if self._closed:
            logger.warning(f"Scheduler is closed; dropping invalidation of {trigger}")
            return

        topics = self.resolver.get_affected_topics(trigger, payload)
        self.metrics.schedules_total.inc()

        if self._pending is None:
            loop = asyncio.get_running_loop()
            self._pending = PendingBatch(
                session_id=uuid4().hex[:8],
                opened_at=loop.time(),
                topics=dict.fromkeys(topics),
            )
            self._timer = loop.call_later(self.window, self._on_timer)
            logger.debug(
                f"Opened batch {self._pending.session_id} for {trigger} "
                f"({len(topics)} topic(s), window {self.window:.3f}s)"
            )
        else:
            self._pending.merge(topics)
            logger.debug(
                f"Merged {trigger} into batch {self._pending.session_id} "
                f"({len(self._pending.topics)} topic(s) pending)"
            )

        self.metrics.pending_topics.set(len(self._pending.topics))

    async def flush(self) -> list[str]:
        """Flush the open batch now instead of waiting for the window.

        Returns the flushed topics (empty when idle). Executor failures
        propagate to the caller; the batch is not requeued.
        """
        batch = self._take()
        if batch is None:
            return []
        return await self._run_flush(batch, path="explicit")

    def cancel_pending(self) -> list[str]:
        """Drop the open batch without flushing it.

        Intended for shutdown. Returns the discarded topics.
        """
        batch = self._take()
        if batch is None:
            return []
        logger.info(
            f"Cancelled batch {batch.session_id}, discarding {len(batch.topics)} topic(s)"
        )
        return batch.topic_list()

    async def wait_in_flight(self) -> None:
        """Wait for flushes already handed to the executor."""
        while self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)

    async def aclose(self) -> None:
        """Close the scheduler: cancel the open batch, let in-flight flushes finish.

        Later ``schedule_invalidation`` calls are dropped with a warning.
        """
        self._closed = True
        self.cancel_pending()
        await self.wait_in_flight()

    def _take(self) -> PendingBatch | None:
        """Take ownership of the open batch and return to IDLE."""
        batch = self._pending
        self._pending = None
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self.metrics.pending_topics.set(0)
        return batch

    def _on_timer(self) -> None:
        self._timer = None
        if self._closed:
            return
        batch = self._take()
        if batch is None:
            return

        task = asyncio.get_running_loop().create_task(
            self._run_flush(batch, path="coalesced"),
            name=f"topicwarden-flush-{batch.session_id}",
        )
        self._in_flight.add(task)
        task.add_done_callback(self._on_flush_done)

    def _on_flush_done(self, task: asyncio.Task[list[str]]) -> None:
        self._in_flight.discard(task)
        if not task.cancelled():
            # Already logged by _run_flush
            task.exception()

    async def _run_flush(self, batch: PendingBatch, path: str) -> list[str]:
        topics = batch.topic_list()
        with LogContext(session_id=batch.session_id):
            started = time.perf_counter()
            try:
                await self.flush_handler(topics)
            except Exception:
                self.metrics.flush_failures_total.inc()
                logger.error(
                    f"Flush of {len(topics)} topic(s) failed; batch discarded",
                    exc_info=True,
                )
                raise

            self.metrics.flushes_total.labels(path=path).inc()
            self.metrics.flush_topics.observe(len(topics))
            logger.info(
                f"Flushed {len(topics)} topic(s) ({path}) in "
                f"{time.perf_counter() - started:.3f}s"
            )
        return topics
