"""Cross-instance flush broadcast.

Uses Redis Pub/Sub to tell every other process which topics were just
flushed, so their process-local cache hosts evict the same topics.
Messages carry already-resolved topic sets; receivers evict them as-is
and never re-resolve or re-publish.

Example:
    broadcaster = FlushBroadcaster(instance_id="a1b2c3d4")
    broadcaster.add_handler(on_remote_flush)
    await broadcaster.start()

    await broadcaster.publish(["CONTRACTS", "PROPERTY_STATS"], session_id="f00dcafe")
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, cast

import orjson

from topicwarden.cache.hosts import get_redis
from topicwarden.config import settings

if TYPE_CHECKING:
    from redis.asyncio import Redis
    from redis.asyncio.client import PubSub

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlushMessage:
    """One flushed topic set announced to peers."""

    topics: tuple[str, ...]
    origin: str
    session_id: str = ""

    def to_bytes(self) -> bytes:
        """Serialize to JSON bytes."""
        return orjson.dumps(
            {
                "topics": list(self.topics),
                "origin": self.origin,
                "session_id": self.session_id,
            }
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "FlushMessage":
        """Deserialize from JSON bytes."""
        parsed = orjson.loads(data)
        topics = parsed["topics"]
        if not isinstance(topics, list) or not all(isinstance(t, str) for t in topics):
            raise ValueError("'topics' must be a list of topic names")
        return cls(
            topics=tuple(topics),
            origin=str(parsed["origin"]),
            session_id=str(parsed.get("session_id") or ""),
        )


# Handler type for remote flush callbacks
FlushMessageHandler = Callable[[FlushMessage], Awaitable[None]]


class FlushBroadcaster:
    """Announces local flushes and relays flushes announced by peers.

    Only meaningful for process-local cache hosts: every instance keeps
    its own copy of cached results and must evict what a peer flushed.
    Announcements from this instance are recognised by ``origin`` and
    never relayed back.
    """

    def __init__(
        self,
        instance_id: str | None = None,
        channel: str | None = None,
        client: Redis | None = None,
        retry_delay: float = 1.0,
    ) -> None:
        self.instance_id = instance_id or settings.instance_id
        self.channel = channel or settings.broadcast_channel
        self.retry_delay = retry_delay
        self.relayed = 0
        self.dropped = 0
        self._handlers: list[FlushMessageHandler] = []
        self._pubsub: PubSub | None = None
        self._task: asyncio.Task[None] | None = None
        self._redis: Redis | None = client

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _client(self) -> Redis:
        if self._redis is None:
            self._redis = await get_redis()
        return self._redis

    def add_handler(self, handler: FlushMessageHandler) -> None:
        """Call ``handler`` with every flush announced by another instance."""
        self._handlers.append(handler)

    def remove_handler(self, handler: FlushMessageHandler) -> None:
        self._handlers.remove(handler)

    async def start(self) -> None:
        """Subscribe to the flush channel and start relaying."""
        if self.running:
            return

        self._pubsub = (await self._client()).pubsub()
        await self._pubsub.subscribe(self.channel)
        self._task = asyncio.create_task(
            self._relay(self._pubsub), name=f"topicwarden-broadcast-{self.instance_id}"
        )
        logger.info(
            f"Relaying flushes on {self.channel} as {self.instance_id} "
            f"({len(self._handlers)} handler(s))"
        )

    async def stop(self) -> None:
        """Stop relaying and drop the subscription. Safe to call twice."""
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        pubsub, self._pubsub = self._pubsub, None
        if pubsub is not None:
            await pubsub.unsubscribe(self.channel)
            await pubsub.aclose()
            logger.info(
                f"Stopped relaying flushes on {self.channel} "
                f"({self.relayed} relayed, {self.dropped} dropped)"
            )

    async def _relay(self, pubsub: PubSub) -> None:
        # redis-py resubscribes on reconnect; back off and listen again
        while True:
            try:
                async for message in pubsub.listen():
                    if message["type"] == "message":
                        await self.handle_message(message["data"])
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.error(
                    f"Flush relay on {self.channel} lost its connection; "
                    f"retrying in {self.retry_delay:g}s",
                    exc_info=True,
                )
                await asyncio.sleep(self.retry_delay)

    async def handle_message(self, data: bytes) -> None:
        """Decode one raw announcement and pass it to the handlers."""
        try:
            msg = FlushMessage.from_bytes(data)
        except Exception as e:
            self.dropped += 1
            logger.error(f"Failed to parse flush message: {e}")
            return

        if msg.origin == self.instance_id:
            return

        self.relayed += 1
        logger.debug(f"Relaying flush of {len(msg.topics)} topic(s) from {msg.origin}")
        for handler in self._handlers:
            try:
                await handler(msg)
            except Exception:
                logger.error(
                    f"Flush handler failed for announcement from {msg.origin}", exc_info=True
                )

    async def publish(self, topics: list[str], session_id: str = "") -> int:
        """Announce a local flush; returns how many subscribers received it."""
        message = FlushMessage(topics=tuple(topics), origin=self.instance_id, session_id=session_id)
        count = cast(int, await (await self._client()).publish(self.channel, message.to_bytes()))
        logger.debug(f"Announced flush of {len(topics)} topic(s) to {count} subscriber(s)")
        return count
