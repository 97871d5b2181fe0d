"""Dependency-aware cache invalidation.

- Topic registry maps logical topic names to cache keys
- Rule table declares which writes affect which other topics
- Resolver computes the single-hop set of topics to invalidate
- Scheduler coalesces bursts of writes into one flush per window
- Executor evicts the final topic set from the cache host
"""

from topicwarden.cache.broadcast import FlushBroadcaster, FlushMessage
from topicwarden.cache.default_rules import DEFAULT_RULES
from topicwarden.cache.executor import CacheHost, InvalidationExecutor
from topicwarden.cache.hosts import InMemoryCacheHost, RedisCacheHost, close_redis, get_redis
from topicwarden.cache.keys import TopicKey
from topicwarden.cache.registry import (
    PROFILES,
    StalenessProfile,
    Topic,
    TopicKind,
    TopicRegistry,
    parameterized_topic,
    static_topic,
)
from topicwarden.cache.resolver import RuleResolver
from topicwarden.cache.rules import (
    InvalidationRule,
    RuleTable,
    field_equals,
    field_in,
    has_field,
    rule,
)
from topicwarden.cache.scheduler import CoalescingScheduler, SchedulerState
from topicwarden.cache.topics import build_default_registry

__all__ = [
    # Registry
    "PROFILES",
    "StalenessProfile",
    "Topic",
    "TopicKey",
    "TopicKind",
    "TopicRegistry",
    "build_default_registry",
    "parameterized_topic",
    "static_topic",
    # Rules
    "DEFAULT_RULES",
    "InvalidationRule",
    "RuleTable",
    "field_equals",
    "field_in",
    "has_field",
    "rule",
    # Resolution and scheduling
    "CoalescingScheduler",
    "RuleResolver",
    "SchedulerState",
    # Eviction
    "CacheHost",
    "InMemoryCacheHost",
    "InvalidationExecutor",
    "RedisCacheHost",
    "close_redis",
    "get_redis",
    # Distributed flushes
    "FlushBroadcaster",
    "FlushMessage",
]
