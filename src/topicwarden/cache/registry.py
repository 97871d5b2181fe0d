"""Topic registry.

Maps logical topic names to cache key descriptors. A topic is either
static (one fixed key) or parameterized (a literal prefix plus a key
builder producing one concrete key per parameter set). At topic
granularity a parameterized topic stands for the whole family of keys
its builder can produce.

Example:
    registry = TopicRegistry(
        [
            static_topic("BENEFICIARIES", "beneficiaries"),
            parameterized_topic("BENEFICIARY", "beneficiary", params=("id",)),
        ]
    )
    registry.resolve("BENEFICIARY")            # TopicKey(("beneficiary",), family=True)
    registry.key_for("BENEFICIARY", "b-17")    # TopicKey(("beneficiary", "b-17"))
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from topicwarden.cache.keys import Primitive, TopicKey
from topicwarden.errors import ConfigurationError, UnknownTopicError

KeyBuilder = Callable[..., Sequence[Primitive]]


@dataclass(frozen=True)
class StalenessProfile:
    """How long a cached result for a topic stays fresh."""

    name: str
    stale_time: float
    refetch_interval: float | None = None
    refetch_on_focus: bool = True


DEFAULT_PROFILE = StalenessProfile("default", stale_time=120.0)
REPORTS_PROFILE = StalenessProfile("reports", stale_time=120.0, refetch_interval=300.0)
REALTIME_PROFILE = StalenessProfile("realtime", stale_time=30.0)
STATIC_PROFILE = StalenessProfile("static", stale_time=1800.0, refetch_on_focus=False)

PROFILES: dict[str, StalenessProfile] = {
    p.name: p for p in (DEFAULT_PROFILE, REPORTS_PROFILE, REALTIME_PROFILE, STATIC_PROFILE)
}


class TopicKind(str, Enum):
    """Kind of topic."""

    STATIC = "static"
    PARAMETERIZED = "parameterized"


@dataclass(frozen=True)
class Topic:
    """A named, logical cache partition."""

    name: str
    prefix: tuple[Primitive, ...]
    params: tuple[str, ...] = ()
    builder: KeyBuilder | None = None
    profile: StalenessProfile = DEFAULT_PROFILE
    description: str = ""

    @property
    def kind(self) -> TopicKind:
        if self.params or self.builder is not None:
            return TopicKind.PARAMETERIZED
        return TopicKind.STATIC

    def key(self) -> TopicKey:
        """Key descriptor at topic granularity (the family for parameterized topics)."""
        return TopicKey(self.prefix, family=self.kind is TopicKind.PARAMETERIZED)

    def build_key(self, *args: Any, **kwargs: Any) -> TopicKey:
        """Build the concrete key for one parameter set.

        Without a custom builder, parameters are appended to the prefix in
        declaration order; omitted parameters become ``None``.
        """
        if self.kind is TopicKind.STATIC:
            if args or kwargs:
                raise TypeError(f"Static topic {self.name} takes no parameters")
            return TopicKey(self.prefix)

        if self.builder is not None:
            parts = tuple(self.builder(*args, **kwargs))
            if parts[: len(self.prefix)] != self.prefix:
                raise ValueError(
                    f"Key builder for {self.name} returned {parts!r}, "
                    f"which does not start with {self.prefix!r}"
                )
            return TopicKey(parts)

        if len(args) > len(self.params):
            raise TypeError(
                f"{self.name} takes {len(self.params)} parameter(s), got {len(args)}"
            )
        unknown = set(kwargs) - set(self.params)
        if unknown:
            raise TypeError(f"Unknown parameter(s) for {self.name}: {sorted(unknown)}")

        values: dict[str, Primitive] = dict(zip(self.params, args))
        for name, value in kwargs.items():
            if name in values:
                raise TypeError(f"Parameter {name!r} for {self.name} given twice")
            values[name] = value

        return TopicKey(self.prefix + tuple(values.get(p) for p in self.params))


def _as_parts(key: str | Sequence[Primitive]) -> tuple[Primitive, ...]:
    if isinstance(key, str):
        return (key,)
    return tuple(key)


def static_topic(
    name: str,
    key: str | Sequence[Primitive],
    profile: StalenessProfile = DEFAULT_PROFILE,
    description: str = "",
) -> Topic:
    """Declare a static topic with a fixed key."""
    return Topic(name=name, prefix=_as_parts(key), profile=profile, description=description)


def parameterized_topic(
    name: str,
    prefix: str | Sequence[Primitive],
    params: Sequence[str] = (),
    builder: KeyBuilder | None = None,
    profile: StalenessProfile = DEFAULT_PROFILE,
    description: str = "",
) -> Topic:
    """Declare a parameterized topic.

    Either ``params`` (default builder) or a custom ``builder`` is required.
    """
    if not params and builder is None:
        raise ValueError(f"Parameterized topic {name} needs params or a builder")
    return Topic(
        name=name,
        prefix=_as_parts(prefix),
        params=tuple(params),
        builder=builder,
        profile=profile,
        description=description,
    )


class TopicRegistry:
    """Immutable lookup table of topics by name."""

    def __init__(self, topics: Iterable[Topic] = ()) -> None:
        self._topics: dict[str, Topic] = {}
        duplicates: list[str] = []
        for topic in topics:
            if topic.name in self._topics:
                duplicates.append(topic.name)
                continue
            self._topics[topic.name] = topic
        if duplicates:
            raise ConfigurationError(
                [f"Duplicate topic name: {name}" for name in sorted(set(duplicates))]
            )

    def __contains__(self, name: object) -> bool:
        return name in self._topics

    def __iter__(self) -> Iterator[Topic]:
        return iter(self._topics.values())

    def __len__(self) -> int:
        return len(self._topics)

    def names(self) -> list[str]:
        return list(self._topics)

    def get(self, name: str) -> Topic:
        """Look up a topic, failing fast on unknown names."""
        try:
            return self._topics[name]
        except KeyError:
            raise UnknownTopicError(name) from None

    def resolve(self, name: str) -> TopicKey:
        """Resolve a topic name to its key descriptor at topic granularity."""
        return self.get(name).key()

    def key_for(self, name: str, *args: Any, **kwargs: Any) -> TopicKey:
        """Build the concrete cache key for one instance of a topic."""
        return self.get(name).build_key(*args, **kwargs)

    def ttl_for(self, name: str) -> float:
        """Freshness lifetime, in seconds, of results cached under a topic."""
        return self.get(name).profile.stale_time
