"""Invalidation rules.

A rule says: when ``trigger`` is written (and the optional condition holds
for the write's payload), also invalidate the ``affects`` topics. Rules
are static configuration; a ``RuleTable`` is an immutable value injected
into the resolver.

Example:
    RULES = RuleTable(
        [
            rule(
                "CONTRACTS",
                affects=["PROPERTY_STATS", "RENTAL_PAYMENTS"],
                when=field_in("status", {"active", "expired"}),
                description="Status changes move occupancy and expected rent",
            ),
        ]
    )
"""

from __future__ import annotations

from collections.abc import Callable, Collection, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, overload

from topicwarden.errors import ConfigurationError

if TYPE_CHECKING:
    from topicwarden.cache.registry import TopicRegistry

Condition = Callable[[Any], bool]

_MISSING = object()


def _unique(names: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(names))


@dataclass(frozen=True)
class InvalidationRule:
    """One trigger -> affected topics declaration.

    ``condition`` is ``None`` for unconditional rules. Payloads are opaque
    to everything but the condition itself.
    """

    triggers: tuple[str, ...]
    affects: tuple[str, ...]
    condition: Condition | None = None
    description: str = ""

    def __post_init__(self) -> None:
        if not self.triggers:
            raise ValueError("An invalidation rule needs at least one trigger")
        object.__setattr__(self, "triggers", _unique(self.triggers))
        object.__setattr__(self, "affects", _unique(self.affects))

    @property
    def is_conditional(self) -> bool:
        return self.condition is not None

    @property
    def label(self) -> str:
        """Short human-readable name for logs."""
        return self.description or f"{'|'.join(self.triggers)} -> {', '.join(self.affects)}"

    def applies_to(self, trigger: str) -> bool:
        return trigger in self.triggers


def rule(
    trigger: str | Iterable[str],
    affects: Iterable[str],
    when: Condition | None = None,
    description: str = "",
) -> InvalidationRule:
    """Declare a rule; ``trigger`` may be one name or several (logical OR)."""
    triggers = (trigger,) if isinstance(trigger, str) else tuple(trigger)
    return InvalidationRule(
        triggers=triggers,
        affects=tuple(affects),
        condition=when,
        description=description,
    )


class RuleTable(Sequence[InvalidationRule]):
    """Immutable, ordered collection of invalidation rules."""

    def __init__(self, rules: Iterable[InvalidationRule] = ()) -> None:
        self._rules: tuple[InvalidationRule, ...] = tuple(rules)
        index: dict[str, list[InvalidationRule]] = {}
        for r in self._rules:
            for trigger in r.triggers:
                index.setdefault(trigger, []).append(r)
        self._by_trigger: dict[str, tuple[InvalidationRule, ...]] = {
            trigger: tuple(rules) for trigger, rules in index.items()
        }

    @overload
    def __getitem__(self, index: int) -> InvalidationRule: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[InvalidationRule]: ...

    def __getitem__(self, index: int | slice) -> InvalidationRule | Sequence[InvalidationRule]:
        return self._rules[index]

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"RuleTable({len(self._rules)} rules)"

    def rules_for(self, trigger: str) -> tuple[InvalidationRule, ...]:
        """Rules whose trigger equals or includes ``trigger``, in table order."""
        return self._by_trigger.get(trigger, ())

    def triggers(self) -> list[str]:
        return list(self._by_trigger)

    def referenced_topics(self) -> list[str]:
        """Every topic named by any rule, in first-seen order."""
        names: dict[str, None] = {}
        for r in self._rules:
            names.update(dict.fromkeys(r.triggers))
            names.update(dict.fromkeys(r.affects))
        return list(names)

    def problems(self, registry: "TopicRegistry") -> list[str]:
        """Describe every inconsistency between the table and a registry."""
        found: list[str] = []
        for position, r in enumerate(self._rules):
            where = f"rule #{position} ({r.label})"
            for name in r.triggers:
                if name not in registry:
                    found.append(f"{where}: unknown trigger topic {name!r}")
            for name in r.affects:
                if name not in registry:
                    found.append(f"{where}: unknown affected topic {name!r}")
            if not r.affects:
                found.append(f"{where}: affects no topics")
        return found

    def validate(self, registry: "TopicRegistry") -> None:
        """Fail fast when a rule names a topic the registry does not know."""
        found = self.problems(registry)
        if found:
            raise ConfigurationError(found)


# -----------------------------------------------------------------------------
# Condition helpers
# -----------------------------------------------------------------------------


def _lookup(payload: Any, field: str) -> Any:
    if isinstance(payload, Mapping):
        return payload.get(field, _MISSING)
    return getattr(payload, field, _MISSING)


def field_in(field: str, values: Collection[Any]) -> Condition:
    """Condition: ``payload[field]`` is one of ``values``."""
    allowed = frozenset(values)

    def condition(payload: Any) -> bool:
        value = _lookup(payload, field)
        return value is not _MISSING and value in allowed

    condition.__name__ = f"field_in({field!r}, {sorted(map(str, allowed))})"
    return condition


def field_equals(field: str, expected: Any) -> Condition:
    """Condition: ``payload[field] == expected``."""

    def condition(payload: Any) -> bool:
        value = _lookup(payload, field)
        return value is not _MISSING and value == expected

    condition.__name__ = f"field_equals({field!r}, {expected!r})"
    return condition


def has_field(field: str) -> Condition:
    """Condition: the payload carries ``field`` with a non-None value."""

    def condition(payload: Any) -> bool:
        value = _lookup(payload, field)
        return value is not _MISSING and value is not None

    condition.__name__ = f"has_field({field!r})"
    return condition
