"""Rule resolution.

Turns one mutation (trigger topic plus optional payload) into the
de-duplicated list of topics that must be invalidated. Resolution is a
single hop: topics contributed by a rule are never used to look up
further rules.
"""

from __future__ import annotations

import logging
from typing import Any

from topicwarden.cache.rules import InvalidationRule, RuleTable
from topicwarden.observability.metrics import InvalidationMetrics

logger = logging.getLogger(__name__)


class RuleResolver:
    """Resolves triggers against an injected, immutable rule table."""

    def __init__(self, rules: RuleTable, metrics: InvalidationMetrics | None = None) -> None:
        self.rules = rules
        self.metrics = metrics or InvalidationMetrics()

    def get_affected_topics(self, trigger: str, payload: Any = None) -> list[str]:
        """Topics to invalidate for a write to ``trigger``.

        The trigger always comes first, followed by the topics of every
        matching rule in table order. Conditional rules fire only when a
        payload is supplied and the condition returns True for it; a
        condition that raises counts as not satisfied.

        Args:
            trigger: Logical topic name that was written
            payload: Opaque write payload, or None when not supplied

        Returns:
            De-duplicated topic names, trigger first
        """
        self.metrics.resolutions_total.inc()
        affected: dict[str, None] = {trigger: None}

        for candidate in self.rules.rules_for(trigger):
            if candidate.condition is not None and not self._condition_holds(
                candidate, trigger, payload
            ):
                continue
            affected.update(dict.fromkeys(candidate.affects))

        return list(affected)

    def _condition_holds(self, candidate: InvalidationRule, trigger: str, payload: Any) -> bool:
        assert candidate.condition is not None

        if payload is None:
            self.metrics.rules_skipped_total.labels(reason="no_payload").inc()
            logger.debug(f"Skipped rule '{candidate.label}' for {trigger}: no payload supplied")
            return False

        try:
            holds = bool(candidate.condition(payload))
        except Exception:
            self.metrics.rules_skipped_total.labels(reason="condition_error").inc()
            logger.warning(
                f"Condition of rule '{candidate.label}' raised for {trigger}; skipping rule",
                exc_info=True,
            )
            return False

        if not holds:
            self.metrics.rules_skipped_total.labels(reason="condition_false").inc()
            logger.debug(f"Skipped rule '{candidate.label}' for {trigger}: condition not met")
        return holds
