"""Global pytest configuration and fixtures.

Provides a small topic registry and rule table mirroring the shapes of
the default catalogue, so unit tests stay independent of it.
"""

from __future__ import annotations

import pytest

from topicwarden.cache.hosts import InMemoryCacheHost
from topicwarden.cache.registry import TopicRegistry, parameterized_topic, static_topic
from topicwarden.cache.rules import RuleTable, field_in, rule
from topicwarden.observability.metrics import InvalidationMetrics


@pytest.fixture
def registry() -> TopicRegistry:
    """Registry with static and parameterized topics."""
    return TopicRegistry(
        [
            static_topic("BENEFICIARIES", "beneficiaries"),
            parameterized_topic("BENEFICIARY", "beneficiary", params=("id",)),
            static_topic("BENEFICIARY_STATS", "beneficiary-stats"),
            static_topic("CONTRACTS", "contracts"),
            static_topic("PROPERTY_STATS", "property-stats"),
            static_topic("RENTAL_PAYMENTS", "rental_payments"),
            parameterized_topic("RENTAL_PAYMENTS_BY_CONTRACT", "rental_payments", params=("contract_id",)),
            static_topic("CASHIER_KPIS", "cashier-kpis"),
            static_topic("USERS", "users"),
        ]
    )


@pytest.fixture
def rules() -> RuleTable:
    """Rule table with unconditional, conditional and chained rules."""
    return RuleTable(
        [
            rule(
                "CONTRACTS",
                affects=["PROPERTY_STATS", "RENTAL_PAYMENTS"],
                when=field_in("status", {"active", "expired"}),
            ),
            rule("BENEFICIARIES", affects=["BENEFICIARY", "BENEFICIARY_STATS"]),
            rule("RENTAL_PAYMENTS", affects=["CASHIER_KPIS", "RENTAL_PAYMENTS_BY_CONTRACT"]),
        ]
    )


@pytest.fixture
def host() -> InMemoryCacheHost:
    """Empty in-memory cache host."""
    return InMemoryCacheHost()


@pytest.fixture
def metrics() -> InvalidationMetrics:
    """Enabled metrics on a private collector registry."""
    return InvalidationMetrics.create(enabled=True)
