"""Tests for the topic registry."""

import pytest

from topicwarden.cache.keys import TopicKey
from topicwarden.cache.registry import (
    PROFILES,
    REPORTS_PROFILE,
    TopicKind,
    TopicRegistry,
    parameterized_topic,
    static_topic,
)
from topicwarden.cache.topics import TOPICS, build_default_registry
from topicwarden.errors import ConfigurationError, UnknownTopicError


class TestTopics:
    """Test topic declarations."""

    def test_static_topic(self) -> None:
        """Static topics resolve to their exact key."""
        topic = static_topic("USERS", "users")
        assert topic.kind is TopicKind.STATIC
        assert topic.key() == TopicKey(("users",))

    def test_static_topic_multi_part_key(self) -> None:
        """Static keys may have several parts."""
        topic = static_topic("FISCAL_YEAR_ACTIVE", ("fiscal-year", "active"))
        assert topic.key() == TopicKey(("fiscal-year", "active"))

    def test_parameterized_topic_resolves_to_family(self) -> None:
        """Parameterized topics resolve to their key family."""
        topic = parameterized_topic("BENEFICIARY", "beneficiary", params=("id",))
        assert topic.kind is TopicKind.PARAMETERIZED
        assert topic.key() == TopicKey(("beneficiary",), family=True)

    def test_build_key_positional(self) -> None:
        """Default builder appends parameters in order."""
        topic = parameterized_topic(
            "GENERAL_LEDGER", "general_ledger", params=("account_id", "date_from", "date_to")
        )
        key = topic.build_key("acc-1", "2024-01-01", "2024-12-31")
        assert key == TopicKey(("general_ledger", "acc-1", "2024-01-01", "2024-12-31"))

    def test_build_key_keywords_and_missing(self) -> None:
        """Keyword parameters work and omitted ones become None."""
        topic = parameterized_topic(
            "GENERAL_LEDGER", "general_ledger", params=("account_id", "date_from", "date_to")
        )
        key = topic.build_key(date_to="2024-12-31")
        assert key.parts == ("general_ledger", None, None, "2024-12-31")

    def test_build_key_rejects_extra_arguments(self) -> None:
        """Too many or unknown parameters raise TypeError."""
        topic = parameterized_topic("BENEFICIARY", "beneficiary", params=("id",))
        with pytest.raises(TypeError):
            topic.build_key("a", "b")
        with pytest.raises(TypeError):
            topic.build_key(name="x")

    def test_static_topic_takes_no_parameters(self) -> None:
        """Static topics reject parameters."""
        with pytest.raises(TypeError):
            static_topic("USERS", "users").build_key("x")

    def test_custom_builder(self) -> None:
        """A custom builder can shape the key."""
        topic = parameterized_topic(
            "REPORT",
            "report",
            builder=lambda report_id, fmt="pdf": ("report", report_id.lower(), fmt),
        )
        assert topic.build_key("R-9").parts == ("report", "r-9", "pdf")

    def test_custom_builder_must_keep_prefix(self) -> None:
        """Builders returning a key outside the prefix are rejected."""
        topic = parameterized_topic("REPORT", "report", builder=lambda rid: ("other", rid))
        with pytest.raises(ValueError, match="does not start with"):
            topic.build_key("r-1")

    def test_parameterized_topic_requires_params_or_builder(self) -> None:
        """A parameterized topic without params or builder is invalid."""
        with pytest.raises(ValueError):
            parameterized_topic("BROKEN", "broken")


class TestTopicRegistry:
    """Test registry lookups."""

    def test_resolve_known_topics(self, registry: TopicRegistry) -> None:
        """Known names resolve to key descriptors."""
        assert registry.resolve("BENEFICIARIES") == TopicKey(("beneficiaries",))
        assert registry.resolve("BENEFICIARY") == TopicKey(("beneficiary",), family=True)

    def test_resolve_unknown_topic_fails_fast(self, registry: TopicRegistry) -> None:
        """Unknown names raise UnknownTopicError."""
        with pytest.raises(UnknownTopicError) as exc_info:
            registry.resolve("NOPE")
        assert exc_info.value.name == "NOPE"
        assert isinstance(exc_info.value, KeyError)

    def test_key_for_builds_concrete_key(self, registry: TopicRegistry) -> None:
        """key_for delegates to the topic's key builder."""
        assert registry.key_for("BENEFICIARY", "b-17") == TopicKey(("beneficiary", "b-17"))

    def test_duplicate_names_rejected(self) -> None:
        """Topic names must be unique."""
        with pytest.raises(ConfigurationError, match="Duplicate topic name: USERS"):
            TopicRegistry([static_topic("USERS", "users"), static_topic("USERS", "users-2")])

    def test_container_protocol(self, registry: TopicRegistry) -> None:
        """Registry supports membership, iteration and len."""
        assert "USERS" in registry
        assert "NOPE" not in registry
        assert len(registry) == len(list(registry)) == len(registry.names())

    def test_ttl_for_uses_profile(self) -> None:
        """ttl_for returns the profile's stale time."""
        registry = TopicRegistry(
            [
                static_topic("USERS", "users"),
                static_topic("TRIAL_BALANCE", "trial-balance", profile=REPORTS_PROFILE),
            ]
        )
        assert registry.ttl_for("USERS") == PROFILES["default"].stale_time
        assert registry.ttl_for("TRIAL_BALANCE") == 120.0


class TestDefaultCatalogue:
    """Test the default topic catalogue."""

    def test_builds_without_duplicates(self) -> None:
        """Default catalogue has unique names."""
        registry = build_default_registry()
        assert len(registry) == len(TOPICS)

    def test_contains_core_topics(self) -> None:
        """Topics used by mutation callers are registered."""
        registry = build_default_registry()
        for name in ("BENEFICIARIES", "CONTRACTS", "PROPERTY_STATS", "RENTAL_PAYMENTS", "USERS"):
            assert name in registry

    def test_rental_payments_family_shares_prefix(self) -> None:
        """Per-contract payments live under the rental payments key."""
        registry = build_default_registry()
        family = registry.resolve("RENTAL_PAYMENTS_BY_CONTRACT")
        assert family.matches(registry.key_for("RENTAL_PAYMENTS_BY_CONTRACT", "c-1").parts)
        assert registry.resolve("RENTAL_PAYMENTS") == TopicKey(("rental_payments",))

    def test_profiles_assigned(self) -> None:
        """KPIs are realtime and settings static."""
        registry = build_default_registry()
        assert registry.get("UNIFIED_KPIS").profile.name == "realtime"
        assert registry.get("SYSTEM_SETTINGS").profile.name == "static"
        assert registry.get("TRIAL_BALANCE").profile.refetch_interval == 300.0
