"""Exception hierarchy for topicwarden."""

from __future__ import annotations


class TopicwardenError(Exception):
    """Base exception for all topicwarden errors."""


class ConfigurationError(TopicwardenError):
    """Static configuration (registry or rule table) is inconsistent.

    Raised at startup or in tests, never on the invalidation hot path.
    """

    def __init__(self, problems: list[str]) -> None:
        self.problems = list(problems)
        summary = "; ".join(self.problems)
        super().__init__(f"Invalid invalidation configuration: {summary}")


class UnknownTopicError(TopicwardenError, KeyError):
    """A topic name is not registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"Unknown topic: {self.name!r}"


class EvictionError(TopicwardenError):
    """One or more evictions of a flush failed.

    Every eviction of the flush was attempted before this was raised.
    """

    def __init__(self, failures: dict[str, BaseException]) -> None:
        self.failures = dict(failures)
        names = ", ".join(sorted(self.failures))
        super().__init__(f"Eviction failed for {len(self.failures)} topic(s): {names}")
