"""Tests for environment-driven settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from topicwarden.config import Settings


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """The coalescing window defaults to 300 ms."""
        monkeypatch.delenv("TOPICWARDEN_COALESCE_WINDOW_MS", raising=False)
        config = Settings(_env_file=None)

        assert config.coalesce_window_ms == 300
        assert config.coalesce_window == pytest.approx(0.3)
        assert len(config.instance_id) == 8

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Settings read TOPICWARDEN_-prefixed variables."""
        monkeypatch.setenv("TOPICWARDEN_COALESCE_WINDOW_MS", "50")
        monkeypatch.setenv("TOPICWARDEN_BROADCAST_ENABLED", "true")
        monkeypatch.setenv("REDIS_URL", "redis://cache:6379/2")

        config = Settings(_env_file=None)

        assert config.coalesce_window == pytest.approx(0.05)
        assert config.broadcast_enabled is True
        assert config.redis_url == "redis://cache:6379/2"

    def test_negative_window_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A negative window is a configuration error."""
        monkeypatch.setenv("TOPICWARDEN_COALESCE_WINDOW_MS", "-1")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)
