from __future__ import annotations

from uuid import uuid4

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="TOPICWARDEN_", env_file=".env", extra="ignore")

    app_name: str = "topicwarden"
    env: str = "dev"

    # Instance ID for distributed deployments
    instance_id: str = Field(default_factory=lambda: str(uuid4())[:8])

    # Redis
    redis_url: str = Field(default="redis://localhost:6379/0", validation_alias="REDIS_URL")
    cache_key_prefix: str = "tw"

    # Coalescing
    coalesce_window_ms: int = Field(default=300, ge=0)
    validate_rules_on_startup: bool = True

    # Cross-instance flush broadcast
    broadcast_enabled: bool = False
    broadcast_channel: str = "topicwarden:invalidation"

    # Observability
    enable_metrics: bool = True
    log_level: str = "INFO"
    log_json: bool = False

    @property
    def coalesce_window(self) -> float:
        """Coalescing window in seconds."""
        return self.coalesce_window_ms / 1000.0


settings = Settings()
