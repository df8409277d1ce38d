"""Application configuration using Pydantic Settings."""
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # MongoDB
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_db_name: str = "daygoals"

    # Redis (cache, dedup ledger, dialog state)
    redis_url: str = "redis://localhost:6379/0"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    # Users without a resolvable city fall back to this zone
    default_timezone: str = "Asia/Yekaterinburg"

    # Background tasks
    run_background_tasks: bool = True
    lifecycle_interval_seconds: int = 3600
    engagement_interval_seconds: int = 3600
    notification_dedup_hours: int = 8
    dialog_state_ttl_seconds: Optional[int] = None

    # External services
    google_maps_api_key: str = ""
    outbound_webhook_url: str = "http://localhost:8080/messages"

    # CORS
    cors_origins: str = "http://localhost:3000,http://localhost:8000"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]


settings = Settings()
