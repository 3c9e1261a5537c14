"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Identity sent on every audit request
DEFAULT_USER_AGENT = "RoboscanBot/1.0"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Scanner
    scanner_user_agent: str = DEFAULT_USER_AGENT
    probe_timeout_seconds: float = Field(default=15.0, gt=0)  # Canonical URL probe
    fetch_timeout_seconds: float = Field(default=10.0, gt=0)  # Per well-known file request
    bot_access_timeout_seconds: float = Field(default=10.0, gt=0)

    # Recurring scans
    scheduler_interval_seconds: float = Field(default=60.0, gt=0)
    scheduler_max_concurrency: int = Field(default=5, ge=1)
    recurring_first_run_delay_seconds: int = Field(default=60, ge=0)

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.env == "production"

    @property
    def is_test(self) -> bool:
        """Check if running in test mode."""
        return self.env == "test"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
