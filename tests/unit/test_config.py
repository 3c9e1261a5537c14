"""Tests for application settings."""

import pytest

from roboscan.config import DEFAULT_USER_AGENT, Settings, get_settings


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self) -> None:
        """Test scanner and scheduler defaults."""
        settings = Settings()

        assert settings.scanner_user_agent == DEFAULT_USER_AGENT == "RoboscanBot/1.0"
        assert settings.probe_timeout_seconds == 15.0
        assert settings.fetch_timeout_seconds == 10.0
        assert settings.bot_access_timeout_seconds == 10.0
        assert settings.scheduler_interval_seconds == 60.0
        assert settings.scheduler_max_concurrency == 5
        assert settings.recurring_first_run_delay_seconds == 60

    def test_test_environment(self) -> None:
        """Test the suite runs with ENV=test."""
        settings = get_settings()
        assert settings.is_test is True
        assert settings.is_production is False

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test values are read from the environment."""
        monkeypatch.setenv("SCHEDULER_MAX_CONCURRENCY", "2")
        monkeypatch.setenv("SCANNER_USER_AGENT", "CustomBot/9")

        settings = Settings()

        assert settings.scheduler_max_concurrency == 2
        assert settings.scanner_user_agent == "CustomBot/9"

    def test_cached(self) -> None:
        """Test get_settings returns one instance."""
        assert get_settings() is get_settings()
