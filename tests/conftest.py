"""Pytest configuration and fixtures."""

import os
from collections.abc import Iterator
from datetime import UTC, datetime

import pytest

from tests.fixtures import FakeClock

# Set test environment before any app code runs
os.environ["ENV"] = "test"


@pytest.fixture(autouse=True)
def reset_settings() -> Iterator[None]:
    """Use test env values, not stale or .env settings."""
    from roboscan.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def clock() -> FakeClock:
    """Clock frozen at Monday 2025-01-06 06:00 UTC."""
    return FakeClock(datetime(2025, 1, 6, 6, 0, tzinfo=UTC))
