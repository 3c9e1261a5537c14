"""Test fixtures for offline scanning and scheduling tests."""

from tests.fixtures.audits import make_snapshot
from tests.fixtures.fake_site import FakeClock, FakeSite, url_key

__all__ = [
    # HTTP
    "FakeSite",
    "url_key",
    # Time
    "FakeClock",
    # Snapshots
    "make_snapshot",
]
