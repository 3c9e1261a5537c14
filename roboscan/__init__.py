"""Roboscan - robots.txt and llms.txt auditing and monitoring."""

from typing import Any

__version__ = "1.0.0"

__all__ = [
    "scan",
    "Scanner",
    "detect_changes",
    "RecurringScheduler",
    "TickSummary",
]


def __getattr__(name: str) -> Any:
    """Lazy import for the public entry points."""
    if name in ("scan", "Scanner"):
        from roboscan.scanner import Scanner, scan

        return locals()[name]
    elif name == "detect_changes":
        from roboscan.monitoring.changes import detect_changes

        return detect_changes
    elif name in ("RecurringScheduler", "TickSummary"):
        from roboscan.scheduler import RecurringScheduler, TickSummary

        return locals()[name]
    raise AttributeError(f"module 'roboscan' has no attribute '{name}'")
