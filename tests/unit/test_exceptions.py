"""Tests for custom exceptions."""

from roboscan.crawler.errors import FetchErrorInfo, FetchErrorKind
from roboscan.exceptions import (
    InvalidUrlError,
    NotFoundError,
    RoboscanError,
    ScanError,
    ValidationError,
)


def test_roboscan_error_base() -> None:
    """Test base RoboscanError."""
    error = RoboscanError(message="Test error", code="test_error")
    assert error.message == "Test error"
    assert error.code == "test_error"
    assert error.details == {}
    assert str(error) == "Test error"


def test_invalid_url_error() -> None:
    """Test InvalidUrlError."""
    error = InvalidUrlError("not a url")
    assert error.to_dict() == {
        "code": "invalid_url",
        "message": "Invalid URL format",
        "details": {"url": "not a url"},
    }


def test_scan_error() -> None:
    """Test ScanError carries the classified failure."""
    info = FetchErrorInfo(kind=FetchErrorKind.TLS, message="SSL/TLS certificate error")
    error = ScanError("https://example.com", info)

    assert error.error is info
    assert error.message == "SSL/TLS certificate error"
    assert error.code == "scan_failed_tls"
    assert error.details == {"url": "https://example.com", "kind": "tls"}


def test_not_found_error() -> None:
    """Test NotFoundError."""
    error = NotFoundError("Recurring scan")
    assert error.message == "Recurring scan not found"
    assert error.code == "not_found"

    error_with_id = NotFoundError("Recurring scan", 12)
    assert error_with_id.message == "Recurring scan with id '12' not found"


def test_validation_error() -> None:
    """Test ValidationError."""
    error = ValidationError("Invalid frequency", field="frequency")
    assert error.message == "Invalid frequency"
    assert error.code == "validation_error"
    assert error.details == {"field": "frequency"}
