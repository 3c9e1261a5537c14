"""Custom exceptions and error handling."""

from typing import Any

from roboscan.crawler.errors import FetchErrorInfo


class RoboscanError(Exception):
    """Base exception for Roboscan application."""

    def __init__(
        self,
        message: str,
        code: str = "error",
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "details": self.details}


class InvalidUrlError(RoboscanError):
    """The supplied target cannot be parsed as an http(s) URL."""

    def __init__(self, url: str):
        super().__init__(
            message="Invalid URL format",
            code="invalid_url",
            details={"url": url},
        )


class ScanError(RoboscanError):
    """The target is unreachable and the audit was aborted."""

    def __init__(self, url: str, error: FetchErrorInfo):
        self.error = error
        super().__init__(
            message=error.message,
            code=f"scan_failed_{error.kind.value}",
            details={"url": url, "kind": error.kind.value},
        )


class NotFoundError(RoboscanError):
    """Resource not found."""

    def __init__(self, resource: str, identifier: str | int | None = None):
        message = f"{resource} not found"
        if identifier is not None:
            message = f"{resource} with id '{identifier}' not found"
        super().__init__(message=message, code="not_found")


class ValidationError(RoboscanError):
    """Validation error."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message=message, code="validation_error", details=details)
