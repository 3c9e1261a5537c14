"""Classification of network failures into user-facing messages.

Every outbound request made during an audit funnels its exceptions through
``classify_fetch_error``. The canonical URL probe aborts the audit on a
critical classification; per-resource fetches record the message and move on.
"""

import ssl
from dataclasses import dataclass
from enum import StrEnum

import httpx


class FetchErrorKind(StrEnum):
    """Failure classes, in classification priority order."""

    DNS = "dns"
    TIMEOUT = "timeout"
    CONNECTION_REFUSED = "connection_refused"
    TLS = "tls"
    NETWORK = "network"
    UNCLASSIFIED = "unclassified"


ERROR_MESSAGES: dict[FetchErrorKind, str] = {
    FetchErrorKind.DNS: (
        "DNS resolution failed: Unable to resolve the domain name. "
        "Please check if the website URL is correct."
    ),
    FetchErrorKind.TIMEOUT: (
        "Connection timeout: The website did not respond in time. "
        "The server may be down or unreachable."
    ),
    FetchErrorKind.CONNECTION_REFUSED: (
        "Connection refused: The website server is not accepting connections. "
        "The server may be down or blocking requests."
    ),
    FetchErrorKind.TLS: (
        "SSL/TLS certificate error: Unable to establish a secure connection. "
        "The website's certificate may be invalid or expired."
    ),
    FetchErrorKind.NETWORK: (
        "Network error: Unable to reach the website. "
        "Please check your internet connection and try again."
    ),
}

DNS_MARKERS = (
    "dns",
    "enotfound",
    "getaddrinfo",
    "name or service not known",
    "nodename nor servname",
    "name resolution",
    "eai_again",
)
TIMEOUT_MARKERS = ("timeout", "timed out", "aborted")
REFUSED_MARKERS = ("refused", "econnrefused")
TLS_MARKERS = ("certificate", "ssl", "tls", "unable to verify")
NETWORK_MARKERS = ("network", "fetch failed", "unreachable", "enetunreach")


@dataclass(frozen=True)
class FetchErrorInfo:
    """A classified network failure."""

    kind: FetchErrorKind
    message: str

    @property
    def critical(self) -> bool:
        """Whether this failure means the target is unreachable."""
        return self.kind != FetchErrorKind.UNCLASSIFIED

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "critical": self.critical,
        }


def _exception_chain(exc: BaseException) -> list[BaseException]:
    chain: list[BaseException] = []
    current: BaseException | None = exc
    while current is not None and current not in chain:
        chain.append(current)
        current = current.__cause__ or current.__context__
    return chain


def _describe(chain: list[BaseException]) -> str:
    parts = []
    for error in chain:
        parts.append(type(error).__name__)
        parts.append(str(error))
    return " ".join(parts).lower()


def classify_fetch_error(exc: BaseException) -> FetchErrorInfo:
    """
    Classify an exception raised while fetching a URL.

    Text markers are checked across the exception and its causes, so the
    underlying socket error wins over the generic httpx wrapper.

    Args:
        exc: The exception raised by the request

    Returns:
        FetchErrorInfo with the failure kind and a user-facing message
    """
    chain = _exception_chain(exc)
    text = _describe(chain)

    def _is(*types: type[BaseException]) -> bool:
        return any(isinstance(error, types) for error in chain)

    if any(marker in text for marker in DNS_MARKERS):
        kind = FetchErrorKind.DNS
    elif _is(httpx.TimeoutException, TimeoutError) or any(
        marker in text for marker in TIMEOUT_MARKERS
    ):
        kind = FetchErrorKind.TIMEOUT
    elif _is(ConnectionRefusedError) or any(marker in text for marker in REFUSED_MARKERS):
        kind = FetchErrorKind.CONNECTION_REFUSED
    elif _is(ssl.SSLError) or any(marker in text for marker in TLS_MARKERS):
        kind = FetchErrorKind.TLS
    elif _is(httpx.NetworkError, OSError) or any(marker in text for marker in NETWORK_MARKERS):
        kind = FetchErrorKind.NETWORK
    else:
        detail = str(exc) or type(exc).__name__
        return FetchErrorInfo(
            kind=FetchErrorKind.UNCLASSIFIED,
            message=f"Connection failed: {detail}",
        )

    return FetchErrorInfo(kind=kind, message=ERROR_MESSAGES[kind])
