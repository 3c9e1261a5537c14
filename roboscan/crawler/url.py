"""URL normalization and utilities for the scanner."""

from urllib.parse import urlparse

import httpx

from roboscan.exceptions import InvalidUrlError


def normalize_target_url(raw: str) -> str:
    """
    Normalize a user-supplied hostname or URL.

    Adds an ``https://`` scheme when none is given and checks the result is an
    http(s) URL with a host.

    Args:
        raw: Free-form input such as ``example.com`` or ``http://example.com/docs/``

    Returns:
        Normalized URL string

    Raises:
        InvalidUrlError: If the input cannot be parsed as an http(s) URL
    """
    url = (raw or "").strip()
    if not url:
        raise InvalidUrlError(raw)

    if not url.lower().startswith(("http://", "https://")):
        url = "https://" + url

    try:
        parsed = urlparse(url)
        # Accessing the port validates it
        parsed.port  # noqa: B018
    except ValueError as e:
        raise InvalidUrlError(raw) from e

    if parsed.scheme.lower() not in ("http", "https") or not parsed.hostname:
        raise InvalidUrlError(raw)
    if any(ch.isspace() for ch in parsed.netloc):
        raise InvalidUrlError(raw)

    return url


def normalize_base_path(path: str) -> str:
    """Strip the trailing slash from a path and treat the root as empty."""
    if path.endswith("/") and path != "/":
        path = path[:-1]
    if path == "/":
        return ""
    return path


def split_origin(url: str | httpx.URL) -> tuple[str, str]:
    """
    Split a URL into its origin and normalized base path.

    Examples:
        https://example.com/docs/ -> ("https://example.com", "/docs")
        https://Example.com:443 -> ("https://example.com", "")

    Returns:
        Tuple of (origin, base_path)
    """
    parsed = httpx.URL(str(url))
    scheme = parsed.scheme.lower()
    host = parsed.host.lower()
    if ":" in host:
        host = f"[{host}]"  # IPv6 literal

    origin = f"{scheme}://{host}"
    if parsed.port is not None:
        origin = f"{origin}:{parsed.port}"

    return origin, normalize_base_path(parsed.path or "/")

