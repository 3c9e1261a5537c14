"""Canonical origin detection.

Sites commonly redirect ``example.com`` to ``www.example.com`` (or the
reverse). One probe request against the user's URL tells us where the site
really lives, and every later fetch uses that origin.
"""

from dataclasses import dataclass, field

import structlog

from roboscan.crawler.errors import classify_fetch_error
from roboscan.crawler.fetcher import ResourceFetcher
from roboscan.crawler.url import normalize_target_url, split_origin
from roboscan.exceptions import ScanError
from roboscan.models import AuditTarget

logger = structlog.get_logger(__name__)


@dataclass
class CanonicalResult:
    """Resolved target plus any warnings raised while probing."""

    target: AuditTarget
    warnings: list[str] = field(default_factory=list)


class UrlCanonicalizer:
    """Resolves a user-supplied URL to its canonical origin and path."""

    def __init__(self, fetcher: ResourceFetcher, timeout: float = 15.0):
        self.fetcher = fetcher
        self.timeout = timeout

    async def canonicalize(self, raw_url: str) -> CanonicalResult:
        """
        Normalize and probe a target URL.

        Args:
            raw_url: Hostname or URL as typed by the user

        Returns:
            CanonicalResult; ``target.canonical_verified`` is False when the
            probe did not succeed and the original origin is kept

        Raises:
            InvalidUrlError: If the input is not a usable URL
            ScanError: If the site is unreachable (DNS, timeout, refused, TLS, network)
        """
        url = normalize_target_url(raw_url)
        origin, base_path = split_origin(url)
        result = CanonicalResult(
            target=AuditTarget(raw_url=raw_url, origin=origin, base_path=base_path)
        )

        logger.info("canonical_probe_started", url=url)

        try:
            response = await self.fetcher.get(url, accept="text/html,*/*", timeout=self.timeout)
        except Exception as e:
            error = classify_fetch_error(e)
            if error.critical:
                logger.warning(
                    "canonical_probe_failed",
                    url=url,
                    kind=error.kind.value,
                    error=str(e),
                )
                raise ScanError(url, error) from e

            logger.info("canonical_probe_degraded", url=url, error=str(e))
            result.warnings.append(f"Could not detect canonical URL: {error.message}")
            return result

        if response.is_success:
            canonical_origin, canonical_path = split_origin(response.url)
            result.target = AuditTarget(
                raw_url=raw_url,
                origin=canonical_origin,
                base_path=canonical_path,
                canonical_verified=True,
            )
            logger.info(
                "canonical_origin_detected",
                url=url,
                origin=canonical_origin,
                base_path=canonical_path or "/",
            )
            return result

        # The site answered, so it exists; keep scanning the original origin
        logger.info("canonical_probe_status", url=url, status_code=response.status_code)
        if response.status_code >= 500:
            result.warnings.append(
                f"Website returned server error ({response.status_code}) but scan will continue"
            )
        return result
