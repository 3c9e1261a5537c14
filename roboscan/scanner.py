"""Audit runner.

Runs one full audit of a target:
- canonical origin detection (probe + redirects)
- concurrent retrieval of the eight well-known files
- robots.txt crawler permission evaluation

Returns an immutable AuditSnapshot.
"""

from datetime import UTC, datetime

import httpx
import structlog

from roboscan.config import get_settings
from roboscan.crawler.canonical import UrlCanonicalizer
from roboscan.crawler.fetcher import ResourceFetcher
from roboscan.crawler.permissions import default_permissions, evaluate_permissions
from roboscan.crawler.resources import RESOURCES
from roboscan.models import AuditSnapshot, WellKnownFile

logger = structlog.get_logger(__name__)


class Scanner:
    """Runs audits against live sites.

    A shared ``httpx.AsyncClient`` may be injected (tests pass one backed by
    ``httpx.MockTransport``); otherwise a client is opened per audit.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        user_agent: str | None = None,
        probe_timeout: float | None = None,
        fetch_timeout: float | None = None,
    ):
        settings = get_settings()
        self.client = client
        self.user_agent = user_agent or settings.scanner_user_agent
        self.probe_timeout = probe_timeout or settings.probe_timeout_seconds
        self.fetch_timeout = fetch_timeout or settings.fetch_timeout_seconds

    async def scan(self, url: str) -> AuditSnapshot:
        """
        Audit a website's well-known files.

        Args:
            url: Hostname or URL as typed by the user

        Returns:
            AuditSnapshot for the canonical target

        Raises:
            InvalidUrlError: If the input is not a usable URL
            ScanError: If the site is unreachable
        """
        if self.client is not None:
            return await self._scan(self.client, url)
        async with httpx.AsyncClient() as client:
            return await self._scan(client, url)

    async def _scan(self, client: httpx.AsyncClient, url: str) -> AuditSnapshot:
        fetcher = ResourceFetcher(client, user_agent=self.user_agent, timeout=self.fetch_timeout)
        canonicalizer = UrlCanonicalizer(fetcher, timeout=self.probe_timeout)

        logger.info("scan_starting", url=url)

        canonical = await canonicalizer.canonicalize(url)
        target = canonical.target
        warnings = list(canonical.warnings)
        errors: list[str] = []

        files = await fetcher.fetch_all(target.origin, target.base_path)

        for spec in RESOURCES:
            outcome = files[spec.kind]
            if outcome.found or outcome.error is None:
                continue
            message = f"Failed to fetch {spec.display_name}: {outcome.error.message}"
            if spec.primary:
                errors.append(message)
            else:
                warnings.append(message)

        robots = files[WellKnownFile.ROBOTS_TXT]
        if robots.found and robots.content is not None:
            bot_permissions = evaluate_permissions(robots.content)
            if "sitemap:" not in robots.content.lower():
                warnings.append("robots.txt found but missing sitemap reference")
        else:
            # No robots.txt: everything is permitted
            bot_permissions = default_permissions()

        snapshot = AuditSnapshot(
            target=target,
            files=files,
            bot_permissions=bot_permissions,
            warnings=tuple(warnings),
            errors=tuple(errors),
            created_at=datetime.now(UTC),
        )

        logger.info(
            "scan_complete",
            url=url,
            origin=target.origin,
            canonical_verified=target.canonical_verified,
            robots_txt_found=snapshot.robots_txt_found,
            llms_txt_found=snapshot.llms_txt_found,
            warnings=len(snapshot.warnings),
            errors=len(snapshot.errors),
        )
        return snapshot


async def scan(url: str, client: httpx.AsyncClient | None = None) -> AuditSnapshot:
    """
    Convenience function to audit a website.

    Args:
        url: Hostname or URL to audit
        client: Optional shared httpx client

    Returns:
        AuditSnapshot with file outcomes and crawler permissions
    """
    return await Scanner(client=client).scan(url)
