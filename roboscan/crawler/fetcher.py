"""HTTP fetcher for well-known files."""

import asyncio
from collections.abc import Iterable

import httpx
import structlog

from roboscan.crawler.errors import FetchErrorInfo, classify_fetch_error
from roboscan.crawler.resources import RESOURCES, ResourceSpec
from roboscan.models import FetchOutcome, WellKnownFile

logger = structlog.get_logger(__name__)


class ResourceFetcher:
    """Retrieves well-known files for a canonical origin.

    Every request is bounded twice: by the httpx timeout and by an
    ``asyncio.timeout`` that cancels the request outright, so a server that
    trickles bytes cannot hold an audit open.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        user_agent: str,
        timeout: float = 10.0,
    ):
        self.client = client
        self.user_agent = user_agent
        self.timeout = timeout

    async def get(
        self,
        url: str,
        accept: str = "*/*",
        timeout: float | None = None,
        method: str = "GET",
        user_agent: str | None = None,
    ) -> httpx.Response:
        """
        Issue one bounded request, following redirects.

        Raises:
            httpx.HTTPError or TimeoutError on failure
        """
        limit = timeout or self.timeout
        async with asyncio.timeout(limit):
            return await self.client.request(
                method,
                url,
                headers={
                    "User-Agent": user_agent or self.user_agent,
                    "Accept": accept,
                },
                follow_redirects=True,
                timeout=limit,
            )

    async def fetch_resource(
        self,
        spec: ResourceSpec,
        origin: str,
        base_path: str = "",
    ) -> FetchOutcome:
        """
        Try each candidate URL for a resource in order until one is valid.

        A non-2xx status or a body failing the content check moves on to the
        next candidate. The reported error is the failure of the last
        candidate, and only when nothing was found.
        """
        last_error: FetchErrorInfo | None = None

        for url in spec.candidate_urls(origin, base_path):
            try:
                response = await self.get(url, accept=spec.accept)
            except Exception as e:
                last_error = classify_fetch_error(e)
                logger.warning(
                    "resource_fetch_failed",
                    resource=spec.display_name,
                    url=url,
                    kind=last_error.kind.value,
                    error=str(e),
                )
                continue

            last_error = None
            if not response.is_success:
                logger.debug(
                    "resource_not_found",
                    resource=spec.display_name,
                    url=url,
                    status_code=response.status_code,
                )
                continue

            content = response.text
            if not spec.validator(content):
                logger.debug("resource_content_rejected", resource=spec.display_name, url=url)
                continue

            logger.info("resource_found", resource=spec.display_name, url=url)
            return FetchOutcome(found=True, content=content, url=url)

        return FetchOutcome.missing(error=last_error)

    async def _settle(self, spec: ResourceSpec, origin: str, base_path: str) -> FetchOutcome:
        try:
            return await self.fetch_resource(spec, origin, base_path)
        except Exception as e:
            error = classify_fetch_error(e)
            logger.warning(
                "resource_task_failed",
                resource=spec.display_name,
                kind=error.kind.value,
                error=str(e),
            )
            return FetchOutcome.missing(error=error)

    async def fetch_all(
        self,
        origin: str,
        base_path: str = "",
        resources: Iterable[ResourceSpec] = RESOURCES,
    ) -> dict[WellKnownFile, FetchOutcome]:
        """
        Fetch every well-known file concurrently.

        Each task settles to a FetchOutcome, so one failing resource never
        cancels its siblings.

        Args:
            origin: Canonical origin, e.g. ``https://www.example.com``
            base_path: Canonical base path, used for the llms.txt lookup

        Returns:
            Mapping of file kind to outcome
        """
        specs = list(resources)
        async with asyncio.TaskGroup() as tg:
            tasks = {
                spec.kind: tg.create_task(self._settle(spec, origin, base_path)) for spec in specs
            }

        results = {kind: task.result() for kind, task in tasks.items()}
        logger.info(
            "resources_fetched",
            origin=origin,
            found=[kind.value for kind, outcome in results.items() if outcome.found],
        )
        return results
