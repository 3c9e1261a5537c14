"""Tests for well-known file definitions and the resource fetcher."""

import asyncio
import time

import httpx
import pytest

from roboscan.crawler.errors import FetchErrorKind
from roboscan.crawler.fetcher import ResourceFetcher
from roboscan.crawler.resources import (
    RESOURCES,
    get_resource,
    looks_like_ads_txt,
    looks_like_manifest,
    looks_like_security_txt,
    looks_like_sitemap,
)
from roboscan.models import WellKnownFile
from tests.fixtures import FakeSite

ORIGIN = "https://example.com"


class TestResourceSpecs:
    """Tests for resource candidate paths and content checks."""

    def test_eight_resources(self) -> None:
        """Test every well-known file has exactly one spec."""
        assert [spec.kind for spec in RESOURCES] == list(WellKnownFile)

    def test_robots_always_at_root(self) -> None:
        """Test robots.txt ignores the base path."""
        spec = get_resource(WellKnownFile.ROBOTS_TXT)
        assert spec.candidate_urls(ORIGIN, "/docs") == ["https://example.com/robots.txt"]

    def test_llms_txt_base_path_first(self) -> None:
        """Test llms.txt tries the base path before the root."""
        spec = get_resource(WellKnownFile.LLMS_TXT)

        assert spec.candidate_urls(ORIGIN, "/docs") == [
            "https://example.com/docs/llms.txt",
            "https://example.com/llms.txt",
        ]
        assert spec.candidate_urls(ORIGIN) == ["https://example.com/llms.txt"]

    def test_security_txt_order(self) -> None:
        """Test the .well-known location is tried first."""
        spec = get_resource(WellKnownFile.SECURITY_TXT)
        assert spec.candidate_urls(ORIGIN) == [
            "https://example.com/.well-known/security.txt",
            "https://example.com/security.txt",
        ]

    def test_validators(self) -> None:
        """Test content checks reject catch-all pages."""
        assert looks_like_sitemap('<?xml version="1.0"?><urlset></urlset>') is True
        assert looks_like_sitemap("<html>Not found</html>") is False
        assert looks_like_security_txt("CONTACT: mailto:security@example.com") is True
        assert looks_like_security_txt("<html></html>") is False
        assert looks_like_manifest('{"name": "Example"}') is True
        assert looks_like_manifest('{"theme_color": "#fff"}') is False
        assert looks_like_manifest("[1, 2]") is False
        assert looks_like_manifest("<html>") is False
        assert looks_like_ads_txt("google.com, pub-123, DIRECT") is True
        assert looks_like_ads_txt("   ") is False


class TestResourceFetcher:
    """Tests for ResourceFetcher."""

    @pytest.mark.asyncio
    async def test_found(self) -> None:
        """Test a 2xx body that passes the check is found."""
        site = FakeSite({f"{ORIGIN}/robots.txt": "User-agent: *\nDisallow:\n"})
        async with site.client() as client:
            fetcher = ResourceFetcher(client, user_agent="RoboscanBot/1.0")
            outcome = await fetcher.fetch_resource(
                get_resource(WellKnownFile.ROBOTS_TXT), ORIGIN
            )

        assert outcome.found is True
        assert outcome.content == "User-agent: *\nDisallow:\n"
        assert outcome.url == f"{ORIGIN}/robots.txt"
        assert outcome.error is None

    @pytest.mark.asyncio
    async def test_sends_identity_headers(self) -> None:
        """Test user agent and per-resource Accept header."""
        site = FakeSite()
        async with site.client() as client:
            fetcher = ResourceFetcher(client, user_agent="RoboscanBot/1.0")
            await fetcher.fetch_resource(get_resource(WellKnownFile.MANIFEST_JSON), ORIGIN)

        assert len(site.requests) == 3
        for request in site.requests:
            assert request.headers["User-Agent"] == "RoboscanBot/1.0"
            assert request.headers["Accept"] == "application/json,*/*"

    @pytest.mark.asyncio
    async def test_falls_back_to_next_candidate(self) -> None:
        """Test a 404 on the first candidate moves on to the second."""
        site = FakeSite({f"{ORIGIN}/security.txt": "Contact: mailto:sec@example.com"})
        async with site.client() as client:
            fetcher = ResourceFetcher(client, user_agent="RoboscanBot/1.0")
            outcome = await fetcher.fetch_resource(
                get_resource(WellKnownFile.SECURITY_TXT), ORIGIN
            )

        assert outcome.found is True
        assert outcome.url == f"{ORIGIN}/security.txt"
        assert site.urls == [
            f"{ORIGIN}/.well-known/security.txt",
            f"{ORIGIN}/security.txt",
        ]

    @pytest.mark.asyncio
    async def test_short_circuits(self) -> None:
        """Test later candidates are not requested after a hit."""
        site = FakeSite({f"{ORIGIN}/manifest.json": '{"short_name": "Ex"}'})
        async with site.client() as client:
            fetcher = ResourceFetcher(client, user_agent="RoboscanBot/1.0")
            outcome = await fetcher.fetch_resource(
                get_resource(WellKnownFile.MANIFEST_JSON), ORIGIN
            )

        assert outcome.found is True
        assert site.urls == [f"{ORIGIN}/manifest.json"]

    @pytest.mark.asyncio
    async def test_catch_all_site(self) -> None:
        """Test a site answering 200 everywhere does not fake validated files."""
        site = FakeSite(default_status=200)
        async with site.client() as client:
            fetcher = ResourceFetcher(client, user_agent="RoboscanBot/1.0")
            results = await fetcher.fetch_all(ORIGIN)

        assert results[WellKnownFile.SITEMAP_XML].found is False
        assert results[WellKnownFile.SECURITY_TXT].found is False
        assert results[WellKnownFile.MANIFEST_JSON].found is False
        assert results[WellKnownFile.ADS_TXT].found is False
        assert results[WellKnownFile.HUMANS_TXT].found is False
        assert results[WellKnownFile.ROBOTS_TXT].found is True

    @pytest.mark.asyncio
    async def test_error_is_recorded(self) -> None:
        """Test a network failure becomes a classified error, not an exception."""
        site = FakeSite({f"{ORIGIN}/ads.txt": httpx.ConnectTimeout("timed out")})
        async with site.client() as client:
            fetcher = ResourceFetcher(client, user_agent="RoboscanBot/1.0")
            outcome = await fetcher.fetch_resource(get_resource(WellKnownFile.ADS_TXT), ORIGIN)

        assert outcome.found is False
        assert outcome.error is not None
        assert outcome.error.kind == FetchErrorKind.TIMEOUT

    @pytest.mark.asyncio
    async def test_error_cleared_by_later_response(self) -> None:
        """Test only the last candidate's failure is reported."""
        site = FakeSite(
            {f"{ORIGIN}/.well-known/security.txt": httpx.ConnectError("Connection refused")}
        )
        async with site.client() as client:
            fetcher = ResourceFetcher(client, user_agent="RoboscanBot/1.0")
            outcome = await fetcher.fetch_resource(
                get_resource(WellKnownFile.SECURITY_TXT), ORIGIN
            )

        assert outcome.found is False
        assert outcome.error is None

    @pytest.mark.asyncio
    async def test_fetch_all_isolates_failures(self) -> None:
        """Test one failing resource leaves the others intact."""
        site = FakeSite(
            {
                f"{ORIGIN}/robots.txt": "User-agent: *\nAllow: /\n",
                f"{ORIGIN}/llms.txt": "# Example\n> Docs",
                f"{ORIGIN}/sitemap.xml": httpx.ReadTimeout("timed out"),
            }
        )
        async with site.client() as client:
            fetcher = ResourceFetcher(client, user_agent="RoboscanBot/1.0")
            results = await fetcher.fetch_all(ORIGIN)

        assert set(results) == set(WellKnownFile)
        assert results[WellKnownFile.ROBOTS_TXT].found is True
        assert results[WellKnownFile.LLMS_TXT].found is True
        assert results[WellKnownFile.SITEMAP_XML].error.kind == FetchErrorKind.TIMEOUT
        assert results[WellKnownFile.AI_TXT].found is False
        assert results[WellKnownFile.AI_TXT].error is None

    @pytest.mark.asyncio
    async def test_fetch_all_runs_concurrently(self) -> None:
        """Test the well-known files are requested in parallel."""
        in_flight = 0
        max_in_flight = 0

        async def handler(request: httpx.Request) -> httpx.Response:  # noqa: ARG001
            nonlocal in_flight, max_in_flight
            in_flight += 1
            max_in_flight = max(max_in_flight, in_flight)
            try:
                await asyncio.sleep(0.01)
            finally:
                in_flight -= 1
            return httpx.Response(404, text="Not Found")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            fetcher = ResourceFetcher(client, user_agent="RoboscanBot/1.0")
            results = await fetcher.fetch_all(ORIGIN)

        assert set(results) == set(WellKnownFile)
        assert max_in_flight == len(RESOURCES)

    @pytest.mark.asyncio
    async def test_slow_response_is_cancelled(self) -> None:
        """Test a request outliving the timeout is cut off and reported as a timeout."""

        async def handler(request: httpx.Request) -> httpx.Response:  # noqa: ARG001
            await asyncio.sleep(5)
            return httpx.Response(200, text="User-agent: *\n")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            fetcher = ResourceFetcher(client, user_agent="RoboscanBot/1.0", timeout=0.05)
            started = time.monotonic()
            outcome = await fetcher.fetch_resource(get_resource(WellKnownFile.ROBOTS_TXT), ORIGIN)
            elapsed = time.monotonic() - started

        assert elapsed < 1
        assert outcome.found is False
        assert outcome.error.kind == FetchErrorKind.TIMEOUT
