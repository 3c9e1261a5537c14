"""Tests for the live bot access probe."""

import httpx
import pytest

from roboscan.crawler.bot_access import probe_bot_access
from roboscan.crawler.permissions import TRACKED_CRAWLERS
from roboscan.exceptions import InvalidUrlError
from tests.fixtures import FakeSite


class TestProbeBotAccess:
    """Tests for probe_bot_access function."""

    @pytest.mark.asyncio
    async def test_sends_bot_user_agent(self) -> None:
        """Test the HEAD request carries the crawler's real user agent."""
        site = FakeSite({"https://example.com/page": "ok"})
        async with site.client() as client:
            result = await probe_bot_access("example.com/page", "GPTBot", client=client)

        assert result.status == 200
        assert result.accessible is True
        assert result.status_text == "OK"
        assert result.error is None

        request = site.requests[0]
        assert request.method == "HEAD"
        assert request.headers["User-Agent"] == TRACKED_CRAWLERS["GPTBot"]["user_agent"]

    @pytest.mark.asyncio
    async def test_blocked_bot(self) -> None:
        """Test a 403 is reported as inaccessible."""
        site = FakeSite({"https://example.com/": (403, "")})
        async with site.client() as client:
            result = await probe_bot_access("https://example.com/", "CCBot", client=client)

        assert result.status == 403
        assert result.accessible is False
        assert result.status_text == "Forbidden"

    @pytest.mark.asyncio
    async def test_unknown_bot_sent_verbatim(self) -> None:
        """Test unknown bot names are used as the user agent."""
        site = FakeSite({"https://example.com/": "ok"})
        async with site.client() as client:
            await probe_bot_access("example.com", "MyBot/2.0", client=client)

        assert site.requests[0].headers["User-Agent"] == "MyBot/2.0"

    @pytest.mark.asyncio
    async def test_connection_failure(self) -> None:
        """Test network errors become status 0 instead of raising."""
        site = FakeSite({"https://example.com/": httpx.ConnectError("Connection refused")})
        async with site.client() as client:
            result = await probe_bot_access("example.com", "Googlebot", client=client)

        assert result.status == 0
        assert result.accessible is False
        assert result.status_text == "Connection failed"
        assert result.error == "Connection refused"
        assert result.to_dict()["bot_name"] == "Googlebot"

    @pytest.mark.asyncio
    async def test_invalid_url(self) -> None:
        """Test malformed URLs raise."""
        with pytest.raises(InvalidUrlError):
            await probe_bot_access("http://", "GPTBot")
