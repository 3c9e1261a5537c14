"""Live bot access probe.

Unlike the audit itself, this deliberately sends the probed crawler's own
user-agent string to see whether the server (or a CDN/WAF in front of it)
treats that crawler differently from what robots.txt says.
"""

from dataclasses import dataclass
from http import HTTPStatus

import httpx
import structlog

from roboscan.config import get_settings
from roboscan.crawler.fetcher import ResourceFetcher
from roboscan.crawler.permissions import get_bot_user_agent
from roboscan.crawler.url import normalize_target_url

logger = structlog.get_logger(__name__)


@dataclass
class BotAccessResult:
    """Outcome of requesting a URL as a specific crawler."""

    bot_name: str
    url: str
    status: int
    accessible: bool
    status_text: str
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "bot_name": self.bot_name,
            "url": self.url,
            "status": self.status,
            "accessible": self.accessible,
            "status_text": self.status_text,
            "error": self.error,
        }


def _reason(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return ""


async def probe_bot_access(
    url: str,
    bot_name: str,
    timeout: float | None = None,
    client: httpx.AsyncClient | None = None,
) -> BotAccessResult:
    """
    Send a HEAD request to a URL as the named crawler.

    Args:
        url: Page to probe (scheme optional)
        bot_name: Crawler name, e.g. ``GPTBot``; unknown names are sent verbatim
        timeout: Request timeout in seconds
        client: Optional shared httpx client

    Returns:
        BotAccessResult; network failures yield status 0 rather than raising

    Raises:
        InvalidUrlError: If the URL cannot be parsed
    """
    settings = get_settings()
    target = normalize_target_url(url)
    user_agent = get_bot_user_agent(bot_name)
    limit = timeout or settings.bot_access_timeout_seconds

    async def _probe(http: httpx.AsyncClient) -> BotAccessResult:
        fetcher = ResourceFetcher(http, user_agent=user_agent, timeout=limit)
        try:
            response = await fetcher.get(target, method="HEAD")
        except Exception as e:
            logger.warning("bot_access_probe_failed", url=target, bot=bot_name, error=str(e))
            return BotAccessResult(
                bot_name=bot_name,
                url=target,
                status=0,
                accessible=False,
                status_text="Connection failed",
                error=str(e) or type(e).__name__,
            )

        logger.info(
            "bot_access_probed",
            url=target,
            bot=bot_name,
            status_code=response.status_code,
        )
        return BotAccessResult(
            bot_name=bot_name,
            url=target,
            status=response.status_code,
            accessible=response.is_success,
            status_text=response.reason_phrase or _reason(response.status_code),
        )

    if client is not None:
        return await _probe(client)
    async with httpx.AsyncClient() as http:
        return await _probe(http)
