"""Crawler permission evaluation for robots.txt.

Derives an Allowed / Restricted / Blocked verdict per crawler by testing a
small sample of representative paths against the crawler's rules. This is an
approximation of crawl permission, not a full RFC 9309 interpreter: the
verdict is advisory and only needs to tell a site owner how the major
crawlers are treated.
"""

from collections.abc import Iterable

import structlog

from roboscan.crawler.robots import WILDCARD_AGENT, RobotsDirectives, parse_robots_txt
from roboscan.models import PermissionStatus, PermissionVerdict

logger = structlog.get_logger(__name__)


# Crawlers evaluated on every audit, in report order
TRACKED_CRAWLERS: dict[str, dict] = {
    # OpenAI
    "GPTBot": {
        "user_agent": "Mozilla/5.0 AppleWebKit/537.36 (KHTML, like Gecko; compatible; GPTBot/1.0; +https://openai.com/gptbot)",
        "owner": "OpenAI",
        "purpose": "Training data collection",
    },
    "ChatGPT-User": {
        "user_agent": "Mozilla/5.0 AppleWebKit/537.36 (KHTML, like Gecko; compatible; ChatGPT-User/1.0; +https://openai.com/bot)",
        "owner": "OpenAI",
        "purpose": "Real-time browsing on behalf of ChatGPT users",
    },
    # Common Crawl
    "CCBot": {
        "user_agent": "CCBot/2.0 (+https://commoncrawl.org/faq/)",
        "owner": "Common Crawl",
        "purpose": "Open dataset used by many AI systems",
    },
    # Anthropic
    "anthropic-ai": {
        "user_agent": "anthropic-ai",
        "owner": "Anthropic",
        "purpose": "Training data collection",
    },
    "Claude-Web": {
        "user_agent": "Claude-Web/1.0",
        "owner": "Anthropic",
        "purpose": "Web retrieval for Claude users",
    },
    # Search engines
    "Googlebot": {
        "user_agent": "Mozilla/5.0 (compatible; Googlebot/2.1; +http://www.google.com/bot.html)",
        "owner": "Google",
        "purpose": "Google search index",
    },
    "Bingbot": {
        "user_agent": "Mozilla/5.0 (compatible; bingbot/2.0; +http://www.bing.com/bingbot.htm)",
        "owner": "Microsoft",
        "purpose": "Bing search index",
    },
    "Slurp": {
        "user_agent": "Mozilla/5.0 (compatible; Yahoo! Slurp; http://help.yahoo.com/help/us/ysearch/slurp)",
        "owner": "Yahoo",
        "purpose": "Yahoo search index",
    },
}

# Marked Allowed when the site has no robots.txt at all
DEFAULT_ALLOWED_CRAWLERS: tuple[str, ...] = ("GPTBot", "CCBot", "anthropic-ai")

# Representative paths tested for every crawler
SAMPLE_PATHS: tuple[str, ...] = ("/", "/api", "/admin", "/search", "/content")

CRAWLER_NAME_MARKERS: tuple[str, ...] = ("bot", "crawler", "spider")


def get_bot_user_agent(bot_name: str) -> str:
    """Full user-agent string for a crawler, or the name itself if unknown."""
    config = TRACKED_CRAWLERS.get(bot_name)
    return config["user_agent"] if config else bot_name


def looks_like_crawler(token: str) -> bool:
    """
    Heuristic: does a user-agent token name an automated crawler?

    Tokens containing "bot", "crawler" or "spider" (any case) qualify. Used to
    pick up additional agents a site lists in its robots.txt.
    """
    lowered = token.lower()
    return any(marker in lowered for marker in CRAWLER_NAME_MARKERS)


def evaluate_agent(
    directives: RobotsDirectives,
    agent: str,
    sample_paths: Iterable[str] = SAMPLE_PATHS,
) -> PermissionVerdict:
    """
    Evaluate one crawler against parsed robots.txt directives.

    The agent's own block is used when present, otherwise the ``*`` block.
    A blocked root means Blocked; some blocked sample paths mean Restricted.
    """
    paths = tuple(sample_paths)
    rules = directives.rules_for(agent)
    if rules is None:
        return PermissionVerdict.allowed(total_paths=len(paths))

    blocked = [path for path in paths if not rules.is_allowed(path)]

    if "/" in blocked:
        return PermissionVerdict(
            status=PermissionStatus.BLOCKED,
            blocked_paths=len(blocked),
            total_paths=len(paths),
        )
    if blocked:
        return PermissionVerdict(
            status=PermissionStatus.RESTRICTED,
            blocked_paths=len(blocked),
            total_paths=len(paths),
        )
    return PermissionVerdict.allowed(total_paths=len(paths))


def discover_crawlers(directives: RobotsDirectives) -> list[str]:
    """Agents named in the file that look like crawlers and are not already tracked."""
    tracked = {name.lower() for name in TRACKED_CRAWLERS}
    discovered = []
    for agent in directives.agents:
        if agent == WILDCARD_AGENT or agent.lower() in tracked:
            continue
        if looks_like_crawler(agent):
            discovered.append(agent)
    return discovered


def evaluate_permissions(content: str | RobotsDirectives) -> dict[str, PermissionVerdict]:
    """
    Build the crawler permission map for a robots.txt file.

    Args:
        content: Raw robots.txt content or already-parsed directives

    Returns:
        Mapping of crawler name to verdict, tracked crawlers first
    """
    directives = parse_robots_txt(content) if isinstance(content, str) else content

    permissions = {name: evaluate_agent(directives, name) for name in TRACKED_CRAWLERS}
    for agent in discover_crawlers(directives):
        permissions[agent] = evaluate_agent(directives, agent)

    logger.debug(
        "bot_permissions_evaluated",
        agents=len(permissions),
        blocked=[name for name, v in permissions.items() if v.status == PermissionStatus.BLOCKED],
    )
    return permissions


def default_permissions() -> dict[str, PermissionVerdict]:
    """Permission map used when a site has no robots.txt."""
    return {
        name: PermissionVerdict.allowed(total_paths=len(SAMPLE_PATHS))
        for name in DEFAULT_ALLOWED_CRAWLERS
    }
