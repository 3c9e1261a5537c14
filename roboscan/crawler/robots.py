"""Robots.txt directive parser.

Parsing is a single pass over the file that produces an immutable
``RobotsDirectives``: rules grouped by user-agent token, sitemap references
and crawl delays. The permission evaluator only ever reads from it.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

WILDCARD_AGENT = "*"


@dataclass(frozen=True)
class RobotsRule:
    """A single robots.txt rule."""

    path: str
    allowed: bool

    def matches(self, url_path: str) -> bool:
        """Check if this rule matches a URL path."""
        # Handle wildcard patterns and end anchors
        if "*" in self.path or self.path.endswith("$"):
            anchored = self.path.endswith("$")
            body = self.path[:-1] if anchored else self.path
            pattern = "^" + ".*".join(re.escape(part) for part in body.split("*"))
            if anchored:
                pattern += "$"
            return bool(re.match(pattern, url_path))
        return url_path.startswith(self.path)


@dataclass(frozen=True)
class AgentRules:
    """Disallow/Allow paths collected for one user-agent token."""

    disallow: tuple[str, ...] = ()
    allow: tuple[str, ...] = ()

    @property
    def rules(self) -> tuple[RobotsRule, ...]:
        return tuple(RobotsRule(path=p, allowed=False) for p in self.disallow) + tuple(
            RobotsRule(path=p, allowed=True) for p in self.allow
        )

    def is_allowed(self, path: str) -> bool:
        """
        Check a path against these rules.

        The longest matching rule wins; on equal length Allow wins.
        No matching rule means allowed.
        """
        best: RobotsRule | None = None
        for rule in self.rules:
            if not rule.matches(path):
                continue
            if best is None or len(rule.path) > len(best.path):
                best = rule
            elif len(rule.path) == len(best.path) and rule.allowed:
                best = rule
        return True if best is None else best.allowed


@dataclass(frozen=True)
class RobotsDirectives:
    """Parsed, read-only view of a robots.txt file."""

    groups: Mapping[str, AgentRules] = field(default_factory=dict)
    agents: tuple[str, ...] = ()  # Tokens as written, first occurrence order
    sitemaps: tuple[str, ...] = ()
    crawl_delays: Mapping[str, float] = field(default_factory=dict)

    def rules_for(self, agent: str) -> AgentRules | None:
        """Rules for an agent, falling back to the wildcard block."""
        rules = self.groups.get(agent.lower())
        if rules is None:
            rules = self.groups.get(WILDCARD_AGENT)
        return rules

    def has_agent(self, agent: str) -> bool:
        return agent.lower() in self.groups


def _split_directive(line: str) -> tuple[str, str] | None:
    # Strip inline comments
    line = line.split("#", 1)[0].strip()
    if not line or ":" not in line:
        return None
    directive, _, value = line.partition(":")
    return directive.strip().lower(), value.strip()


def parse_robots_txt(content: str) -> RobotsDirectives:
    """
    Parse robots.txt content.

    Consecutive ``User-agent`` lines form one group; the Allow/Disallow lines
    that follow apply to every agent in it. Directives before the first
    ``User-agent`` line are ignored, as are unknown directives.

    Args:
        content: The robots.txt file content

    Returns:
        RobotsDirectives with rules keyed by lower-cased agent token
    """
    disallow: dict[str, list[str]] = {}
    allow: dict[str, list[str]] = {}
    agents: dict[str, str] = {}
    sitemaps: list[str] = []
    crawl_delays: dict[str, float] = {}

    content = content.removeprefix("\ufeff")  # UTF-8 BOM survives httpx decoding

    current: list[str] = []
    in_rules = False  # Seen a rule since the last User-agent line

    for raw_line in content.splitlines():
        parsed = _split_directive(raw_line)
        if parsed is None:
            continue
        directive, value = parsed

        if directive == "user-agent":
            if in_rules:
                current = []
                in_rules = False
            if not value:
                continue
            # "GPTBot/1.0" names the same agent as "GPTBot"
            name = value.split("/", 1)[0].strip()
            if not name:
                continue
            key = name.lower()
            agents.setdefault(key, name)
            disallow.setdefault(key, [])
            allow.setdefault(key, [])
            current.append(key)

        elif directive == "sitemap":
            if value:
                sitemaps.append(value)

        elif directive in ("disallow", "allow", "crawl-delay"):
            if not current:
                continue
            in_rules = True
            if directive == "crawl-delay":
                try:
                    delay = float(value)
                except ValueError:
                    continue
                for key in current:
                    crawl_delays[key] = delay
            elif value:  # Empty Disallow means allow all
                target = disallow if directive == "disallow" else allow
                for key in current:
                    target[key].append(value)

    groups = {
        key: AgentRules(disallow=tuple(disallow[key]), allow=tuple(allow[key])) for key in agents
    }
    return RobotsDirectives(
        groups=MappingProxyType(groups),
        agents=tuple(agents.values()),
        sitemaps=tuple(sitemaps),
        crawl_delays=MappingProxyType(crawl_delays),
    )
