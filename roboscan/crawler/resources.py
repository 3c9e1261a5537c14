"""Well-known file definitions.

Each resource lists its candidate paths (tried in order, first valid hit wins)
and a content check that decides whether a 2xx body really is that file.
Loosely typed formats get a sanity check so that catch-all pages returning 200
for every path do not register as found.
"""

import json
from collections.abc import Callable
from dataclasses import dataclass

from roboscan.models import WellKnownFile

TEXT_ACCEPT = "text/plain,*/*"


def accept_any(content: str) -> bool:  # noqa: ARG001
    return True


def looks_like_sitemap(content: str) -> bool:
    return "<?xml" in content or "<urlset" in content or "<sitemapindex" in content


def looks_like_security_txt(content: str) -> bool:
    return "contact:" in content.lower()


def looks_like_manifest(content: str) -> bool:
    try:
        parsed = json.loads(content)
    except ValueError:
        return False
    if not isinstance(parsed, dict):
        return False
    return bool(parsed.get("name") or parsed.get("short_name") or parsed.get("start_url"))


def looks_like_ads_txt(content: str) -> bool:
    return bool(content.strip()) and ("," in content or "#" in content)


def has_meaningful_text(content: str) -> bool:
    return len(content.strip()) > 10


@dataclass(frozen=True)
class ResourceSpec:
    """How to locate and recognise one well-known file."""

    kind: WellKnownFile
    display_name: str
    paths: tuple[str, ...]
    accept: str = TEXT_ACCEPT
    validator: Callable[[str], bool] = accept_any
    # Failures are reported as audit errors rather than warnings
    primary: bool = False

    def candidate_urls(self, origin: str, base_path: str = "") -> list[str]:  # noqa: ARG002
        return [f"{origin}{path}" for path in self.paths]


@dataclass(frozen=True)
class LlmsTxtSpec(ResourceSpec):
    """llms.txt is looked up under the target's base path before the root."""

    def candidate_urls(self, origin: str, base_path: str = "") -> list[str]:
        urls = []
        if base_path:
            urls.append(f"{origin}{base_path}/llms.txt")
        root = f"{origin}/llms.txt"
        if root not in urls:
            urls.append(root)
        return urls


RESOURCES: tuple[ResourceSpec, ...] = (
    # robots.txt always lives at the domain root
    ResourceSpec(
        kind=WellKnownFile.ROBOTS_TXT,
        display_name="robots.txt",
        paths=("/robots.txt",),
        primary=True,
    ),
    LlmsTxtSpec(
        kind=WellKnownFile.LLMS_TXT,
        display_name="llms.txt",
        paths=("/llms.txt",),
        primary=True,
    ),
    ResourceSpec(
        kind=WellKnownFile.SITEMAP_XML,
        display_name="sitemap.xml",
        paths=("/sitemap.xml",),
        accept="application/xml,text/xml,*/*",
        validator=looks_like_sitemap,
    ),
    # RFC 9116: /.well-known/ location preferred
    ResourceSpec(
        kind=WellKnownFile.SECURITY_TXT,
        display_name="security.txt",
        paths=("/.well-known/security.txt", "/security.txt"),
        validator=looks_like_security_txt,
    ),
    ResourceSpec(
        kind=WellKnownFile.MANIFEST_JSON,
        display_name="manifest.json",
        paths=("/manifest.json", "/site.webmanifest", "/manifest.webmanifest"),
        accept="application/json,*/*",
        validator=looks_like_manifest,
    ),
    ResourceSpec(
        kind=WellKnownFile.ADS_TXT,
        display_name="ads.txt",
        paths=("/ads.txt",),
        validator=looks_like_ads_txt,
    ),
    ResourceSpec(
        kind=WellKnownFile.HUMANS_TXT,
        display_name="humans.txt",
        paths=("/humans.txt",),
        validator=has_meaningful_text,
    ),
    ResourceSpec(
        kind=WellKnownFile.AI_TXT,
        display_name="ai.txt",
        paths=("/ai.txt",),
        validator=has_meaningful_text,
    ),
)


def get_resource(kind: WellKnownFile) -> ResourceSpec:
    for spec in RESOURCES:
        if spec.kind == kind:
            return spec
    raise KeyError(kind)
