"""Audit result models.

An ``AuditSnapshot`` is the immutable outcome of one scan: the resolved target,
one ``FetchOutcome`` per well-known file, the derived crawler permissions and
the warnings/errors collected along the way. Snapshots are created once and
handed to storage as-is.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from types import MappingProxyType

from roboscan.crawler.errors import FetchErrorInfo


class WellKnownFile(StrEnum):
    """The eight files retrieved for every audit."""

    ROBOTS_TXT = "robots_txt"
    LLMS_TXT = "llms_txt"
    SITEMAP_XML = "sitemap_xml"
    SECURITY_TXT = "security_txt"
    MANIFEST_JSON = "manifest_json"
    ADS_TXT = "ads_txt"
    HUMANS_TXT = "humans_txt"
    AI_TXT = "ai_txt"


class PermissionStatus(StrEnum):
    """Access classification for one crawler."""

    ALLOWED = "Allowed"
    RESTRICTED = "Restricted"
    BLOCKED = "Blocked"


@dataclass(frozen=True)
class PermissionVerdict:
    """Derived access verdict for one crawler agent."""

    status: PermissionStatus
    blocked_paths: int = 0
    total_paths: int = 0

    @classmethod
    def allowed(cls, total_paths: int = 0) -> "PermissionVerdict":
        return cls(status=PermissionStatus.ALLOWED, total_paths=total_paths)

    @property
    def label(self) -> str:
        """Human-readable label, also the persisted form."""
        if self.status == PermissionStatus.RESTRICTED:
            return (
                f"Restricted ({self.blocked_paths} of {self.total_paths} "
                "common paths blocked)"
            )
        return self.status.value

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class AuditTarget:
    """A URL being audited, before and after redirect resolution."""

    raw_url: str
    origin: str
    base_path: str = ""
    canonical_verified: bool = False

    @property
    def url(self) -> str:
        return f"{self.origin}{self.base_path}"

    def to_dict(self) -> dict:
        return {
            "raw_url": self.raw_url,
            "origin": self.origin,
            "base_path": self.base_path,
            "canonical_verified": self.canonical_verified,
        }


@dataclass(frozen=True)
class FetchOutcome:
    """Result of retrieving one well-known file."""

    found: bool
    content: str | None = None
    url: str | None = None  # Candidate that produced the hit
    error: FetchErrorInfo | None = None

    @classmethod
    def missing(cls, error: FetchErrorInfo | None = None) -> "FetchOutcome":
        return cls(found=False, error=error)

    def to_dict(self) -> dict:
        return {
            "found": self.found,
            "content": self.content,
            "url": self.url,
            "error": self.error.to_dict() if self.error else None,
        }


def _freeze(mapping: Mapping | None) -> Mapping:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class AuditSnapshot:
    """Immutable result of one full scan of a target."""

    target: AuditTarget
    files: Mapping[WellKnownFile, FetchOutcome]
    bot_permissions: Mapping[str, PermissionVerdict] = field(default_factory=dict)
    warnings: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        files = {kind: self.files.get(kind, FetchOutcome.missing()) for kind in WellKnownFile}
        object.__setattr__(self, "files", _freeze(files))
        object.__setattr__(self, "bot_permissions", _freeze(self.bot_permissions))
        object.__setattr__(self, "warnings", tuple(self.warnings))
        object.__setattr__(self, "errors", tuple(self.errors))

    def outcome(self, kind: WellKnownFile) -> FetchOutcome:
        return self.files[kind]

    @property
    def robots_txt_found(self) -> bool:
        return self.files[WellKnownFile.ROBOTS_TXT].found

    @property
    def robots_txt_content(self) -> str | None:
        return self.files[WellKnownFile.ROBOTS_TXT].content

    @property
    def llms_txt_found(self) -> bool:
        return self.files[WellKnownFile.LLMS_TXT].found

    @property
    def llms_txt_content(self) -> str | None:
        return self.files[WellKnownFile.LLMS_TXT].content

    @property
    def permission_labels(self) -> dict[str, str]:
        return {agent: verdict.label for agent, verdict in self.bot_permissions.items()}

    def to_dict(self) -> dict:
        result: dict = {
            "url": self.target.url,
            "target": self.target.to_dict(),
        }
        for kind, outcome in self.files.items():
            name = kind.value
            result[f"{name}_found"] = outcome.found
            result[f"{name}_content"] = outcome.content
        result["bot_permissions"] = self.permission_labels
        result["warnings"] = list(self.warnings)
        result["errors"] = list(self.errors)
        result["created_at"] = self.created_at.isoformat()
        return result
