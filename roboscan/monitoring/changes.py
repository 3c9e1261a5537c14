"""Change detection between two audits of the same target.

Compares the previous and current AuditSnapshot of a recurring scan and
reports the deltas that are worth telling a site owner about: robots.txt or
llms.txt content edits, crawler permission changes and newly appearing errors.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from roboscan.models import AuditSnapshot

# Sentinels for permissions that only exist on one side
NOT_SET = "Not set"
REMOVED = "Removed"


@dataclass(frozen=True)
class PermissionChange:
    """Old and new permission label for one crawler."""

    old: str
    new: str

    def to_dict(self) -> dict:
        return {"old": self.old, "new": self.new}


@dataclass(frozen=True)
class ChangeRecord:
    """Structured diff between two audit snapshots."""

    robots_txt_changed: bool = False
    llms_txt_changed: bool = False
    # None when no crawler changed
    bot_permissions_changed: Mapping[str, PermissionChange] | None = None
    # None when no new errors appeared
    new_errors: tuple[str, ...] | None = None

    @property
    def has_changes(self) -> bool:
        return bool(
            self.robots_txt_changed
            or self.llms_txt_changed
            or self.bot_permissions_changed
            or self.new_errors
        )

    def to_dict(self) -> dict:
        changes: dict = {}
        if self.robots_txt_changed:
            changes["robots_txt_changed"] = True
        if self.llms_txt_changed:
            changes["llms_txt_changed"] = True
        if self.bot_permissions_changed:
            changes["bot_permissions_changed"] = {
                agent: change.to_dict() for agent, change in self.bot_permissions_changed.items()
            }
        if self.new_errors:
            changes["new_errors"] = list(self.new_errors)
        return {"has_changes": self.has_changes, "changes": changes}


def normalize_content(content: str | None) -> str:
    """Normalize file content so whitespace-only edits do not count as changes."""
    return (content or "").strip().replace("\r\n", "\n")


def diff_permissions(
    previous: Mapping[str, str],
    current: Mapping[str, str],
) -> dict[str, PermissionChange]:
    """
    Diff two crawler permission maps.

    Every agent in either map is considered. Agents present on only one side
    are reported with ``Not set`` / ``Removed`` instead of being skipped.
    """
    changes: dict[str, PermissionChange] = {}
    agents = list(previous) + [agent for agent in current if agent not in previous]

    for agent in agents:
        old = previous.get(agent)
        new = current.get(agent)
        if old == new or (not old and not new):
            continue
        changes[agent] = PermissionChange(old=old or NOT_SET, new=new or REMOVED)

    return changes


def diff_errors(previous: tuple[str, ...], current: tuple[str, ...]) -> tuple[str, ...]:
    """Errors present now that were not present before; resolved errors are ignored."""
    seen = set(previous)
    return tuple(error for error in current if error not in seen)


def detect_changes(previous: AuditSnapshot, current: AuditSnapshot) -> ChangeRecord:
    """
    Compare two snapshots of the same recurring target.

    Pure and deterministic: the same pair always yields an equal record.

    Args:
        previous: The last persisted snapshot
        current: The snapshot just produced

    Returns:
        ChangeRecord; ``has_changes`` is False for identical audits
    """
    robots_changed = normalize_content(previous.robots_txt_content) != normalize_content(
        current.robots_txt_content
    )
    llms_changed = normalize_content(previous.llms_txt_content) != normalize_content(
        current.llms_txt_content
    )

    permission_changes = diff_permissions(previous.permission_labels, current.permission_labels)
    new_errors = diff_errors(previous.errors, current.errors)

    return ChangeRecord(
        robots_txt_changed=robots_changed,
        llms_txt_changed=llms_changed,
        bot_permissions_changed=(
            MappingProxyType(permission_changes) if permission_changes else None
        ),
        new_errors=new_errors or None,
    )
