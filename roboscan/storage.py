"""Storage contract consumed by the scheduler, plus an in-memory implementation.

Persistence technology is not the core's concern: the scheduler and the
recurring scan service only talk to ``ScanStorage``. ``InMemoryStorage``
backs the CLI, local development and the test suite.
"""

import itertools
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol

from roboscan.exceptions import NotFoundError
from roboscan.models import AuditSnapshot
from roboscan.schemas import (
    Notification,
    NotificationCreate,
    NotificationPreference,
    NotificationPreferences,
    RecurringScan,
)


@dataclass(frozen=True)
class StoredScan:
    """A persisted audit snapshot."""

    id: int
    snapshot: AuditSnapshot
    user_id: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class ScanStorage(Protocol):
    """Typed CRUD operations the core needs from persistence."""

    async def get_recurring_scan(self, recurring_scan_id: int) -> RecurringScan | None: ...

    async def get_due_recurring_scans(self, now: datetime) -> list[RecurringScan]: ...

    async def create_recurring_scan(
        self,
        user_id: str,
        url: str,
        frequency: str,
        next_run_at: datetime | None,
        is_active: bool = True,
    ) -> RecurringScan: ...

    async def update_recurring_scan(self, recurring_scan_id: int, **fields: Any) -> RecurringScan: ...

    async def delete_recurring_scan(self, recurring_scan_id: int) -> None: ...

    async def create_scan(
        self, snapshot: AuditSnapshot, user_id: str | None = None
    ) -> StoredScan: ...

    async def get_scan(self, scan_id: int) -> StoredScan | None: ...

    async def create_notification_preference(
        self, recurring_scan_id: int, preferences: NotificationPreferences
    ) -> NotificationPreference: ...

    async def get_notification_preference_by_recurring_scan_id(
        self, recurring_scan_id: int
    ) -> NotificationPreference | None: ...

    async def create_notification(self, notification: NotificationCreate) -> Notification: ...


class InMemoryStorage:
    """Dict-backed ScanStorage.

    Operations never await, so each one is atomic with respect to other
    tasks on the same event loop.
    """

    def __init__(self) -> None:
        self.recurring_scans: dict[int, RecurringScan] = {}
        self.scans: dict[int, StoredScan] = {}
        self.preferences: dict[int, NotificationPreference] = {}
        self.notifications: list[Notification] = []
        self._ids = itertools.count(1)

    def _next_id(self) -> int:
        return next(self._ids)

    async def get_recurring_scan(self, recurring_scan_id: int) -> RecurringScan | None:
        return self.recurring_scans.get(recurring_scan_id)

    async def get_due_recurring_scans(self, now: datetime) -> list[RecurringScan]:
        return [
            scan
            for scan in self.recurring_scans.values()
            if scan.is_active and scan.next_run_at is not None and scan.next_run_at <= now
        ]

    async def create_recurring_scan(
        self,
        user_id: str,
        url: str,
        frequency: str,
        next_run_at: datetime | None,
        is_active: bool = True,
    ) -> RecurringScan:
        scan = RecurringScan(
            id=self._next_id(),
            user_id=user_id,
            url=url,
            frequency=frequency,
            is_active=is_active,
            next_run_at=next_run_at,
        )
        self.recurring_scans[scan.id] = scan
        return scan

    async def update_recurring_scan(self, recurring_scan_id: int, **fields: Any) -> RecurringScan:
        current = self.recurring_scans.get(recurring_scan_id)
        if current is None:
            raise NotFoundError("Recurring scan", recurring_scan_id)
        updated = current.model_copy(update=fields)
        self.recurring_scans[recurring_scan_id] = updated
        return updated

    async def delete_recurring_scan(self, recurring_scan_id: int) -> None:
        if self.recurring_scans.pop(recurring_scan_id, None) is None:
            raise NotFoundError("Recurring scan", recurring_scan_id)
        self.preferences.pop(recurring_scan_id, None)

    async def create_scan(self, snapshot: AuditSnapshot, user_id: str | None = None) -> StoredScan:
        stored = StoredScan(id=self._next_id(), snapshot=snapshot, user_id=user_id)
        self.scans[stored.id] = stored
        return stored

    async def get_scan(self, scan_id: int) -> StoredScan | None:
        return self.scans.get(scan_id)

    async def create_notification_preference(
        self, recurring_scan_id: int, preferences: NotificationPreferences
    ) -> NotificationPreference:
        preference = NotificationPreference(
            id=self._next_id(),
            recurring_scan_id=recurring_scan_id,
            **preferences.model_dump(),
        )
        self.preferences[recurring_scan_id] = preference
        return preference

    async def get_notification_preference_by_recurring_scan_id(
        self, recurring_scan_id: int
    ) -> NotificationPreference | None:
        return self.preferences.get(recurring_scan_id)

    async def create_notification(self, notification: NotificationCreate) -> Notification:
        stored = Notification(id=self._next_id(), **notification.model_dump())
        self.notifications.append(stored)
        return stored
