"""Records exchanged with the storage collaborator."""

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class ScanFrequency(StrEnum):
    """How often a recurring scan runs."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class NotificationMethod(StrEnum):
    """Where change notifications are delivered."""

    IN_APP = "in-app"
    EMAIL = "email"
    BOTH = "both"


class NotificationType(StrEnum):
    """One notification type per change category."""

    ROBOTS_TXT_CHANGE = "robots_txt_change"
    LLMS_TXT_CHANGE = "llms_txt_change"
    BOT_PERMISSION_CHANGE = "bot_permission_change"
    NEW_ERRORS = "new_errors"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class RecurringScan(BaseModel):
    """A target re-audited on a fixed cadence."""

    id: int
    user_id: str
    url: str
    # Kept as a plain string; unknown values fall back to daily scheduling
    frequency: str = Field(description="daily, weekly or monthly")
    is_active: bool = True
    last_scan_id: int | None = None
    last_run_at: datetime | None = None
    next_run_at: datetime | None = None
    created_at: datetime = Field(default_factory=_utcnow)

    model_config = {"from_attributes": True}


class NotificationPreferences(BaseModel):
    """Per-category notification switches."""

    notify_on_robots_txt_change: bool = True
    notify_on_llms_txt_change: bool = True
    notify_on_bot_permission_change: bool = True
    notify_on_new_errors: bool = True
    notification_method: NotificationMethod = NotificationMethod.IN_APP

    def enabled(self, notification_type: NotificationType) -> bool:
        return {
            NotificationType.ROBOTS_TXT_CHANGE: self.notify_on_robots_txt_change,
            NotificationType.LLMS_TXT_CHANGE: self.notify_on_llms_txt_change,
            NotificationType.BOT_PERMISSION_CHANGE: self.notify_on_bot_permission_change,
            NotificationType.NEW_ERRORS: self.notify_on_new_errors,
        }[notification_type]

    @property
    def sends_email(self) -> bool:
        return self.notification_method in (NotificationMethod.EMAIL, NotificationMethod.BOTH)


class NotificationPreference(NotificationPreferences):
    """Stored notification preferences for one recurring scan."""

    id: int
    recurring_scan_id: int

    model_config = {"from_attributes": True}


class NotificationCreate(BaseModel):
    """A notification to be persisted."""

    user_id: str
    recurring_scan_id: int | None = None
    scan_id: int | None = None
    type: NotificationType
    title: str
    message: str
    changes: dict[str, Any] | None = None
    is_read: bool = False


class Notification(NotificationCreate):
    """A persisted notification."""

    id: int
    created_at: datetime = Field(default_factory=_utcnow)

    model_config = {"from_attributes": True}
