"""Notification emission for recurring scan changes."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

import structlog

from roboscan.config import get_settings
from roboscan.monitoring.changes import ChangeRecord
from roboscan.schemas import (
    NotificationCreate,
    NotificationPreferences,
    NotificationType,
    RecurringScan,
)
from roboscan.storage import ScanStorage

logger = structlog.get_logger(__name__)

TITLES: dict[NotificationType, str] = {
    NotificationType.ROBOTS_TXT_CHANGE: "robots.txt Changed",
    NotificationType.LLMS_TXT_CHANGE: "llms.txt Changed",
    NotificationType.BOT_PERMISSION_CHANGE: "Bot Permissions Changed",
    NotificationType.NEW_ERRORS: "New Errors Detected",
}


@dataclass
class NotificationResult:
    """Result of a notification delivery attempt."""

    success: bool
    channel: str
    error: str | None = None
    response_data: dict | None = None


class NotificationProvider(ABC):
    """Base class for notification providers."""

    @property
    @abstractmethod
    def channel(self) -> str:
        """Return the channel name."""

    @abstractmethod
    async def send(self, notification: NotificationCreate) -> NotificationResult:
        """Deliver a notification."""


class InAppProvider(NotificationProvider):
    """Persists notifications through storage so they show up in-app."""

    def __init__(self, storage: ScanStorage):
        self.storage = storage

    @property
    def channel(self) -> str:
        return "in-app"

    async def send(self, notification: NotificationCreate) -> NotificationResult:
        stored = await self.storage.create_notification(notification)
        return NotificationResult(
            success=True,
            channel=self.channel,
            response_data={"notification_id": stored.id},
        )


class EmailProvider(NotificationProvider):
    """Email notification provider.

    Outside production the email is only logged.
    """

    @property
    def channel(self) -> str:
        return "email"

    async def send(self, notification: NotificationCreate) -> NotificationResult:
        settings = get_settings()
        message = notification.message
        if len(message) > 100:
            message = message[:100] + "..."

        if not settings.is_production:
            logger.info(
                "email_notification_dev",
                recipient=notification.user_id,
                title=notification.title,
                message=message,
            )
            return NotificationResult(
                success=True,
                channel=self.channel,
                response_data={"mode": settings.env, "logged": True},
            )

        # TODO: hand off to a mail service once one is configured
        logger.info(
            "email_notification_sent",
            recipient=notification.user_id,
            title=notification.title,
        )
        return NotificationResult(success=True, channel=self.channel)


def build_notifications(
    recurring_scan: RecurringScan,
    scan_id: int | None,
    record: ChangeRecord,
    preferences: NotificationPreferences,
) -> list[NotificationCreate]:
    """
    Turn a ChangeRecord into one notification per enabled changed category.

    Args:
        recurring_scan: The config the audit ran for
        scan_id: Id of the snapshot that surfaced the changes
        record: Output of detect_changes
        preferences: Per-category switches for this recurring scan

    Returns:
        Notifications in category order; empty when nothing changed
    """
    if not record.has_changes:
        return []

    url = recurring_scan.url
    candidates: list[tuple[NotificationType, str, dict]] = []

    if record.robots_txt_changed:
        candidates.append(
            (
                NotificationType.ROBOTS_TXT_CHANGE,
                f"Changes detected in robots.txt for {url}",
                {"robots_txt_changed": True},
            )
        )
    if record.llms_txt_changed:
        candidates.append(
            (
                NotificationType.LLMS_TXT_CHANGE,
                f"Changes detected in llms.txt for {url}",
                {"llms_txt_changed": True},
            )
        )
    if record.bot_permissions_changed:
        changed = {
            agent: change.to_dict() for agent, change in record.bot_permissions_changed.items()
        }
        candidates.append(
            (
                NotificationType.BOT_PERMISSION_CHANGE,
                f"Bot permission changes detected for {len(changed)} bot(s) on {url}",
                {"bot_permissions_changed": changed},
            )
        )
    if record.new_errors:
        candidates.append(
            (
                NotificationType.NEW_ERRORS,
                f"{len(record.new_errors)} new error(s) detected on {url}",
                {"new_errors": list(record.new_errors)},
            )
        )

    return [
        NotificationCreate(
            user_id=recurring_scan.user_id,
            recurring_scan_id=recurring_scan.id,
            scan_id=scan_id,
            type=notification_type,
            title=TITLES[notification_type],
            message=message,
            changes=changes,
        )
        for notification_type, message, changes in candidates
        if preferences.enabled(notification_type)
    ]


class NotificationDispatcher:
    """Delivers change notifications for a recurring scan."""

    def __init__(
        self,
        storage: ScanStorage,
        email_provider: NotificationProvider | None = None,
    ):
        self.storage = storage
        self.in_app = InAppProvider(storage)
        self.email = email_provider or EmailProvider()

    async def dispatch(
        self,
        recurring_scan: RecurringScan,
        scan_id: int | None,
        record: ChangeRecord,
    ) -> list[NotificationResult]:
        """
        Emit notifications for a change record.

        Nothing is sent when the recurring scan has no stored preferences.
        """
        preferences = await self.storage.get_notification_preference_by_recurring_scan_id(
            recurring_scan.id
        )
        if preferences is None:
            logger.debug("notification_preferences_missing", recurring_scan_id=recurring_scan.id)
            return []

        results: list[NotificationResult] = []
        for notification in build_notifications(recurring_scan, scan_id, record, preferences):
            results.append(await self.in_app.send(notification))
            if preferences.sends_email:
                results.append(await self.email.send(notification))

            logger.info(
                "notification_emitted",
                recurring_scan_id=recurring_scan.id,
                scan_id=scan_id,
                type=notification.type.value,
                method=preferences.notification_method.value,
            )

        return results
