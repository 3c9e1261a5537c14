"""Recurring scan management: create, pause, resume, reschedule and delete."""

from datetime import timedelta

import structlog

from roboscan.config import Settings, get_settings
from roboscan.crawler.url import normalize_target_url
from roboscan.exceptions import NotFoundError, ValidationError
from roboscan.scheduler import Clock, utcnow
from roboscan.schemas import NotificationPreferences, RecurringScan, ScanFrequency
from roboscan.storage import ScanStorage

logger = structlog.get_logger(__name__)


def validate_frequency(frequency: str) -> ScanFrequency:
    try:
        return ScanFrequency(frequency)
    except ValueError:
        raise ValidationError(
            f"Invalid frequency '{frequency}'. Must be daily, weekly or monthly",
            field="frequency",
        ) from None


class RecurringScanService:
    """Lifecycle operations on recurring scan configs."""

    def __init__(
        self,
        storage: ScanStorage,
        clock: Clock | None = None,
        settings: Settings | None = None,
    ):
        self.storage = storage
        self.clock = clock or utcnow
        self._settings = settings or get_settings()

    async def _require(self, recurring_scan_id: int) -> RecurringScan:
        config = await self.storage.get_recurring_scan(recurring_scan_id)
        if config is None:
            raise NotFoundError("Recurring scan", recurring_scan_id)
        return config

    async def create(
        self,
        user_id: str,
        url: str,
        frequency: str,
        preferences: NotificationPreferences | None = None,
    ) -> RecurringScan:
        """
        Create an active recurring scan and its notification preferences.

        The first run is scheduled shortly after creation rather than
        immediately.

        Raises:
            InvalidUrlError: If the URL cannot be parsed
            ValidationError: If the frequency is not daily, weekly or monthly
        """
        target = normalize_target_url(url)
        validated = validate_frequency(frequency)
        delay = timedelta(seconds=self._settings.recurring_first_run_delay_seconds)

        config = await self.storage.create_recurring_scan(
            user_id=user_id,
            url=target,
            frequency=validated.value,
            next_run_at=self.clock() + delay,
        )
        await self.storage.create_notification_preference(
            config.id, preferences or NotificationPreferences()
        )

        logger.info(
            "recurring_scan_created",
            recurring_scan_id=config.id,
            url=target,
            frequency=validated.value,
        )
        return config

    async def pause(self, recurring_scan_id: int) -> RecurringScan:
        await self._require(recurring_scan_id)
        config = await self.storage.update_recurring_scan(recurring_scan_id, is_active=False)
        logger.info("recurring_scan_paused", recurring_scan_id=recurring_scan_id)
        return config

    async def resume(self, recurring_scan_id: int) -> RecurringScan:
        """Reactivate a paused scan; a missed run is made due immediately."""
        current = await self._require(recurring_scan_id)
        now = self.clock()
        fields: dict = {"is_active": True}
        if current.next_run_at is None or current.next_run_at < now:
            fields["next_run_at"] = now

        config = await self.storage.update_recurring_scan(recurring_scan_id, **fields)
        logger.info(
            "recurring_scan_resumed",
            recurring_scan_id=recurring_scan_id,
            next_run_at=config.next_run_at.isoformat() if config.next_run_at else None,
        )
        return config

    async def update_frequency(self, recurring_scan_id: int, frequency: str) -> RecurringScan:
        validated = validate_frequency(frequency)
        await self._require(recurring_scan_id)
        return await self.storage.update_recurring_scan(
            recurring_scan_id, frequency=validated.value
        )

    async def delete(self, recurring_scan_id: int) -> None:
        await self._require(recurring_scan_id)
        await self.storage.delete_recurring_scan(recurring_scan_id)
        logger.info("recurring_scan_deleted", recurring_scan_id=recurring_scan_id)
