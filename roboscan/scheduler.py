"""Recurring audit scheduler.

This module provides:
- Next-run calculation for daily/weekly/monthly recurring scans
- A tick that audits every due target under a global concurrency limit
- Change detection against the previous snapshot and notification emission
- A polling loop that never runs two ticks at once
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

import structlog

from roboscan.config import Settings, get_settings
from roboscan.monitoring.changes import detect_changes
from roboscan.monitoring.notifications import NotificationDispatcher
from roboscan.scanner import Scanner
from roboscan.schemas import ScanFrequency

if TYPE_CHECKING:
    from roboscan.models import AuditSnapshot
    from roboscan.schemas import RecurringScan
    from roboscan.storage import ScanStorage

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]

INTERVALS: dict[str, timedelta] = {
    ScanFrequency.DAILY.value: timedelta(days=1),
    ScanFrequency.WEEKLY.value: timedelta(days=7),
    ScanFrequency.MONTHLY.value: timedelta(days=30),
}


def utcnow() -> datetime:
    return datetime.now(UTC)


def calculate_next_run(frequency: str, from_time: datetime | None = None) -> datetime:
    """
    Calculate the next scheduled run time.

    Args:
        frequency: daily, weekly or monthly; anything else is treated as daily
        from_time: Calculate from this time (defaults to now)

    Returns:
        from_time plus the frequency's interval
    """
    now = from_time or utcnow()
    return now + INTERVALS.get(frequency, INTERVALS[ScanFrequency.DAILY.value])


class AuditRunner(Protocol):
    async def scan(self, url: str) -> AuditSnapshot: ...


class TargetOutcome(StrEnum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class TickSummary:
    """Counts for one scheduler tick."""

    due: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    skipped_overlap: bool = False

    def record(self, outcome: TargetOutcome) -> None:
        if outcome == TargetOutcome.SUCCEEDED:
            self.succeeded += 1
        elif outcome == TargetOutcome.FAILED:
            self.failed += 1
        else:
            self.skipped += 1


class RecurringScheduler:
    """Runs due recurring scans.

    The limiter is shared by every tick, so the number of audits in flight
    never exceeds its capacity no matter how many targets are due.
    """

    def __init__(
        self,
        storage: ScanStorage,
        scanner: AuditRunner | None = None,
        clock: Clock | None = None,
        limiter: asyncio.Semaphore | None = None,
        settings: Settings | None = None,
        notifier: NotificationDispatcher | None = None,
    ):
        self._settings = settings or get_settings()
        self.storage = storage
        self.scanner = scanner or Scanner()
        self.clock = clock or utcnow
        self.limiter = limiter or asyncio.Semaphore(self._settings.scheduler_max_concurrency)
        self.notifier = notifier or NotificationDispatcher(storage)
        self.interval = self._settings.scheduler_interval_seconds
        self._tick_running = False
        self._stop_event = asyncio.Event()

    @property
    def tick_running(self) -> bool:
        return self._tick_running

    async def run_tick(self) -> TickSummary:
        """
        Audit every recurring scan that is due.

        Returns:
            TickSummary; ``skipped_overlap`` is set when a previous tick was
            still running and this one did nothing
        """
        if self._tick_running:
            logger.warning("scheduler_tick_overlap_skipped")
            return TickSummary(skipped_overlap=True)

        self._tick_running = True
        try:
            now = self.clock()
            try:
                due = await self.storage.get_due_recurring_scans(now)
            except Exception as e:
                logger.error("scheduler_due_query_failed", error=str(e))
                return TickSummary()

            summary = TickSummary(due=len(due))
            if not due:
                logger.debug("scheduler_tick_idle")
                return summary

            logger.info("scheduler_tick_started", due=len(due))
            outcomes = await asyncio.gather(*(self._run_limited(config.id) for config in due))
            for outcome in outcomes:
                summary.record(outcome)

            logger.info(
                "scheduler_tick_complete",
                due=summary.due,
                succeeded=summary.succeeded,
                failed=summary.failed,
                skipped=summary.skipped,
            )
            return summary
        finally:
            self._tick_running = False

    async def _run_limited(self, recurring_scan_id: int) -> TargetOutcome:
        async with self.limiter:
            try:
                return await self.process_recurring_scan(recurring_scan_id)
            except Exception as e:
                logger.error(
                    "recurring_scan_bookkeeping_failed",
                    recurring_scan_id=recurring_scan_id,
                    error=str(e),
                )
                return TargetOutcome.FAILED

    async def process_recurring_scan(self, recurring_scan_id: int) -> TargetOutcome:
        """
        Run one recurring scan and reschedule it.

        Audit failures are logged and reported as FAILED; the config is
        rescheduled either way and only a successful run moves
        ``last_scan_id``.
        """
        config = await self.storage.get_recurring_scan(recurring_scan_id)
        if config is None or not config.is_active:
            logger.info("recurring_scan_skipped", recurring_scan_id=recurring_scan_id)
            return TargetOutcome.SKIPPED

        # Each target runs in its own task, so the bound context stays per target
        with structlog.contextvars.bound_contextvars(
            recurring_scan_id=config.id, url=config.url
        ):
            return await self._run(config)

    async def _run(self, config: RecurringScan) -> TargetOutcome:
        now = self.clock()
        new_scan_id: int | None = None
        try:
            new_scan_id = await self._audit(config)
        except Exception as e:
            logger.error(
                "recurring_scan_failed",
                error=str(e),
                error_type=type(e).__name__,
            )

        fields: dict = {
            "last_run_at": now,
            "next_run_at": calculate_next_run(config.frequency, now),
        }
        if new_scan_id is not None:
            fields["last_scan_id"] = new_scan_id
        await self.storage.update_recurring_scan(config.id, **fields)

        if new_scan_id is None:
            return TargetOutcome.FAILED

        logger.info(
            "recurring_scan_complete",
            scan_id=new_scan_id,
            next_run_at=fields["next_run_at"].isoformat(),
        )
        return TargetOutcome.SUCCEEDED

    async def _audit(self, config: RecurringScan) -> int:
        snapshot = await self.scanner.scan(config.url)
        stored = await self.storage.create_scan(snapshot, user_id=config.user_id)

        if config.last_scan_id is not None:
            previous = await self.storage.get_scan(config.last_scan_id)
            if previous is not None:
                record = detect_changes(previous.snapshot, snapshot)
                if record.has_changes:
                    logger.info(
                        "recurring_scan_changes_detected",
                        changes=record.to_dict()["changes"],
                    )
                    await self.notifier.dispatch(config, stored.id, record)

        return stored.id

    async def run_forever(self) -> None:
        """Tick now, then every ``interval`` seconds until stop() is called."""
        self._stop_event.clear()
        pending: set[asyncio.Task] = set()
        logger.info("scheduler_started", interval=self.interval)

        while not self._stop_event.is_set():
            task = asyncio.create_task(self.run_tick())
            pending.add(task)
            task.add_done_callback(pending.discard)
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval)
            except TimeoutError:
                continue

        if pending:
            await asyncio.gather(*pending)
        logger.info("scheduler_stopped")

    def stop(self) -> None:
        self._stop_event.set()
