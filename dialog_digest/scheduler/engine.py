"""DigestScheduler: APScheduler lifecycle for the daily summary job."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from dialog_digest.config import settings

if TYPE_CHECKING:
    from datetime import datetime

    from dialog_digest.scheduler.service import DigestService

logger = logging.getLogger(__name__)

DAILY_JOB_ID = "daily-summary"


class DigestScheduler:
    """Runs the daily summary job and the startup reconciliation pass.

    Args:
        service: DigestService doing the actual work.
        hour: Hour of the daily trigger (default from settings).
        minute: Minute of the daily trigger (default from settings).
        timezone: IANA timezone string (default from settings).
    """

    def __init__(
        self,
        service: DigestService,
        hour: int | None = None,
        minute: int | None = None,
        timezone: str | None = None,
    ) -> None:
        self._service = service
        self._hour = settings.daily_summary_hour if hour is None else hour
        self._minute = settings.daily_summary_minute if minute is None else minute
        self._timezone = timezone or settings.scheduler_timezone
        self._scheduler = AsyncIOScheduler(timezone=self._timezone)
        self._reconcile_task: asyncio.Task[list[str]] | None = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def next_run_time(self) -> datetime | None:
        """When the daily job fires next, or None if not scheduled."""
        job = self._scheduler.get_job(DAILY_JOB_ID)
        return getattr(job, "next_run_time", None)

    @property
    def reconcile_task(self) -> asyncio.Task[list[str]] | None:
        return self._reconcile_task

    # -- Lifecycle -------------------------------------------------------------

    async def start(self, reconcile: bool = True) -> None:
        """Add the daily job, start the scheduler, and launch reconciliation."""
        self._scheduler.add_job(
            self._run_daily,
            trigger=CronTrigger(
                hour=self._hour, minute=self._minute, timezone=self._timezone
            ),
            id=DAILY_JOB_ID,
            name="Summarize yesterday's dialogues",
            coalesce=True,
            max_instances=1,
            misfire_grace_time=None,
            replace_existing=True,
        )
        self._scheduler.start()
        self._running = True
        logger.info(
            "Scheduler started: daily summary at %02d:%02d (tz=%s), next run %s",
            self._hour,
            self._minute,
            self._timezone,
            self.next_run_time,
        )

        if reconcile:
            self._reconcile_task = asyncio.create_task(self._run_reconcile())

    async def stop(self) -> None:
        """Cancel pending reconciliation and shut down the scheduler."""
        if self._reconcile_task is not None and not self._reconcile_task.done():
            self._reconcile_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._reconcile_task
        self._reconcile_task = None

        if self._running:
            self._scheduler.shutdown(wait=False)
            self._running = False
            logger.info("Scheduler stopped")

    # -- Jobs ------------------------------------------------------------------

    async def _run_daily(self) -> None:
        """Callback invoked by APScheduler."""
        try:
            await self._service.summarize_yesterday()
        except Exception:
            logger.exception("Daily summary job failed")

    async def _run_reconcile(self) -> list[str]:
        try:
            return await self._service.reconcile()
        except Exception:
            logger.exception("Startup reconciliation failed")
            return []
