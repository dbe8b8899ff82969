"""
Background scheduler service for periodic jobs.

Runs the daily recurring task maintenance pass (orphan sweep + forward
window reconciliation). Uses APScheduler for in-process scheduling without
external dependencies.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from taskcycle.core.config import get_settings
from taskcycle.core.logger import logger
from taskcycle.models.lifecycle import MaintenanceReport
from taskcycle.services.lifecycle_facade import LifecycleFacade
from taskcycle.utils.datetime_utils import now_utc

MAINTENANCE_JOB_ID = "recurring_task_maintenance"


class BackgroundScheduler:
    """
    Background scheduler for periodic jobs.

    Features:
    - Daily recurring task maintenance (default 02:00 UTC)
    - Optional maintenance run at startup
    """

    def __init__(self, facade: LifecycleFacade):
        self._facade = facade
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._last_run: Optional[datetime] = None
        self._last_report: Optional[MaintenanceReport] = None

    @property
    def last_run(self) -> Optional[datetime]:
        return self._last_run

    @property
    def last_report(self) -> Optional[MaintenanceReport]:
        return self._last_report

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    async def start(self, run_immediately: bool = False):
        """Start the scheduler."""
        settings = get_settings()

        # Only run scheduler in non-test environments
        if settings.is_test:
            logger.info("Background scheduler disabled in test environment")
            return
        if not settings.MAINTENANCE_ENABLED:
            logger.info("Recurring task maintenance disabled by configuration")
            return

        self._scheduler = AsyncIOScheduler(timezone="UTC")
        self._scheduler.add_job(
            self.run_maintenance,
            CronTrigger(
                hour=settings.MAINTENANCE_CRON_HOUR,
                minute=settings.MAINTENANCE_CRON_MINUTE,
                timezone="UTC",
            ),
            id=MAINTENANCE_JOB_ID,
            name="Recurring Task Maintenance",
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info(
            "Background scheduler started:\n"
            f"  - Recurring task maintenance: daily "
            f"{settings.MAINTENANCE_CRON_HOUR:02d}:{settings.MAINTENANCE_CRON_MINUTE:02d} UTC"
        )

        if run_immediately:
            asyncio.create_task(self.run_maintenance())

    async def stop(self):
        """Stop the scheduler."""
        if self._scheduler:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Background scheduler stopped")

    async def run_maintenance(self) -> Optional[MaintenanceReport]:
        """Job body: run one maintenance pass, never raising into APScheduler."""
        self._last_run = now_utc()
        try:
            report = await self._facade.maintenance()
        except Exception as e:
            logger.error(f"Recurring task maintenance job failed: {e}")
            return None

        self._last_report = report
        if report.success:
            logger.info(f"Recurring task maintenance succeeded in {report.duration_ms}ms")
        else:
            logger.warning(
                f"Recurring task maintenance finished with {len(report.windows.errors)} errors"
            )
        return report


# ===========================================
# Global scheduler instance
# ===========================================

_scheduler: Optional[BackgroundScheduler] = None


def get_background_scheduler() -> BackgroundScheduler:
    """Get or create the global background scheduler."""
    global _scheduler
    if _scheduler is None:
        from taskcycle.deps import get_lifecycle_facade

        _scheduler = BackgroundScheduler(get_lifecycle_facade())
    return _scheduler


async def start_background_scheduler(run_immediately: bool = False):
    """Start the global background scheduler."""
    scheduler = get_background_scheduler()
    await scheduler.start(run_immediately=run_immediately)


async def stop_background_scheduler():
    """Stop the global background scheduler."""
    global _scheduler
    if _scheduler:
        await _scheduler.stop()
        _scheduler = None
