"""Scheduler running the daily interview reminder sweep."""

import logging
from zoneinfo import ZoneInfo

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.exc import SQLAlchemyError

from hirescore.core.config import settings
from hirescore.services.notification_service import NotificationService, ReminderSummary

logger = logging.getLogger(__name__)

REMINDER_JOB_ID = "interview_reminders"


class ReminderScheduler:
    """Owns the process-wide APScheduler instance for reminders."""

    _instance: "ReminderScheduler | None" = None
    _scheduler: AsyncIOScheduler | None = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._initialized = True
        self._scheduler = None
        self._notifier: NotificationService | None = None
        self.last_summary: ReminderSummary | None = None

    @property
    def scheduler(self) -> AsyncIOScheduler | None:
        return self._scheduler

    @property
    def notifier(self) -> NotificationService:
        if self._notifier is None:
            self._notifier = NotificationService()
        return self._notifier

    async def start(self, notifier: NotificationService | None = None):
        """Start the scheduler and register the daily reminder job."""
        if self._scheduler is not None and self._scheduler.running:
            logger.info("Reminder scheduler already running")
            return

        if notifier is not None:
            self._notifier = notifier

        self._scheduler = AsyncIOScheduler(timezone=settings.scheduler_timezone)
        self._scheduler.add_job(
            self.run_reminders,
            trigger=CronTrigger(
                hour=settings.reminder_hour,
                minute=settings.reminder_minute,
                timezone=settings.scheduler_timezone,
            ),
            id=REMINDER_JOB_ID,
            replace_existing=True,
            misfire_grace_time=14400,
            coalesce=True,
        )
        self._scheduler.start()

        job = self._scheduler.get_job(REMINDER_JOB_ID)
        logger.info(
            f"Reminder scheduler started, next run: {job.next_run_time if job else None}"
        )

    async def stop(self):
        """Stop the scheduler."""
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Reminder scheduler stopped")

    async def run_reminders(self) -> ReminderSummary | None:
        """Run one reminder sweep."""
        logger.info("Checking for applications that need reminders...")
        try:
            self.last_summary = await self.notifier.send_reminders()
        except SQLAlchemyError as e:
            logger.error(f"Reminder sweep failed: {e}")
            return None
        logger.info(
            f"Reminder sweep done: {self.last_summary.reminders_sent} emails for "
            f"{self.last_summary.reminders_created} applications"
        )
        return self.last_summary

    def get_status(self) -> dict:
        """Get scheduler status."""
        if self._scheduler is None:
            return {"scheduler_running": False, "jobs_count": 0}

        job = self._scheduler.get_job(REMINDER_JOB_ID)
        next_run = None
        if job and job.next_run_time:
            next_run = job.next_run_time.astimezone(ZoneInfo(settings.scheduler_timezone))

        return {
            "scheduler_running": self._scheduler.running,
            "jobs_count": len(self._scheduler.get_jobs()),
            "next_scheduled_run": next_run,
        }


# Global reminder scheduler instance
reminder_scheduler = ReminderScheduler()
