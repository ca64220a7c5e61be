"""Tests for the reminder scheduler."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from hirescore.services.notification_service import ReminderSummary
from hirescore.services.reminder_scheduler import (
    REMINDER_JOB_ID,
    ReminderScheduler,
    reminder_scheduler,
)


@pytest.fixture
def reminder_notifier():
    notifier = MagicMock()
    notifier.send_reminders = AsyncMock(
        return_value=ReminderSummary(
            applications_processed=1, reminders_sent=2, reminders_created=1
        )
    )
    return notifier


class TestReminderScheduler:
    """Tests for ReminderScheduler."""

    def test_singleton(self):
        assert ReminderScheduler() is reminder_scheduler

    def test_status_when_stopped(self):
        assert reminder_scheduler.get_status()["scheduler_running"] is False

    @pytest.mark.asyncio
    async def test_start_and_stop(self, reminder_notifier):
        await reminder_scheduler.start(reminder_notifier)
        try:
            status = reminder_scheduler.get_status()
            assert status["scheduler_running"] is True
            assert status["jobs_count"] == 1
            assert status["next_scheduled_run"] is not None
            assert reminder_scheduler.scheduler.get_job(REMINDER_JOB_ID) is not None
        finally:
            await reminder_scheduler.stop()

        assert reminder_scheduler.scheduler is None

    @pytest.mark.asyncio
    async def test_run_reminders(self, reminder_notifier):
        reminder_scheduler._notifier = reminder_notifier

        summary = await reminder_scheduler.run_reminders()

        assert summary.reminders_sent == 2
        reminder_notifier.send_reminders.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_run_reminders_database_error(self, reminder_notifier):
        reminder_notifier.send_reminders.side_effect = OperationalError(
            "SELECT", {}, Exception("locked")
        )
        reminder_scheduler._notifier = reminder_notifier

        assert await reminder_scheduler.run_reminders() is None
