"""Manual status changes with an append-only history."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from hirescore.core.exceptions import ApplicationNotFoundError, PipelineError
from hirescore.core.storage import async_session, utc_now
from hirescore.models import Application, ApplicationStatus, StatusHistoryEntry
from hirescore.services.notification_service import (
    NotificationService,
    StatusChangeSummary,
)

logger = logging.getLogger(__name__)


class StatusService:
    """Moves applications between hiring stages and records each move."""

    def __init__(
        self,
        notifier: NotificationService,
        session_factory: sessionmaker = async_session,
    ):
        self.notifier = notifier
        self.session_factory = session_factory

    async def change_status(
        self,
        application_id: int,
        new_status: str,
        changed_by: str | None = None,
        notes: str | None = None,
    ) -> StatusChangeSummary | None:
        """Set a new status and alert stakeholders for key stages.

        The history entry is committed together with the status before any
        alert is sent. A held analysis lease is dropped so the running
        analysis cannot overwrite this status. Returns None when the status
        did not change.
        """
        status = ApplicationStatus(new_status)

        async with self.session_factory() as session:
            application = await session.get(Application, application_id)
            if application is None:
                raise ApplicationNotFoundError(application_id)

            old_status = application.status
            if old_status == status:
                logger.info(f"Application {application_id} already {status}")
                return None

            application.status = status
            application.analysis_lease_token = None
            application.analysis_lease_expires_at = None
            application.updated_at = utc_now()
            session.add(
                StatusHistoryEntry(
                    application_id=application_id,
                    old_status=old_status,
                    new_status=status,
                    changed_by=changed_by,
                    notes=notes,
                )
            )
            await session.commit()

        logger.info(f"Application {application_id}: {old_status} -> {status}")
        try:
            return await self.notifier.notify_status_change(
                application_id, old_status, status.value
            )
        except (PipelineError, SQLAlchemyError) as e:
            logger.error(f"Status alert for application {application_id} failed: {e}")
            return StatusChangeSummary(notified=False)

    async def get_history(self, application_id: int) -> list[StatusHistoryEntry]:
        """Return status history, oldest first."""
        async with self.session_factory() as session:
            if await session.get(Application, application_id) is None:
                raise ApplicationNotFoundError(application_id)
            result = await session.scalars(
                select(StatusHistoryEntry)
                .where(StatusHistoryEntry.application_id == application_id)
                .order_by(StatusHistoryEntry.created_at, StatusHistoryEntry.id)
            )
            return list(result)
