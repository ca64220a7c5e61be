"""API routes for notification dispatch and audit history."""

import logging

from fastapi import APIRouter, Depends, Query

from hirescore.core.exceptions import (
    ApplicationNotFoundError,
    NotificationNotFoundError,
    not_found_exception,
)
from hirescore.schemas.notification import (
    NotificationHistoryItem,
    RetryResponse,
    StatusChangeNotifyRequest,
    StatusChangeNotifyResponse,
)
from hirescore.services.llm.dependencies import notification_service_dep
from hirescore.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.post("/status-change", response_model=StatusChangeNotifyResponse)
async def notify_status_change(
    request: StatusChangeNotifyRequest,
    service: NotificationService = Depends(notification_service_dep),
):
    """Alert the candidate and team about a status transition."""
    try:
        summary = await service.notify_status_change(
            request.application_id, request.old_status, request.new_status
        )
    except ApplicationNotFoundError as e:
        raise not_found_exception(e.message)

    return StatusChangeNotifyResponse(
        notified=summary.notified,
        candidate_emails_sent=summary.candidate_emails_sent,
        team_emails_sent=summary.team_emails_sent,
        push_sent=summary.push_sent,
        push_failed=summary.push_failed,
    )


@router.get("/history", response_model=list[NotificationHistoryItem])
async def get_notification_history(
    status: str | None = Query(default=None, description="Filter by sent or failed"),
    limit: int = Query(default=100, ge=1, le=500),
    service: NotificationService = Depends(notification_service_dep),
):
    """Return the notification audit log, newest first."""
    records = await service.list_history(status=status, limit=limit)
    return [NotificationHistoryItem.model_validate(record) for record in records]


@router.post("/{notification_id}/retry", response_model=RetryResponse)
async def retry_notification(
    notification_id: int,
    service: NotificationService = Depends(notification_service_dep),
):
    """Resend a failed email notification."""
    try:
        outcome = await service.retry_notification(notification_id)
    except NotificationNotFoundError as e:
        raise not_found_exception(e.message)

    return RetryResponse(success=outcome.success, message=outcome.message)
