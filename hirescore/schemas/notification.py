"""Schemas for notifications and status changes."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from hirescore.schemas.common import CamelModel


class StatusChangeNotifyRequest(CamelModel):
    """Request to alert stakeholders about a status transition."""

    application_id: int
    old_status: str | None = None
    new_status: str


class StatusChangeNotifyResponse(CamelModel):
    """Outcome of a status-change alert."""

    success: bool = True
    notified: bool
    candidate_emails_sent: int = 0
    team_emails_sent: int = 0
    push_sent: int = 0
    push_failed: int = 0


class NotificationHistoryItem(BaseModel):
    """One entry of the notification audit log."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    notification_type: str
    recipient_email: str
    recipient_name: str | None = None
    subject: str
    status: str
    error_message: str | None = None
    retry_count: int = 0
    last_retry_at: datetime | None = None
    metadata: dict[str, Any] | None = Field(default=None, validation_alias="meta")
    created_at: datetime


class RetryResponse(BaseModel):
    """Outcome of a manual notification retry."""

    success: bool
    message: str


class StatusUpdateRequest(CamelModel):
    """Request to move an application to a new stage."""

    status: str = Field(..., description="Target status")
    changed_by: str | None = Field(default=None, description="Who made the change")
    notes: str | None = None


class StatusUpdateResponse(CamelModel):
    """Outcome of a manual status change."""

    success: bool = True
    application_id: int
    status: str
    changed: bool
    notified: bool = False


class StatusHistoryItem(BaseModel):
    """One entry of an application's status history."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    application_id: int
    old_status: str | None = None
    new_status: str
    changed_by: str | None = None
    notes: str | None = None
    created_at: datetime
